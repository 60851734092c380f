"""Tests for the portal assessment service."""

import json

import pytest

from medicrew.errors import LLMServiceError
from medicrew.llm.client import MockLLMClient
from medicrew.models.enums import UrgencyLevel
from medicrew.portal.assessment import (
    DEFAULT_TREATMENT_PLAN,
    FALLBACK_CONFIDENCE,
    RECOMMENDED_ACTIONS,
    RECOMMENDED_TESTS,
    RED_FLAGS_BY_URGENCY,
    UNKNOWN_CONDITIONS,
    AssessmentService,
    fallback_assessment,
    fallback_insights,
)


class TestFallbackAssessment:
    """Tests for the rule-based assessment."""

    def test_most_severe_match_wins(self):
        assessment = fallback_assessment(["Cough", "Shortness of breath"], "1-3 days")

        assert assessment.urgency_level == UrgencyLevel.HIGH
        assert assessment.possible_conditions == ["Common cold", "Bronchitis", "Pneumonia", "Allergies"]
        assert assessment.recommended_action == RECOMMENDED_ACTIONS[UrgencyLevel.HIGH]
        assert assessment.confidence == FALLBACK_CONFIDENCE
        assert len(assessment.questions_to_ask) == 4

    def test_chest_pain_is_critical(self):
        assessment = fallback_assessment(["Chest pain"], "Less than 1 day")
        assert assessment.urgency_level == UrgencyLevel.CRITICAL
        assert "Angina" in assessment.possible_conditions

    def test_critical_keyword_in_additional_info(self):
        assessment = fallback_assessment(["Headache"], "1-3 days", "It is the most severe headache of my life")
        assert assessment.urgency_level == UrgencyLevel.CRITICAL

    def test_unknown_symptoms(self):
        assessment = fallback_assessment(["Tingling toes"], "4-7 days")

        assert assessment.urgency_level == UrgencyLevel.LOW
        assert assessment.possible_conditions == UNKNOWN_CONDITIONS
        assert "Tingling toes" in assessment.reasoning

    def test_conditions_deduplicated_and_capped(self):
        assessment = fallback_assessment(["Fatigue", "Dizziness"], "1-2 weeks")

        conditions = assessment.possible_conditions
        assert len(conditions) == 4
        assert len(set(conditions)) == 4
        assert assessment.urgency_level == UrgencyLevel.MEDIUM


class TestFallbackInsights:
    def test_uses_urgency_tables(self, sample_symptom_check):
        insights = fallback_insights(sample_symptom_check)

        assert insights.differential_diagnosis == sample_symptom_check.ai_assessment.possible_conditions
        assert insights.recommended_tests == RECOMMENDED_TESTS[UrgencyLevel.LOW]
        assert insights.red_flags == RED_FLAGS_BY_URGENCY[UrgencyLevel.LOW]
        assert insights.ai_confidence == 82


class TestAssessmentService:
    """Tests for AssessmentService."""

    @pytest.mark.asyncio
    async def test_analyze_symptoms_parses_response(self):
        client = MockLLMClient(default_response=json.dumps({
            "urgencyLevel": "medium",
            "possibleConditions": ["Migraine", "Tension headache", "Sinusitis", "Dehydration", "Eye strain"],
            "recommendedAction": "See your GP this week",
            "questionsToAsk": ["Any aura?"],
            "confidence": 88,
            "reasoning": "Recurrent headaches",
        }))
        service = AssessmentService(client)

        assessment = await service.analyze_symptoms(["Headache"], "1-2 weeks")

        assert assessment.urgency_level == UrgencyLevel.MEDIUM
        assert assessment.possible_conditions == ["Migraine", "Tension headache", "Sinusitis", "Dehydration"]
        assert assessment.confidence == 88
        assert assessment.recommended_action == "See your GP this week"
        assert client.calls[0]["max_tokens"] == 800
        assert "Symptoms: Headache" in client.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_analyze_symptoms_fills_missing_fields(self):
        client = MockLLMClient(default_response='{"urgencyLevel": "high"}')
        service = AssessmentService(client)

        assessment = await service.analyze_symptoms(["Fever"], "1-3 days")

        assert assessment.urgency_level == UrgencyLevel.HIGH
        assert assessment.possible_conditions == ["Viral infection", "Influenza", "COVID-19", "Bacterial infection"]
        assert assessment.confidence == FALLBACK_CONFIDENCE

    @pytest.mark.asyncio
    async def test_analyze_symptoms_unparseable(self):
        service = AssessmentService(MockLLMClient(default_response="Sorry, I can't help."))

        assessment = await service.analyze_symptoms(["Rash"], "4-7 days")

        assert assessment == fallback_assessment(["Rash"], "4-7 days")

    @pytest.mark.asyncio
    async def test_critical_symptoms_never_downgraded(self):
        """The model can't rate chest pain as anything but critical."""
        client = MockLLMClient(default_response='{"urgencyLevel": "low", "reasoning": "probably fine"}')
        service = AssessmentService(client)

        assessment = await service.analyze_symptoms(["Chest pain"], "Less than 1 day")

        assert assessment.urgency_level == UrgencyLevel.CRITICAL
        assert assessment.reasoning == "probably fine"

    @pytest.mark.asyncio
    async def test_without_client_uses_fallback(self, sample_symptom_check):
        service = AssessmentService()

        assessment = await service.analyze_symptoms(["Back pain"], "1-2 weeks")
        insights = await service.generate_doctor_insights(sample_symptom_check)
        plan = await service.generate_treatment_plan("Muscle strain", ["Back pain"])

        assert assessment.urgency_level == UrgencyLevel.LOW
        assert insights == fallback_insights(sample_symptom_check)
        assert plan == DEFAULT_TREATMENT_PLAN

    @pytest.mark.asyncio
    async def test_llm_errors_propagate(self):
        service = AssessmentService(MockLLMClient(error=LLMServiceError("down")))

        with pytest.raises(LLMServiceError):
            await service.analyze_symptoms(["Cough"], "1-3 days")

    @pytest.mark.asyncio
    async def test_generate_doctor_insights(self, sample_symptom_check):
        client = MockLLMClient(default_response=json.dumps({
            "differentialDiagnosis": ["Lumbar strain", "Disc herniation"],
            "recommendedTests": ["MRI lumbar spine"],
            "aiConfidence": 71,
        }))
        service = AssessmentService(client)

        insights = await service.generate_doctor_insights(sample_symptom_check)

        assert insights.differential_diagnosis == ["Lumbar strain", "Disc herniation"]
        assert insights.recommended_tests == ["MRI lumbar spine"]
        assert insights.red_flags == RED_FLAGS_BY_URGENCY[UrgencyLevel.LOW]
        assert insights.ai_confidence == 71
        assert "Patient Symptoms: Back pain, Joint pain" in client.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_generate_treatment_plan(self):
        client = MockLLMClient(default_response=json.dumps({
            "medications": ["Ibuprofen"],
            "followUp": "Review in 10 days",
        }))
        service = AssessmentService(client)

        plan = await service.generate_treatment_plan("Muscle strain", ["Back pain"])

        assert plan.medications == ["Ibuprofen"]
        assert plan.lifestyle == DEFAULT_TREATMENT_PLAN.lifestyle
        assert plan.follow_up == "Review in 10 days"
        assert "Diagnosis: Muscle strain" in client.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_calls_client_with_service_settings(self, mock_llm_client, mock_llm_response):
        mock_llm_client.complete.return_value = mock_llm_response('{"urgencyLevel": "low"}')
        service = AssessmentService(mock_llm_client, model="test/model", temperature=0.2, max_tokens=300)

        assessment = await service.analyze_symptoms(["Cough"], "1-3 days", "Non-smoker")

        assert assessment.urgency_level == UrgencyLevel.LOW
        kwargs = mock_llm_client.complete.call_args.kwargs
        assert kwargs["model"] == "test/model"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 300
        assert kwargs["messages"][0]["role"] == "system"
        assert "Additional Information: Non-smoker" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_treatment_plan_default_is_a_copy(self):
        service = AssessmentService()

        plan = await service.generate_treatment_plan("Flu", ["Fever"])
        plan.medications.append("Something else")

        assert "Something else" not in DEFAULT_TREATMENT_PLAN.medications
