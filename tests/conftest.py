"""
Pytest configuration and shared fixtures for the test suite.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from medicrew.llm.client import MockLLMClient
from medicrew.models.consultation import ConsultationState, LLMResponse
from medicrew.models.enums import UrgencyLevel
from medicrew.models.portal import AIAssessment, SymptomCheck
from medicrew.portal.queue import PatientQueue
from medicrew.portal.store import PortalStore


# Prompt fragments that identify each stage's user prompt
PATIENT_TRIAGE = "structured triage assessment in the following JSON format"
PATIENT_GP = "Please provide your GP assessment"
PATIENT_SPECIALIST = "specialist perspective on these symptoms"
PATIENT_SYNTHESIS = "final recommendation in JSON format"

DOCTOR_TRIAGE = "Please provide your triage assessment for this case"
DOCTOR_GP = "As the GP, provide your clinical perspective"
DOCTOR_SPECIALIST = "what's your specialist take"
DOCTOR_SUMMARY = "Synthesize this into structured insights"


# ============================================================================
# Mock LLM Client
# ============================================================================

@pytest.fixture
def mock_llm_response():
    """Factory for creating mock LLM responses."""
    def _create(content: str, model: str = "test-model", input_tokens: int = 100, output_tokens: int = 50):
        return LLMResponse(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
    return _create


@pytest.fixture
def mock_llm_client(mock_llm_response):
    """Create a mock LLM client that returns configurable responses."""
    client = MagicMock()
    client.complete = AsyncMock(return_value=mock_llm_response("Default mock response"))
    return client


# ============================================================================
# Canned stage responses
# ============================================================================

@pytest.fixture
def triage_json():
    """Factory for a triage response wrapped in prose, as models tend to write it."""
    def _create(urgency: str = "routine", red_flags=None, specialties=None, reasoning="Symptoms look stable."):
        payload = {
            "urgencyLevel": urgency,
            "reasoning": reasoning,
            "redFlags": red_flags or [],
            "relevantSpecialties": specialties or [],
        }
        return f"Here is my assessment:\n```json\n{json.dumps(payload)}\n```"
    return _create


@pytest.fixture
def recommendation_json():
    def _create(urgency: str = "routine", summary: str = "Book a GP visit this week."):
        return json.dumps({
            "urgency": urgency,
            "summary": summary,
            "nextSteps": ["See your GP", "Keep a symptom diary"],
            "questionsForDoctor": ["Could this be eczema?"],
            "specialistType": "Dermatologist",
            "timeframe": "this week",
            "disclaimer": "Trust me, I'm a doctor.",
        })
    return _create


@pytest.fixture
def patient_llm(triage_json, recommendation_json):
    """MockLLMClient answering every patient-facing stage."""
    def _create(triage: str = None, synthesis: str = None, **extra):
        return MockLLMClient(
            prompt_responses={
                PATIENT_TRIAGE: triage if triage is not None else triage_json(),
                PATIENT_GP: "GP: likely benign, but worth a review.",
                PATIENT_SPECIALIST: "Specialist: consistent with my area, see below.",
                PATIENT_SYNTHESIS: synthesis if synthesis is not None else recommendation_json(),
            },
            **extra,
        )
    return _create


# ============================================================================
# Portal Fixtures
# ============================================================================

@pytest.fixture
def sample_assessment():
    return AIAssessment(
        urgency_level=UrgencyLevel.LOW,
        possible_conditions=["Muscle strain", "Herniated disc", "Sciatica", "Osteoarthritis"],
        recommended_action="Self-care at home is appropriate.",
        questions_to_ask=["Any numbness?"],
        confidence=82,
        reasoning="Mechanical back pain pattern.",
    )


@pytest.fixture
def sample_symptom_check(sample_assessment):
    return SymptomCheck(
        id="sc-test",
        patient_id="pat-001",
        patient_name="Jordan Lee",
        symptoms=["Back pain", "Joint pain"],
        duration="1-2 weeks",
        additional_info="Started after moving house",
        ai_assessment=sample_assessment,
    )


@pytest.fixture
def queue():
    return PatientQueue()


@pytest.fixture
def portal_store(queue):
    return PortalStore(queue=queue)


@pytest.fixture
def consultation_state():
    return ConsultationState(symptoms="Itchy rash on both arms")
