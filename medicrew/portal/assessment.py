"""
AI assessment service for the portal.

Three single-shot LLM tasks: triage a patient's symptom checklist, give a
reviewing doctor diagnostic insights, and suggest a treatment plan. Each
one extracts JSON from the reply, validates it, and fills anything
missing from a rule-based fallback. LLM errors are not caught here.
"""

import logging
from typing import Optional

from medicrew.agents.specialists import detect_critical_signals
from medicrew.config import DEFAULT_MODEL
from medicrew.models.consultation import DoctorInsights, TreatmentPlanSuggestion
from medicrew.models.enums import UrgencyLevel
from medicrew.models.portal import AIAssessment, SymptomCheck
from medicrew.utils.parsing import parse_structured
from medicrew.utils.protocols import LLMClientProtocol


logger = logging.getLogger(__name__)

MAX_LIST_ITEMS = 4
FALLBACK_CONFIDENCE = 80

# Symptom keyword -> (likely conditions, urgency)
CONDITIONS: dict[str, tuple[list[str], UrgencyLevel]] = {
    "headache": (["Tension headache", "Migraine", "Sinusitis", "Hypertension"], UrgencyLevel.MEDIUM),
    "fever": (["Viral infection", "Influenza", "COVID-19", "Bacterial infection"], UrgencyLevel.MEDIUM),
    "chest pain": (["Angina", "Myocardial infarction", "Costochondritis", "GERD"], UrgencyLevel.CRITICAL),
    "cough": (["Common cold", "Bronchitis", "Pneumonia", "Allergies"], UrgencyLevel.LOW),
    "shortness of breath": (["Asthma", "COPD", "Heart failure", "Pulmonary embolism"], UrgencyLevel.HIGH),
    "abdominal pain": (["Gastritis", "Appendicitis", "Gallstones", "IBS"], UrgencyLevel.MEDIUM),
    "back pain": (["Muscle strain", "Herniated disc", "Sciatica", "Osteoarthritis"], UrgencyLevel.LOW),
    "nausea": (["Gastroenteritis", "Food poisoning", "Motion sickness", "Pregnancy"], UrgencyLevel.LOW),
    "dizziness": (["Vertigo", "Hypotension", "Anemia", "Dehydration"], UrgencyLevel.MEDIUM),
    "rash": (["Allergic reaction", "Eczema", "Contact dermatitis", "Viral exanthem"], UrgencyLevel.LOW),
    "fatigue": (["Anemia", "Hypothyroidism", "Chronic fatigue", "Depression"], UrgencyLevel.LOW),
    "joint pain": (["Osteoarthritis", "Rheumatoid arthritis", "Gout", "Lupus"], UrgencyLevel.MEDIUM),
}

UNKNOWN_CONDITIONS = [
    "General malaise",
    "Viral illness",
    "Stress-related symptoms",
    "Further evaluation needed",
]

RECOMMENDED_ACTIONS = {
    UrgencyLevel.CRITICAL: "Seek emergency medical attention immediately. Call 000 or go to the nearest emergency department.",
    UrgencyLevel.HIGH: "Schedule an urgent appointment with a doctor within 24 hours. Monitor symptoms closely.",
    UrgencyLevel.MEDIUM: "Book a routine appointment with your GP within the next few days. Rest and monitor symptoms.",
    UrgencyLevel.LOW: "Self-care at home is appropriate. Rest, stay hydrated, and monitor symptoms. See a doctor if symptoms worsen.",
}

QUESTIONS_TO_ASK = {
    UrgencyLevel.CRITICAL: [
        "Are you experiencing severe pain or pressure?",
        "Is the pain radiating?",
        "Are you having difficulty breathing?",
        "Do you feel faint?",
    ],
    UrgencyLevel.HIGH: [
        "When did symptoms start?",
        "Have they been getting worse?",
        "Are you taking any medications?",
        "Do you have known conditions?",
    ],
    UrgencyLevel.MEDIUM: [
        "How long have you had these symptoms?",
        "Have you tried any treatments?",
        "Do you have allergies?",
        "Is this the first time?",
    ],
    UrgencyLevel.LOW: [
        "Can you describe symptoms in more detail?",
        "Have you noticed triggers?",
        "What makes it better or worse?",
        "Any other symptoms?",
    ],
}

RECOMMENDED_TESTS = {
    UrgencyLevel.CRITICAL: ["ECG", "Troponin", "Chest X-ray", "Blood gas analysis", "CT scan"],
    UrgencyLevel.HIGH: ["CBC", "Basic metabolic panel", "Chest X-ray", "EKG"],
    UrgencyLevel.MEDIUM: ["CBC", "Urinalysis", "Basic metabolic panel"],
    UrgencyLevel.LOW: ["Physical examination", "Vital signs monitoring"],
}

RED_FLAGS_BY_URGENCY = {
    UrgencyLevel.CRITICAL: ["Severe symptoms reported", "Possible cardiovascular involvement", "Requires immediate intervention"],
    UrgencyLevel.HIGH: ["Symptoms persisting", "May indicate underlying condition", "Close monitoring needed"],
    UrgencyLevel.MEDIUM: ["Monitor for worsening", "Follow-up recommended", "Consider differential diagnoses"],
    UrgencyLevel.LOW: ["Self-limiting likely", "Routine care appropriate", "Patient education needed"],
}

DEFAULT_TREATMENT_PLAN = TreatmentPlanSuggestion(
    medications=[
        "Symptomatic treatment as needed",
        "Follow prescribing guidelines",
        "Monitor for adverse reactions",
    ],
    lifestyle=[
        "Rest and adequate hydration",
        "Avoid strenuous activities",
        "Maintain balanced diet",
        "Monitor symptoms daily",
    ],
)

ASSESSMENT_SYSTEM_PROMPT = "You are a medical triage AI. Always respond with valid JSON only."
INSIGHTS_SYSTEM_PROMPT = "You are a medical AI assisting doctors. Respond with valid JSON only."
TREATMENT_SYSTEM_PROMPT = "You are a medical AI. Respond with valid JSON only."


def fallback_assessment(symptoms: list[str], duration: str, additional_info: str = "") -> AIAssessment:
    """
    Rule-based assessment from the conditions table.

    Urgency is the most severe level among matched symptoms; any critical
    keyword in the symptoms or the additional information makes it critical.
    """
    urgency = UrgencyLevel.LOW
    conditions: list[str] = []

    for symptom in symptoms:
        lowered = symptom.lower()
        for keyword, (matched, level) in CONDITIONS.items():
            if keyword in lowered:
                conditions.extend(c for c in matched if c not in conditions)
                if level.severity > urgency.severity:
                    urgency = level

    if detect_critical_signals(" ".join([*symptoms, additional_info or ""])):
        urgency = UrgencyLevel.CRITICAL

    conditions = conditions[:MAX_LIST_ITEMS] or list(UNKNOWN_CONDITIONS)

    return AIAssessment(
        urgency_level=urgency,
        possible_conditions=conditions,
        recommended_action=RECOMMENDED_ACTIONS[urgency],
        questions_to_ask=list(QUESTIONS_TO_ASK[urgency]),
        confidence=FALLBACK_CONFIDENCE,
        reasoning=(
            f"Based on {', '.join(symptoms)} over {duration}, "
            f"{conditions[0]} is a possibility."
        ),
    )


def fallback_insights(check: SymptomCheck) -> DoctorInsights:
    urgency = check.ai_assessment.urgency_level
    return DoctorInsights(
        differential_diagnosis=list(check.ai_assessment.possible_conditions),
        recommended_tests=list(RECOMMENDED_TESTS[urgency]),
        red_flags=list(RED_FLAGS_BY_URGENCY[urgency]),
        ai_confidence=check.ai_assessment.confidence,
    )


class AssessmentService:
    """
    LLM-backed assessments for the portal.

    With no LLM client, every call returns the rule-based fallback.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClientProtocol] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
        max_tokens: Optional[int] = 800,
    ):
        self.llm_client = llm_client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _ask(self, system_prompt: str, prompt: str) -> Optional[str]:
        if self.llm_client is None:
            return None
        response = await self.llm_client.complete(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.content

    async def analyze_symptoms(
        self,
        symptoms: list[str],
        duration: str,
        additional_info: str = "",
    ) -> AIAssessment:
        """
        Triage a patient's symptom checklist.

        Args:
            symptoms: Selected or typed symptoms
            duration: How long the symptoms have lasted
            additional_info: Free-text extra details

        Returns:
            AIAssessment with at most four conditions and four questions
        """
        fallback = fallback_assessment(symptoms, duration, additional_info)

        prompt = f"""Analyze the following patient symptoms and provide a structured assessment.

Symptoms: {", ".join(symptoms)}
Duration: {duration}
Additional Information: {additional_info or "None provided"}

Respond ONLY with a JSON object in this exact format:
{{
  "urgencyLevel": "low|medium|high|critical",
  "possibleConditions": ["condition1", "condition2", "condition3", "condition4"],
  "recommendedAction": "specific action for patient",
  "questionsToAsk": ["question1", "question2", "question3", "question4"],
  "confidence": 85,
  "reasoning": "brief explanation of the assessment"
}}

Guidelines:
- CRITICAL: Life-threatening symptoms (chest pain, severe breathing difficulty, unconsciousness, severe bleeding)
- HIGH: Requires urgent attention within 24 hours
- MEDIUM: Should see doctor within a few days
- LOW: Self-care appropriate, monitor symptoms"""

        content = await self._ask(ASSESSMENT_SYSTEM_PROMPT, prompt)
        if content is None:
            return fallback

        assessment = parse_structured(content, AIAssessment, fallback, fill_missing=True)

        updates = {
            "possible_conditions": assessment.possible_conditions[:MAX_LIST_ITEMS],
            "questions_to_ask": assessment.questions_to_ask[:MAX_LIST_ITEMS],
        }
        if (
            fallback.urgency_level == UrgencyLevel.CRITICAL
            and assessment.urgency_level != UrgencyLevel.CRITICAL
        ):
            logger.warning(
                f"Assessment rated {assessment.urgency_level.value} for critical symptoms, raising"
            )
            updates["urgency_level"] = UrgencyLevel.CRITICAL
        return assessment.model_copy(update=updates)

    async def generate_doctor_insights(self, symptom_check: SymptomCheck) -> DoctorInsights:
        """Differential, tests and red flags for the reviewing doctor."""
        assessment = symptom_check.ai_assessment
        prompt = f"""As a medical AI assisting doctors, analyze this patient case and provide diagnostic insights.

Patient Symptoms: {", ".join(symptom_check.symptoms)}
Duration: {symptom_check.duration}
Additional Info: {symptom_check.additional_info or "None"}
AI Triage Level: {assessment.urgency_level.value}
Possible Conditions: {", ".join(assessment.possible_conditions)}

Respond with JSON only:
{{
  "differentialDiagnosis": ["diagnosis1", "diagnosis2", "diagnosis3"],
  "recommendedTests": ["test1", "test2", "test3"],
  "redFlags": ["flag1", "flag2"],
  "aiConfidence": 85
}}"""

        fallback = fallback_insights(symptom_check)
        content = await self._ask(INSIGHTS_SYSTEM_PROMPT, prompt)
        if content is None:
            return fallback
        return parse_structured(content, DoctorInsights, fallback, fill_missing=True)

    async def generate_treatment_plan(
        self,
        diagnosis: str,
        symptoms: list[str],
    ) -> TreatmentPlanSuggestion:
        """Suggested medications, lifestyle advice and follow-up for a diagnosis."""
        prompt = f"""As a medical AI, suggest a treatment plan.

Diagnosis: {diagnosis}
Symptoms: {", ".join(symptoms)}

Respond with JSON only:
{{
  "medications": ["medication1", "medication2", "medication3"],
  "lifestyle": ["recommendation1", "recommendation2", "recommendation3"],
  "followUp": "follow-up instructions"
}}"""

        fallback = DEFAULT_TREATMENT_PLAN.model_copy(deep=True)
        content = await self._ask(TREATMENT_SYSTEM_PROMPT, prompt)
        if content is None:
            return fallback
        return parse_structured(content, TreatmentPlanSuggestion, fallback, fill_missing=True)
