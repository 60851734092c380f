"""
Prompt loading and formatting utilities.

Handles loading role prompts from markdown files and building the user
prompts for each consultation stage.
"""

from pathlib import Path
from typing import Optional

from medicrew.models.consultation import ConsultationState
from medicrew.models.portal import SymptomCheck


# Base directory for prompts (shipped inside the package)
PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Team messages in the final-recommendation prompt
SYNTHESIS_TRANSCRIPT_TEMPLATE = "### {name}\n{content}"


def load_prompt(role: str, category: str = "agents") -> str:
    """
    Load a prompt template from a markdown file.

    Args:
        role: The role name (e.g., "triage", "cardiology")
        category: The prompt category (e.g., "agents", "colleague")

    Returns:
        The prompt template as a string

    Raises:
        FileNotFoundError: If the prompt file doesn't exist
    """
    prompt_path = PROMPTS_DIR / category / f"{role}.md"

    if not prompt_path.exists():
        raise FileNotFoundError(
            f"Prompt file not found: {prompt_path}. "
            f"Expected prompt for role '{role}' in category '{category}'."
        )

    return prompt_path.read_text(encoding="utf-8").strip()


def build_colleague_system_prompt(agent_prompt: str, stage: str) -> str:
    """
    Extend an agent's system prompt for doctor-to-doctor consultation.

    Args:
        agent_prompt: The agent's own system prompt
        stage: One of "triage", "gp", "specialist"

    Returns:
        The combined system prompt
    """
    return agent_prompt + "\n\n" + load_prompt(stage, "colleague")


def get_available_roles() -> list[str]:
    """
    Get list of roles with an agent prompt file.

    Returns:
        Sorted list of role names
    """
    agents_dir = PROMPTS_DIR / "agents"
    if not agents_dir.exists():
        return []
    return sorted(file.stem for file in agents_dir.glob("*.md"))


# =============================================================================
# PATIENT-FACING STAGE PROMPTS
# =============================================================================


def _patient_context(state: ConsultationState) -> str:
    lines = [f"Patient symptoms: {state.symptoms}"]
    if state.additional_info:
        lines.append(f"Additional information: {', '.join(state.additional_info)}")
    return "\n".join(lines)


def _urgency_line(state: ConsultationState) -> str:
    urgency = state.urgency_level.patient_label if state.urgency_level else "unknown"
    return f"Triage assessment: {urgency} urgency"


def build_triage_user_prompt(state: ConsultationState) -> str:
    """
    Build the user prompt for the triage stage.

    Args:
        state: Consultation state holding the symptoms

    Returns:
        The formatted user prompt requesting a JSON triage assessment
    """
    return f"""{_patient_context(state)}

Please provide a structured triage assessment in the following JSON format:
{{
  "urgencyLevel": "emergency" | "urgent" | "routine" | "self_care",
  "reasoning": "your reasoning here",
  "redFlags": ["list of red flags identified"],
  "relevantSpecialties": ["list of relevant medical specialties"]
}}
"""


def build_gp_user_prompt(state: ConsultationState) -> str:
    """Build the user prompt for the GP stage."""
    if state.red_flags:
        flags = f"Red flags identified: {', '.join(state.red_flags)}"
    else:
        flags = "No red flags identified"

    return f"""{_patient_context(state)}

{_urgency_line(state)}
{flags}

Previous assessments:
{state.format_transcript()}

Please provide your GP assessment, focusing on the overall picture and any additional considerations.
"""


def build_specialist_user_prompt(state: ConsultationState, agent_name: str) -> str:
    """Build the user prompt for one specialist."""
    flags = f"Red flags identified: {', '.join(state.red_flags)}" if state.red_flags else ""

    return f"""{_patient_context(state)}

{_urgency_line(state)}
{flags}

Previous assessments from the care team:
{state.format_transcript()}

As {agent_name}, please provide your specialist perspective on these symptoms.
Focus on aspects relevant to your specialty and any specific recommendations.
"""


def build_synthesis_user_prompt(state: ConsultationState) -> str:
    """
    Build the user prompt for the final recommendation.

    Args:
        state: Consultation state with all team messages

    Returns:
        The formatted prompt requesting a JSON care recommendation
    """
    urgency = state.urgency_level.patient_label if state.urgency_level else "routine"
    flags = f"Red flags: {', '.join(state.red_flags)}" if state.red_flags else ""

    return f"""Patient symptoms: {state.symptoms}
Urgency level: {urgency}
{flags}

## Team Assessments:
{state.format_transcript(SYNTHESIS_TRANSCRIPT_TEMPLATE)}

Please provide a final recommendation in JSON format:
{{
  "urgency": "{urgency}",
  "summary": "A clear, empathetic summary of the situation",
  "nextSteps": ["Step 1", "Step 2", "Step 3"],
  "questionsForDoctor": ["Question 1 to ask your doctor", "Question 2"],
  "specialistType": "Type of specialist to see if applicable",
  "timeframe": "When to seek care (e.g., 'within 24 hours', 'this week')"
}}
"""


# =============================================================================
# DOCTOR-FACING STAGE PROMPTS
# =============================================================================


def format_symptom_check(check: SymptomCheck) -> str:
    """
    Render a symptom check as the case header for doctor prompts.

    Args:
        check: The patient's symptom check

    Returns:
        Multi-line case summary
    """
    assessment = check.ai_assessment
    conditions = ", ".join(assessment.possible_conditions) or "None listed"
    return f"""Patient: {check.patient_name}
Symptoms: {", ".join(check.symptoms)}
Duration: {check.duration}
Additional Info: {check.additional_info or "None"}
Current AI Triage: {assessment.urgency_level.value} urgency
Possible Conditions (from initial triage): {conditions}"""


def build_doctor_triage_prompt(check: SymptomCheck) -> str:
    """Build the doctor-facing triage prompt."""
    return f"""{format_symptom_check(check)}

Please provide your triage assessment for this case. Be concise and clinical.
Include: urgency level, key red flags, and which specialties should be consulted.
"""


def build_doctor_gp_prompt(check: SymptomCheck, transcript: str) -> str:
    """Build the doctor-facing GP prompt."""
    return f"""{format_symptom_check(check)}

**Team discussion so far:**
{transcript}

As the GP, provide your clinical perspective. What's your differential? What would you want to rule out?
"""


def build_doctor_specialist_prompt(
    check: SymptomCheck,
    transcript: str,
    agent_name: str,
) -> str:
    """Build the doctor-facing prompt for one specialist."""
    return f"""{format_symptom_check(check)}

**Team discussion so far:**
{transcript}

As {agent_name}, what's your specialist take? Any specific concerns or recommended investigations?
"""


def build_doctor_summary_prompt(
    check: SymptomCheck,
    transcript: str,
    red_flags: Optional[list[str]] = None,
) -> str:
    """Build the prompt for the structured doctor summary."""
    flags = ", ".join(red_flags or []) or "None"
    return f"""{format_symptom_check(check)}

## Team Discussion:
{transcript}

Red flags identified: {flags}

Synthesize this into structured insights and a treatment plan suggestion.
Respond with JSON only.
"""
