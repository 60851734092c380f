"""
Doctor-facing consultation.

Runs the care team over a stored SymptomCheck, with every agent
addressing the reviewing doctor as a colleague, and ends with structured
DoctorInsights plus a TreatmentPlanSuggestion.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from medicrew.agents.definitions import AgentDefinition, get_agent
from medicrew.agents.specialists import get_relevant_specialists
from medicrew.models.consultation import (
    AgentMessage,
    ConsultationState,
    DoctorInsights,
    DoctorSummary,
    StageEvent,
    TreatmentPlanSuggestion,
)
from medicrew.models.enums import AgentRole
from medicrew.models.portal import SymptomCheck
from medicrew.models.progress import ProgressCallback
from medicrew.utils.parsing import extract_labelled_list, parse_structured
from medicrew.utils.prompt_loader import (
    build_colleague_system_prompt,
    build_doctor_gp_prompt,
    build_doctor_specialist_prompt,
    build_doctor_summary_prompt,
    build_doctor_triage_prompt,
    load_prompt,
)
from medicrew.workflow.base import BaseConsultationWorkflow, RunContext, dump_messages


logger = logging.getLogger(__name__)

RED_FLAG_LABELS = [r"red flags?"]
DEFAULT_TESTS = ["Physical examination", "Vital signs", "Basic metabolic panel"]
DEFAULT_MEDICATIONS = ["Symptomatic treatment as needed"]
DEFAULT_LIFESTYLE = ["Rest", "Adequate hydration", "Monitor symptoms"]

TRANSCRIPT_TEMPLATE = "**{name}:** {content}"


@dataclass
class DoctorRunContext(RunContext):
    symptom_check: Optional[SymptomCheck] = None


def default_doctor_summary(check: SymptomCheck, red_flags: list[str]) -> DoctorSummary:
    """The summary used when the model's output can't be parsed."""
    return DoctorSummary(
        insights=DoctorInsights(
            differential_diagnosis=list(check.ai_assessment.possible_conditions),
            recommended_tests=list(DEFAULT_TESTS),
            red_flags=list(red_flags),
            ai_confidence=check.ai_assessment.confidence,
        ),
        treatment_plan=TreatmentPlanSuggestion(
            medications=list(DEFAULT_MEDICATIONS),
            lifestyle=list(DEFAULT_LIFESTYLE),
        ),
    )


class DoctorConsultationOrchestrator(BaseConsultationWorkflow):
    """
    Runs the care team over a patient's symptom check for a doctor.

    Urgency is taken from the symptom check's assessment, not re-derived.
    """

    def _new_context_for(
        self,
        check: SymptomCheck,
        session_id: Optional[str],
        progress_callback: Optional[ProgressCallback],
    ) -> DoctorRunContext:
        state = ConsultationState(
            symptoms=", ".join(check.symptoms),
            additional_info=[check.additional_info] if check.additional_info else [],
            urgency_level=check.ai_assessment.urgency_level,
        )
        if session_id:
            state.session_id = session_id

        base = self._new_context(state, progress_callback)
        return DoctorRunContext(
            state=base.state,
            usage=base.usage,
            report=base.report,
            symptom_check=check,
        )

    async def run(
        self,
        symptom_check: SymptomCheck,
        session_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ConsultationState:
        """
        Run the doctor-facing consultation to completion.

        Args:
            symptom_check: The case under review
            session_id: Optional session id
            progress_callback: Optional callback for live progress updates

        Returns:
            The completed state, with `doctor_summary` set
        """
        ctx = self._new_context_for(symptom_check, session_id, progress_callback)
        async for _ in self._execute(ctx):
            pass
        return ctx.state

    async def stream(
        self,
        symptom_check: SymptomCheck,
        session_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AsyncIterator[StageEvent]:
        """Run the consultation, yielding a StageEvent per completed stage."""
        ctx = self._new_context_for(symptom_check, session_id, progress_callback)
        async for event in self._execute(ctx):
            yield event

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _triage(self, ctx: DoctorRunContext) -> dict:
        state = ctx.state
        check = ctx.symptom_check
        agent = get_agent(AgentRole.TRIAGE)

        response = await self._call(
            ctx,
            build_colleague_system_prompt(agent.system_prompt, "triage"),
            build_doctor_triage_prompt(check),
            stage="triage",
        )

        new_flags = state.merge_red_flags(extract_labelled_list(response.content, RED_FLAG_LABELS))
        new_roles = state.merge_specialties(get_relevant_specialists(" ".join(check.symptoms)))

        message = self._message(AgentRole.TRIAGE, response.content)
        state.append_message(message)

        return {
            "messages": dump_messages([message]),
            "urgencyLevel": state.urgency_level.value,
            "redFlags": new_flags,
            "relevantSpecialties": [role.value for role in new_roles],
        }

    async def _gp(self, ctx: DoctorRunContext) -> dict:
        agent = get_agent(AgentRole.GP)
        response = await self._call(
            ctx,
            build_colleague_system_prompt(agent.system_prompt, "gp"),
            build_doctor_gp_prompt(
                ctx.symptom_check, ctx.state.format_transcript(TRANSCRIPT_TEMPLATE)
            ),
            stage="gp",
        )
        message = self._message(AgentRole.GP, response.content)
        ctx.state.append_message(message)
        return {"messages": dump_messages([message])}

    async def _consult_specialist(self, ctx: DoctorRunContext, agent: AgentDefinition) -> AgentMessage:
        response = await self._call(
            ctx,
            build_colleague_system_prompt(agent.system_prompt, "specialist"),
            build_doctor_specialist_prompt(
                ctx.symptom_check,
                ctx.state.format_transcript(TRANSCRIPT_TEMPLATE),
                agent.name,
            ),
            stage=f"specialist:{agent.role.value}",
        )
        return self._message(agent.role, response.content)

    async def _synthesize(self, ctx: DoctorRunContext) -> dict:
        state = ctx.state
        check = ctx.symptom_check

        response = await self._call(
            ctx,
            load_prompt("summary", "colleague"),
            build_doctor_summary_prompt(
                check,
                state.format_transcript("### {name}\n{content}"),
                state.red_flags,
            ),
            stage="synthesize",
        )

        summary = parse_structured(
            response.content,
            DoctorSummary,
            default_doctor_summary(check, state.red_flags),
            fill_missing=True,
        )
        state.set_doctor_summary(summary)

        insights = summary.insights
        content = (
            "**Summary:** Based on the team discussion, the most likely differentials are: "
            f"{', '.join(insights.differential_diagnosis) or 'none identified'}. "
            f"Recommended tests: {', '.join(insights.recommended_tests) or 'none'}."
        )
        message = self._message(AgentRole.ORCHESTRATOR, content)
        state.append_message(message)

        return {
            "messages": dump_messages([message]),
            "doctorSummary": summary.model_dump(mode="json", by_alias=True),
        }
