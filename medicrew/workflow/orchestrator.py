"""
Patient-facing consultation orchestrator.

Takes a free-text symptom description through triage, the GP, up to two
specialists and a final synthesis into a CareRecommendation.
"""

import logging
from typing import AsyncIterator, Optional

from medicrew.agents.definitions import AgentDefinition, get_agent
from medicrew.agents.specialists import (
    detect_critical_signals,
    get_relevant_specialists,
    normalize_specialty,
)
from medicrew.models.consultation import (
    AgentMessage,
    CareRecommendation,
    ConsultationState,
    StageEvent,
    TriageOutput,
)
from medicrew.models.enums import AgentRole, UrgencyLevel
from medicrew.models.progress import ProgressCallback
from medicrew.utils.parsing import parse_structured
from medicrew.utils.prompt_loader import (
    build_gp_user_prompt,
    build_specialist_user_prompt,
    build_synthesis_user_prompt,
    build_triage_user_prompt,
)
from medicrew.workflow.base import BaseConsultationWorkflow, RunContext, dump_messages


logger = logging.getLogger(__name__)

DEFAULT_NEXT_STEPS = ["Consult with your GP for proper assessment"]


class ConsultationOrchestrator(BaseConsultationWorkflow):
    """
    Runs a patient consultation end to end.

    Usage:
        orchestrator = ConsultationOrchestrator(llm_client)
        state = await orchestrator.run("Chest pain when climbing stairs")

        async for event in orchestrator.stream("Itchy rash on both arms"):
            ...
    """

    def _new_state(
        self,
        symptoms: str,
        additional_info: Optional[list[str]],
        session_id: Optional[str],
    ) -> ConsultationState:
        if not symptoms or not symptoms.strip():
            raise ValueError("Symptoms must not be empty")

        state = ConsultationState(
            symptoms=symptoms.strip(),
            additional_info=[info for info in (additional_info or []) if info and info.strip()],
        )
        if session_id:
            state.session_id = session_id
        return state

    async def run(
        self,
        symptoms: str,
        additional_info: Optional[list[str]] = None,
        session_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ConsultationState:
        """
        Run a full consultation.

        Args:
            symptoms: Patient's description of their symptoms
            additional_info: Optional extra details (age, history, ...)
            session_id: Optional session id (generated if not provided)
            progress_callback: Optional callback for live progress updates

        Returns:
            The completed ConsultationState

        Raises:
            ValueError: If symptoms are blank
            LLMError: If the text-generation service fails
        """
        state = self._new_state(symptoms, additional_info, session_id)
        async for _ in self._execute(self._new_context(state, progress_callback)):
            pass
        return state

    async def stream(
        self,
        symptoms: str,
        additional_info: Optional[list[str]] = None,
        session_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AsyncIterator[StageEvent]:
        """
        Run a consultation, yielding a StageEvent as each stage completes.

        Arguments are validated before the first event is produced.
        """
        state = self._new_state(symptoms, additional_info, session_id)
        async for event in self._execute(self._new_context(state, progress_callback)):
            yield event

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _triage(self, ctx: RunContext) -> dict:
        state = ctx.state
        agent = get_agent(AgentRole.TRIAGE)

        signals = detect_critical_signals(" ".join([state.symptoms, *state.additional_info]))
        keyword_roles = get_relevant_specialists(state.symptoms)

        response = await self._call(
            ctx, agent.system_prompt, build_triage_user_prompt(state), stage="triage"
        )

        fallback = TriageOutput(
            urgency_level=UrgencyLevel.CRITICAL if signals else UrgencyLevel.MEDIUM,
            reasoning=response.content,
            red_flags=signals,
            relevant_specialties=[role.value for role in keyword_roles],
        )
        triage = parse_structured(response.content, TriageOutput, fallback)

        urgency = triage.urgency_level
        if signals and urgency != UrgencyLevel.CRITICAL:
            logger.warning(
                f"[{state.session_id}] triage rated {urgency.value} despite {signals}, raising to critical"
            )
            urgency = UrgencyLevel.CRITICAL
        state.urgency_level = urgency

        new_flags = state.merge_red_flags(triage.red_flags)

        suggested = [normalize_specialty(name) for name in triage.relevant_specialties]
        new_roles = state.merge_specialties([role for role in suggested if role is not None])
        # Keyword matches are always added so e.g. "chest" reaches cardiology
        new_roles += state.merge_specialties(keyword_roles)

        message = self._message(AgentRole.TRIAGE, triage.reasoning)
        state.append_message(message)

        logger.info(
            f"[{state.session_id}] triage: {urgency.value}, "
            f"{len(state.red_flags)} red flags, specialties={[r.value for r in state.relevant_specialties]}"
        )
        return {
            "messages": dump_messages([message]),
            "urgencyLevel": urgency.value,
            "redFlags": new_flags,
            "relevantSpecialties": [role.value for role in new_roles],
        }

    async def _gp(self, ctx: RunContext) -> dict:
        agent = get_agent(AgentRole.GP)
        response = await self._call(
            ctx, agent.system_prompt, build_gp_user_prompt(ctx.state), stage="gp"
        )
        message = self._message(AgentRole.GP, response.content)
        ctx.state.append_message(message)
        return {"messages": dump_messages([message])}

    async def _consult_specialist(self, ctx: RunContext, agent: AgentDefinition) -> AgentMessage:
        response = await self._call(
            ctx,
            agent.system_prompt,
            build_specialist_user_prompt(ctx.state, agent.name),
            stage=f"specialist:{agent.role.value}",
        )
        return self._message(agent.role, response.content)

    async def _synthesize(self, ctx: RunContext) -> dict:
        state = ctx.state
        coordinator = get_agent(AgentRole.ORCHESTRATOR)
        urgency = state.urgency_level or UrgencyLevel.MEDIUM

        response = await self._call(
            ctx, coordinator.system_prompt, build_synthesis_user_prompt(state), stage="synthesize"
        )

        fallback = CareRecommendation(
            urgency=urgency,
            summary=response.content,
            next_steps=list(DEFAULT_NEXT_STEPS),
        )
        recommendation = parse_structured(
            response.content, CareRecommendation, fallback, fill_missing=True
        )
        if recommendation.urgency.severity < urgency.severity:
            # The recommendation may not be softer than triage
            recommendation = recommendation.model_copy(update={"urgency": urgency})

        state.set_recommendation(recommendation)
        message = self._message(AgentRole.ORCHESTRATOR, recommendation.summary)
        state.append_message(message)

        return {
            "messages": dump_messages([message]),
            "recommendation": recommendation.model_dump(mode="json", by_alias=True),
        }
