"""
Base Consultation Workflow - Shared machinery for both consultation flows.

Both the patient-facing and the doctor-facing consultation walk the same
state machine:

    triage -> gp -> specialist -> synthesize -> complete
           \\-> synthesize (critical urgency)
                 gp -> synthesize (no specialists to consult)

Subclasses supply the four stage handlers; this module owns routing,
progress reporting, cost tracking and the stage-event stream.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Optional

from medicrew.agents.definitions import AgentDefinition, get_agent
from medicrew.config import DEFAULT_MODEL
from medicrew.llm.cost_tracker import CostTracker
from medicrew.models.consultation import (
    AgentMessage,
    ConsultationState,
    LLMResponse,
    StageEvent,
)
from medicrew.models.enums import AgentRole, ConsultationStep, UrgencyLevel
from medicrew.models.progress import ProgressCallback, ProgressStage, ProgressUpdate
from medicrew.utils.protocols import LLMClientProtocol


logger = logging.getLogger(__name__)

MAX_SPECIALISTS = 2

_STAGE_PROGRESS = {
    ConsultationStep.TRIAGE: (ProgressStage.TRIAGE, "Assessing urgency...", 10),
    ConsultationStep.GP: (ProgressStage.GP, "GP is reviewing the case...", 30),
    ConsultationStep.SPECIALIST: (ProgressStage.SPECIALIST_THINKING, "Consulting specialists...", 50),
    ConsultationStep.SYNTHESIZE: (ProgressStage.SYNTHESIZE, "Preparing recommendation...", 80),
}


def route_after_triage(state: ConsultationState) -> ConsultationStep:
    """Critical cases skip the GP and specialists and go straight to synthesis."""
    if state.urgency_level == UrgencyLevel.most_severe():
        return ConsultationStep.SYNTHESIZE
    return ConsultationStep.GP


def route_after_gp(state: ConsultationState) -> ConsultationStep:
    if state.specialists_to_consult:
        return ConsultationStep.SPECIALIST
    return ConsultationStep.SYNTHESIZE


def next_step(step: ConsultationStep, state: ConsultationState) -> ConsultationStep:
    """The step that follows `step`, given what the state now holds."""
    if step == ConsultationStep.TRIAGE:
        return route_after_triage(state)
    if step == ConsultationStep.GP:
        return route_after_gp(state)
    if step == ConsultationStep.SPECIALIST:
        return ConsultationStep.SYNTHESIZE
    return ConsultationStep.COMPLETE


def dump_messages(messages: list[AgentMessage]) -> list[dict]:
    return [m.model_dump(mode="json", by_alias=True) for m in messages]


@dataclass
class RunContext:
    """Everything one consultation run carries between stages."""

    state: ConsultationState
    usage: CostTracker
    report: Callable[..., None] = field(default=lambda *args, **kwargs: None)


class BaseConsultationWorkflow(ABC):
    """
    Abstract base class for consultation workflows.

    Provides shared functionality:
    - LLM calls with per-run cost tracking
    - Routing between stages
    - Progress reporting
    - Stage-event streaming
    """

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        pricing_config: str = "config/models.yaml",
    ):
        """
        Initialize the workflow.

        Args:
            llm_client: LLM client for all API calls
            model: Model used by every stage
            temperature: Sampling temperature
            max_tokens: Optional cap on generated tokens per call
            pricing_config: YAML file with model pricing
        """
        self.llm_client = llm_client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._pricing = CostTracker.from_config(pricing_config).pricing

    # ------------------------------------------------------------------
    # Stage handlers
    # ------------------------------------------------------------------

    @abstractmethod
    async def _triage(self, ctx: RunContext) -> dict:
        """Assess urgency, red flags and relevant specialties."""

    @abstractmethod
    async def _gp(self, ctx: RunContext) -> dict:
        """Add the GP's perspective."""

    @abstractmethod
    async def _consult_specialist(self, ctx: RunContext, agent: AgentDefinition) -> AgentMessage:
        """Ask one specialist for their view."""

    @abstractmethod
    async def _synthesize(self, ctx: RunContext) -> dict:
        """Write the terminal record and the coordinator's message."""

    async def _specialists(self, ctx: RunContext) -> dict:
        """Consult the first few relevant specialists, one after another."""
        new_messages = []
        roles = ctx.state.specialists_to_consult[:MAX_SPECIALISTS]
        for index, role in enumerate(roles):
            agent = get_agent(role)
            ctx.report(
                ProgressStage.SPECIALIST_THINKING,
                f"{agent.name} is reviewing...",
                50 + index * 15,
                role=role.value,
                agent_name=agent.name,
            )
            message = await self._consult_specialist(ctx, agent)
            ctx.state.append_message(message)
            new_messages.append(message)
            ctx.report(
                ProgressStage.SPECIALIST_COMPLETE,
                f"{agent.name} has responded",
                55 + index * 15,
                role=role.value,
            )
        return {"messages": dump_messages(new_messages)}

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    async def _call(
        self,
        ctx: RunContext,
        system_prompt: str,
        user_prompt: str,
        stage: str,
    ) -> LLMResponse:
        """Send one system+user exchange to the model and record its usage."""
        response = await self.llm_client.complete(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        ctx.usage.record(response, stage=stage)
        ctx.state.token_usage = ctx.usage.to_token_usage()
        return response

    @staticmethod
    def _message(role: AgentRole, content: str) -> AgentMessage:
        return AgentMessage(role=role, agent_name=get_agent(role).name, content=content)

    def _new_context(
        self,
        state: ConsultationState,
        progress_callback: Optional[ProgressCallback],
    ) -> RunContext:
        def report(stage: ProgressStage, message: str, percent: int, **detail):
            if progress_callback:
                progress_callback(ProgressUpdate(
                    stage=stage,
                    message=message,
                    percent=percent,
                    detail=detail,
                ))

        return RunContext(state=state, usage=CostTracker(pricing=dict(self._pricing)), report=report)

    async def _execute(self, ctx: RunContext) -> AsyncIterator[StageEvent]:
        """
        Drive the state machine, yielding one event per completed stage.

        LLM failures propagate; parse failures are absorbed by the handlers.
        """
        state = ctx.state
        handlers = {
            ConsultationStep.TRIAGE: self._triage,
            ConsultationStep.GP: self._gp,
            ConsultationStep.SPECIALIST: self._specialists,
            ConsultationStep.SYNTHESIZE: self._synthesize,
        }

        ctx.report(ProgressStage.INITIALIZING, "Starting consultation...", 5, session_id=state.session_id)

        step = state.current_step
        try:
            while step != ConsultationStep.COMPLETE:
                stage, message, percent = _STAGE_PROGRESS[step]
                ctx.report(stage, message, percent)
                logger.info(f"[{state.session_id}] running stage {step.value}")

                delta = await handlers[step](ctx)

                following = next_step(step, state)
                state.advance_to(following)
                delta["currentStep"] = following.value
                yield StageEvent(step=step.value, data=delta)
                step = following
        except Exception as e:
            logger.error(f"[{state.session_id}] consultation failed at {step.value}: {e}")
            ctx.report(ProgressStage.ERROR, str(e), 100, step=step.value)
            raise

        logger.info(
            f"[{state.session_id}] consultation complete: "
            f"{len(state.messages)} messages, {state.token_usage.total_tokens} tokens"
        )
        ctx.report(
            ProgressStage.COMPLETE,
            "Consultation complete",
            100,
            total_tokens=state.token_usage.total_tokens,
            estimated_cost_usd=state.token_usage.estimated_cost_usd,
        )
