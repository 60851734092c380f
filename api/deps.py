"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from medicrew.config import Settings
from medicrew.llm.client import LLMClient
from medicrew.portal.assessment import AssessmentService
from medicrew.portal.store import PortalStore
from medicrew.utils.protocols import LLMClientProtocol
from medicrew.workflow.doctor_consultation import DoctorConsultationOrchestrator
from medicrew.workflow.orchestrator import ConsultationOrchestrator


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache()
def get_llm_client() -> LLMClientProtocol:
    """
    Shared LLM client.

    Raises LLMConfigurationError (rendered as 503) when no API key is set;
    the failure is not cached, so setting the key takes effect on the next request.
    """
    settings = get_settings()
    return LLMClient(api_key=settings.api_key, base_url=settings.base_url)


@lru_cache()
def get_portal_store() -> PortalStore:
    """Process-wide portal repository."""
    return PortalStore()


def get_optional_llm_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Optional[LLMClientProtocol]:
    """The shared LLM client, or None when no API key is configured."""
    if not settings.api_key:
        return None
    return get_llm_client()


def get_assessment_service(
    llm_client: Annotated[Optional[LLMClientProtocol], Depends(get_optional_llm_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AssessmentService:
    return AssessmentService(llm_client, model=settings.model, temperature=settings.temperature)


def get_consultation_orchestrator(
    llm_client: Annotated[LLMClientProtocol, Depends(get_llm_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConsultationOrchestrator:
    return ConsultationOrchestrator(
        llm_client,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        pricing_config=settings.pricing_config,
    )


def get_doctor_orchestrator(
    llm_client: Annotated[LLMClientProtocol, Depends(get_llm_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DoctorConsultationOrchestrator:
    return DoctorConsultationOrchestrator(
        llm_client,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        pricing_config=settings.pricing_config,
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
PortalStoreDep = Annotated[PortalStore, Depends(get_portal_store)]
AssessmentServiceDep = Annotated[AssessmentService, Depends(get_assessment_service)]
ConsultationOrchestratorDep = Annotated[ConsultationOrchestrator, Depends(get_consultation_orchestrator)]
DoctorOrchestratorDep = Annotated[DoctorConsultationOrchestrator, Depends(get_doctor_orchestrator)]
