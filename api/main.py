"""
FastAPI backend for MediCrew.

Provides the patient consultation API, the doctor & patient portal API,
and Server-Sent Events (SSE) streaming of consultation stages.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from api.deps import get_settings  # noqa: E402
from api.errors import register_exception_handlers  # noqa: E402
from api.routes import consult, health, portal  # noqa: E402
from medicrew import __version__  # noqa: E402
from medicrew.utils.logging import setup_logging  # noqa: E402

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info(f"MediCrew API starting (model={settings.model})")
    if not settings.api_key:
        logger.warning("OPENROUTER_API_KEY is not set; AI endpoints will return 503")
    yield
    logger.info("MediCrew API shutting down")


app = FastAPI(
    title="MediCrew API",
    description="Multi-agent health navigation with a doctor review portal",
    version=__version__,
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(consult.router, prefix="/api", tags=["Consultation"])
app.include_router(portal.router, prefix="/api", tags=["Portal"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
