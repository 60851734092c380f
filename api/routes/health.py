"""Health check endpoints."""

from fastapi import APIRouter

from medicrew import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "healthy", "service": "medicrew"}


@router.get("/")
async def root():
    """API root."""
    return {
        "name": "MediCrew API",
        "version": __version__,
        "docs": "/docs",
    }
