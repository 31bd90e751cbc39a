"""Health check route."""

from fastapi import APIRouter

from ..utils import diagnostics_svc

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Liveness check, with the languages the engine can check."""
    return {"status": "ok", "languages": sorted(diagnostics_svc.engine.checkers)}
