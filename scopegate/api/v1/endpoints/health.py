"""Health check endpoint. No dependencies; used for liveness checks."""

from fastapi import APIRouter

from scopegate.core.config import get_settings
from scopegate.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status and the operating mode."""
    return HealthResponse(mode=get_settings().auth_mode)
