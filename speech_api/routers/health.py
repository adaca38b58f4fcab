from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from speech_api.config import Settings, get_settings
from speech_api.schemas.common import DependencyStatus, HealthResponse
from speech_api.services.health_checks import gather_health

router = APIRouter(prefix="/api/v1", tags=["health"])

_HEALTHY_STATES = {"up", "disabled"}


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, settings: Settings = Depends(get_settings)):
    services = getattr(request.app.state, "services", None)
    dependencies = await gather_health(
        settings,
        services.store if services else None,
        services.history if services else None,
    )
    overall = "healthy" if all(item.get("status") in _HEALTHY_STATES for item in dependencies.values()) else "degraded"
    return HealthResponse(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        dependencies={name: DependencyStatus(**value) for name, value in dependencies.items()},
        history_enabled=settings.history_enabled,
        version=settings.stack_version,
    )
