from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel


class DependencyStatus(BaseModel):
    status: str
    latency_ms: int | None = None
    details: Dict[str, Any] | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    dependencies: Dict[str, DependencyStatus]
    history_enabled: bool
    version: str
