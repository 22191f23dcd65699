# task_api/routers/health.py
import time

from fastapi import APIRouter, Request

from task_api.core.timestamps import now_iso
from task_api.schemas.health import HealthOut

router = APIRouter(prefix="/health", tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("", response_model=HealthOut)
def health(request: Request):
    """Liveness check; never touches the store."""
    return HealthOut(
        status="ok",
        timestamp=now_iso(),
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        version=request.app.state.settings.app_version,
    )
