from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from ..common.trace import new_trace_id
from ..models import HealthInfo, OkEnvelope

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    # Health endpoint is public (no auth)
    info = HealthInfo(
        service="retro_board",
        time_utc=datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        providers=sorted(request.app.state.providers),
    )
    return OkEnvelope(trace_id=new_trace_id(), data=info.model_dump()).model_dump()
