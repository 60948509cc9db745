from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# -------------------------
# HTTP envelopes & errors
# -------------------------

class OkEnvelope(BaseModel):
    status: Literal["ok"] = "ok"
    trace_id: str
    data: Any


class ErrorEnvelope(BaseModel):
    status: Literal["error"] = "error"
    code: str
    message: str
    trace_id: str
    data: Any = Field(default_factory=dict)


class HealthInfo(BaseModel):
    service: str
    time_utc: str
    providers: list[str] = Field(default_factory=list)
