from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .api.http import router as http_router
from .api.oauth import router as oauth_router
from .auth.providers import build_providers
from .auth.sessions import SessionRegistry
from .common.errors import ApiError
from .common.trace import new_trace_id
from .core.config import ConfigManager, RetroConfig
from .models import ErrorEnvelope

logger = logging.getLogger(__name__)


def create_app(cfg: Optional[RetroConfig] = None, *, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Build the sign-in service.

    ``http_client`` is used for every identity-provider call; tests pass one
    backed by ``httpx.MockTransport``.
    """
    cfg = cfg or ConfigManager().load()
    logging.getLogger().setLevel(cfg.log_level.upper())

    app = FastAPI(title="Retro Board")

    # Dependency injection via app.state
    app.state.config = cfg
    app.state.providers = build_providers(cfg)
    app.state.sessions = SessionRegistry()
    app.state.http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(cfg.http_timeout_s))
    logger.info("sign-in providers: %s", ", ".join(sorted(app.state.providers)) or "none")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.http_client.aclose()

    @app.exception_handler(ApiError)
    async def api_error_handler(_, exc: ApiError):
        body = ErrorEnvelope(code=exc.code, message=exc.message, trace_id=new_trace_id(), data=exc.data or {})
        return JSONResponse(status_code=exc.http_status, content=body.model_dump())

    app.include_router(http_router)
    app.include_router(oauth_router)
    return app
