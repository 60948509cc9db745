from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Query, Request
from fastapi.responses import RedirectResponse

from ..auth.providers import OAuthProvider, ProviderError
from ..auth.sessions import SessionRegistry
from ..common.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()


def _provider(request: Request, name: str) -> OAuthProvider:
    provider = request.app.state.providers.get(name)
    if provider is None:
        raise ApiError(code="NOT_FOUND", message=f"unknown sign-in provider: {name}", http_status=404)
    return provider


def _back_to_app(request: Request, **params: str) -> RedirectResponse:
    app_url = request.app.state.config.app_url
    return RedirectResponse(f"{app_url}?{urlencode(params)}", status_code=302)


@router.get("/oauth/{provider}/login")
def oauth_login(request: Request, provider: str):
    p = _provider(request, provider)
    sessions: SessionRegistry = request.app.state.sessions
    redirect_uri = str(request.url_for("oauth_callback", provider=provider))
    url = p.authorization_url(state=sessions.new_state(), redirect_uri=redirect_uri)
    return RedirectResponse(url, status_code=302)


@router.get("/oauth/{provider}/callback", name="oauth_callback")
async def oauth_callback(
    request: Request,
    provider: str,
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
):
    p = _provider(request, provider)
    sessions: SessionRegistry = request.app.state.sessions
    if not sessions.consume_state(state):
        raise ApiError(code="INVALID_ARGUMENT", message="unknown or reused oauth state", http_status=400)
    if not code:
        raise ApiError(code="INVALID_ARGUMENT", message="code is required", http_status=400)

    client: httpx.AsyncClient = request.app.state.http_client
    redirect_uri = str(request.url_for("oauth_callback", provider=provider))
    try:
        access_token = await p.exchange(client, code=code, redirect_uri=redirect_uri)
        user = await p.fetch_user(client, access_token)
        member = await p.is_member(client, access_token, user)
    except (httpx.HTTPError, ProviderError, ValueError) as e:
        logger.warning("%s sign-in failed: %s", provider, e)
        raise ApiError(code="UNAVAILABLE", message=f"{provider} sign-in failed", http_status=502) from e

    if not member:
        logger.info("%s: %s is not in the organization", provider, user)
        return _back_to_app(request, error="not_in_org")

    token = sessions.issue(user)
    logger.info("%s: signed in %s", provider, user)
    return _back_to_app(request, user=user, token=token)
