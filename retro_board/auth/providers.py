from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import RetroConfig

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The identity provider answered with something we cannot use."""


@dataclass(frozen=True)
class OAuthProvider(ABC):
    """Authorization-code sign-in against one identity provider.

    Subclasses know how to name the signed-in user and whether that user
    belongs to the configured organization.
    """

    name: str
    client_id: str
    client_secret: str
    authorize_url: str
    token_url: str
    scopes: tuple[str, ...] = ()

    def authorization_url(self, *, state: str, redirect_uri: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "state": state,
        }
        if self.scopes:
            params["scope"] = " ".join(self.scopes)
        if redirect_uri:
            params["redirect_uri"] = redirect_uri
        return str(httpx.URL(self.authorize_url, params=params))

    async def exchange(self, client: httpx.AsyncClient, *, code: str, redirect_uri: Optional[str] = None) -> str:
        """Trade an authorization code for an access token."""
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if redirect_uri:
            form["redirect_uri"] = redirect_uri
        resp = await client.post(self.token_url, data=form, headers={"Accept": "application/json"})
        resp.raise_for_status()
        body = resp.json()
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise ProviderError(f"{self.name}: token response without access_token")
        return token

    @abstractmethod
    async def fetch_user(self, client: httpx.AsyncClient, access_token: str) -> str:
        ...

    @abstractmethod
    async def is_member(self, client: httpx.AsyncClient, access_token: str, user: str) -> bool:
        ...


def _bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}


def _json_object(resp: httpx.Response, provider: str) -> dict:
    body = resp.json()
    if not isinstance(body, dict):
        raise ProviderError(f"{provider}: expected a JSON object, got {type(body).__name__}")
    return body


@dataclass(frozen=True)
class GithubProvider(OAuthProvider):
    organization: str = ""
    api_url: str = "https://api.github.com"

    async def fetch_user(self, client: httpx.AsyncClient, access_token: str) -> str:
        resp = await client.get(f"{self.api_url}/user", headers=_bearer(access_token))
        resp.raise_for_status()
        login = _json_object(resp, "github").get("login")
        if not login:
            raise ProviderError("github: user without login")
        return login

    async def is_member(self, client: httpx.AsyncClient, access_token: str, user: str) -> bool:
        resp = await client.get(
            f"{self.api_url}/orgs/{self.organization}/members/{user}",
            headers=_bearer(access_token),
        )
        # 204 member, 404 not a member (or membership hidden), 302 requester not in org
        return resp.status_code == 204


@dataclass(frozen=True)
class Office365Provider(OAuthProvider):
    domain: str = ""
    graph_url: str = "https://graph.microsoft.com/v1.0"

    async def fetch_user(self, client: httpx.AsyncClient, access_token: str) -> str:
        resp = await client.get(f"{self.graph_url}/me/", headers=_bearer(access_token))
        resp.raise_for_status()
        mail = _json_object(resp, "office365").get("mail")
        if not mail:
            raise ProviderError("office365: account without mail")
        return mail

    async def is_member(self, client: httpx.AsyncClient, access_token: str, user: str) -> bool:
        return user.lower().endswith(self.domain.lower())


def build_providers(cfg: RetroConfig) -> dict[str, OAuthProvider]:
    """Providers that are fully configured, keyed by the name used in URLs."""
    providers: dict[str, OAuthProvider] = {}
    if cfg.github.enabled:
        providers["github"] = GithubProvider(
            name="github",
            client_id=cfg.github.client_id or "",
            client_secret=cfg.github.client_secret or "",
            authorize_url="https://github.com/login/oauth/authorize",
            token_url="https://github.com/login/oauth/access_token",
            scopes=("read:org",),
            organization=cfg.github.organization or "",
        )
    if cfg.office365.enabled:
        providers["office365"] = Office365Provider(
            name="office365",
            client_id=cfg.office365.client_id or "",
            client_secret=cfg.office365.client_secret or "",
            authorize_url="https://login.microsoftonline.com/common/oauth2/v2.0/authorize",
            token_url="https://login.microsoftonline.com/common/oauth2/v2.0/token",
            scopes=("user.read",),
            domain=cfg.office365.domain or "",
        )
    if not providers:
        logger.warning("no sign-in provider configured")
    return providers
