import unittest
from urllib.parse import parse_qs, urlsplit

import httpx
from fastapi.testclient import TestClient

from retro_board.app import create_app
from retro_board.auth.providers import OAuthProvider
from retro_board.core.config import GithubConfig, Office365Config, RetroConfig


def provider_api(request: httpx.Request) -> httpx.Response:
    """Stand-in for GitHub and Microsoft Graph."""
    host, path = request.url.host, request.url.path
    if path.endswith("/access_token") or path.endswith("/oauth2/v2.0/token"):
        code = parse_qs(request.content.decode())["code"][0]
        if code == "broken":
            return httpx.Response(500)
        return httpx.Response(200, json={"access_token": f"at-{code}"})

    auth = request.headers.get("authorization", "")
    if host == "api.github.com" and path == "/user":
        if auth == "Bearer at-listy":
            return httpx.Response(200, json=["alice"])
        login = "alice" if auth == "Bearer at-good" else "eve"
        return httpx.Response(200, json={"login": login})
    if host == "api.github.com" and path == "/orgs/acme/members/alice":
        return httpx.Response(204)
    if host == "graph.microsoft.com" and path == "/v1.0/me/":
        mail = "bob@acme.example" if auth == "Bearer at-good" else "bob@elsewhere.example"
        return httpx.Response(200, json={"mail": mail})
    return httpx.Response(404)


def query(location: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(location).query).items()}


class TestOAuthRoutes(unittest.TestCase):

    def setUp(self):
        cfg = RetroConfig(
            app_url="/board",
            github=GithubConfig(client_id="gh-id", client_secret="gh-secret", organization="acme"),
            office365=Office365Config(client_id="ms-id", client_secret="ms-secret", domain="acme.example"),
        )
        self.app = create_app(cfg, http_client=httpx.AsyncClient(transport=httpx.MockTransport(provider_api)))
        self.client = TestClient(self.app)

    def _login(self, provider: str) -> str:
        resp = self.client.get(f"/oauth/{provider}/login", follow_redirects=False)
        self.assertEqual(resp.status_code, 302)
        return query(resp.headers["location"])["state"]

    def _callback(self, provider: str, code: str, state: str):
        return self.client.get(
            f"/oauth/{provider}/callback",
            params={"code": code, "state": state},
            follow_redirects=False,
        )

    def test_login_redirects_to_provider(self):
        resp = self.client.get("/oauth/github/login", follow_redirects=False)
        location = resp.headers["location"]
        self.assertTrue(location.startswith("https://github.com/login/oauth/authorize?"))
        q = query(location)
        self.assertEqual(q["client_id"], "gh-id")
        self.assertEqual(q["redirect_uri"], "http://testserver/oauth/github/callback")
        self.assertTrue(q["state"])

    def test_github_member_gets_token(self):
        state = self._login("github")
        resp = self._callback("github", "good", state)
        self.assertEqual(resp.status_code, 302)
        location = resp.headers["location"]
        self.assertTrue(location.startswith("/board?"))
        q = query(location)
        self.assertEqual(q["user"], "alice")
        self.assertTrue(self.app.state.sessions.check("alice", q["token"]))

    def test_github_outsider_is_turned_away(self):
        state = self._login("github")
        resp = self._callback("github", "other", state)
        self.assertEqual(query(resp.headers["location"]), {"error": "not_in_org"})
        self.assertFalse(self.app.state.sessions.check("eve", "anything"))

    def test_office365_domain_check(self):
        resp = self._callback("office365", "good", self._login("office365"))
        self.assertEqual(query(resp.headers["location"])["user"], "bob@acme.example")

        resp = self._callback("office365", "other", self._login("office365"))
        self.assertEqual(query(resp.headers["location"]), {"error": "not_in_org"})

    def test_state_is_single_use(self):
        state = self._login("github")
        self.assertEqual(self._callback("github", "good", state).status_code, 302)
        resp = self._callback("github", "good", state)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "INVALID_ARGUMENT")

    def test_provider_failure_is_502(self):
        resp = self._callback("github", "broken", self._login("github"))
        self.assertEqual(resp.status_code, 502)
        body = resp.json()
        self.assertEqual(body["status"], "error")
        self.assertEqual(body["code"], "UNAVAILABLE")
        self.assertTrue(body["trace_id"])

    def test_non_object_identity_is_502(self):
        resp = self._callback("github", "listy", self._login("github"))
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["code"], "UNAVAILABLE")

    def test_unknown_provider(self):
        resp = self.client.get("/oauth/gitlab/login", follow_redirects=False)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "NOT_FOUND")

    def test_health_lists_providers(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["providers"], ["github", "office365"])


class TestUnconfigured(unittest.TestCase):

    def test_provider_base_is_abstract(self):
        with self.assertRaises(TypeError):
            OAuthProvider(name="x", client_id="i", client_secret="s", authorize_url="a", token_url="t")

    def test_no_providers(self):
        app = create_app(RetroConfig(), http_client=httpx.AsyncClient(transport=httpx.MockTransport(provider_api)))
        client = TestClient(app)
        self.assertEqual(client.get("/oauth/github/login", follow_redirects=False).status_code, 404)


if __name__ == "__main__":
    unittest.main()
