import httpx
import pytest

from api.server import app


@pytest.mark.asyncio
async def test_health_endpoint():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


@pytest.mark.asyncio
async def test_lifespan_creates_database(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

    from fastapi import FastAPI

    from viewaccess import models
    from api.server import lifespan

    models.dispose_db_manager()
    async with lifespan(FastAPI()):
        assert models._db_manager is not None
        assert models._db_manager.health_check()
    assert models._db_manager is None


def test_root(client):
    assert "running" in client.get("/").json()["message"]


def test_metrics_mounted(client):
    r = client.get("/metrics/")
    assert r.status_code == 200
    assert "viewaccess_access_checks_total" in r.text


class TestAdminAuth:
    def test_requires_api_key(self, client):
        assert client.get("/api/roles").status_code == 403
        assert client.get("/api/roles", headers={"X-API-Key": "wrong"}).status_code == 403

    def test_plugins(self, client, api_key_headers):
        r = client.get("/api/access/plugins", headers=api_key_headers)
        assert r.status_code == 200
        assert {p["id"] for p in r.json()} == {"none", "role"}


class TestRoleRoutes:
    def test_list_roles(self, client, api_key_headers):
        r = client.get("/api/roles", headers=api_key_headers)
        assert r.status_code == 200
        assert list(r.json()) == ["editor", "admin", "reviewer"]

    def test_put_and_delete_role(self, client, api_key_headers):
        r = client.put("/api/roles/author", json={"label": "Author", "weight": 9},
                       headers=api_key_headers)
        assert r.status_code == 200
        assert r.json() == {"id": "author", "label": "Author", "weight": 9}

        assert client.delete("/api/roles/author", headers=api_key_headers).status_code == 200
        assert client.delete("/api/roles/author", headers=api_key_headers).status_code == 404

    def test_put_role_invalid_id(self, client, api_key_headers):
        r = client.put("/api/roles/a,b", json={"label": "Bad"}, headers=api_key_headers)
        assert r.status_code == 400
        r = client.put("/api/roles/%20editor", json={"label": "Padded"}, headers=api_key_headers)
        assert r.status_code == 400


class TestAccessRoutes:
    url = "/api/displays/content/page_1/access"

    def test_get_unconfigured(self, client, api_key_headers):
        r = client.get(self.url, headers=api_key_headers)
        assert r.status_code == 200
        assert r.json() == {
            "view_id": "content",
            "display_id": "page_1",
            "type": "none",
            "options": {},
            "summary": "Unrestricted",
            "route_requirement": None,
        }

    def test_put_role_access(self, client, api_key_headers):
        body = {"type": "role", "options": {"role": {"editor": "editor", "admin": 0}}}
        r = client.put(self.url, json=body, headers=api_key_headers)
        assert r.status_code == 200
        data = r.json()
        assert data["type"] == "role"
        assert data["options"] == {"role": ["editor"]}
        assert data["summary"] == "Editor"
        assert data["route_requirement"] == "editor"

    def test_put_invalid_selection(self, client, api_key_headers):
        body = {"type": "role", "options": {"role": {"editor": 0}}}
        r = client.put(self.url, json=body, headers=api_key_headers)
        assert r.status_code == 422
        data = r.json()
        assert data["errors"] == {
            "role": 'You must select at least one role if type is "by role"'
        }
        assert data["value"] == {}

    @pytest.mark.parametrize("selection", ["editor", 5])
    def test_put_scalar_selection(self, client, api_key_headers, selection):
        body = {"type": "role", "options": {"role": selection}}
        r = client.put(self.url, json=body, headers=api_key_headers)
        assert r.status_code == 422
        assert "role" in r.json()["errors"]

    def test_put_unknown_type(self, client, api_key_headers):
        r = client.put(self.url, json={"type": "perm"}, headers=api_key_headers)
        assert r.status_code == 400

    def test_delete(self, client, api_key_headers):
        client.put(self.url, json={"type": "role", "options": {"role": ["admin"]}},
                   headers=api_key_headers)
        assert client.delete(self.url, headers=api_key_headers).status_code == 200
        assert client.delete(self.url, headers=api_key_headers).status_code == 404

    def test_summary_of_stale_role(self, client, api_key_headers):
        client.put(self.url, json={"type": "role", "options": {"role": ["editor"]}},
                   headers=api_key_headers)
        client.delete("/api/roles/editor", headers=api_key_headers)

        r = client.get(self.url + "/summary", headers=api_key_headers)
        assert r.status_code == 409
        assert "editor" in r.json()["detail"]

        # the configuration view degrades instead of failing
        r = client.get(self.url, headers=api_key_headers)
        assert r.status_code == 200
        assert r.json()["summary"] is None

    def test_dependencies(self, client, api_key_headers):
        client.put(self.url, json={"type": "role", "options": {"role": ["editor", "ghost"]}},
                   headers=api_key_headers)
        r = client.get("/api/displays/content/page_1/dependencies", headers=api_key_headers)
        assert r.json() == {"config": ["user.role.editor"]}

    def test_check(self, client, api_key_headers):
        client.put(self.url, json={"type": "role", "options": {"role": ["editor", "admin"]}},
                   headers=api_key_headers)
        r = client.post(self.url + "/check", json={"roles": ["admin"]}, headers=api_key_headers)
        assert r.json() == {"granted": True}
        r = client.post(self.url + "/check", json={"roles": []}, headers=api_key_headers)
        assert r.json() == {"granted": False}


class TestGuardedDisplay:
    def _configure(self, client, api_key_headers, roles):
        client.put("/api/displays/content/page_1/access",
                   json={"type": "role", "options": {"role": roles}},
                   headers=api_key_headers)

    def test_unrestricted_display(self, client):
        r = client.get("/displays/content/page_1")
        assert r.status_code == 200
        assert r.json()["view_id"] == "content"

    def test_role_granted(self, client, api_key_headers):
        self._configure(client, api_key_headers, ["editor", "admin"])
        r = client.get("/displays/content/page_1",
                       headers={"X-Actor-Roles": "authenticated,admin", "X-Actor-Id": "7"})
        assert r.status_code == 200
        assert r.json()["actor"] == "7"

    def test_role_denied(self, client, api_key_headers):
        self._configure(client, api_key_headers, ["editor"])
        r = client.get("/displays/content/page_1", headers={"X-Actor-Roles": "author"})
        assert r.status_code == 403

    def test_anonymous_denied(self, client, api_key_headers):
        self._configure(client, api_key_headers, ["editor"])
        assert client.get("/displays/content/page_1").status_code == 403

    def test_empty_stored_policy_denies(self, client, access_manager):
        from viewaccess.models import DisplayAccess

        with access_manager.db.get_session_context() as session:
            session.add(DisplayAccess(view_id="content", display_id="page_1",
                                      access_type="role", options={"role": []}))
        r = client.get("/displays/content/page_1", headers={"X-Actor-Roles": "editor"})
        assert r.status_code == 403

    def test_custom_roles_header(self, client, api_key_headers, monkeypatch):
        monkeypatch.setenv("ACTOR_ROLES_HEADER", "X-Roles")
        self._configure(client, api_key_headers, ["editor"])
        r = client.get("/displays/content/page_1", headers={"X-Roles": "editor"})
        assert r.status_code == 200
