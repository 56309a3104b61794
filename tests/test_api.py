"""Tests for the FastAPI web API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import ACCOUNT_ID, STEAM_ID64
from dotacompanion.api import AppContext, create_app
from dotacompanion.api.routes_steam import render_bridge_page
from dotacompanion.infra.database import get_user_by_email, set_user_admin


def register(client, email="player@example.com", password="secret1"):
    response = client.post("/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert isinstance(data["version"], str)

    def test_cors_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://frontend.test"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestRegisterAndLogin:
    """POST /auth/register, POST /auth/login, GET /auth/me"""

    def test_register(self, client):
        data = register(client)
        assert data["token"].count(".") == 2
        assert data["user"]["email"] == "player@example.com"
        assert "passwordHash" not in data["user"]
        assert "password_hash" not in data["user"]

    def test_register_normalizes_email(self, client):
        data = register(client, email="  Player@Example.COM ")
        assert data["user"]["email"] == "player@example.com"

    def test_duplicate_is_conflict(self, client):
        register(client)
        response = client.post(
            "/auth/register", json={"email": "player@example.com", "password": "other1"}
        )
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": "secret1"},
            {"email": "a@b", "password": "secret1"},
            {"email": "a@@b.com", "password": "secret1"},
            {"email": "player@example.com", "password": "short"},
            {"email": "player@example.com"},
        ],
    )
    def test_validation_errors_are_400(self, client, body):
        response = client.post("/auth/register", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_login(self, client):
        register(client)
        response = client.post(
            "/auth/login", json={"email": "player@example.com", "password": "secret1"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["lastLogin"] is not None

    def test_login_wrong_password(self, client):
        register(client)
        response = client.post(
            "/auth/login", json={"email": "player@example.com", "password": "wrong12"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized", "detail": "Invalid credentials"}

    def test_login_short_password_is_400(self, client):
        register(client)
        response = client.post(
            "/auth/login", json={"email": "player@example.com", "password": "abc"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_me(self, client):
        token = register(client)["token"]
        response = client.get("/auth/me", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "player@example.com"

    def test_me_without_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_with_bad_token(self, client):
        response = client.get("/auth/me", headers=bearer("not.a.token"))
        assert response.status_code == 401

    def test_missing_secret_is_config_error(self, config, fake):
        config.auth.jwt_secret = ""
        context = AppContext.from_config(
            config, http=httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
        )
        with TestClient(create_app(context)) as client:
            response = client.post(
                "/auth/register", json={"email": "player@example.com", "password": "secret1"}
            )
        assert response.status_code == 500
        assert response.json()["error"] == "config_error"


class TestSteamLogin:
    """GET /auth/steam and GET /auth/steam/callback"""

    def test_redirects_to_steam(self, client):
        response = client.get("/auth/steam", follow_redirects=False)
        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("https://steamcommunity.com/openid/login?")
        assert "auth%2Fsteam%2Fcallback" in location

    def test_configured_return_url(self, client, context):
        context.config.auth.steam_return_url = "https://app.test/auth/steam/callback"
        location = client.get("/auth/steam", follow_redirects=False).headers["location"]
        assert "openid.return_to=https%3A%2F%2Fapp.test%2Fauth%2Fsteam%2Fcallback" in location

    def test_callback_posts_token_to_opener(self, client, fake):
        response = client.get("/auth/steam/callback", params=fake.steam_callback_params())
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert '"type": "STEAM_AUTH_SUCCESS"' in response.text
        assert "window.opener.postMessage" in response.text
        assert STEAM_ID64 in response.text

    def test_callback_defaults_to_any_opener(self, client, fake):
        response = client.get("/auth/steam/callback", params=fake.steam_callback_params())
        assert 'postMessage(message, "*")' in response.text

    def test_callback_targets_configured_frontend(self, client, context, fake):
        context.config.server.frontend_origin = "https://app.test"
        response = client.get("/auth/steam/callback", params=fake.steam_callback_params())
        assert 'postMessage(message, "https://app.test")' in response.text
        assert '"*"' not in response.text

    def test_callback_token_authenticates(self, client, fake):
        client.get("/auth/steam/callback", params=fake.steam_callback_params())
        # Second login refreshes the same user
        response = client.get("/auth/steam/callback", params=fake.steam_callback_params())
        token = response.text.split('"token": "')[1].split('"')[0]
        me = client.get("/auth/me", headers=bearer(token)).json()["user"]
        assert me["steamId"] == STEAM_ID64
        assert me["steamDisplayName"] == f"Player_{STEAM_ID64[-4:]}"

    def test_invalid_assertion_is_401(self, client, fake):
        fake.steam_valid = False
        response = client.get("/auth/steam/callback", params=fake.steam_callback_params())
        assert response.status_code == 401

    def test_bridge_page_escapes_script_end(self):
        user = {"steamDisplayName": "</script><script>alert(1)</script>"}
        page = render_bridge_page("tok", user)
        assert page.count("</script>") == 1


class TestProfile:
    """GET /profile/{steam_id}"""

    def test_profile_camel_case(self, client):
        response = client.get(f"/profile/{STEAM_ID64}")
        assert response.status_code == 200
        assert response.json() == {
            "displayName": "Arteezy",
            "avatarUrl": "https://avatars.test/full.jpg",
            "accountId": ACCOUNT_ID,
            "steamId": STEAM_ID64,
            "profileUrl": "https://steamcommunity.com/id/rtz/",
        }

    def test_invalid_id(self, client):
        response = client.get("/profile/abc")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_id_format"

    def test_private_profile(self, client):
        assert client.get("/profile/1").status_code == 404


class TestStats:
    """GET /stats/{steam_id}"""

    def test_live_stats(self, client):
        response = client.get(f"/stats/{STEAM_ID64}")
        assert response.status_code == 200
        data = response.json()
        assert data["stats"] == {
            "totalMatches": 3,
            "wins": 2,
            "losses": 1,
            "winRate": 66.7,
            "mainRoles": ["carry", "mid"],
        }
        first = data["recentMatches"][0]
        assert first["matchId"] == "7001"
        assert first["result"] == "win"
        assert first["heroName"] == "Anti-Mage"
        assert first["date"] == "2023-11-14"

    def test_fallback_for_private_profile(self, client):
        data = client.get("/stats/1").json()
        assert data["stats"]["totalMatches"] == 245
        assert data["stats"]["winRate"] == 53.9
        assert [m["heroName"] for m in data["recentMatches"]] == [
            "Pudge",
            "Shadow Fiend",
            "Juggernaut",
        ]

    def test_provider_outage_is_not_an_error(self, client, fake):
        fake.errors[f"/api/players/{ACCOUNT_ID}"] = 503
        response = client.get(f"/stats/{STEAM_ID64}")
        assert response.status_code == 200
        assert response.json()["stats"]["totalMatches"] == 245

    def test_invalid_id(self, client):
        response = client.get("/stats/abc")
        assert response.status_code == 400

    @pytest.mark.parametrize("steam_id", ["9" * 5000, "1000000000000000"])
    def test_unresolvable_numeric_id(self, client, steam_id):
        response = client.get(f"/stats/{steam_id}")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_id_format"
        assert client.get(f"/profile/{steam_id}").status_code == 400


class TestStratzStats:
    """GET /stats/{steam_id}/stratz"""

    def test_matches(self, client):
        response = client.get(f"/stats/{STEAM_ID64}/stratz")
        assert response.status_code == 200
        matches = response.json()["matches"]
        assert [m["matchId"] for m in matches] == ["8001"]
        assert matches[0]["heroName"] == "Juggernaut"

    def test_upstream_error_is_502(self, client, fake):
        fake.stratz_response = httpx.Response(500, text="internal")
        response = client.get(f"/stats/{STEAM_ID64}/stratz")
        assert response.status_code == 502
        assert response.json()["error"] == "upstream_error"

    def test_timeout_is_504(self, client, fake):
        fake.stratz_response = httpx.ReadTimeout("timed out")
        assert client.get(f"/stats/{STEAM_ID64}/stratz").status_code == 504

    def test_missing_token_is_500(self, config, fake):
        config.providers.stratz_token = ""
        context = AppContext.from_config(
            config, http=httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
        )
        with TestClient(create_app(context)) as client:
            response = client.get(f"/stats/{STEAM_ID64}/stratz")
        assert response.status_code == 500
        assert response.json()["error"] == "config_error"


class TestHeroes:
    """GET /heroes"""

    def test_catalog_keyed_by_id(self, client):
        data = client.get("/heroes").json()
        assert set(data) == {"1", "8", "11"}
        assert data["11"]["name"] == "Shadow Fiend"
        assert data["11"]["iconUrl"].endswith("/icons/nevermore.png?")

    def test_outage_gives_empty_catalog(self, client, fake):
        fake.errors["/api/heroes"] = 500
        response = client.get("/heroes")
        assert response.status_code == 200
        assert response.json() == {}


class TestAnalytics:
    """GET /analytics, GET /analytics/{steam_id}, POST /analytics/players"""

    @pytest.fixture
    def admin_token(self, client, db_session):
        token = register(client, email="admin@example.com")["token"]
        set_user_admin(db_session, get_user_by_email(db_session, "admin@example.com"))
        return token

    def test_root(self, client):
        assert client.get("/analytics").json() == {"message": "Analytics service is running"}

    def test_unknown_player(self, client):
        assert client.get("/analytics/123").status_code == 404

    def test_admin_stores_player(self, client, admin_token):
        body = {"steamId": "123", "mmr": 4200, "farmEfficiency": 0.75, "visionScore": 18.0}
        response = client.post("/analytics/players", json=body, headers=bearer(admin_token))
        assert response.status_code == 201
        assert response.json()["created"] is True

        response = client.get("/analytics/123")
        assert response.status_code == 200
        assert response.json() == {"farmEfficiency": 0.75, "visionScore": 18.0}

    def test_player_without_stats(self, client, admin_token):
        client.post(
            "/analytics/players", json={"steamId": "456", "mmr": 3000}, headers=bearer(admin_token)
        )
        assert client.get("/analytics/456").status_code == 400

    def test_requires_token(self, client):
        response = client.post("/analytics/players", json={"steamId": "123"})
        assert response.status_code == 401

    def test_requires_admin(self, client):
        token = register(client)["token"]
        response = client.post("/analytics/players", json={"steamId": "123"}, headers=bearer(token))
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
