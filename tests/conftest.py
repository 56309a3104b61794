"""Shared fixtures: fake providers behind httpx.MockTransport and an in-memory app."""

from __future__ import annotations

import json
import re
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from dotacompanion.api import AppContext, create_app
from dotacompanion.core.config import AppConfig
from dotacompanion.core.steam_id import to_steam_id64

OPENDOTA_URL = "https://opendota.test/api"
STRATZ_URL = "https://stratz.test/graphql"
JWT_SECRET = "test-secret-key-for-unit-tests"

ACCOUNT_ID = 86745912
STEAM_ID64 = to_steam_id64(ACCOUNT_ID)

# 2023-11-14 and 2023-11-13 (UTC)
MATCH_TIME_1 = 1700000000
MATCH_TIME_2 = 1699900000

_PLAYER_PATH = re.compile(r"/api/players/(\d+)(/\w+)?")


def hero(hero_id: int, slug: str, name: str) -> dict:
    return {
        "id": hero_id,
        "name": f"npc_dota_hero_{slug}",
        "localized_name": name,
        "img": f"/apps/dota2/images/dota_react/heroes/{slug}.png?",
        "icon": f"/apps/dota2/images/dota_react/heroes/icons/{slug}.png?",
        "roles": [],
    }


class FakeProviders:
    """In-memory OpenDota / STRATZ / Steam served through one mock transport."""

    def __init__(self):
        self.profiles: dict[int, dict] = {
            ACCOUNT_ID: {
                "profile": {
                    "account_id": ACCOUNT_ID,
                    "personaname": "Arteezy",
                    "avatarfull": "https://avatars.test/full.jpg",
                    "profileurl": "https://steamcommunity.com/id/rtz/",
                },
                "rank_tier": 80,
            }
        }
        self.win_loss: dict[int, dict] = {ACCOUNT_ID: {"win": 2, "lose": 1}}
        self.matches: dict[int, list] = {
            ACCOUNT_ID: [
                {
                    "match_id": 7001,
                    "player_slot": 5,
                    "radiant_win": True,
                    "hero_id": 1,
                    "start_time": MATCH_TIME_1,
                    "kills": 10,
                    "deaths": 2,
                    "assists": 7,
                },
                {
                    "match_id": 7000,
                    "player_slot": 130,
                    "radiant_win": True,
                    "hero_id": 9999,
                    "start_time": MATCH_TIME_2,
                    "kills": 1,
                    "deaths": 8,
                    "assists": 3,
                },
            ]
        }
        self.heroes_played: dict[int, list] = {
            ACCOUNT_ID: [
                {"hero_id": 1, "games": 50, "win": 30},
                {"hero_id": 8, "games": 40, "win": 20},
                {"hero_id": 11, "games": 10, "win": 5},
            ]
        }
        self.catalog: list[dict] = [
            hero(1, "antimage", "Anti-Mage"),
            hero(8, "juggernaut", "Juggernaut"),
            hero(11, "nevermore", "Shadow Fiend"),
        ]
        self.stratz_matches: list[dict] = [
            {
                "id": 8001,
                "didRadiantWin": False,
                "startDateTime": MATCH_TIME_1,
                "durationSeconds": 2400,
                "players": [
                    {"heroId": 8, "isRadiant": False, "kills": 9, "deaths": 1, "assists": 4}
                ],
            }
        ]
        # path -> status code, e.g. {"/api/heroes": 500}
        self.errors: dict[str, int] = {}
        self.stratz_response: httpx.Response | Exception | None = None
        self.steam_valid = True
        self.steam_players: list[dict] = []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "stratz.test":
            return self._stratz(request)
        if host == "steamcommunity.com":
            verdict = "true" if self.steam_valid else "false"
            return httpx.Response(
                200, text=f"ns:http://specs.openid.net/auth/2.0\nis_valid:{verdict}\n"
            )
        if host == "api.steampowered.com":
            return httpx.Response(200, json={"response": {"players": self.steam_players}})
        return self._opendota(request)

    def _opendota(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path in self.errors:
            return httpx.Response(self.errors[path], json={"error": "fake failure"})
        if path == "/api/heroes":
            return httpx.Response(200, json=self.catalog)

        match = _PLAYER_PATH.fullmatch(path)
        if match is None:
            return httpx.Response(404, json={"error": "Not Found"})
        account_id, sub = int(match.group(1)), match.group(2)
        if sub is None:
            # OpenDota answers unknown accounts with a profile-less object
            return httpx.Response(200, json=self.profiles.get(account_id, {"rank_tier": None}))
        if sub == "/wl":
            return httpx.Response(200, json=self.win_loss.get(account_id, {"win": 0, "lose": 0}))
        if sub == "/matches":
            limit = int(request.url.params.get("limit", 20))
            return httpx.Response(200, json=self.matches.get(account_id, [])[:limit])
        if sub == "/heroes":
            return httpx.Response(200, json=self.heroes_played.get(account_id, []))
        return httpx.Response(404, json={"error": "Not Found"})

    def _stratz(self, request: httpx.Request) -> httpx.Response:
        if isinstance(self.stratz_response, Exception):
            raise self.stratz_response
        if self.stratz_response is not None:
            return self.stratz_response
        body = json.loads(request.content)
        account_id = body["variables"]["steamAccountId"]
        return httpx.Response(
            200,
            json={
                "data": {
                    "player": {"steamAccountId": account_id, "matches": self.stratz_matches}
                }
            },
        )

    def steam_callback_params(self, steam_id: str = STEAM_ID64) -> dict[str, str]:
        return {
            "openid.ns": "http://specs.openid.net/auth/2.0",
            "openid.mode": "id_res",
            "openid.claimed_id": f"https://steamcommunity.com/openid/id/{steam_id}",
            "openid.identity": f"https://steamcommunity.com/openid/id/{steam_id}",
            "openid.sig": "fake-signature",
        }

    def form_of(self, request: httpx.Request) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@pytest.fixture
def fake() -> FakeProviders:
    return FakeProviders()


@pytest_asyncio.fixture
async def http(fake):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake.handler)) as client:
        yield client


@pytest.fixture
def config() -> AppConfig:
    config = AppConfig()
    config.database.url = "sqlite://"
    config.auth.jwt_secret = JWT_SECRET
    config.providers.opendota_url = OPENDOTA_URL
    config.providers.stratz_url = STRATZ_URL
    config.providers.stratz_token = "test-stratz-token"
    return config


@pytest.fixture
def context(config, fake) -> AppContext:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return AppContext.from_config(config, http=http)


@pytest.fixture
def client(context):
    with TestClient(create_app(context)) as test_client:
        yield test_client


@pytest.fixture
def db_session(context):
    session = context.db.get_session()
    yield session
    session.close()
