"""
Dota Companion OpenDota API Integration

Read-only client for the OpenDota REST API (https://docs.opendota.com).

Every operation issues a single GET and degrades instead of raising: list
shaped calls return an empty list, win/loss returns zero counts and the
profile lookup returns None. Failures are logged with the endpoint and the
upstream status so an outage can be diagnosed from the logs.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

logger = logging.getLogger(__name__)

OPENDOTA_API_BASE = "https://api.opendota.com/api"
DEFAULT_TIMEOUT = 10.0

T = TypeVar("T", bound=BaseModel)


# =============================================================================
# Payload models
# =============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OpenDotaProfile(_Payload):
    account_id: int
    personaname: str | None = None
    name: str | None = None
    avatar: str | None = None
    avatarmedium: str | None = None
    avatarfull: str | None = None
    profileurl: str | None = None


class OpenDotaPlayer(_Payload):
    """``GET /players/{account_id}``. ``profile`` is absent for private accounts."""

    profile: OpenDotaProfile | None = None
    rank_tier: int | None = None
    leaderboard_rank: int | None = None


class WinLoss(_Payload):
    win: int = 0
    lose: int = 0


class RecentMatch(_Payload):
    match_id: int
    player_slot: int
    radiant_win: bool | None = None
    hero_id: int
    start_time: int
    kills: int | None = 0
    deaths: int | None = 0
    assists: int | None = 0
    duration: int | None = None


class HeroStat(_Payload):
    hero_id: int
    games: int = 0
    win: int = 0
    last_played: int | None = None


class Hero(_Payload):
    id: int
    name: str = ""
    localized_name: str = ""
    img: str | None = None
    icon: str | None = None
    roles: list[str] = []


# =============================================================================
# Client
# =============================================================================


class OpenDotaClient:
    """
    Client for the OpenDota REST API.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     client = OpenDotaClient(http=http)
        ...     wl = await client.get_win_loss(86745912)
        ...     print(wl.win, wl.lose)
    """

    def __init__(
        self,
        base_url: str = OPENDOTA_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        http: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http
        self._owns_http = http is None

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def _get_json(self, endpoint: str, params: dict | None = None) -> Any | None:
        """GET ``endpoint`` and return decoded JSON, or None on any failure."""
        url = f"{self.base_url}{endpoint}"
        try:
            resp = await self._get_http().get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            logger.debug(f"OpenDota {endpoint}: {resp.status_code}")
            return data
        except httpx.HTTPStatusError as e:
            logger.warning(f"OpenDota {endpoint} returned {e.response.status_code}")
        except httpx.TimeoutException:
            logger.warning(f"OpenDota {endpoint} timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            logger.warning(f"OpenDota {endpoint} request failed: {e!r}")
        except ValueError as e:
            logger.warning(f"OpenDota {endpoint} returned invalid JSON: {e}")
        return None

    async def _get_list(self, endpoint: str, model: type[T], params: dict | None = None) -> list[T]:
        data = await self._get_json(endpoint, params)
        if not isinstance(data, list):
            if data is not None:
                logger.warning(f"OpenDota {endpoint}: expected a list, got {type(data).__name__}")
            return []

        items = []
        for raw in data:
            try:
                items.append(model.model_validate(raw))
            except SchemaError as e:
                logger.debug(f"OpenDota {endpoint}: skipped malformed item: {e.error_count()} errors")
        return items

    async def get_profile(self, account_id: int) -> OpenDotaPlayer | None:
        """Player profile, or None when the request or payload fails."""
        data = await self._get_json(f"/players/{account_id}")
        if data is None:
            return None
        try:
            return OpenDotaPlayer.model_validate(data)
        except SchemaError as e:
            logger.warning(f"OpenDota profile {account_id} is malformed: {e.error_count()} errors")
            return None

    async def get_win_loss(self, account_id: int) -> WinLoss:
        """All-time win/loss counts; zero counts on failure."""
        data = await self._get_json(f"/players/{account_id}/wl")
        if data is None:
            return WinLoss()
        try:
            return WinLoss.model_validate(data)
        except SchemaError:
            logger.warning(f"OpenDota win/loss for {account_id} is malformed")
            return WinLoss()

    async def get_recent_matches(self, account_id: int, limit: int = 20) -> list[RecentMatch]:
        """Most recent matches first."""
        return await self._get_list(
            f"/players/{account_id}/matches", RecentMatch, params={"limit": limit}
        )

    async def get_top_heroes(self, account_id: int, limit: int = 5) -> list[HeroStat]:
        """Most played heroes; OpenDota already sorts by games played."""
        heroes = await self._get_list(f"/players/{account_id}/heroes", HeroStat)
        return heroes[:limit]

    async def get_hero_catalog(self) -> list[Hero]:
        return await self._get_list("/heroes", Hero)

