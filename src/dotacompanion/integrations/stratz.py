"""
Dota Companion STRATZ API Integration

Client for the STRATZ GraphQL API (https://stratz.com/api). Unlike the
OpenDota client, failures here are raised as typed errors so callers can
surface them: ConfigError without a token, UpstreamTimeout when the request
exceeds its timeout, UpstreamError for error statuses and GraphQL errors.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from dotacompanion.core.errors import ConfigError, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)

STRATZ_API_URL = "https://api.stratz.com/graphql"
DEFAULT_TIMEOUT = 10.0
# STRATZ rejects requests without a user agent
USER_AGENT = "STRATZ_API"

PLAYER_MATCHES_QUERY = """
query PlayerMatches($steamAccountId: Long!, $take: Int!) {
  player(steamAccountId: $steamAccountId) {
    steamAccountId
    matches(request: { take: $take }) {
      id
      didRadiantWin
      startDateTime
      durationSeconds
      players(steamAccountId: $steamAccountId) {
        heroId
        isRadiant
        kills
        deaths
        assists
      }
    }
  }
}
"""


# =============================================================================
# Payload models
# =============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StratzMatchPlayer(_Payload):
    hero_id: int = Field(alias="heroId")
    is_radiant: bool = Field(alias="isRadiant")
    kills: int = 0
    deaths: int = 0
    assists: int = 0


class StratzMatch(_Payload):
    id: int
    did_radiant_win: bool = Field(alias="didRadiantWin")
    start_date_time: int = Field(alias="startDateTime")
    duration_seconds: int | None = Field(None, alias="durationSeconds")
    players: list[StratzMatchPlayer] = []

    @property
    def player(self) -> StratzMatchPlayer | None:
        """The queried player's row (the query filters players by account)."""
        return self.players[0] if self.players else None


class StratzPlayer(_Payload):
    steam_account_id: int = Field(alias="steamAccountId")
    matches: list[StratzMatch] = []


class StratzPlayerData(_Payload):
    player: StratzPlayer | None = None


# =============================================================================
# Client
# =============================================================================


class StratzClient:
    """Client for the STRATZ GraphQL API."""

    def __init__(
        self,
        token: str | None,
        url: str = STRATZ_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http: httpx.AsyncClient | None = None,
    ):
        self.token = token or ""
        self.url = url
        self.timeout = timeout
        self._http = http
        self._owns_http = http is None

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def execute(self, query: str, variables: dict | None = None) -> dict:
        """Run a GraphQL query and return its ``data`` object."""
        if not self.token:
            raise ConfigError("STRATZ API token is not configured (set STRATZ_API_TOKEN)")

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        try:
            resp = await self._get_http().post(
                self.url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"STRATZ request timed out after {self.timeout}s")
            raise UpstreamTimeout(f"STRATZ did not answer within {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.warning(f"STRATZ request failed: {e!r}")
            raise UpstreamError(f"STRATZ request failed: {e}") from e

        if resp.is_error:
            body = resp.text[:500]
            logger.warning(f"STRATZ returned {resp.status_code}: {body}")
            raise UpstreamError(
                f"STRATZ returned {resp.status_code}", status=resp.status_code, body=body
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamError("STRATZ returned invalid JSON", status=resp.status_code) from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = "; ".join(
                str(err.get("message", err) if isinstance(err, dict) else err) for err in errors
            )
            logger.warning(f"STRATZ GraphQL errors: {messages}")
            raise UpstreamError(
                f"STRATZ GraphQL error: {messages}", status=resp.status_code, body=messages
            )

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise UpstreamError("STRATZ response has no data", status=resp.status_code)
        return data

    async def query_player_matches(self, account_id: int, take: int = 20) -> list[StratzMatch]:
        """Recent matches of ``account_id``, most recent first."""
        data = await self.execute(
            PLAYER_MATCHES_QUERY, {"steamAccountId": account_id, "take": take}
        )
        try:
            parsed = StratzPlayerData.model_validate(data)
        except SchemaError as e:
            raise UpstreamError(
                f"STRATZ payload did not match the expected schema ({e.error_count()} errors)"
            ) from e

        if parsed.player is None:
            return []
        logger.debug(f"STRATZ returned {len(parsed.player.matches)} matches for {account_id}")
        return parsed.player.matches
