"""
Steam OpenID 2.0 Authentication for Dota Companion.

Steam uses OpenID 2.0 (NOT OAuth2). The flow is:
1. Frontend opens /auth/steam in a popup
2. Redirect to steamcommunity.com/openid/login
3. Steam redirects back with the user's Steam64 ID in the claimed id
4. We verify the assertion with Steam (check_authentication)
5. The user record is created/updated and a session token is issued

No API key is required for the login itself. With STEAM_API_KEY set, the
display name, avatar and profile URL are fetched from the Steam Web API.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlencode, urlparse

import httpx

logger = logging.getLogger(__name__)

# Steam OpenID 2.0 constants
STEAM_OPENID_URL = "https://steamcommunity.com/openid/login"
STEAM_OPENID_NS = "http://specs.openid.net/auth/2.0"
STEAM_IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"
STEAM_CLAIMED_ID_PATTERN = re.compile(r"^https://steamcommunity\.com/openid/id/(\d{17})$")

# Steam Web API (optional, for profile data)
STEAM_API_BASE = "https://api.steampowered.com"
STEAM_AVATAR_BASE = "https://steamcdn-a.akamaihd.net/steamcommunity/public/images/avatars/"

REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class SteamProfile:
    """Identity asserted by Steam plus optional public profile data."""

    steam_id: str
    display_name: str = ""
    avatar_url: str = ""
    profile_url: str = ""

    @classmethod
    def anonymous(cls, steam_id: str) -> SteamProfile:
        """Profile used when the Steam Web API is not available."""
        return cls(
            steam_id=steam_id,
            display_name=f"Player_{steam_id[-4:]}",
            profile_url=f"https://steamcommunity.com/profiles/{steam_id}",
        )


def normalize_avatar_url(avatar: str | None) -> str:
    """Steam sometimes returns a bare avatar hash path instead of a URL."""
    if not avatar:
        return ""
    if avatar.startswith("http"):
        return avatar
    return f"{STEAM_AVATAR_BASE}{avatar.lstrip('/')}"


def build_auth_url(return_url: str, realm: str | None = None) -> str:
    """Build the Steam OpenID login redirect URL.

    Args:
        return_url: The callback URL Steam will redirect to after auth.
        realm: Trust root shown to the user; defaults to the return URL's origin.

    Returns:
        Full Steam OpenID URL to redirect the user to.
    """
    params = {
        "openid.ns": STEAM_OPENID_NS,
        "openid.mode": "checkid_setup",
        "openid.return_to": return_url,
        "openid.realm": realm or _get_realm(return_url),
        "openid.identity": STEAM_IDENTIFIER_SELECT,
        "openid.claimed_id": STEAM_IDENTIFIER_SELECT,
    }
    return f"{STEAM_OPENID_URL}?{urlencode(params)}"


async def validate_response(
    params: dict[str, str], http: httpx.AsyncClient | None = None
) -> str | None:
    """Validate Steam's OpenID response and extract the Steam64 ID.

    Performs the check_authentication round trip so a forged or replayed
    redirect is rejected.

    Returns:
        Steam64 ID (17-digit string) or None if the assertion is invalid.
    """
    if params.get("openid.mode") != "id_res":
        logger.warning("Steam OpenID: mode is not id_res")
        return None

    claimed_id = params.get("openid.claimed_id", "")
    match = STEAM_CLAIMED_ID_PATTERN.match(claimed_id)
    if not match:
        logger.warning(f"Steam OpenID: invalid claimed_id format: {claimed_id}")
        return None

    steam_id = match.group(1)

    verify_params = dict(params)
    verify_params["openid.mode"] = "check_authentication"

    try:
        if http is None:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.post(STEAM_OPENID_URL, data=verify_params)
        else:
            resp = await http.post(STEAM_OPENID_URL, data=verify_params, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Steam OpenID: HTTP error during validation: {e!r}")
        return None

    # Key-value pairs separated by newlines
    if "is_valid:true" in resp.text:
        logger.info(f"Steam OpenID: validated Steam64 ID {steam_id}")
        return steam_id

    logger.warning(f"Steam OpenID: assertion for {steam_id} rejected by Steam")
    return None


async def get_player_summary(
    steam_id: str, api_key: str, http: httpx.AsyncClient | None = None
) -> SteamProfile | None:
    """Fetch display name, avatar and profile URL from the Steam Web API.

    Returns None if no API key is configured or the request fails.
    """
    if not api_key:
        logger.debug("Steam API key not set, skipping player summary")
        return None

    url = f"{STEAM_API_BASE}/ISteamUser/GetPlayerSummaries/v0002/"
    params = {"key": api_key, "steamids": steam_id}

    try:
        if http is None:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.get(url, params=params)
        else:
            resp = await http.get(url, params=params, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        # The exception text can contain the request URL, which carries the key
        logger.warning(f"Steam API error fetching player summary: {type(e).__name__}")
        return None
    except ValueError:
        logger.warning("Steam API returned invalid JSON for player summary")
        return None

    players = data.get("response", {}).get("players", []) if isinstance(data, dict) else []
    if not players:
        return None

    player = players[0]
    return SteamProfile(
        steam_id=steam_id,
        display_name=player.get("personaname", "") or f"Player_{steam_id[-4:]}",
        avatar_url=normalize_avatar_url(player.get("avatarfull") or player.get("avatar")),
        profile_url=player.get("profileurl", "")
        or f"https://steamcommunity.com/profiles/{steam_id}",
    )


def _get_realm(return_url: str) -> str:
    """Extract the realm (scheme + host) from a URL."""
    parsed = urlparse(return_url)
    return f"{parsed.scheme}://{parsed.netloc}/"
