"""
Steam OpenID authentication routes.

Endpoints:
    GET /auth/steam          - Redirect user to Steam login page
    GET /auth/steam/callback - Handle Steam's redirect, create/update user and
                               hand the token to the opener window
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from dotacompanion.api.context import AppContext, get_context
from dotacompanion.api.shared import get_callback_url
from dotacompanion.auth.middleware import get_auth_service
from dotacompanion.auth.service import AuthService
from dotacompanion.auth.steam import (
    SteamProfile,
    build_auth_url,
    get_player_summary,
    validate_response,
)
from dotacompanion.core.errors import Unauthorized

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/steam", tags=["auth-steam"])

STEAM_AUTH_MESSAGE = "STEAM_AUTH_SUCCESS"

_BRIDGE_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Steam login</title></head>
<body>
<p>Login successful. You can close this window.</p>
<script>
  (function () {{
    var message = {payload};
    if (window.opener) {{
      window.opener.postMessage(message, {target_origin});
      window.close();
    }}
  }})();
</script>
</body>
</html>
"""


def render_bridge_page(token: str, user: dict, target_origin: str = "*") -> str:
    """HTML page that posts the login result to ``window.opener``.

    The message is only delivered when the opener's origin matches
    ``target_origin`` (``"*"`` delivers to any opener).
    """
    payload = json.dumps({"type": STEAM_AUTH_MESSAGE, "data": {"token": token, "user": user}})
    # Keep user-controlled strings (display names) from closing the script element
    payload = payload.replace("</", "<\\/")
    origin = json.dumps(target_origin).replace("</", "<\\/")
    return _BRIDGE_PAGE.format(payload=payload, target_origin=origin)


@router.get("")
async def steam_login(
    request: Request, context: AppContext = Depends(get_context)
) -> RedirectResponse:
    """Redirect user to Steam's OpenID login page."""
    auth_config = context.config.auth
    callback_url = auth_config.steam_return_url or get_callback_url(request)
    auth_url = build_auth_url(callback_url, auth_config.steam_realm or None)
    logger.info(f"Redirecting to Steam login, callback: {callback_url}")
    return RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)


@router.get("/callback")
async def steam_callback(
    request: Request,
    context: AppContext = Depends(get_context),
    auth: AuthService = Depends(get_auth_service),
) -> HTMLResponse:
    """Handle Steam's OpenID callback after the user authenticates.

    Flow:
    1. Validate the OpenID response with Steam
    2. Fetch the Steam profile (name, avatar) if an API key is set
    3. Create or refresh the linked user
    4. Return the bridge page carrying the token
    """
    params = dict(request.query_params)
    steam_id = await validate_response(params, http=context.http)
    if not steam_id:
        raise Unauthorized("Steam authentication failed")

    profile = await get_player_summary(
        steam_id, context.config.auth.steam_api_key, http=context.http
    )
    user, token = auth.link_steam_identity(profile or SteamProfile.anonymous(steam_id))
    logger.info(f"Steam login successful for Steam64 ID {steam_id} (user {user.id})")
    page = render_bridge_page(token, user.to_dict(), context.config.server.frontend_origin)
    return HTMLResponse(page)
