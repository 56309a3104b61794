"""
Miscellaneous route handlers.

Endpoints:
- GET /health - health check
"""

from fastapi import APIRouter

from dotacompanion.api.shared import __version__

router = APIRouter(tags=["misc"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}
