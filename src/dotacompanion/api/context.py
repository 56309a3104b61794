"""
Application context.

Everything a request handler needs (configuration, database, provider
clients, aggregator) is built once at startup into an AppContext and stored on
``app.state.context``. Handlers receive it through the dependencies below;
there are no module-level singletons.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import httpx
from fastapi import Request
from sqlalchemy.orm import Session

from dotacompanion.core.config import AppConfig, load_config
from dotacompanion.infra.database import DatabaseManager
from dotacompanion.integrations.opendota import OpenDotaClient
from dotacompanion.integrations.stratz import StratzClient
from dotacompanion.stats.aggregator import ProfileAggregator
from dotacompanion.stats.roles import DEFAULT_HERO_ROLES, load_hero_roles

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    config: AppConfig
    db: DatabaseManager
    http: httpx.AsyncClient
    opendota: OpenDotaClient
    stratz: StratzClient
    aggregator: ProfileAggregator

    @classmethod
    def from_config(
        cls, config: AppConfig | None = None, http: httpx.AsyncClient | None = None
    ) -> AppContext:
        """Build the context; ``http`` may be injected (tests use a mock transport)."""
        config = config or load_config()
        providers = config.providers

        http = http or httpx.AsyncClient(
            timeout=providers.timeout_seconds,
            headers={"Accept": "application/json"},
        )
        opendota = OpenDotaClient(providers.opendota_url, providers.timeout_seconds, http=http)
        stratz = StratzClient(
            providers.stratz_token, providers.stratz_url, providers.timeout_seconds, http=http
        )
        if not stratz.is_configured:
            logger.warning("STRATZ_API_TOKEN not set - STRATZ endpoints will fail with ConfigError")

        hero_roles = (
            load_hero_roles(config.stats.hero_roles_file)
            if config.stats.hero_roles_file
            else DEFAULT_HERO_ROLES
        )
        aggregator = ProfileAggregator(
            opendota,
            stratz,
            hero_roles=hero_roles,
            recent_limit=config.stats.recent_matches_limit,
            top_heroes_limit=config.stats.top_heroes_limit,
            request_timeout=config.stats.request_timeout_seconds,
            cdn_url=providers.opendota_cdn_url,
        )
        return cls(
            config=config,
            db=DatabaseManager(config.database.url),
            http=http,
            opendota=opendota,
            stratz=stratz,
            aggregator=aggregator,
        )

    async def aclose(self) -> None:
        await self.http.aclose()
        self.db.dispose()


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_db(request: Request) -> Iterator[Session]:
    """Per-request database session."""
    session = get_context(request).db.get_session()
    try:
        yield session
    finally:
        session.close()


def get_aggregator(request: Request) -> ProfileAggregator:
    return get_context(request).aggregator
