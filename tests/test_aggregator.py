"""Tests for the player stats aggregation pipeline."""

import asyncio

import pytest

from conftest import ACCOUNT_ID, OPENDOTA_URL, STEAM_ID64, STRATZ_URL
from dotacompanion.core.errors import ConfigError, InvalidIdFormat, NotFound, UpstreamError
from dotacompanion.core.schemas import WinLossRecord
from dotacompanion.integrations.opendota import OpenDotaClient
from dotacompanion.integrations.stratz import StratzClient
from dotacompanion.stats.aggregator import (
    ProfileAggregator,
    hero_fallback_name,
    is_win,
    iso_date,
    win_rate,
)
from dotacompanion.stats.fallback import FALLBACK_PLAYER_STATS
from dotacompanion.stats.roles import CARRY, MID


@pytest.fixture
def aggregator(http):
    return ProfileAggregator(
        OpenDotaClient(OPENDOTA_URL, http=http),
        StratzClient("test-stratz-token", STRATZ_URL, http=http),
    )


class TestHelpers:
    """Pure helpers used by the pipeline."""

    @pytest.mark.parametrize(
        "slot,radiant_win,expected",
        [
            (5, True, True),
            (5, False, False),
            (130, True, False),
            (130, False, True),
            (127, True, True),
            (128, True, False),
        ],
    )
    def test_is_win(self, slot, radiant_win, expected):
        assert is_win(slot, radiant_win) is expected

    def test_win_rate_rounds_half_up(self):
        assert win_rate(2, 3) == 66.7
        assert win_rate(1, 8) == 12.5
        assert win_rate(1, 16) == 6.3  # 6.25 rounds up
        assert win_rate(132, 245) == 53.9

    def test_win_rate_without_matches(self):
        assert win_rate(0, 0) == 0.0

    def test_iso_date_is_utc(self):
        assert iso_date(1700000000) == "2023-11-14"
        assert iso_date(0) == "1970-01-01"

    def test_hero_fallback_name(self):
        assert hero_fallback_name(9999) == "Hero 9999"


class TestProfileSummary:
    """get_profile_summary"""

    @pytest.mark.asyncio
    async def test_accepts_both_id_forms(self, aggregator):
        by_64 = await aggregator.get_profile_summary(STEAM_ID64)
        by_account = await aggregator.get_profile_summary(str(ACCOUNT_ID))
        assert by_64 == by_account
        assert by_64.display_name == "Arteezy"
        assert by_64.account_id == ACCOUNT_ID
        assert by_64.steam_id == STEAM_ID64

    @pytest.mark.asyncio
    async def test_private_profile_not_found(self, aggregator):
        with pytest.raises(NotFound):
            await aggregator.get_profile_summary("1")

    @pytest.mark.asyncio
    async def test_invalid_id(self, aggregator, fake):
        with pytest.raises(InvalidIdFormat):
            await aggregator.get_profile_summary("abc")
        assert fake.requests == []


class TestPlayerStats:
    """get_player_stats on live data."""

    @pytest.mark.asyncio
    async def test_live_stats(self, aggregator):
        result = await aggregator.get_player_stats(STEAM_ID64)
        stats = result.stats
        assert (stats.total_matches, stats.wins, stats.losses) == (3, 2, 1)
        assert stats.win_rate == 66.7
        assert stats.main_roles == (CARRY, MID)

    @pytest.mark.asyncio
    async def test_match_results_from_slot_and_side(self, aggregator):
        result = await aggregator.get_player_stats(STEAM_ID64)
        radiant, dire = result.recent_matches
        assert radiant.match_id == "7001"
        assert radiant.result == "win"
        assert dire.result == "loss"

    @pytest.mark.asyncio
    async def test_hero_enrichment(self, aggregator):
        result = await aggregator.get_player_stats(STEAM_ID64)
        known, unknown = result.recent_matches
        assert known.hero_name == "Anti-Mage"
        assert known.hero_image_url == (
            "https://api.opendota.com/apps/dota2/images/dota_react/heroes/antimage.png?"
        )
        assert known.date == "2023-11-14"
        assert (known.kills, known.deaths, known.assists) == (10, 2, 7)
        assert unknown.hero_name == "Hero 9999"
        assert unknown.hero_icon_url == ""

    @pytest.mark.asyncio
    async def test_invariants(self, aggregator):
        stats = (await aggregator.get_player_stats(STEAM_ID64)).stats
        assert stats.wins + stats.losses == stats.total_matches
        assert 0 <= stats.win_rate <= 100
        assert 1 <= len(stats.main_roles) <= 2

    @pytest.mark.asyncio
    async def test_idempotent(self, aggregator):
        first = await aggregator.get_player_stats(STEAM_ID64)
        second = await aggregator.get_player_stats(STEAM_ID64)
        assert first == second

    @pytest.mark.asyncio
    async def test_unknown_heroes_only_gives_generalist(self, aggregator, fake):
        fake.heroes_played[ACCOUNT_ID] = [{"hero_id": 9999, "games": 3, "win": 1}]
        stats = (await aggregator.get_player_stats(STEAM_ID64)).stats
        assert stats.main_roles == ("generalist",)

    @pytest.mark.asyncio
    async def test_catalog_outage_keeps_live_stats(self, aggregator, fake):
        fake.errors["/api/heroes"] = 500
        result = await aggregator.get_player_stats(STEAM_ID64)
        assert result is not FALLBACK_PLAYER_STATS
        assert result.recent_matches[0].hero_name == "Hero 1"

    @pytest.mark.asyncio
    async def test_win_loss_record(self, aggregator, fake):
        assert await aggregator.get_win_loss(ACCOUNT_ID) == WinLossRecord(wins=2, losses=1)
        fake.errors[f"/api/players/{ACCOUNT_ID}/wl"] = 500
        assert await aggregator.get_win_loss(ACCOUNT_ID) == WinLossRecord(wins=0, losses=0)

    @pytest.mark.asyncio
    async def test_invalid_id_is_not_masked(self, aggregator):
        with pytest.raises(InvalidIdFormat):
            await aggregator.get_player_stats("abc")


class TestFallback:
    """Mock data replaces any live failure."""

    @pytest.mark.asyncio
    async def test_private_profile(self, aggregator):
        assert await aggregator.get_player_stats("1") is FALLBACK_PLAYER_STATS

    @pytest.mark.asyncio
    async def test_zero_matches(self, aggregator, fake):
        fake.win_loss[ACCOUNT_ID] = {"win": 0, "lose": 0}
        assert await aggregator.get_player_stats(STEAM_ID64) is FALLBACK_PLAYER_STATS

    @pytest.mark.asyncio
    async def test_negative_counts(self, aggregator, fake):
        fake.win_loss[ACCOUNT_ID] = {"win": -1, "lose": 3}
        assert await aggregator.get_player_stats(STEAM_ID64) is FALLBACK_PLAYER_STATS

    @pytest.mark.asyncio
    async def test_provider_outage(self, aggregator, fake):
        fake.errors[f"/api/players/{ACCOUNT_ID}"] = 503
        assert await aggregator.get_player_stats(STEAM_ID64) is FALLBACK_PLAYER_STATS

    @pytest.mark.asyncio
    async def test_pipeline_timeout(self, http):
        class SlowOpenDota(OpenDotaClient):
            async def get_profile(self, account_id):
                await asyncio.sleep(5)

        aggregator = ProfileAggregator(SlowOpenDota(OPENDOTA_URL, http=http), request_timeout=0.05)
        assert await aggregator.get_player_stats(STEAM_ID64) is FALLBACK_PLAYER_STATS

    @pytest.mark.asyncio
    async def test_unexpected_error(self, http):
        class BrokenOpenDota(OpenDotaClient):
            async def get_win_loss(self, account_id):
                raise RuntimeError("boom")

        aggregator = ProfileAggregator(BrokenOpenDota(OPENDOTA_URL, http=http))
        assert await aggregator.get_player_stats(STEAM_ID64) is FALLBACK_PLAYER_STATS

    def test_fallback_satisfies_invariants(self):
        stats = FALLBACK_PLAYER_STATS.stats
        assert stats.wins + stats.losses == stats.total_matches
        assert stats.win_rate == win_rate(stats.wins, stats.total_matches)
        assert stats.main_roles == (MID, CARRY)
        assert [m.hero_name for m in FALLBACK_PLAYER_STATS.recent_matches] == [
            "Pudge",
            "Shadow Fiend",
            "Juggernaut",
        ]


class TestHeroesData:
    """get_heroes_data"""

    @pytest.mark.asyncio
    async def test_reshaped_catalog(self, aggregator):
        heroes = await aggregator.get_heroes_data()
        assert set(heroes) == {1, 8, 11}
        assert heroes[8].name == "Juggernaut"
        assert heroes[8].icon_url.startswith("https://api.opendota.com/apps/")

    @pytest.mark.asyncio
    async def test_outage_gives_empty(self, aggregator, fake):
        fake.errors["/api/heroes"] = 500
        assert await aggregator.get_heroes_data() == {}


class TestStratzMatches:
    """get_stratz_matches"""

    @pytest.mark.asyncio
    async def test_summaries(self, aggregator):
        matches = await aggregator.get_stratz_matches(STEAM_ID64)
        assert len(matches) == 1
        match = matches[0]
        assert match.match_id == "8001"
        assert match.result == "win"  # Dire player, Radiant lost
        assert match.hero_name == "Juggernaut"
        assert match.date == "2023-11-14"

    @pytest.mark.asyncio
    async def test_no_stratz_client(self, http):
        aggregator = ProfileAggregator(OpenDotaClient(OPENDOTA_URL, http=http))
        with pytest.raises(ConfigError):
            await aggregator.get_stratz_matches(STEAM_ID64)

    @pytest.mark.asyncio
    async def test_upstream_errors_propagate(self, aggregator, fake):
        import httpx

        fake.stratz_response = httpx.Response(502, text="bad gateway")
        with pytest.raises(UpstreamError):
            await aggregator.get_stratz_matches(STEAM_ID64)
