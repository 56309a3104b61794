"""
Dota Companion Stats - Player stats aggregation.

This module contains:
- aggregator: ProfileAggregator, the provider fallback pipeline
- fallback: Static stats served when no live data is available
- roles: Hero -> role table and main-role inference
"""

from dotacompanion.stats.aggregator import ProfileAggregator
from dotacompanion.stats.fallback import FALLBACK_PLAYER_STATS
from dotacompanion.stats.roles import DEFAULT_HERO_ROLES, determine_main_roles

__all__ = [
    "DEFAULT_HERO_ROLES",
    "FALLBACK_PLAYER_STATS",
    "ProfileAggregator",
    "determine_main_roles",
]
