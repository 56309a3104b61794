"""
Hero -> role lookup and main-role inference.

The table is plain data: pass a different mapping to ProfileAggregator (or
point ``stats.hero_roles_file`` at a YAML/JSON file) to change it without
touching the aggregation code.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

CARRY = "carry"
MID = "mid"
OFFLANE = "offlane"
SUPPORT = "support"
HARD_SUPPORT = "hard_support"
GENERALIST = "generalist"

MAX_MAIN_ROLES = 2

HeroRoleTable = Mapping[int, tuple[str, ...]]

# Keyed by OpenDota hero id
DEFAULT_HERO_ROLES: dict[int, tuple[str, ...]] = {
    1: (CARRY,),  # Anti-Mage
    2: (OFFLANE,),  # Axe
    3: (SUPPORT,),  # Bane
    4: (CARRY,),  # Bloodseeker
    5: (HARD_SUPPORT,),  # Crystal Maiden
    6: (CARRY,),  # Drow Ranger
    7: (SUPPORT, OFFLANE),  # Earthshaker
    8: (CARRY,),  # Juggernaut
    9: (SUPPORT, MID),  # Mirana
    10: (CARRY,),  # Morphling
    11: (MID,),  # Shadow Fiend
    12: (CARRY,),  # Phantom Lancer
    13: (MID,),  # Puck
    14: (SUPPORT, OFFLANE),  # Pudge
    15: (MID, OFFLANE),  # Razor
    16: (OFFLANE,),  # Sand King
    17: (MID,),  # Storm Spirit
    18: (CARRY,),  # Sven
    19: (MID, SUPPORT),  # Tiny
    20: (SUPPORT,),  # Vengeful Spirit
    21: (MID, SUPPORT),  # Windranger
    22: (MID,),  # Zeus
    23: (MID, OFFLANE),  # Kunkka
    25: (MID, SUPPORT),  # Lina
    26: (HARD_SUPPORT,),  # Lion
    27: (HARD_SUPPORT,),  # Shadow Shaman
    28: (OFFLANE,),  # Slardar
    29: (OFFLANE,),  # Tidehunter
    30: (HARD_SUPPORT,),  # Witch Doctor
    31: (HARD_SUPPORT,),  # Lich
    32: (CARRY, SUPPORT),  # Riki
    33: (OFFLANE,),  # Enigma
    34: (MID,),  # Tinker
    35: (MID, CARRY),  # Sniper
    36: (MID, OFFLANE),  # Necrophos
    37: (HARD_SUPPORT,),  # Warlock
    38: (OFFLANE,),  # Beastmaster
    39: (MID,),  # Queen of Pain
    40: (SUPPORT, OFFLANE),  # Venomancer
    41: (CARRY,),  # Faceless Void
    42: (CARRY,),  # Wraith King
    43: (MID, OFFLANE),  # Death Prophet
    44: (CARRY,),  # Phantom Assassin
    45: (MID, SUPPORT),  # Pugna
    46: (MID,),  # Templar Assassin
    47: (MID, OFFLANE),  # Viper
    48: (CARRY,),  # Luna
    49: (MID, OFFLANE),  # Dragon Knight
    50: (HARD_SUPPORT,),  # Dazzle
    51: (OFFLANE, SUPPORT),  # Clockwerk
    52: (MID,),  # Leshrac
    53: (OFFLANE, CARRY),  # Nature's Prophet
    54: (CARRY,),  # Lifestealer
    55: (OFFLANE,),  # Dark Seer
    56: (CARRY,),  # Clinkz
    57: (SUPPORT,),  # Omniknight
    58: (SUPPORT,),  # Enchantress
    59: (MID,),  # Huskar
    60: (OFFLANE,),  # Night Stalker
    61: (OFFLANE,),  # Broodmother
    62: (SUPPORT,),  # Bounty Hunter
    63: (CARRY,),  # Weaver
    64: (HARD_SUPPORT,),  # Jakiro
    65: (OFFLANE,),  # Batrider
    66: (HARD_SUPPORT,),  # Chen
    67: (CARRY,),  # Spectre
    68: (HARD_SUPPORT,),  # Ancient Apparition
    69: (OFFLANE,),  # Doom
    70: (CARRY,),  # Ursa
    71: (SUPPORT,),  # Spirit Breaker
    72: (CARRY,),  # Gyrocopter
    73: (CARRY, MID),  # Alchemist
    74: (MID,),  # Invoker
    75: (SUPPORT,),  # Silencer
    76: (MID,),  # Outworld Destroyer
    77: (OFFLANE,),  # Lycan
    78: (OFFLANE,),  # Brewmaster
    79: (HARD_SUPPORT,),  # Shadow Demon
    80: (CARRY,),  # Lone Druid
    81: (CARRY,),  # Chaos Knight
    82: (MID,),  # Meepo
    83: (HARD_SUPPORT,),  # Treant Protector
    84: (HARD_SUPPORT,),  # Ogre Magi
    85: (HARD_SUPPORT,),  # Undying
    86: (SUPPORT,),  # Rubick
    87: (HARD_SUPPORT,),  # Disruptor
    88: (SUPPORT,),  # Nyx Assassin
    89: (CARRY,),  # Naga Siren
    90: (SUPPORT,),  # Keeper of the Light
    91: (HARD_SUPPORT,),  # Io
    92: (OFFLANE, MID),  # Visage
    93: (CARRY,),  # Slark
    94: (CARRY,),  # Medusa
    95: (CARRY,),  # Troll Warlord
    96: (OFFLANE,),  # Centaur Warrunner
    97: (OFFLANE,),  # Magnus
    98: (OFFLANE,),  # Timbersaw
    99: (OFFLANE,),  # Bristleback
    100: (SUPPORT,),  # Tusk
    101: (SUPPORT,),  # Skywrath Mage
    102: (SUPPORT,),  # Abaddon
    103: (HARD_SUPPORT,),  # Elder Titan
    104: (OFFLANE,),  # Legion Commander
    105: (SUPPORT,),  # Techies
    106: (MID,),  # Ember Spirit
    107: (SUPPORT,),  # Earth Spirit
    108: (OFFLANE,),  # Underlord
    109: (CARRY,),  # Terrorblade
    110: (SUPPORT, OFFLANE),  # Phoenix
    111: (HARD_SUPPORT,),  # Oracle
    112: (HARD_SUPPORT,),  # Winter Wyvern
    113: (MID, CARRY),  # Arc Warden
    114: (CARRY, MID),  # Monkey King
    119: (SUPPORT,),  # Dark Willow
    120: (OFFLANE, MID),  # Pangolier
    121: (HARD_SUPPORT,),  # Grimstroke
    123: (SUPPORT,),  # Hoodwink
    126: (MID,),  # Void Spirit
    128: (SUPPORT,),  # Snapfire
    129: (OFFLANE,),  # Mars
    131: (SUPPORT,),  # Ringmaster
    135: (OFFLANE,),  # Dawnbreaker
    136: (SUPPORT,),  # Marci
    137: (OFFLANE,),  # Primal Beast
    138: (CARRY, MID),  # Muerta
    145: (CARRY,),  # Kez
}


def determine_main_roles(
    hero_ids: Iterable[int],
    table: HeroRoleTable = DEFAULT_HERO_ROLES,
    limit: int = MAX_MAIN_ROLES,
) -> list[str]:
    """Most frequent roles across ``hero_ids``.

    Ties keep the order in which roles were first seen. Heroes missing from
    the table contribute nothing; if none resolve the result is
    ``[GENERALIST]``.
    """
    counts: Counter[str] = Counter()
    for hero_id in hero_ids:
        counts.update(table.get(hero_id, ()))

    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counts, key=lambda role: counts[role], reverse=True)
    return ranked[:limit] or [GENERALIST]


def load_hero_roles(path: Path | str) -> dict[int, tuple[str, ...]]:
    """Load a hero id -> roles table from a YAML or JSON file."""
    path = Path(path)
    with open(path) as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            import yaml

            raw = yaml.safe_load(f) or {}
        else:
            raw = json.load(f)

    table = {int(hero_id): tuple(roles) for hero_id, roles in raw.items()}
    logger.info(f"Loaded roles for {len(table)} heroes from {path}")
    return table
