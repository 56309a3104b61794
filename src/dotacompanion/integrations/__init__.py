"""
Dota Companion Integrations - External statistics providers.

This module contains:
- opendota: OpenDota REST client (degrades to neutral results)
- stratz: STRATZ GraphQL client (raises typed errors)
"""

from dotacompanion.integrations.opendota import OpenDotaClient
from dotacompanion.integrations.stratz import StratzClient

__all__ = ["OpenDotaClient", "StratzClient"]
