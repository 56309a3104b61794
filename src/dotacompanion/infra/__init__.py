"""
Dota Companion Infrastructure - System infrastructure components.

This module contains:
- database: SQLAlchemy user and player store
"""

__all__: list[str] = []
