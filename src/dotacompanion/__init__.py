"""
Dota Companion - backend-for-frontend for a Dota 2 companion app.

Authenticates users (email/password and Steam OpenID), stores minimal
user and player records, and proxies OpenDota and STRATZ into a
simplified player profile and match-history view.

Usage:
    from dotacompanion.api import create_app

    app = create_app()
"""

__version__ = "0.1.0"
__author__ = "Dota Companion Contributors"
