"""
Dota Companion Auth - Accounts, session tokens and Steam OpenID.

This module contains:
- jwt: Session token signing and verification
- passwords: bcrypt hashing
- steam: Steam OpenID 2.0 and Steam Web API profile lookup
- service: AuthService (register, login, Steam identity linking)
- middleware: FastAPI dependencies for bearer-token authentication
"""

__all__: list[str] = []
