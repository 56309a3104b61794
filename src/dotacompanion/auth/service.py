"""
Account operations: registration, login and Steam identity linking.

AuthService works on one SQLAlchemy session (one request) and returns the
user together with a freshly signed session token.
"""

import logging

from sqlalchemy.orm import Session

from dotacompanion.auth.jwt import create_access_token, decode_token, token_subject
from dotacompanion.auth.passwords import hash_password, verify_password
from dotacompanion.auth.steam import SteamProfile
from dotacompanion.core.config import AuthConfig
from dotacompanion.core.errors import ConfigError, Conflict, InternalError, Unauthorized
from dotacompanion.infra.database import (
    User,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_steam_id,
    update_user_last_login,
    user_exists,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, config: AuthConfig):
        self.db = db
        self.config = config

    def _require_secret(self) -> None:
        # Before any write: an account must never exist without a usable token
        if not self.config.jwt_secret:
            raise ConfigError("JWT_SECRET is not configured")

    def issue_token(self, user: User) -> str:
        return create_access_token(user.id, self.config.jwt_secret, self.config.jwt_expiry_days)

    def register(self, email: str, password: str) -> tuple[User, str]:
        """Create an email/password account.

        Raises:
            Conflict: the email is already registered.
        """
        self._require_secret()
        if user_exists(self.db, email):
            raise Conflict("User already exists")

        user = create_user(self.db, email=email, password_hash=hash_password(password))
        if user is None:
            # Lost a race with a concurrent registration of the same email
            raise Conflict("User already exists")

        token = self.issue_token(user)
        logger.info(f"User registered (id={user.id})")
        return user, token

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and refresh the last-login timestamp.

        Raises:
            Unauthorized: unknown email or wrong password.
        """
        self._require_secret()
        user = get_user_by_email(self.db, email)
        if user is None or not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid credentials")

        update_user_last_login(self.db, user)
        token = self.issue_token(user)
        logger.info(f"User logged in (id={user.id})")
        return user, token

    def link_steam_identity(self, profile: SteamProfile) -> tuple[User, str]:
        """Create or refresh the user owning ``profile.steam_id``."""
        self._require_secret()
        user = get_user_by_steam_id(self.db, profile.steam_id)
        if user is None:
            user = create_user(self.db, steam_id=profile.steam_id)
            if user is None:
                # Created concurrently by another request
                user = get_user_by_steam_id(self.db, profile.steam_id)
            if user is None:
                raise InternalError(f"Could not create user for Steam ID {profile.steam_id}")
            logger.info(f"Created user {user.id} for Steam ID {profile.steam_id}")
        else:
            logger.info(f"Existing user {user.id} logged in via Steam")

        user.steam_display_name = profile.display_name
        user.steam_avatar = profile.avatar_url
        user.steam_profile = profile.profile_url
        update_user_last_login(self.db, user)
        return user, self.issue_token(user)

    def resolve_token(self, token: str) -> User:
        """User named by a valid token.

        Raises:
            Unauthorized: invalid/expired token or the user no longer exists.
        """
        user_id = token_subject(decode_token(token, self.config.jwt_secret))
        user = get_user_by_id(self.db, user_id)
        if user is None:
            raise Unauthorized("User not found")
        return user
