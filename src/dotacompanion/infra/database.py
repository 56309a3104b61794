"""
Dota Companion User and Player Store.

Persistent storage for user accounts (email/password and Steam identities)
and per-player analytics records.

Uses SQLAlchemy ORM; SQLite by default, any SQLAlchemy URL via DATABASE_URL.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


def _utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


logger = logging.getLogger(__name__)

Base = declarative_base()


# =============================================================================
# Database Models
# =============================================================================


class User(Base):
    """An account: email/password, Steam identity, or both."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Unique when present; Steam-only accounts have no email
    email = Column(String(255), unique=True, nullable=True, index=True)
    password_hash = Column(String(255), nullable=True)
    steam_id = Column(String(20), unique=True, nullable=True, index=True)

    steam_display_name = Column(String(100))
    steam_avatar = Column(String(500))
    steam_profile = Column(String(500))

    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now)
    last_login = Column(DateTime(timezone=True))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses (never includes the hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "steamId": self.steam_id,
            "steamDisplayName": self.steam_display_name,
            "steamAvatar": self.steam_avatar,
            "steamProfile": self.steam_profile,
            "isAdmin": bool(self.is_admin),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }


class Player(Base):
    """Stored analytics for a player, keyed by Steam id."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    steam_id = Column(String(20), unique=True, nullable=False, index=True)
    mmr = Column(Integer)

    farm_efficiency = Column(Float)
    vision_score = Column(Float)

    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now)

    @property
    def has_stats(self) -> bool:
        return self.farm_efficiency is not None or self.vision_score is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "steamId": self.steam_id,
            "mmr": self.mmr,
            "stats": {
                "farmEfficiency": self.farm_efficiency,
                "visionScore": self.vision_score,
            },
        }


# =============================================================================
# Database Manager
# =============================================================================


class DatabaseManager:
    """Owns the engine and session factory for one database URL."""

    def __init__(self, url: str):
        self.url = url
        parsed = make_url(url)

        engine_kwargs: dict[str, Any] = {"echo": False}
        if parsed.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if parsed.database in (None, "", ":memory:"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            else:
                Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        # Create tables if they don't exist
        Base.metadata.create_all(self.engine)

        logger.info(f"Database initialized ({parsed.get_backend_name()})")

    def get_session(self) -> Session:
        """Get a database session."""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


# =============================================================================
# User Operations
# =============================================================================


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(func.lower(User.email) == email.lower())).first()


def get_user_by_steam_id(db: Session, steam_id: str) -> User | None:
    return db.scalars(select(User).where(User.steam_id == steam_id)).first()


def user_exists(db: Session, email: str) -> bool:
    return get_user_by_email(db, email) is not None


def create_user(
    db: Session,
    email: str | None = None,
    password_hash: str | None = None,
    steam_id: str | None = None,
    **fields: Any,
) -> User | None:
    """Insert a user. Returns None if the email or Steam id is already taken."""
    if not email and not steam_id:
        raise ValueError("A user needs an email or a Steam id")

    user = User(
        email=email.lower() if email else None,
        password_hash=password_hash,
        steam_id=steam_id,
        **fields,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("User creation rejected by unique constraint")
        return None
    db.refresh(user)
    return user


def update_user_last_login(db: Session, user: User) -> User:
    user.last_login = _utc_now()
    db.commit()
    return user


def set_user_admin(db: Session, user: User, is_admin: bool = True) -> User:
    user.is_admin = is_admin
    db.commit()
    return user


# =============================================================================
# Player Operations
# =============================================================================


def get_player_by_steam_id(db: Session, steam_id: str) -> Player | None:
    return db.scalars(select(Player).where(Player.steam_id == steam_id)).first()


def upsert_player(
    db: Session,
    steam_id: str,
    mmr: int | None = None,
    farm_efficiency: float | None = None,
    vision_score: float | None = None,
) -> tuple[Player, bool]:
    """Create or replace the stored record for ``steam_id``.

    Returns:
        (player, created)
    """
    player = get_player_by_steam_id(db, steam_id)
    created = player is None
    if created:
        player = Player(steam_id=steam_id)
        db.add(player)

    player.mmr = mmr
    player.farm_efficiency = farm_efficiency
    player.vision_score = vision_score
    db.commit()
    db.refresh(player)
    logger.info(f"{'Created' if created else 'Updated'} player record {steam_id}")
    return player, created
