"""JWT session token creation and verification using python-jose."""

from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from dotacompanion.core.errors import ConfigError, Unauthorized

ALGORITHM = "HS256"
EXPIRY_DAYS = 7


def create_access_token(user_id: int, secret: str, expiry_days: int = EXPIRY_DAYS) -> str:
    """Create a signed token whose subject is ``user_id``."""
    if not secret:
        raise ConfigError("JWT_SECRET is not configured")
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=expiry_days),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> dict:
    """Decode and verify a token. Raises Unauthorized on failure."""
    if not secret:
        raise ConfigError("JWT_SECRET is not configured")
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise Unauthorized("Token has expired") from e
    except JWTError as e:
        raise Unauthorized("Invalid token") from e


def token_subject(claims: dict) -> int:
    """User id carried by verified ``claims``."""
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise Unauthorized("Invalid token payload") from e
