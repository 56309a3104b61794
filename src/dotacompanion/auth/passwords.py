"""Password hashing and verification using bcrypt."""

import bcrypt

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str | None) -> bool:
    """Verify a plaintext password against a bcrypt hash.

    Accounts without a password (Steam-only) never verify.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
