"""SteamID64 <-> Dota account id conversion."""

import re

from dotacompanion.core.errors import InvalidIdFormat

# SteamID64 = account id + this offset (individual account, public universe)
STEAM_ID64_OFFSET = 76561197960265728

# Account ids fit in 32 bits (at most 10 digits); anything this long is a SteamID64
STEAM_ID64_MIN_LENGTH = 16

# A SteamID64 is a 64-bit integer, so at most 20 digits
STEAM_ID64_MAX_LENGTH = 20

ACCOUNT_ID_LIMIT = 2**32

_DIGITS = re.compile(r"[0-9]+")


def to_account_id(value: str) -> int:
    """Convert a SteamID64 or an account id string to an account id.

    Raises:
        InvalidIdFormat: if ``value`` is not purely numeric, or does not
            resolve to a 32-bit account id.
    """
    if not isinstance(value, str) or not _DIGITS.fullmatch(value):
        raise InvalidIdFormat(f"Invalid Steam id: {value!r} is not numeric")
    if len(value) > STEAM_ID64_MAX_LENGTH:
        raise InvalidIdFormat(f"Invalid Steam id: longer than {STEAM_ID64_MAX_LENGTH} digits")

    account_id = int(value)
    if len(value) >= STEAM_ID64_MIN_LENGTH:
        account_id -= STEAM_ID64_OFFSET
    if not 0 <= account_id < ACCOUNT_ID_LIMIT:
        raise InvalidIdFormat(f"Invalid Steam id: {value} is not an individual account")
    return account_id


def to_steam_id64(account_id: int) -> str:
    """Inverse of :func:`to_account_id` for short-form ids."""
    if not 0 <= account_id < ACCOUNT_ID_LIMIT:
        raise InvalidIdFormat(f"Invalid account id: {account_id}")
    return str(account_id + STEAM_ID64_OFFSET)
