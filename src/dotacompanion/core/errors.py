"""
Error taxonomy for Dota Companion.

Every failure that reaches the HTTP boundary is one of these types. The API
maps them to responses by type (see ``dotacompanion.api.install_error_handlers``),
never by inspecting messages.
"""

from __future__ import annotations


class DotaCompanionError(Exception):
    """Base class for all application errors."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = "", **context) -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class ValidationError(DotaCompanionError):
    """Malformed client input."""

    status_code = 400
    code = "validation_error"


class InvalidIdFormat(ValidationError):
    """A Steam id that is not purely numeric."""

    code = "invalid_id_format"


class Unauthorized(DotaCompanionError):
    status_code = 401
    code = "unauthorized"


class Forbidden(DotaCompanionError):
    status_code = 403
    code = "forbidden"


class NotFound(DotaCompanionError):
    status_code = 404
    code = "not_found"


class Conflict(DotaCompanionError):
    status_code = 409
    code = "conflict"


class ConfigError(DotaCompanionError):
    """A required secret or token is not configured."""

    status_code = 500
    code = "config_error"


class UpstreamError(DotaCompanionError):
    """A provider answered with an error status or an error payload."""

    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str = "", status: int | None = None, body: str = "") -> None:
        super().__init__(message, status=status)
        self.status = status
        self.body = body


class UpstreamTimeout(DotaCompanionError):
    status_code = 504
    code = "upstream_timeout"


class InternalError(DotaCompanionError):
    status_code = 500
    code = "internal_error"
