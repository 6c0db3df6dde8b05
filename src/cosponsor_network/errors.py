"""Failure classes reported at the service boundary.

Each error carries a machine-readable ``code`` and a human-readable message.
Data defects inside an otherwise valid dataset are not errors: they are
collected as ``DataIntegrityWarning`` records (see models.py) and skipped.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to a caller."""

    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(ServiceError):
    """Bad direction/term/focus parameter. Raised before any graph work."""

    code = "bad_request"


class NotFoundError(ServiceError):
    """Focus id has no member in the requested term."""

    code = "not_found"


class UpstreamError(ServiceError):
    """Record Store unreachable or returned malformed data."""

    code = "upstream_failure"
