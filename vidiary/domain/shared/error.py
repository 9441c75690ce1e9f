"""Error hierarchy for vidiary.

Error layers:
- DiaryError: Base class for all vidiary errors
- DomainError: Rule violations the caller can act on (missing clip, bad input)
- InfrastructureError: Storage and system-level failures

The CLI maps every DiaryError to a console error and a non-zero exit status.
"""


class DiaryError(Exception):
    """Base class for all vidiary errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(DiaryError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConcurrentLoadCollisionError(DomainError):
    """A coalesced partition load finished without leaving the partition loaded."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(DiaryError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """The local database could not be opened or used."""


class SerializationError(InfrastructureError):
    """A payload could not be captured as durable bytes."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
