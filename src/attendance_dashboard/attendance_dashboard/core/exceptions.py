class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an employee or record id does not resolve."""


class StorageError(DomainError):
    """Raised by storage backends when a read or write fails."""


class PersistenceQuotaError(StorageError):
    """Raised when a write would exceed the storage quota."""


class CorruptedStateError(DomainError):
    """Raised when a persisted document cannot be decoded."""
