class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, shift or locator does not resolve."""


class ConflictError(DomainError):
    """Raised when a uniqueness race is detected at the storage layer.

    Callers treat this as retryable.
    """


class StorageError(DomainError):
    """Raised for any other persistence failure."""


class TransactionAbortedError(StorageError):
    """Raised when the database aborted the whole open transaction.

    Savepoints are gone at that point, so no partial result can be kept.
    """
