"""Errors raised by storage operations.

Every error here is terminal for the operation that raised it. The CLI
layer turns them into a single ``Error: <message>`` line.
"""


class StorageError(Exception):
    """Base class for storage management failures."""
    pass


class NotFoundError(StorageError):
    """Raised when a storage (or the default storage) does not exist."""
    pass


class AlreadyExistsError(StorageError):
    """Raised when creating a storage under a name that is taken."""
    pass


class ValidationError(StorageError):
    """Raised for malformed input: image references, names, credentials."""
    pass


class ForbiddenError(StorageError):
    """Raised when an operation is refused by a safety rule."""
    pass


class AbortedError(StorageError):
    """Raised when the user declines a confirmation."""
    pass


class UnsupportedError(StorageError):
    """Raised when the container engine lacks a required feature."""
    pass


class PersistenceError(StorageError):
    """Raised when the configuration document cannot be read or written."""
    pass
