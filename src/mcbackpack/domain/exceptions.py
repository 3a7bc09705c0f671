"""Domain-level exceptions.

Every failure a store operation can report is a subclass of DomainException
so callers (and the CLI layer) can catch them uniformly.
"""


class DomainException(Exception):
    """Base class for all backpack errors."""


class ValidationError(DomainException):
    """An argument was malformed or an invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested backpack does not exist."""


class DuplicateEntityError(DomainException):
    """A backpack with the same identifier already exists."""


class StoreClosedError(DomainException):
    """The store has been closed and accepts no more operations."""


class StorageError(DomainException):
    """The underlying persistence layer failed (I/O, corruption, driver)."""
