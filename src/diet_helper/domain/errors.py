"""Errors raised by catalog operations."""


class CatalogError(Exception):
    """Base class for catalog failures."""


class ValidationError(CatalogError):
    """User input violates one or more constraints."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class NotFoundError(CatalogError):
    """An operation references an id that no longer exists."""


class RangeError(CatalogError, IndexError):
    """A position lies outside the target sequence."""


class ModeError(CatalogError):
    """The operation is not allowed in the current bulk-select mode."""


class PersistenceError(CatalogError):
    """Loading or saving the catalog document failed."""


class ImageIOError(CatalogError):
    """Saving or deleting an image file failed."""
