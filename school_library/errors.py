class LibraryError(Exception):
    """Base class for errors reported by the library core."""
    pass


class ValidationError(LibraryError, ValueError):
    """A required field is missing or a value is out of range."""
    pass


class NotFound(LibraryError, LookupError):
    """Unknown book or loan id."""
    pass


class OutOfStock(LibraryError):
    """Borrow attempted on a book with no copies left."""
    pass


class AlreadyReturned(LibraryError):
    """The loan has already been closed."""
    pass


class LookupFailed(LibraryError):
    """The external metadata service could not be queried."""
    pass
