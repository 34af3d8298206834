"""Error taxonomy for nearby-voter retrieval.

Every failure surfaced by the retrieval pipeline derives from
``RetrievalError`` so outer layers (API, CLI) can map them in one place.
An empty candidate set or an empty registry result is not an error.
"""


class RetrievalError(Exception):
    """Base class for retrieval failures.

    Args:
        message: Human-readable, user-presentable description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SearchValidationError(RetrievalError):
    """Invalid search input, rejected before any backend call.

    Args:
        field: Name of the offending input field.
        message: Human-readable description.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class GeocodeFailure(RetrievalError):
    """The address could not be resolved to coordinates.

    Covers both "provider found no match" and provider transport errors
    (timeout, HTTP error, connection failure).  Nothing is cached.
    """


class StoreError(RetrievalError):
    """A backing store (spatial, cache or registry) failed a connection or query.

    Args:
        store: Which store failed (``local`` or ``registry``).
        message: Human-readable description.
    """

    def __init__(self, store: str, message: str) -> None:
        self.store = store
        super().__init__(f"{store}: {message}")


class CacheDegraded(RetrievalError):
    """The result cache could not be read or written.

    Never fatal: a failed read is downgraded to "every id missing" and a
    failed refresh still returns the fetched rows.
    """
