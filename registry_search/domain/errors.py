class SearchError(Exception):
    """Base class for failures raised while answering a query."""


class StoreUnavailableError(SearchError):
    """The package store could not be read (missing catalog, I/O failure)."""


class OperationCancelledError(SearchError):
    """The caller signalled cancellation before a store round trip."""


class UnsupportedQueryError(SearchError):
    """The store cannot execute the shape of query it was given."""
