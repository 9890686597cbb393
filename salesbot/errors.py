"""Error taxonomy for the sales assistant.

Remote clients translate transport failures into these types; the HTTP
layer maps every one of them to the same generic 500 response.
"""


class SalesbotError(Exception):
    """Base class for all assistant errors."""
    pass


class RequestParseError(SalesbotError):
    """Raised when a request body is missing or malformed."""
    pass


class EmbeddingError(SalesbotError):
    """Raised when the embedding API fails or returns malformed data."""
    pass


class RetrievalError(SalesbotError):
    """Raised when the vector index is unreachable or rejects a call."""
    pass


class GenerationError(SalesbotError):
    """Raised when the chat-completion call fails."""
    pass


class SeedError(SalesbotError):
    """Raised when storing the catalog in the vector index fails."""
    pass


class UnknownError(SalesbotError):
    """Wraps any unexpected exception raised inside the pipeline."""
    pass
