"""Exceptions raised by the retrieval core."""


class RAGError(Exception):
    """Base class for retrieval core errors."""


class DimensionMismatchError(RAGError, ValueError):
    """Raised when vectors of different dimensionality are combined."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}")


class BatchLengthMismatchError(RAGError, ValueError):
    """Raised when sources and embeddings passed together differ in length."""

    def __init__(self, sources: int, embeddings: int):
        self.sources = sources
        self.embeddings = embeddings
        super().__init__(
            f"Batch length mismatch: {sources} source(s) but {embeddings} embedding(s)"
        )


class EmbeddingError(RAGError):
    """Raised when the remote embedding backend fails or misbehaves."""


class RetrievalError(RAGError):
    """Raised when a query cannot be answered from the vector store at all."""
