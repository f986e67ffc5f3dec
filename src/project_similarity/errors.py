"""Exceptions raised by the similarity engine."""


class SimilarityError(Exception):
    """Base class for similarity engine errors."""


class ReferencedEntityNotFound(SimilarityError, LookupError):
    """
    A precomputed index and the record repository disagree.

    Raised when a queried id is missing from the index, or when the index names a record the
    repository does not hold. Either way the index is stale relative to the corpus.
    """

    def __init__(self, message: str, missing_ids: list[str] | None = None):
        super().__init__(message)
        self.missing_ids = list(missing_ids or [])


class InvalidWeightConfiguration(SimilarityError, ValueError):
    """Axis weights that do not form a convex combination."""
