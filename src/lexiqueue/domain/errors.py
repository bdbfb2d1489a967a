"""Error taxonomy for the review engine.

Every failure is scoped to a single fetch or grading transaction; none of
these leave the engine unusable.
"""

from typing import Any


class LexiqueueError(Exception):
    """Base class for engine errors."""


class ReviewApiError(LexiqueueError):
    """The review service rejected a request or could not be reached."""

    def __init__(self, message: str, status: int | None = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class FetchFailure(LexiqueueError):
    """Loading or topping up the queue failed. Recorded, never raised."""


class GradeCommitFailure(LexiqueueError):
    """The remote commit of a grade failed and the optimistic update was rolled back."""

    def __init__(self, message: str, rating: Any = None):
        super().__init__(message)
        self.rating = rating


class GradeInProgress(LexiqueueError):
    """A grade was issued while another one is still awaiting its commit."""
