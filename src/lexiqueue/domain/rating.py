"""
Rating policy: maps a grading verdict to its queue and stats effects.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from enum import Enum

from .constants import AGAIN_REQUEUE_OFFSET, HARD_REQUEUE_OFFSET


class Rating(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"
    SKIP = "skip"


class ResultKind(str, Enum):
    """Verdict sent to the server when committing a grade."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Graduate:
    """The card leaves the session."""

    def resolve(self, remaining: int) -> int | None:
        return None


@dataclass(frozen=True)
class InsertAfter:
    """Reinsert the card `offset` positions into the remaining queue."""

    offset: int

    def resolve(self, remaining: int) -> int | None:
        return min(max(self.offset, 0), remaining)


@dataclass(frozen=True)
class InsertAtEnd:
    """Reinsert the card at the tail of the remaining queue."""

    def resolve(self, remaining: int) -> int | None:
        return remaining


RequeuePolicy = Graduate | InsertAfter | InsertAtEnd


@dataclass(frozen=True)
class RatingPolicy:
    """
    Effects of a single rating.

    Attributes:
        result_kind: Verdict committed to the server.
        requeue: Where the card goes after grading.
        counts_as_attempt: Whether the grade counts towards `reviewed`.
        counts_as_success: Whether the grade counts towards `correct`.
    """

    result_kind: ResultKind
    requeue: RequeuePolicy
    counts_as_attempt: bool
    counts_as_success: bool

    @property
    def is_skip(self) -> bool:
        return self.result_kind is ResultKind.SKIPPED


RATING_POLICIES: dict[Rating, RatingPolicy] = {
    Rating.AGAIN: RatingPolicy(
        result_kind=ResultKind.FAILURE,
        requeue=InsertAfter(AGAIN_REQUEUE_OFFSET),
        counts_as_attempt=True,
        counts_as_success=False,
    ),
    Rating.HARD: RatingPolicy(
        result_kind=ResultKind.FAILURE,
        requeue=InsertAfter(HARD_REQUEUE_OFFSET),
        counts_as_attempt=True,
        counts_as_success=False,
    ),
    Rating.GOOD: RatingPolicy(
        result_kind=ResultKind.SUCCESS,
        requeue=Graduate(),
        counts_as_attempt=True,
        counts_as_success=True,
    ),
    Rating.EASY: RatingPolicy(
        result_kind=ResultKind.SUCCESS,
        requeue=Graduate(),
        counts_as_attempt=True,
        counts_as_success=True,
    ),
    Rating.SKIP: RatingPolicy(
        result_kind=ResultKind.SKIPPED,
        requeue=InsertAtEnd(),
        counts_as_attempt=False,
        counts_as_success=False,
    ),
}


def parse_rating(value: "Rating | str") -> Rating:
    """
    Coerce a user-supplied rating into a Rating.

    Raises:
        ValueError: If the value is not one of again/hard/good/easy/skip.
    """
    if isinstance(value, Rating):
        return value
    try:
        return Rating(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(r.value for r in Rating)
        raise ValueError(f"Unknown rating '{value}' (expected one of: {valid})") from None


def policy_for(rating: "Rating | str") -> RatingPolicy:
    return RATING_POLICIES[parse_rating(rating)]
