"""
Domain models for a review session.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, replace
from typing import Any

from .rating import Rating, ResultKind


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return _as_id(value.get("_id") or value.get("id"))
    return str(value)


@dataclass(frozen=True)
class CardRecord:
    """
    One flashcard instance tracked within a session's queue.

    Attributes:
        key: Session-stable identity, unique within a QueueStore.
        word: Opaque display payload (term, translation, ...).
        progress_id: Server-side progress record, if the card has one.
        session_repetition: Times this card was requeued in the session.
        last_rating: Most recent verdict applied to this card.
        category: Category reference carried by the raw item, if any.
    """

    key: str
    word: dict[str, Any]
    progress_id: str | None = None
    session_repetition: int = 0
    last_rating: Rating | None = None
    category: Any = None

    def __post_init__(self):
        assert self.key, "CardRecord requires a non-empty key"
        assert self.session_repetition >= 0, "session_repetition must be >= 0"

    @classmethod
    def from_raw(cls, item: dict[str, Any]) -> "CardRecord":
        """
        Normalize a raw server item into a CardRecord.

        Review-mode items wrap the word (`{"progressId", "word": {...}}`);
        learn-mode items are bare word documents.

        Raises:
            ValueError: If the item carries neither a progress nor a word id.
        """
        if not isinstance(item, dict):
            raise ValueError(f"Card item must be a mapping, got {type(item).__name__}")

        nested = item.get("word")
        word = nested if isinstance(nested, dict) else item

        progress_id = _as_id(item.get("progressId"))
        if progress_id is None and word is not item:
            progress_id = _as_id(item.get("_id"))

        key = progress_id or _as_id(word.get("_id")) or _as_id(word.get("id"))
        if key is None:
            raise ValueError("Card item has neither a progress id nor a word id")

        return cls(
            key=key,
            word=word,
            progress_id=progress_id,
            category=item.get("category") if word is not item else None,
        )

    @property
    def word_id(self) -> str | None:
        return _as_id(self.word.get("_id")) or _as_id(self.word.get("id")) or _as_id(
            self.word.get("wordId")
        )

    @property
    def category_id(self) -> str | None:
        for candidate in (self.word.get("category"), self.category):
            resolved = _as_id(candidate)
            if resolved is not None:
                return resolved
        return None

    @property
    def term(self) -> str:
        return str(self.word.get("term") or self.word.get("word") or self.key)

    def fresh(self) -> "CardRecord":
        """Copy with per-session counters cleared (used when merged into a queue)."""
        return replace(self, session_repetition=0, last_rating=None)

    def requeued(self, rating: Rating) -> "CardRecord":
        return replace(
            self,
            session_repetition=self.session_repetition + 1,
            last_rating=rating,
        )


@dataclass(frozen=True)
class StatsSnapshot:
    """Session counters; `total` is a high-water mark."""

    total: int = 0
    reviewed: int = 0
    correct: int = 0
    streak: int = 0
    lapses: int = 0
    skipped: int = 0

    def __post_init__(self):
        for name in ("total", "reviewed", "correct", "streak", "lapses", "skipped"):
            assert getattr(self, name) >= 0, f"stats.{name} must be >= 0"

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "reviewed": self.reviewed,
            "correct": self.correct,
            "streak": self.streak,
            "lapses": self.lapses,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class SessionMeta:
    """Gamification counters reported by the server."""

    xp_earned: float = 0
    streak: float = 0
    combo: float = 0
    max_combo: float = 0
    daily_progress: float = 0
    daily_goal: float | None = None
    unlocked_decks: tuple = ()
    achievements: tuple = ()
    cooldown_until: Any = None
    last_award: Any = None

    def __post_init__(self):
        assert self.max_combo >= self.combo, "max_combo must be >= combo"

    def to_dict(self) -> dict[str, Any]:
        """Render using the server's camelCase keys."""
        return {
            "xpEarned": self.xp_earned,
            "streak": self.streak,
            "combo": self.combo,
            "maxCombo": self.max_combo,
            "dailyProgress": self.daily_progress,
            "dailyGoal": self.daily_goal,
            "unlockedDecks": list(self.unlocked_decks),
            "achievements": list(self.achievements),
            "cooldownUntil": self.cooldown_until,
            "lastAward": self.last_award,
        }


@dataclass(frozen=True)
class GradeOutcome:
    """Result of the most recently committed grading transaction."""

    success: bool
    rating: Rating
    payload: dict[str, Any] | None = None
    error: Exception | None = None


@dataclass(frozen=True)
class GradeSubmission:
    """Request body for committing a grade."""

    word_id: str
    result: ResultKind
    progress_id: str | None = None
    duration_ms: int | None = None
    category_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "wordId": self.word_id,
            "result": self.result.value,
            "progressId": self.progress_id,
            "durationMs": self.duration_ms,
            "categoryId": self.category_id,
        }
        return {k: v for k, v in payload.items() if v is not None}
