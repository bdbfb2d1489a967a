"""
ReviewEngine: the surface the UI layer talks to.

Wires a ReviewSession to its FetchCoordinator and GradingController and
exposes read-only views plus the refresh/grade/skip commands.
"""

import logging
from collections.abc import Callable
from typing import Any

from lexiqueue.domain.constants import DEFAULT_LIMIT, DEFAULT_MODE, MAX_LIMIT, MODES
from lexiqueue.domain.models import CardRecord, GradeOutcome, SessionMeta, StatsSnapshot
from lexiqueue.domain.ports import ReviewGateway
from lexiqueue.domain.rating import Rating

from .fetch_coordinator import FetchCoordinator
from .grading import GradingController
from .session import Listener, ReviewSession, SessionState

logger = logging.getLogger(__name__)


class ReviewEngine:
    """
    One learn/review session for a (mode, category) pairing.

    Engines never share state; create one per pairing (see EngineRegistry).
    """

    def __init__(
        self,
        gateway: ReviewGateway,
        mode: str = DEFAULT_MODE,
        limit: int = DEFAULT_LIMIT,
        category: str | None = None,
        auto_fetch: bool = True,
        restart_on_empty: bool = False,
        exact_rollback: bool = True,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}' (expected one of: {', '.join(MODES)})")
        if not 1 <= limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}, got {limit}")

        self.auto_fetch = auto_fetch
        self._gateway = gateway
        self._session = ReviewSession(mode=mode, limit=limit, category=category)
        self._fetcher = FetchCoordinator(
            self._session, gateway, restart_on_empty=restart_on_empty
        )
        self._grader = GradingController(
            self._session, gateway, self._fetcher, exact_rollback=exact_rollback
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._session.mode

    @property
    def category(self) -> str | None:
        return self._session.category

    @property
    def limit(self) -> int:
        return self._session.limit

    @property
    def current_card(self) -> CardRecord | None:
        return self._session.queue.head

    @property
    def queue(self) -> tuple[CardRecord, ...]:
        return self._session.queue.snapshot()

    @property
    def stats(self) -> StatsSnapshot:
        return self._session.stats

    @property
    def session_meta(self) -> SessionMeta:
        return self._session.meta

    @property
    def last_result(self) -> GradeOutcome | None:
        return self._session.last_result

    @property
    def error(self) -> Exception | None:
        return self._session.error

    @property
    def loading(self) -> bool:
        return self._session.loading

    @property
    def grading(self) -> bool:
        return self._session.grading

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_session_complete(self) -> bool:
        return self._session.is_complete

    @property
    def closed(self) -> bool:
        return not self._session.active

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Initial load; a no-op unless `auto_fetch` is set."""
        if not self.auto_fetch:
            return False
        return await self.refresh(reset=True)

    async def refresh(self, reset: bool = True) -> bool:
        return await self._fetcher.fetch_queue(reset=reset)

    async def grade_card(
        self, rating: Rating | str, duration_ms: int | None = None
    ) -> dict[str, Any] | None:
        return await self._grader.grade(rating, duration_ms)

    async def skip_card(self, duration_ms: int | None = None) -> dict[str, Any] | None:
        return await self._grader.skip(duration_ms)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        return self._session.subscribe(listener)

    def close(self) -> None:
        """
        Detach the engine. Network calls still in flight complete, but their
        results are no longer applied.
        """
        if not self._session.active:
            return
        self._session.active = False
        self._session.listeners.clear()
        logger.debug(f"Closed engine mode={self.mode} category={self.category}")

    async def aclose(self) -> None:
        """Close the engine and release the gateway's transport."""
        self.close()
        await self._gateway.aclose()

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view of the engine for API responses."""
        card = self.current_card
        result = self.last_result
        return {
            "mode": self.mode,
            "category": self.category,
            "state": self.state.value,
            "loading": self.loading,
            "isSessionComplete": self.is_session_complete,
            "currentCard": _card_to_dict(card) if card else None,
            "remaining": len(self._session.queue),
            "stats": self.stats.to_dict(),
            "sessionMeta": self.session_meta.to_dict(),
            "lastResult": (
                {
                    "success": result.success,
                    "rating": result.rating.value,
                    "error": str(result.error) if result.error else None,
                }
                if result
                else None
            ),
            "error": str(self.error) if self.error else None,
        }


def _card_to_dict(card: CardRecord) -> dict[str, Any]:
    return {
        "key": card.key,
        "word": card.word,
        "progressId": card.progress_id,
        "sessionRepetition": card.session_repetition,
        "lastRating": card.last_rating.value if card.last_rating else None,
    }
