"""
Single-flight loader for the review queue.

Fetches a page of cards, decides reset-vs-merge semantics, and keeps the
queue topped up after each successful grade.
"""

import logging

from lexiqueue.domain.constants import TOPUP_MIN_THRESHOLD
from lexiqueue.domain.errors import FetchFailure
from lexiqueue.domain.models import CardRecord
from lexiqueue.domain.ports import ReviewGateway

from .session import ReviewSession
from .session_meta import extract_meta, normalize_session_meta
from .stats_tracker import initial_stats, with_high_water_total

logger = logging.getLogger(__name__)


def top_up_threshold(limit: int) -> int:
    return max(TOPUP_MIN_THRESHOLD, limit // 2)


class FetchCoordinator:
    """
    Loads cards into a ReviewSession.

    At most one fetch is in flight per session; extra calls made while one is
    outstanding are dropped rather than queued.
    """

    def __init__(
        self,
        session: ReviewSession,
        gateway: ReviewGateway,
        restart_on_empty: bool = False,
    ):
        """
        Args:
            session: Shared session state.
            gateway: The list/refill collaborator.
            restart_on_empty: When the queue drains, immediately start a new
                batch instead of leaving the session complete.
        """
        self._session = session
        self._gateway = gateway
        self.restart_on_empty = restart_on_empty

    @property
    def inflight(self) -> bool:
        return self._session.loading

    async def fetch_queue(self, reset: bool = False) -> bool:
        """
        Fetch a page of cards and merge it into the queue.

        Args:
            reset: Start a new session: replace the queue, zero the stats and
                reset the session metadata.

        Returns:
            True if a response was applied; False if the call was dropped,
            failed, or arrived after the session was closed.
        """
        session = self._session
        if session.loading:
            logger.debug(f"Fetch already in flight for mode={session.mode}; dropping")
            return False

        session.loading = True
        session.error = None
        session.notify()
        generation = session.generation

        try:
            payload = await self._gateway.list_queue(
                session.mode,
                session.limit,
                category=session.category,
                reset_session=reset,
            )
        except Exception as e:
            logger.warning(f"Queue fetch failed (mode={session.mode}, reset={reset}): {e}")
            failure = FetchFailure(f"Could not load cards: {e}")
            failure.__cause__ = e
            if session.active:
                session.error = failure
            return False
        finally:
            session.loading = False
            if session.active:
                session.notify()

        if not session.active or session.generation != generation:
            logger.info("Discarding fetch result for a closed or superseded session")
            return False

        self._apply(payload, reset)
        session.notify()
        return True

    def _apply(self, payload: dict, reset: bool) -> None:
        session = self._session
        cards = self._build_cards(payload.get("items") if isinstance(payload, dict) else None)

        added = session.queue.merge(cards, reset=reset)
        raw_meta = extract_meta(payload)

        if reset:
            session.generation += 1
            session.stats = initial_stats(total=len(session.queue))
            session.meta = normalize_session_meta(raw_meta, session.meta, reset=True)
        else:
            session.stats = with_high_water_total(session.stats, len(session.queue))
            session.meta = normalize_session_meta(raw_meta, session.meta)

        session.loaded = True
        logger.info(
            f"Loaded {added} cards (mode={session.mode}, reset={reset}, "
            f"queue={len(session.queue)})"
        )

    @staticmethod
    def _build_cards(items) -> list[CardRecord]:
        cards: list[CardRecord] = []
        for item in items or []:
            try:
                cards.append(CardRecord.from_raw(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed card item: {e}")
        return cards

    async def top_up_if_needed(self) -> bool:
        """
        Refill the queue when it runs low.

        Empty queue: start a new batch if `restart_on_empty`, otherwise the
        session stays complete until an explicit refresh. Below threshold:
        append more cards without resetting.

        Returns:
            True if a fetch was applied.
        """
        remaining = len(self._session.queue)
        if remaining == 0:
            if self.restart_on_empty:
                return await self.fetch_queue(reset=True)
            return False
        if remaining < top_up_threshold(self._session.limit):
            return await self.fetch_queue(reset=False)
        return False
