"""
Grading controller: one optimistic grading transaction per call.

    1. Mutate the queue and stats locally.
    2. Commit the grade to the review service.
    3. On success merge the returned session metadata and top up the queue.
       On failure roll the local mutation back and re-raise.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any

from lexiqueue.domain.errors import GradeCommitFailure, GradeInProgress
from lexiqueue.domain.models import CardRecord, GradeOutcome, GradeSubmission
from lexiqueue.domain.ports import ReviewGateway
from lexiqueue.domain.rating import Rating, RatingPolicy, parse_rating, policy_for

from .fetch_coordinator import FetchCoordinator
from .session import ReviewSession
from .session_meta import extract_meta, normalize_session_meta
from .stats_tracker import apply_rating, revert_rating, with_high_water_total

logger = logging.getLogger(__name__)


class GradingController:
    """
    Applies ratings to the head card of a ReviewSession.

    Grades are serialized: a call made while another grade is awaiting its
    commit raises GradeInProgress instead of acting on a queue whose head may
    already have changed.
    """

    def __init__(
        self,
        session: ReviewSession,
        gateway: ReviewGateway,
        fetcher: FetchCoordinator,
        exact_rollback: bool = True,
    ):
        """
        Args:
            session: Shared session state.
            gateway: The submit-grade collaborator.
            fetcher: Used for the post-grade top-up check.
            exact_rollback: Restore the pre-grade stats snapshot on a failed
                or cancelled commit, keeping any higher total. When False,
                counters are decremented with `revert_rating` and the streak
                is reset to 0.
        """
        self._session = session
        self._gateway = gateway
        self._fetcher = fetcher
        self.exact_rollback = exact_rollback

    async def grade(
        self, rating: Rating | str, duration_ms: int | None = None
    ) -> dict[str, Any] | None:
        """
        Grade the head card.

        Returns:
            The service response on success; None if there was nothing to grade.

        Raises:
            ValueError: Unknown rating.
            GradeInProgress: Another grade has not resolved yet.
            GradeCommitFailure: The service rejected the grade (state rolled back).
            asyncio.CancelledError: Cancelled before the commit resolved; the
                local mutation is rolled back first.
        """
        rating = parse_rating(rating)
        session = self._session

        if session.grading:
            raise GradeInProgress("A grade is already being committed; wait for it to finish")

        card = session.queue.head
        if card is None:
            return None
        if card.word_id is None:
            logger.warning(f"Card {card.key} has no word id; cannot grade")
            return None

        policy = policy_for(rating)
        stats_before = session.stats
        generation = session.generation

        session.grading = True
        try:
            self._mutate(card, rating, policy)
            session.last_result = None
            session.notify()

            submission = GradeSubmission(
                word_id=card.word_id,
                result=policy.result_kind,
                progress_id=card.progress_id,
                duration_ms=duration_ms,
                category_id=card.category_id,
            )
            try:
                payload = await self._gateway.submit_grade(submission)
            except asyncio.CancelledError:
                logger.info(f"Grade for card {card.key} cancelled before commit")
                if session.active and session.generation == generation:
                    self._rollback(card, rating, stats_before)
                raise
            except Exception as e:
                logger.warning(f"Grade commit failed for card {card.key} ({rating.value}): {e}")
                if session.active and session.generation == generation:
                    self._rollback(card, rating, stats_before)
                else:
                    logger.info(f"Session moved on; not rolling back card {card.key}")
                failure = GradeCommitFailure(f"Could not save grade: {e}", rating=rating)
                session.last_result = GradeOutcome(success=False, rating=rating, error=failure)
                session.error = failure
                raise failure from e
        finally:
            session.grading = False
            session.notify()

        if not session.active:
            return payload

        session.meta = normalize_session_meta(extract_meta(payload), session.meta)
        session.last_result = GradeOutcome(success=True, rating=rating, payload=payload)
        session.notify()

        await self._fetcher.top_up_if_needed()
        return payload

    async def skip(self, duration_ms: int | None = None) -> dict[str, Any] | None:
        return await self.grade(Rating.SKIP, duration_ms)

    def _mutate(self, card: CardRecord, rating: Rating, policy: RatingPolicy) -> None:
        queue = self._session.queue
        popped = queue.pop_front()
        assert popped is card, "Queue head changed during grading"

        index = policy.requeue.resolve(len(queue))
        if index is not None:
            queue.insert_at(card.requeued(rating), index)

        self._session.stats = apply_rating(self._session.stats, rating, len(queue))

    def _rollback(self, card: CardRecord, rating: Rating, stats_before) -> None:
        queue = self._session.queue
        queue.remove(card.key)
        queue.push_front(card)

        current = self._session.stats
        if self.exact_rollback:
            restored = replace(stats_before, total=max(stats_before.total, current.total))
        else:
            restored = revert_rating(current, rating)
        # total never drops below reviewed + queued.
        self._session.stats = with_high_water_total(restored, len(queue))
