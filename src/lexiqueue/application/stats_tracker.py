"""
Session statistics reducer.

This is a pure computation module with no I/O.
"""

from dataclasses import replace

from lexiqueue.domain.models import StatsSnapshot
from lexiqueue.domain.rating import Rating, policy_for


def initial_stats(total: int = 0) -> StatsSnapshot:
    return StatsSnapshot(total=max(total, 0))


def apply_rating(
    stats: StatsSnapshot, rating: Rating | str, queue_length_after_pop: int
) -> StatsSnapshot:
    """
    Compute the counters after a rating is applied.

    Args:
        stats: Counters before the grade.
        rating: The verdict.
        queue_length_after_pop: Queue length once the card was popped and requeued.

    Returns:
        New snapshot; `stats` is not modified.
    """
    policy = policy_for(rating)
    attempted = policy.counts_as_attempt
    succeeded = attempted and policy.counts_as_success

    reviewed = stats.reviewed + 1 if attempted else stats.reviewed
    correct = stats.correct + 1 if succeeded else stats.correct
    lapses = (
        stats.lapses + 1
        if attempted and not policy.counts_as_success and not policy.is_skip
        else stats.lapses
    )
    skipped = stats.skipped + 1 if policy.is_skip else stats.skipped

    if not attempted:
        streak = stats.streak
    elif succeeded:
        streak = stats.streak + 1
    else:
        streak = 0

    return StatsSnapshot(
        total=max(stats.total, reviewed + queue_length_after_pop),
        reviewed=reviewed,
        correct=correct,
        streak=streak,
        lapses=lapses,
        skipped=skipped,
    )


def revert_rating(stats: StatsSnapshot, rating: Rating | str) -> StatsSnapshot:
    """
    Undo `apply_rating` for a failed commit.

    Counters are decremented and floored at 0. The streak cannot be rebuilt
    from the counters alone, so it is reset to 0. `total` is a high-water mark
    and stays as is.
    """
    policy = policy_for(rating)
    attempted = policy.counts_as_attempt

    return replace(
        stats,
        reviewed=max(stats.reviewed - 1, 0) if attempted else stats.reviewed,
        correct=(
            max(stats.correct - 1, 0)
            if attempted and policy.counts_as_success
            else stats.correct
        ),
        lapses=(
            max(stats.lapses - 1, 0)
            if attempted and not policy.counts_as_success and not policy.is_skip
            else stats.lapses
        ),
        skipped=max(stats.skipped - 1, 0) if policy.is_skip else stats.skipped,
        streak=0,
    )


def with_high_water_total(stats: StatsSnapshot, queue_length: int) -> StatsSnapshot:
    """Raise `total` to cover everything reviewed plus what is still queued."""
    return replace(stats, total=max(stats.total, stats.reviewed + queue_length))
