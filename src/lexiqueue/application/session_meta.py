"""
Merge server-reported gamification metadata into the local snapshot.

The server sends camelCase payloads (`xpEarned`, `maxCombo`, ...) that may be
partial or missing. Normalization keeps the local snapshot sane between
round-trips: counters never go negative and `max_combo` never drops below
`combo`.
"""

import math
from typing import Any

from lexiqueue.domain.models import SessionMeta

DEFAULT_SESSION_META = SessionMeta()

# snake_case field -> wire key
_COUNTER_FIELDS = {
    "xp_earned": "xpEarned",
    "streak": "streak",
    "daily_progress": "dailyProgress",
}


def _finite(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _number(value: Any, fallback: Any) -> Any:
    return value if _finite(value) else fallback


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def extract_meta(payload: dict[str, Any] | None) -> dict[str, Any] | None:
    """Pick the session metadata block out of a list or submit response."""
    if not isinstance(payload, dict):
        return None
    return _first_present(payload.get("session"), payload.get("meta"))


def normalize_session_meta(
    raw: dict[str, Any] | None,
    previous: SessionMeta | None = None,
    reset: bool = False,
) -> SessionMeta:
    """
    Build the next SessionMeta from a raw server block.

    Args:
        raw: Server payload (may be None or partial).
        previous: Current local snapshot.
        reset: Start from the all-zero default instead of `previous`.

    Returns:
        A new SessionMeta.
    """
    base = DEFAULT_SESSION_META if reset or previous is None else previous
    if not isinstance(raw, dict):
        raw = {}

    counters = {
        field: max(0, _number(raw.get(key), getattr(base, field)))
        for field, key in _COUNTER_FIELDS.items()
    }

    combo = max(0, _number(raw.get("combo"), base.combo))
    max_combo = max(combo, _number(raw.get("maxCombo"), base.max_combo))

    unlocked = raw.get("unlockedDecks")
    achievements = raw.get("achievements")

    return SessionMeta(
        combo=combo,
        max_combo=max_combo,
        daily_goal=_number(raw.get("dailyGoal"), base.daily_goal),
        unlocked_decks=tuple(unlocked) if isinstance(unlocked, list) else base.unlocked_decks,
        achievements=(
            tuple(achievements) if isinstance(achievements, list) else base.achievements
        ),
        cooldown_until=_first_present(raw.get("cooldownUntil"), base.cooldown_until),
        # A response without an award means nothing was awarded this time.
        last_award=_first_present(raw.get("lastAward"), raw.get("award")),
        **counters,
    )
