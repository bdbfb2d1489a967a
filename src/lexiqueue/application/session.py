"""
Mutable state shared by the fetch coordinator and the grading controller.

One ReviewSession exists per engine. Both collaborators write through it, and
every write ends with `notify()` so subscribers (UI, server) see the change.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from lexiqueue.domain.models import GradeOutcome, SessionMeta, StatsSnapshot

from .queue_store import QueueStore
from .session_meta import DEFAULT_SESSION_META
from .stats_tracker import initial_stats

logger = logging.getLogger(__name__)

Listener = Callable[["ReviewSession"], None]


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    GRADING = "grading"
    COMPLETE = "complete"


@dataclass
class ReviewSession:
    """
    Session-scoped state for one (mode, category) pairing.

    Attributes:
        mode: "learn" or "review".
        limit: Page size requested from the server.
        category: Optional category filter.
        queue: The working set; head is the card being shown.
        generation: Bumped on every applied reset fetch. In-flight work started
            under an older generation must not touch the new session.
        active: Cleared by `close()`; late network results are discarded.
    """

    mode: str
    limit: int
    category: str | None = None
    queue: QueueStore = field(default_factory=QueueStore)
    stats: StatsSnapshot = field(default_factory=initial_stats)
    meta: SessionMeta = DEFAULT_SESSION_META
    last_result: GradeOutcome | None = None
    error: Exception | None = None
    loading: bool = False
    grading: bool = False
    loaded: bool = False
    generation: int = 0
    active: bool = True
    listeners: list[Listener] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.loading and not self.queue and self.stats.reviewed > 0

    @property
    def state(self) -> SessionState:
        if self.loading:
            return SessionState.LOADING
        if self.grading:
            return SessionState.GRADING
        if self.is_complete:
            return SessionState.COMPLETE
        if self.loaded:
            return SessionState.READY
        return SessionState.IDLE

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self.listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning(f"Session listener {listener!r} failed: {e}")
