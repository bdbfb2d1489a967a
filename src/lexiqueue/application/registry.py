"""Per-(mode, category) engine registry.

Learn and review sessions, and sessions for different categories, each get
their own engine; nothing is shared between them.
"""

import logging
from collections.abc import Callable

from lexiqueue.domain.ports import ReviewGateway

from .engine import ReviewEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str, str | None], ReviewEngine]


class EngineRegistry:
    def __init__(self, factory: EngineFactory, gateway: ReviewGateway | None = None):
        """
        Args:
            factory: Builds the engine for a (mode, category) pair.
            gateway: Transport shared by the engines, closed by `aclose()`.
        """
        self._factory = factory
        self.gateway = gateway
        self._engines: dict[tuple[str, str | None], ReviewEngine] = {}

    def __len__(self) -> int:
        return len(self._engines)

    def get(self, mode: str, category: str | None = None) -> ReviewEngine:
        key = (mode, category or None)
        engine = self._engines.get(key)
        if engine is None or engine.closed:
            engine = self._factory(mode, category or None)
            self._engines[key] = engine
            logger.info(f"Created engine for mode={mode} category={category}")
        return engine

    def close(self, mode: str, category: str | None = None) -> None:
        engine = self._engines.pop((mode, category or None), None)
        if engine is not None:
            engine.close()

    def close_all(self) -> None:
        for engine in self._engines.values():
            engine.close()
        self._engines.clear()

    async def aclose(self) -> None:
        """Close every engine, then the shared gateway."""
        self.close_all()
        if self.gateway is not None:
            await self.gateway.aclose()
