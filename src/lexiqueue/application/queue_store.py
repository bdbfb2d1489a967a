"""
Ordered, de-duplicated working set of cards for one session.

The head of the store is the card currently shown. The store is the single
writable copy of the queue: the fetch coordinator and the grading controller
hold a reference to the same instance, so async callbacks always read the
current order.
"""

import logging
from collections.abc import Iterable, Iterator

from lexiqueue.domain.models import CardRecord

logger = logging.getLogger(__name__)


class QueueStore:
    """Ordered sequence of CardRecord, unique by key. Front = next to show."""

    def __init__(self, cards: Iterable[CardRecord] = ()):
        self._cards: list[CardRecord] = []
        self.merge(cards, reset=True)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[CardRecord]:
        return iter(list(self._cards))

    def __bool__(self) -> bool:
        return bool(self._cards)

    def __contains__(self, key: object) -> bool:
        return any(card.key == key for card in self._cards)

    @property
    def head(self) -> CardRecord | None:
        return self._cards[0] if self._cards else None

    def keys(self) -> list[str]:
        return [card.key for card in self._cards]

    def snapshot(self) -> tuple[CardRecord, ...]:
        return tuple(self._cards)

    def merge(self, incoming: Iterable[CardRecord], reset: bool = False) -> int:
        """
        Merge fetched cards into the queue.

        Args:
            incoming: Cards in server order.
            reset: Discard existing entries first.

        Returns:
            Number of cards appended.

        Cards whose key is already queued are left untouched, so re-fetching
        the same page is idempotent. New cards are appended after retained ones.
        """
        if reset:
            self._cards = []

        existing = set(self.keys())
        added = 0
        for card in incoming:
            if card.key in existing:
                continue
            self._cards.append(card.fresh())
            existing.add(card.key)
            added += 1

        self._check_unique()
        logger.debug(f"Merged {added} cards (reset={reset}, size={len(self._cards)})")
        return added

    def pop_front(self) -> CardRecord | None:
        if not self._cards:
            return None
        return self._cards.pop(0)

    def insert_at(self, card: CardRecord, offset: int) -> int:
        """
        Insert a card at `offset`, clamped to [0, len(store)].

        Returns:
            The index the card landed at.
        """
        assert card.key not in self, f"Duplicate card key in queue: {card.key}"
        index = min(max(offset, 0), len(self._cards))
        self._cards.insert(index, card)
        return index

    def push_front(self, card: CardRecord) -> None:
        self.insert_at(card, 0)

    def remove(self, key: str) -> CardRecord | None:
        """Remove the card with `key`, if queued."""
        for index, card in enumerate(self._cards):
            if card.key == key:
                return self._cards.pop(index)
        return None

    def clear(self) -> None:
        self._cards = []

    def _check_unique(self) -> None:
        keys = self.keys()
        assert len(keys) == len(set(keys)), "QueueStore contains duplicate keys"
