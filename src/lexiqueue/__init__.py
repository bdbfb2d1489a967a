"""lexiqueue: spaced-repetition review queue engine for a vocabulary trainer."""

from lexiqueue.consts import VERSION

__version__ = VERSION
