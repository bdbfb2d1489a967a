"""In-memory test doubles shared across the suite."""

import asyncio

from lexiqueue.domain.models import CardRecord
from lexiqueue.domain.ports import ReviewGateway


def make_word(word_id, term=None, category=None):
    word = {"_id": word_id, "term": term or f"term-{word_id}", "translation": f"tr-{word_id}"}
    if category is not None:
        word["category"] = category
    return word


def make_items(*word_ids, review=False):
    """Raw server items; review-mode items wrap the word with a progress id."""
    if review:
        return [{"progressId": f"p-{wid}", "word": make_word(wid)} for wid in word_ids]
    return [make_word(wid) for wid in word_ids]


def make_card(word_id, **kwargs):
    return CardRecord(key=word_id, word=make_word(word_id), **kwargs)


class FakeGateway(ReviewGateway):
    """
    Scripted in-memory gateway.

    `pages` are returned by successive list_queue calls (the last page repeats);
    `submit_error` makes every submit_grade raise; `hold` blocks list_queue
    until released.
    """

    def __init__(self, pages=None, session=None, submit_error=None, submit_response=None):
        self.pages = list(pages or [[]])
        self.session = session if session is not None else {}
        self.submit_error = submit_error
        self.submit_response = submit_response
        self.list_calls = []
        self.submissions = []
        self.hold: asyncio.Event | None = None
        self.list_error: Exception | None = None
        self.closed = False

    async def list_queue(self, mode, limit, category=None, reset_session=False):
        self.list_calls.append(
            {"mode": mode, "limit": limit, "category": category, "reset_session": reset_session}
        )
        if self.hold is not None:
            await self.hold.wait()
        if self.list_error is not None:
            raise self.list_error
        index = min(len(self.list_calls) - 1, len(self.pages) - 1)
        return {"items": list(self.pages[index]), "session": dict(self.session)}

    async def submit_grade(self, submission):
        self.submissions.append(submission)
        if self.submit_error is not None:
            raise self.submit_error
        if self.submit_response is not None:
            return self.submit_response
        return {"success": True, "session": dict(self.session)}

    async def aclose(self):
        self.closed = True
