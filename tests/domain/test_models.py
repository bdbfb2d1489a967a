import pytest

from lexiqueue.domain.models import (
    CardRecord,
    GradeSubmission,
    SessionMeta,
    StatsSnapshot,
)
from lexiqueue.domain.rating import Rating, ResultKind


def test_review_item_uses_progress_id_as_key():
    item = {
        "progressId": "p1",
        "word": {"_id": "w1", "term": "ev", "category": {"_id": "c9", "name": "Home"}},
    }
    card = CardRecord.from_raw(item)

    assert card.key == "p1"
    assert card.progress_id == "p1"
    assert card.word_id == "w1"
    assert card.category_id == "c9"
    assert card.term == "ev"
    assert card.session_repetition == 0
    assert card.last_rating is None


def test_learn_item_falls_back_to_word_id():
    card = CardRecord.from_raw({"_id": "w2", "term": "kedi", "category": "c1"})

    assert card.key == "w2"
    assert card.progress_id is None
    assert card.word_id == "w2"
    assert card.category_id == "c1"


def test_wrapped_item_without_progress_id_uses_item_id():
    card = CardRecord.from_raw({"_id": "prog-7", "word": {"id": 42}})
    assert card.key == "prog-7"
    assert card.progress_id == "prog-7"
    assert card.word_id == "42"


def test_category_on_wrapping_item_is_used_when_word_has_none():
    card = CardRecord.from_raw(
        {"progressId": "p1", "word": {"_id": "w1"}, "category": {"_id": "c3"}}
    )
    assert card.category_id == "c3"


def test_item_without_identifier_is_rejected():
    with pytest.raises(ValueError):
        CardRecord.from_raw({"term": "anonymous"})
    with pytest.raises(ValueError):
        CardRecord.from_raw("w1")


def test_requeued_increments_repetition_and_records_rating():
    card = CardRecord(key="k", word={"_id": "w"})
    again = card.requeued(Rating.AGAIN).requeued(Rating.HARD)

    assert again.session_repetition == 2
    assert again.last_rating is Rating.HARD
    assert card.session_repetition == 0
    assert again.fresh().session_repetition == 0


def test_negative_stats_fail_fast():
    with pytest.raises(AssertionError):
        StatsSnapshot(reviewed=-1)


def test_session_meta_requires_max_combo_at_least_combo():
    with pytest.raises(AssertionError):
        SessionMeta(combo=3, max_combo=1)


def test_session_meta_to_dict_uses_wire_keys():
    meta = SessionMeta(xp_earned=20, combo=2, max_combo=4, unlocked_decks=("a",))
    d = meta.to_dict()
    assert d["xpEarned"] == 20
    assert d["maxCombo"] == 4
    assert d["unlockedDecks"] == ["a"]


def test_grade_submission_omits_missing_fields():
    submission = GradeSubmission(word_id="w1", result=ResultKind.FAILURE, duration_ms=1200)
    assert submission.to_payload() == {
        "wordId": "w1",
        "result": "failure",
        "durationMs": 1200,
    }
