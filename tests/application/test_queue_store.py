import pytest

from fakes import make_card
from lexiqueue.application.queue_store import QueueStore
from lexiqueue.domain.rating import Rating


def test_merge_appends_new_cards_in_order():
    store = QueueStore()
    added = store.merge([make_card("a"), make_card("b")])

    assert added == 2
    assert store.keys() == ["a", "b"]
    assert store.head.key == "a"


def test_merge_is_idempotent_for_known_keys():
    store = QueueStore([make_card("a"), make_card("b")])
    requeued = store.pop_front().requeued(Rating.AGAIN)
    store.insert_at(requeued, 1)

    added = store.merge([make_card("b"), make_card("a"), make_card("c")])

    assert added == 1
    assert store.keys() == ["b", "a", "c"]
    # Existing entry untouched by the re-fetch
    assert store.snapshot()[1].session_repetition == 1


def test_merge_deduplicates_within_one_batch():
    store = QueueStore()
    store.merge([make_card("a"), make_card("a"), make_card("b")])
    assert store.keys() == ["a", "b"]


def test_merge_resets_session_counters_of_new_cards():
    store = QueueStore()
    store.merge([make_card("a", session_repetition=4, last_rating=Rating.HARD)])
    card = store.head
    assert card.session_repetition == 0
    assert card.last_rating is None


def test_reset_merge_discards_existing_entries():
    store = QueueStore([make_card("a"), make_card("b")])
    store.merge([make_card("c")], reset=True)
    assert store.keys() == ["c"]


@pytest.mark.parametrize(
    "batches",
    [
        [["a", "b"], ["b", "c"], ["c", "a", "d"]],
        [["x"], ["x"], ["x", "y"], []],
    ],
)
def test_keys_stay_unique_across_merge_sequences(batches):
    store = QueueStore()
    for batch in batches:
        store.merge([make_card(k) for k in batch])
        keys = store.keys()
        assert len(keys) == len(set(keys))


def test_pop_front_on_empty_store_returns_none():
    store = QueueStore()
    assert store.pop_front() is None
    assert len(store) == 0


def test_insert_at_clamps_offset():
    store = QueueStore([make_card("a"), make_card("b")])
    assert store.insert_at(make_card("z"), 10) == 2
    assert store.insert_at(make_card("y"), -3) == 0
    assert store.keys() == ["y", "a", "b", "z"]


def test_inserting_duplicate_key_fails_fast():
    store = QueueStore([make_card("a")])
    with pytest.raises(AssertionError):
        store.insert_at(make_card("a"), 0)


def test_remove_and_push_front():
    store = QueueStore([make_card("a"), make_card("b")])
    removed = store.remove("b")
    assert removed.key == "b"
    assert store.remove("missing") is None

    store.push_front(removed)
    assert store.keys() == ["b", "a"]
    assert "a" in store
