"""
Tests for the conversation store.
"""

from store import WELCOME_ID, ConversationStore, Role, Turn, welcome_turn


def test_starts_with_welcome_turn():
    store = ConversationStore()
    turns = store.snapshot()
    assert len(turns) == 1
    assert turns[0].id == WELCOME_ID
    assert turns[0].role is Role.MODEL


def test_append_preserves_order_and_duplicates():
    """Identical texts are distinct turns, kept in append order."""
    store = ConversationStore()
    texts = ["2x = 4", "x = 2?", "2x = 4", "x = 2?"]
    for i, text in enumerate(texts):
        store.append(Role.USER if i % 2 == 0 else Role.MODEL, text)

    turns = store.snapshot(include_welcome=False)
    assert [t.text for t in turns] == texts
    assert len({t.id for t in turns}) == 4


def test_append_assigns_id_and_timestamp():
    store = ConversationStore()
    turn = store.append(Role.USER, "hello")
    assert turn.id and turn.id != WELCOME_ID
    assert turn.created_at.tzinfo is not None


def test_append_keeps_given_turn():
    store = ConversationStore()
    turn = Turn(role=Role.MODEL, text="ok", id="fixed")
    assert store.append(turn) is turn
    assert store.snapshot()[-1].id == "fixed"


def test_snapshot_excludes_welcome_for_requests():
    store = ConversationStore()
    store.append(Role.USER, "help")
    assert [t.text for t in store.snapshot(include_welcome=False)] == ["help"]
    assert len(store.snapshot()) == 2


def test_snapshot_is_a_copy():
    store = ConversationStore()
    before = store.snapshot()
    store.append(Role.USER, "later")
    assert len(before) == 1
    assert len(store) == 2


def test_replace_all():
    store = ConversationStore()
    store.append(Role.USER, "a")
    store.append(Role.MODEL, "b")
    store.replace_all([welcome_turn()])
    assert [t.id for t in store] == [WELCOME_ID]
