"""Tests for view resolution, navigation and the pin board."""

from dataclasses import replace

import pytest

from aichat_workspace.core import Mode, Outcome
from aichat_workspace.router import initial_state
from aichat_workspace.store import ConversationRegistry, MessageStore
from aichat_workspace.views import (
    display_number,
    pinned,
    resolve_target,
    resolve_view,
    summarize,
)


@pytest.fixture
def store(sample_messages):
    store = MessageStore()
    for msg in sample_messages:
        store.append(msg)
    return store


@pytest.fixture
def registry():
    ids = iter(["q1", "q2"])
    registry = ConversationRegistry(id_factory=lambda: next(ids))
    registry.create("m1", "What is X?", "General")
    registry.create("m4", "What is Y?", "Research")
    return registry


@pytest.fixture
def state():
    return initial_state("General")


class TestResolveView:
    def test_new_chat_is_empty(self, state, store, registry):
        assert resolve_view(state, store, registry) == []

    def test_all_history_shows_everything(self, state, store, registry):
        history = replace(state, mode=Mode.ALL_HISTORY)
        assert [m.id for m in resolve_view(history, store, registry)] == [
            "m1", "m2", "m3", "m4", "m5",
        ]

    def test_active_conversation_filters_by_tag(self, state, store, registry):
        active = replace(state, mode=Mode.ACTIVE_CONVERSATION, conversation_id="q2")
        assert [m.id for m in resolve_view(active, store, registry)] == ["m4", "m5"]

    def test_deleted_conversation_shows_nothing(self, state, store, registry):
        registry.delete("q1")
        active = replace(state, mode=Mode.ACTIVE_CONVERSATION, conversation_id="q1")
        assert resolve_view(active, store, registry) == []

    def test_does_not_mutate_store(self, state, store, registry):
        before = store.all()
        history = replace(state, mode=Mode.ALL_HISTORY)
        view = resolve_view(history, store, registry)
        view.clear()
        assert store.all() == before


class TestResolveTarget:
    def test_found_at_position(self, store):
        view = store.all()
        for k, msg in enumerate(view):
            target = resolve_target(view, msg.id)
            assert target.outcome is Outcome.OK
            assert target.index == k

    def test_not_in_current_view(self, store):
        view = [m for m in store.all() if m.conversation_id == "q2"]
        target = resolve_target(view, "m1")
        assert target.outcome is Outcome.NOT_FOUND
        assert target.index is None

    def test_display_number_is_one_based(self, store):
        view = [m for m in store.all() if m.conversation_id == "q2"]
        assert display_number(view, "m5") == 2
        assert display_number(view, "m1") is None


class TestPinBoard:
    def test_independent_of_mode(self, store):
        store.update_flags("m2", pinned=True)
        store.update_flags("m5", pinned=True)
        assert [m.id for m in pinned(store)] == ["m2", "m5"]

    def test_empty_by_default(self, store):
        assert pinned(store) == []


class TestSummary:
    def test_user_messages_only(self, store):
        assert [m.id for m in summarize(store.all())] == ["m1", "m3", "m4"]

    def test_limit(self, store):
        assert [m.id for m in summarize(store.all(), limit=1)] == ["m1"]
