import pytest

from conftest import FlakyRemote
from eli5.models import DEFAULT_TITLE, Message, ReadingLevel
from eli5.persistence.session_store import SessionStore, derive_title


def user_msg(content, ts=0, msg_id="m1", level=ReadingLevel.CHILD):
    return Message(id=msg_id, role="user", content=content, timestamp=ts, level=level)


def is_recency_sorted(sessions):
    stamps = [s.last_updated for s in sessions]
    return stamps == sorted(stamps, reverse=True)


class TestDeriveTitle:
    def test_short_first_message_kept(self):
        assert derive_title(DEFAULT_TITLE, [user_msg("Explain black holes")]) == "Explain black holes"

    def test_exactly_thirty_chars_kept(self):
        text = "x" * 30
        assert derive_title(DEFAULT_TITLE, [user_msg(text)]) == text

    def test_long_first_message_clipped(self):
        text = "abcdefghijklmnopqrstuvwxyz012345678"
        assert len(text) == 35
        assert derive_title(DEFAULT_TITLE, [user_msg(text)]) == text[:27] + "..."

    def test_custom_title_untouched(self):
        assert derive_title("My notes", [user_msg("Explain black holes")]) == "My notes"

    def test_empty_messages_keep_default(self):
        assert derive_title(DEFAULT_TITLE, []) == DEFAULT_TITLE


class TestLoad:
    def test_load_orders_newest_first_and_activates_first(self, store, user, clock):
        first = store.create_session(user.id)
        clock.advance()
        second = store.create_session(user.id)

        fresh = SessionStore(store.remote, clock=clock)
        loaded = fresh.load(user.id)

        assert [s.id for s in loaded] == [second.id, first.id]
        assert fresh.active_session_id == second.id

    def test_load_empty_leaves_active_unset(self, store, user):
        assert store.load(user.id) == []
        assert store.active_session_id is None

    def test_load_failure_leaves_state_empty(self, remote, user, clock):
        store = SessionStore(FlakyRemote(remote, fail_on={"list_chats"}), clock=clock)
        assert store.load(user.id) == []
        assert store.sessions == []
        assert store.active_session_id is None


class TestCreate:
    def test_new_session_defaults(self, store, user, clock):
        session = store.create_session(user.id)

        assert session.title == DEFAULT_TITLE
        assert session.messages == []
        assert session.last_updated == clock.now
        assert store.sessions[0] is session
        assert store.active_session_id == session.id

    def test_ids_distinct_even_within_one_clock_tick(self, store, user):
        ids = [store.create_session(user.id).id for _ in range(25)]
        assert len(set(ids)) == len(ids)

    def test_ids_skip_ids_already_loaded(self, remote, user, clock):
        first = SessionStore(remote, clock=clock)
        existing = first.create_session(user.id)

        second = SessionStore(remote, clock=clock)
        second.load(user.id)
        created = second.create_session(user.id)

        assert created.id != existing.id

    def test_remote_failure_keeps_local_list_unchanged(self, flaky, store, user):
        kept = store.create_session(user.id)
        flaky.fail_on.add("insert_chat")

        assert store.create_session(user.id) is None
        assert [s.id for s in store.sessions] == [kept.id]
        assert store.active_session_id == kept.id


class TestDelete:
    def test_delete_then_load_never_returns_it(self, store, user, clock):
        doomed = store.create_session(user.id)
        clock.advance()
        store.create_session(user.id)

        assert store.delete_session(doomed.id) is True
        assert doomed.id not in [s.id for s in store.load(user.id)]

    def test_deleting_active_clears_selection(self, store, user, clock):
        store.create_session(user.id)
        clock.advance()
        active = store.create_session(user.id)

        store.delete_session(active.id)

        assert store.active_session_id is None
        assert len(store.sessions) == 1

    def test_deleting_other_keeps_selection(self, store, user, clock):
        other = store.create_session(user.id)
        clock.advance()
        active = store.create_session(user.id)

        store.delete_session(other.id)

        assert store.active_session_id == active.id

    def test_remote_failure_keeps_session(self, flaky, store, user):
        session = store.create_session(user.id)
        flaky.fail_on.add("delete_chat")

        assert store.delete_session(session.id) is False
        assert store.get(session.id) is session
        assert store.active_session_id == session.id


class TestRename:
    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_title_is_noop(self, flaky, store, user, blank):
        session = store.create_session(user.id)
        calls_before = len(flaky.calls)

        assert store.rename_session(session.id, blank) is False
        assert session.title == DEFAULT_TITLE
        assert len(flaky.calls) == calls_before

    def test_title_trimmed_and_persisted(self, store, user, clock):
        session = store.create_session(user.id)

        assert store.rename_session(session.id, "  Black holes  ") is True
        assert session.title == "Black holes"
        reloaded = SessionStore(store.remote, clock=clock).load(user.id)
        assert reloaded[0].title == "Black holes"

    def test_remote_failure_keeps_old_title(self, flaky, store, user):
        session = store.create_session(user.id)
        flaky.fail_on.add("update_chat")

        assert store.rename_session(session.id, "New name") is False
        assert session.title == DEFAULT_TITLE


class TestAppendMessages:
    def test_unknown_session_is_noop(self, flaky, store):
        assert store.append_messages("missing", [user_msg("hi")]) is False
        assert "update_chat" not in flaky.calls

    def test_title_from_first_message_survives_reload(self, store, user, clock):
        session = store.create_session(user.id)
        clock.advance()

        assert store.append_messages(session.id, [user_msg("Explain black holes")])

        reloaded = SessionStore(store.remote, clock=clock).load(user.id)
        assert reloaded[0].title == "Explain black holes"
        assert reloaded[0].messages[0].level == ReadingLevel.CHILD

    def test_long_first_message_clipped(self, store, user):
        session = store.create_session(user.id)
        text = "Why do cats purr when they are hap"
        text = text + "p" * (35 - len(text))

        store.append_messages(session.id, [user_msg(text)])

        assert session.title == text[:27] + "..."

    def test_title_only_derived_once(self, store, user):
        session = store.create_session(user.id)
        store.append_messages(session.id, [user_msg("First question")])
        store.append_messages(
            session.id,
            [user_msg("First question"), user_msg("Second question", msg_id="m2")],
        )
        assert session.title == "First question"

    def test_renamed_session_keeps_title(self, store, user):
        session = store.create_session(user.id)
        store.rename_session(session.id, "Custom")

        store.append_messages(session.id, [user_msg("Explain black holes")])

        assert session.title == "Custom"

    def test_whole_list_replaces_messages(self, store, user):
        session = store.create_session(user.id)
        store.append_messages(session.id, [user_msg("a"), user_msg("b", msg_id="m2")])
        store.append_messages(session.id, [user_msg("a")])
        assert [m.content for m in session.messages] == ["a"]

    def test_updated_session_moves_to_front(self, store, user, clock):
        first = store.create_session(user.id)
        clock.advance()
        second = store.create_session(user.id)
        assert [s.id for s in store.sessions] == [second.id, first.id]

        clock.advance()
        store.append_messages(first.id, [user_msg("Explain black holes")])

        assert [s.id for s in store.sessions] == [first.id, second.id]
        assert is_recency_sorted(store.sessions)

    def test_ties_keep_previous_relative_order(self, store, user, clock):
        older = store.create_session(user.id)
        newer = store.create_session(user.id)  # same clock tick as `older`
        clock.advance()
        third = store.create_session(user.id)
        clock.advance()

        store.append_messages(third.id, [user_msg("hi")])

        assert [s.id for s in store.sessions] == [third.id, newer.id, older.id]
        assert is_recency_sorted(store.sessions)

    def test_remote_failure_leaves_local_state(self, flaky, store, user, clock):
        first = store.create_session(user.id)
        clock.advance()
        second = store.create_session(user.id)
        before = (list(first.messages), first.title, first.last_updated)
        flaky.fail_on.add("update_chat")
        clock.advance()

        assert store.append_messages(first.id, [user_msg("lost")]) is False

        assert (first.messages, first.title, first.last_updated) == before
        assert [s.id for s in store.sessions] == [second.id, first.id]

    def test_reentrant_append_for_same_session_rejected(self, remote, user, clock):
        results = []

        class ReentrantRemote(FlakyRemote):
            def update_chat(self, chat_id, **fields):
                if not results:
                    results.append(
                        store.append_messages(chat_id, [user_msg("stale", msg_id="x")])
                    )
                return self.inner.update_chat(chat_id, **fields)

        store = SessionStore(ReentrantRemote(remote), clock=clock)
        session = store.create_session(user.id)

        assert store.append_messages(session.id, [user_msg("first")]) is True
        assert results == [False]
        assert [m.content for m in session.messages] == ["first"]
