"""Tests for domain/session.py — per-user ABSENT/PRESENT state machine."""

import pytest

from hearken.config import SessionConfig
from hearken.domain.dispatcher import Dispatcher
from hearken.domain.session import Session, SessionHandlers, UserTable


def _tracing_handlers():
    """Handlers that record (handler, user) pairs instead of replying."""
    trace = []
    handlers = {
        "greeting": lambda res: trace.append(("greeting", res.user_id)),
        "converse": lambda res: trace.append(("converse", res.user_id)),
        "farewell": lambda res: trace.append(("farewell", res.user_id)),
    }
    return trace, handlers


class TestStateMachine:
    @pytest.mark.asyncio
    async def test_single_user_lifecycle(self, bot, transport):
        trace, handlers = _tracing_handlers()
        bot.session(r"^join$", r"^leave$", handlers)

        for text in ["join", "hello", "leave", "hello"]:
            await transport.say("U1", text)

        assert trace == [
            ("greeting", "U1"),
            ("converse", "U1"),
            ("farewell", "U1"),
        ]

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, bot, transport):
        trace, handlers = _tracing_handlers()
        bot.session(r"^join$", r"^leave$", handlers)

        await transport.say("U1", "join")
        await transport.say("U2", "join")
        await transport.say("U1", "leave")
        await transport.say("U2", "hi")

        assert trace == [
            ("greeting", "U1"),
            ("greeting", "U2"),
            ("farewell", "U1"),
            ("converse", "U2"),
        ]

    @pytest.mark.asyncio
    async def test_absent_user_gets_no_conversation(self, bot, transport):
        trace, handlers = _tracing_handlers()
        bot.session(r"^join$", r"^leave$", handlers)

        await transport.say("U1", "hello")

        assert trace == []

    @pytest.mark.asyncio
    async def test_user_table_tracks_presence(self, bot, transport):
        trace, handlers = _tracing_handlers()
        session = bot.session(r"^join$", r"^leave$", handlers)

        await transport.say("U1", "join")
        assert "U1" in session.users
        assert session.users.get("U1") == "alice"

        await transport.say("U1", "leave")
        assert "U1" not in session.users
        assert len(session.users) == 0

    @pytest.mark.asyncio
    async def test_sessions_do_not_share_tables(self, bot, transport):
        first_trace, first = _tracing_handlers()
        second_trace, second = _tracing_handlers()
        bot.session(r"^join$", r"^leave$", first)
        bot.session(r"^enter$", r"^exit$", second)

        await transport.say("U1", "join")
        await transport.say("U1", "chat")

        assert first_trace == [("greeting", "U1"), ("converse", "U1")]
        assert second_trace == []


class TestDisposal:
    @pytest.mark.asyncio
    async def test_dispose_stops_all_three_listeners(self, bot, transport):
        trace, handlers = _tracing_handlers()
        session = bot.session(r"^join$", r"^leave$", handlers)

        await transport.say("U1", "join")
        bot.ignore(session)

        await transport.say("U1", "hello")
        await transport.say("U1", "leave")
        await transport.say("U2", "join")

        assert trace == [("greeting", "U1")]
        assert session.disposed is True
        assert session.summon.disposed
        assert session.converse.disposed
        assert session.dismiss.disposed

    def test_children_released_in_fixed_order(self, bot):
        session = bot.session(r"^join$", r"^leave$")
        assert session.children == [session.summon, session.converse, session.dismiss]

    def test_dispose_is_idempotent(self, bot):
        session = bot.session(r"^join$", r"^leave$")
        session.dispose()
        session.dispose()
        assert session.disposed is True

    def test_session_handles_are_in_registry(self, bot):
        session = bot.session(r"^join$", r"^leave$")
        for handle in (session.summon, session.converse, session.dismiss):
            assert bot.registry.get(handle.id) is handle


class TestDefaultHandlers:
    @pytest.mark.asyncio
    async def test_salutations_use_sender_name(self, bot, transport):
        bot.session(r"^join$", r"^leave$")

        for text in ["join", "hello", "leave"]:
            await transport.say("U1", text)

        assert transport.texts == ["Hello, alice!", "Whatever, alice!", "Bye, alice!"]
        assert all(channel == "C100" for channel, _ in transport.sent)

    @pytest.mark.asyncio
    async def test_unknown_sender_falls_back(self, bot, transport):
        bot.session(r"^join$", r"^leave$")

        await transport.say("U404", "join")

        assert transport.texts == ["Hello, Buddy!"]

    @pytest.mark.asyncio
    async def test_phrases_come_from_config(self, transport):
        config = SessionConfig(fallback_name="friend", greeting_phrase="Hey")
        bot = Dispatcher(transport, session_config=config)
        bot.session(r"^join$", r"^leave$")

        await transport.say("U404", "join")

        assert transport.texts == ["Hey, friend!"]

    @pytest.mark.asyncio
    async def test_partial_override_keeps_other_defaults(self, bot, transport):
        async def custom_greeting(res):
            await res.send("welcome aboard")

        bot.session(r"^join$", r"^leave$", {"greeting": custom_greeting})

        await transport.say("U2", "join")
        await transport.say("U2", "leave")

        assert transport.texts == ["welcome aboard", "Bye, bob!"]


class TestHandlerConfig:
    def test_unknown_key_rejected(self, bot):
        with pytest.raises(ValueError, match="salute"):
            bot.session(r"^join$", r"^leave$", {"salute": lambda res: None})

    def test_non_callable_rejected(self, bot):
        with pytest.raises(TypeError):
            bot.session(r"^join$", r"^leave$", {"greeting": "hi"})

    def test_resolve_fills_defaults(self):
        greeting = lambda res: None
        resolved = SessionHandlers.resolve(SessionHandlers(greeting=greeting))
        assert resolved.greeting is greeting
        assert callable(resolved.converse)
        assert callable(resolved.farewell)

    def test_resolve_none(self):
        resolved = SessionHandlers.resolve(None)
        assert all(callable(h) for h in (resolved.greeting, resolved.converse, resolved.farewell))


class TestHandlerErrors:
    @pytest.mark.asyncio
    async def test_failing_converse_leaves_dismiss_working(self, bot, transport):
        trace = []

        def converse(res):
            raise RuntimeError("chatty failure")

        session = bot.session(r"^join$", r"^leave$", {
            "greeting": lambda res: trace.append("greeting"),
            "converse": converse,
            "farewell": lambda res: trace.append("farewell"),
        })

        await transport.say("U1", "join")
        await transport.say("U1", "hello")
        await transport.say("U1", "leave")

        assert trace == ["greeting", "farewell"]
        assert session.converse.disposed is True
        assert session.dismiss.disposed is False


class TestUserTable:
    def test_enter_and_leave(self):
        table = UserTable()
        table.enter("U1", "alice")
        assert "U1" in table
        table.leave("U1")
        assert "U1" not in table

    def test_presence_without_name(self):
        table = UserTable()
        table.enter("U1")
        assert "U1" in table
        assert table.get("U1") is None

    def test_leave_absent_user_is_noop(self):
        table = UserTable()
        table.leave("nobody")
        assert len(table) == 0

    def test_missing_user_id_ignored(self):
        table = UserTable()
        table.enter(None, "ghost")
        assert len(table) == 0

    def test_snapshot_is_a_copy(self):
        table = UserTable()
        table.enter("U1", "alice")
        snap = table.snapshot()
        snap.clear()
        assert "U1" in table


def test_session_is_composite_of_listeners(bot):
    session = bot.session(r"^join$", r"^leave$")
    assert isinstance(session, Session)
    assert "active" in repr(session)


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_marks_session_disposed(self, bot):
        session = bot.session(r"^join$", r"^leave$")
        await bot.logout()
        assert session.disposed is True

    def test_session_disposed_once_all_children_are(self, bot):
        session = bot.session(r"^join$", r"^leave$")
        session.summon.dispose()
        assert session.disposed is False
        session.converse.dispose()
        session.dismiss.dispose()
        assert session.disposed is True
