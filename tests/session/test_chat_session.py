"""
Tests for ChatSession and the auth providers.

Tests cover:
- Streaming replies into the persistent surface
- Validation feedback for self-correction
- Cancellation keeping finalized updates
- Snapshot and restore
- Auth provider behavior
"""

import asyncio
import json

import pytest

from genui.a2ui.component_catalog import build_default_catalog
from genui.common.exceptions import StreamStateError
from genui.config.settings import GenUIRuntimeSettings
from genui.session import (
    AnonymousAuthProvider,
    CallableAuthProvider,
    ChatSession,
    SessionSnapshot,
    StaticAuthProvider,
)
from genui.stream.stream_source import IterableTextStream

FENCE = "`" * 3


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def session():
    return ChatSession(session_id="ses_test", catalog=build_default_catalog(), settings=GenUIRuntimeSettings())


def update(*components):
    return {"surfaceUpdate": {"components": list(components)}}


def markdown(component_id, content):
    return {"id": component_id, "component": {"Markdown": {"data": {"content": content}}}}


def fenced(message):
    return f"{FENCE}json\n{json.dumps(message)}\n{FENCE}\n"


def chunked(text, size=7):
    return [text[i:i + size] for i in range(0, len(text), size)]


# ============================================================
# Reply Tests
# ============================================================

class TestReplies:
    """Assistant replies update the surface once per block."""

    def test_user_message_recorded(self, session):
        message = session.add_user_message("show me a timeline")
        assert message.role == "user"
        assert message.id.startswith("msg_")
        assert session.messages == [message]

    def test_manual_feed_and_complete(self, session):
        text = "Sure.\n" + fenced(update(markdown("m1", "one"))) + "Done"
        parser = session.begin_assistant_message("msg_fixed")
        for chunk in chunked(text):
            session.feed(parser, chunk)
        assert session.surface.ids() == ["m1"]

        reply = session.complete_assistant_message(parser)
        assert reply.id == "msg_fixed"
        assert reply.role == "assistant"
        assert reply.content == text
        assert parser.is_finished

    def test_tail_block_absorbed_on_complete(self, session):
        parser = session.begin_assistant_message()
        session.feed(parser, f"{FENCE}json\n{json.dumps(update(markdown('m1', 'x')))}\n{FENCE}")
        assert session.surface.ids() == []
        session.complete_assistant_message(parser)
        assert session.surface.ids() == ["m1"]

    def test_surface_persists_across_replies(self, session):
        for text in (fenced(update(markdown("a", "1"), markdown("b", "2"))), fenced(update(markdown("a", "3")))):
            parser = session.begin_assistant_message()
            session.feed(parser, text)
            session.complete_assistant_message(parser)
        assert session.surface.ids() == ["a", "b"]
        assert session.surface.get("a").data == {"content": "3"}
        assert [node.component_id for node in session.render().children] == ["a", "b"]

    def test_parser_from_elsewhere_rejected(self, session):
        parser = session.begin_assistant_message()
        session.complete_assistant_message(parser)
        with pytest.raises(StreamStateError):
            session.feed(parser, "more")
        with pytest.raises(StreamStateError):
            session.complete_assistant_message(parser)

    def test_invalid_update_produces_feedback(self, session):
        bad = {"id": "m1", "component": {"Markdown": {"data": {"content": 5}}}}
        parser = session.begin_assistant_message()
        session.feed(parser, fenced(update(bad)))
        session.complete_assistant_message(parser)
        assert session.surface.ids() == []
        feedback = session.take_feedback()
        assert "m1 (Markdown)" in feedback
        assert session.take_feedback() == ""

    def test_cancel_keeps_finalized_updates(self, session):
        parser = session.begin_assistant_message()
        session.feed(parser, "Intro\n" + fenced(update(markdown("m1", "x"))) + f"Next\n{FENCE}json\n{{\"surf")
        reply = session.cancel_assistant_message(parser)
        assert session.surface.ids() == ["m1"]
        assert reply.content.endswith(f"{FENCE}\nNext\n")
        assert parser.is_cancelled

    def test_reset_surface(self, session):
        parser = session.begin_assistant_message()
        session.feed(parser, fenced(update(markdown("m1", "x"))))
        session.reset_surface()
        assert len(session.surface) == 0


# ============================================================
# Async Streaming Tests
# ============================================================

class TestStreaming:
    """stream_assistant_message over async sources."""

    @pytest.mark.asyncio
    async def test_stream_reply(self, session):
        text = "Intro\n" + fenced(update(markdown("m1", "x"), markdown("m2", "y"))) + "Outro"
        reply = await session.stream_assistant_message(IterableTextStream(chunked(text)))
        assert reply.content == text
        assert session.surface.ids() == ["m1", "m2"]
        assert session.messages[-1] is reply

    @pytest.mark.asyncio
    async def test_stream_failure_records_partial_reply(self, session):
        async def source():
            yield fenced(update(markdown("m1", "x")))
            yield "half a sentence"
            raise ConnectionError("dropped")

        with pytest.raises(ConnectionError):
            await session.stream_assistant_message(source())
        assert session.surface.ids() == ["m1"]
        assert session.messages[-1].role == "assistant"
        assert "half a sentence" not in session.messages[-1].content

    @pytest.mark.asyncio
    async def test_task_cancellation(self, session):
        text = fenced(update(markdown("m1", "x")))
        chunks = chunked(text) + ["tail "] * 200
        task = asyncio.create_task(session.stream_assistant_message(IterableTextStream(chunks, delay=0.01)))
        while not session.surface.ids():
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.surface.ids() == ["m1"]
        assert session.messages[-1].content == text


# ============================================================
# Snapshot Tests
# ============================================================

class TestSnapshots:
    """Snapshot, serialize, restore."""

    def test_round_trip(self, session):
        session.add_user_message("hi")
        parser = session.begin_assistant_message()
        session.feed(parser, fenced(update(markdown("m1", "x"))))
        session.complete_assistant_message(parser)

        snapshot = session.snapshot()
        restored = SessionSnapshot.from_dict(json.loads(json.dumps(snapshot.to_dict())))
        assert restored == snapshot

        fresh = ChatSession(catalog=session.catalog)
        fresh.restore(restored)
        assert fresh.surface == session.surface
        assert [message.content for message in fresh.messages] == [message.content for message in session.messages]

    def test_restore_cancels_in_flight_replies(self, session):
        parser = session.begin_assistant_message()
        session.feed(parser, "partial")
        session.restore(SessionSnapshot())
        assert parser.is_cancelled
        assert session.messages == []
        with pytest.raises(StreamStateError):
            session.complete_assistant_message(parser)

    def test_empty_snapshot_from_none(self):
        assert SessionSnapshot.from_dict(None) == SessionSnapshot()


# ============================================================
# Auth Provider Tests
# ============================================================

class TestAuthProviders:

    def test_static(self):
        assert StaticAuthProvider(" user-1 ").current_user_id() == "user-1"
        with pytest.raises(ValueError):
            StaticAuthProvider("  ")

    def test_anonymous(self):
        assert AnonymousAuthProvider().current_user_id() is None

    def test_callable(self):
        current = {"user": " ada "}
        provider = CallableAuthProvider(lambda: current["user"])
        assert provider.current_user_id() == "ada"
        current["user"] = ""
        assert provider.current_user_id() is None
        current["user"] = None
        assert provider.current_user_id() is None
