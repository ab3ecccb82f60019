import asyncio

import pytest

from studioflow.ai.adapter.base import BaseLLMAdapter
from studioflow.ai.client import LLMClient
from studioflow.ai.errors import AIError
from studioflow.ai.models.common import GenerationChunk, MessageRole
from studioflow.ai.session import (
    ChatSession,
    SessionState,
    SessionStatus,
    cancel,
    complete,
    fail,
    receive_delta,
    start_send,
)
from studioflow.core.errors import ErrorKind, InvalidInputError


class HangingAdapter(BaseLLMAdapter):
    """Emits one chunk, then waits until cancelled."""

    def __init__(self):
        super().__init__(model="test-model", api_key="test-key-123")
        self.started = None

    async def generate(self, request):
        raise NotImplementedError

    async def stream(self, request, on_chunk):
        on_chunk(GenerationChunk(delta="par"))
        self.started.set()
        await asyncio.Event().wait()


class TestTransitions:
    def test_send(self):
        state = start_send(SessionState(), "hi")

        assert state.status == SessionStatus.THINKING
        assert len(state.messages) == 1
        assert state.messages[0].role == MessageRole.USER
        assert state.messages[0].content == "hi"

    def test_first_delta_starts_streaming(self):
        state = receive_delta(start_send(SessionState(), "hi"), "Hel")
        assert state.status == SessionStatus.STREAMING
        assert state.partial == "Hel"

    def test_complete_commits_partial(self):
        state = start_send(SessionState(), "hi")
        state = receive_delta(receive_delta(state, "Hel"), "lo")
        state = complete(state)

        assert state.status == SessionStatus.IDLE
        assert state.partial == ""
        assert [m.content for m in state.messages] == ["hi", "Hello"]
        assert state.messages[-1].role == MessageRole.ASSISTANT

    def test_complete_uses_fallback_text(self):
        state = complete(start_send(SessionState(), "hi"), "whole reply")
        assert state.messages[-1].content == "whole reply"

    def test_empty_reply_commits_nothing(self):
        state = complete(start_send(SessionState(), "hi"))
        assert len(state.messages) == 1
        assert state.status == SessionStatus.IDLE

    def test_fail_discards_partial(self):
        state = receive_delta(start_send(SessionState(), "hi"), "Hel")
        state = fail(state, "boom", ErrorKind.NETWORK)

        assert state.status == SessionStatus.ERROR
        assert state.partial == ""
        assert state.error == "boom"
        assert state.error_kind == ErrorKind.NETWORK
        assert len(state.messages) == 1

    def test_cancel_discards_partial(self):
        state = cancel(receive_delta(start_send(SessionState(), "hi"), "Hel"))
        assert state.status == SessionStatus.IDLE
        assert state.partial == ""
        assert len(state.messages) == 1

    def test_late_events_are_ignored(self):
        idle = SessionState()
        assert receive_delta(idle, "x") is idle
        assert complete(idle, "x") is idle

    def test_transitions_do_not_mutate(self):
        original = SessionState()
        start_send(original, "hi")
        assert original.messages == ()
        assert original.status == SessionStatus.IDLE


class TestChatSession:
    def test_two_chunk_stream(self, make_client):
        session = ChatSession(make_client(chunks=["Hel", "lo"]))
        statuses = []
        session.subscribe(lambda state: statuses.append(state.status))

        state = asyncio.run(session.send("hi"))

        assert state.status == SessionStatus.IDLE
        assert [m.content for m in state.messages] == ["hi", "Hello"]
        assert statuses == [
            SessionStatus.THINKING,
            SessionStatus.STREAMING,
            SessionStatus.STREAMING,
            SessionStatus.IDLE,
        ]

    def test_context_is_forwarded(self, make_client):
        client = make_client(chunks=["ok"])
        session = ChatSession(client, context="default context")

        asyncio.run(session.send("first"))
        asyncio.run(session.send("second", context="override"))

        assert client.adapter.requests[0].context == "default context"
        assert client.adapter.requests[1].context == "override"
        # history grows with each exchange
        assert len(client.adapter.requests[1].messages) == 3

    def test_failure(self, make_client):
        session = ChatSession(make_client(chunks=["Hel"], error=AIError("429 quota", ErrorKind.RATE_LIMIT)))

        state = asyncio.run(session.send("hi"))

        assert state.status == SessionStatus.ERROR
        assert state.error == "429 quota"
        assert state.error_kind == ErrorKind.RATE_LIMIT
        assert state.partial == ""
        assert len(state.messages) == 1

    def test_unexpected_exception_is_classified(self, make_client):
        session = ChatSession(make_client(error=RuntimeError("network unreachable")))

        state = asyncio.run(session.send("hi"))

        assert state.status == SessionStatus.ERROR
        assert state.error_kind == ErrorKind.NETWORK

    def test_retry_after_failure(self, make_client):
        client = make_client(error=AIError("boom"))
        session = ChatSession(client)
        asyncio.run(session.send("hi"))

        client.adapter.error = None
        client.adapter.chunks = ["ok"]
        state = asyncio.run(session.retry())

        assert state.status == SessionStatus.IDLE
        assert [m.content for m in state.messages] == ["hi", "ok"]

    def test_retry_after_success_resends(self, make_client):
        session = ChatSession(make_client(chunks=["ok"]))
        asyncio.run(session.send("hi"))

        state = asyncio.run(session.retry())

        assert [m.content for m in state.messages] == ["hi", "ok", "hi", "ok"]

    def test_retry_without_history(self, make_client):
        session = ChatSession(make_client())
        with pytest.raises(InvalidInputError):
            asyncio.run(session.retry())

    def test_blank_message_rejected(self, make_client):
        session = ChatSession(make_client())
        with pytest.raises(InvalidInputError):
            asyncio.run(session.send("   "))
        assert session.state.messages == ()

    def test_cancel_mid_stream(self):
        adapter = HangingAdapter()
        session = ChatSession(LLMClient(adapter))

        async def scenario():
            adapter.started = asyncio.Event()
            task = asyncio.ensure_future(session.send("hi"))
            await adapter.started.wait()
            assert session.state.status == SessionStatus.STREAMING
            assert session.state.partial == "par"
            assert session.state.is_busy

            with pytest.raises(InvalidInputError):
                await session.send("again")

            session.cancel()
            return await task

        state = asyncio.run(scenario())

        assert state.status == SessionStatus.IDLE
        assert state.partial == ""
        assert [m.content for m in state.messages] == ["hi"]

    def test_unsubscribe(self, make_client):
        session = ChatSession(make_client(chunks=["ok"]))
        seen = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()

        asyncio.run(session.send("hi"))

        assert seen == []

    def test_reset(self, make_client):
        session = ChatSession(make_client(chunks=["ok"]))
        asyncio.run(session.send("hi"))
        session.reset()
        assert session.messages == ()
