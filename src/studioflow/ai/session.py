"""Conversation state machine and its asyncio driver.

State moves ``idle -> thinking -> streaming -> idle`` on success and
``thinking|streaming -> error`` on failure. The transition functions are
pure: each takes a SessionState and returns a new one. ``ChatSession``
owns the in-flight request and feeds provider events through them.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..core.errors import ErrorKind, InvalidInputError
from .client import LLMClient
from .errors import classify_error
from .models.common import ChatMessage, MessageRole

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    THINKING = "thinking"
    STREAMING = "streaming"
    ERROR = "error"


ACTIVE_STATUSES = (SessionStatus.THINKING, SessionStatus.STREAMING)


@dataclass(frozen=True)
class SessionState:
    """Snapshot of one conversation."""
    messages: Tuple[ChatMessage, ...] = ()
    status: SessionStatus = SessionStatus.IDLE
    partial: str = ""
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def is_busy(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def last_user_message(self) -> Optional[ChatMessage]:
        for message in reversed(self.messages):
            if message.role == MessageRole.USER:
                return message
        return None


def start_send(state: SessionState, content: str) -> SessionState:
    """Append a user message and wait for the reply."""
    message = ChatMessage(role=MessageRole.USER, content=content)
    return replace(
        state,
        messages=state.messages + (message,),
        status=SessionStatus.THINKING,
        partial="",
        error=None,
        error_kind=None,
    )


def start_retry(state: SessionState) -> SessionState:
    """Wait for a new reply to the existing history."""
    return replace(state, status=SessionStatus.THINKING, partial="", error=None, error_kind=None)


def receive_delta(state: SessionState, delta: str) -> SessionState:
    # Late deltas after cancel or failure are dropped
    if not state.is_busy:
        return state
    return replace(state, partial=state.partial + delta, status=SessionStatus.STREAMING)


def complete(state: SessionState, fallback_text: str = "") -> SessionState:
    """Commit the accumulated reply as an assistant message and go idle.

    ``fallback_text`` is used when nothing was streamed. An empty reply
    commits no message.
    """
    if not state.is_busy:
        return state
    text = state.partial or fallback_text
    messages = state.messages
    if text:
        messages = messages + (ChatMessage(role=MessageRole.ASSISTANT, content=text),)
    return replace(state, messages=messages, status=SessionStatus.IDLE, partial="")


def fail(state: SessionState, message: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> SessionState:
    """Record the error and discard any partial reply."""
    return replace(state, status=SessionStatus.ERROR, partial="", error=message, error_kind=kind)


def cancel(state: SessionState) -> SessionState:
    """Back to idle without committing partial text."""
    return replace(state, status=SessionStatus.IDLE, partial="", error=None, error_kind=None)


StateObserver = Callable[[SessionState], None]


class ChatSession:
    """Drives a SessionState through one LLMClient.

    Observers registered with ``subscribe`` are called with every new
    state. Only one reply may be in flight at a time.
    """

    def __init__(self, client: LLMClient, context: Optional[str] = None,
                 state: Optional[SessionState] = None):
        self.client = client
        self.context = context
        self.state = state or SessionState()
        self._observers: List[StateObserver] = []
        self._task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register ``observer``; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _apply(self, new_state: SessionState) -> None:
        if new_state is self.state:
            return
        self.state = new_state
        for observer in list(self._observers):
            observer(new_state)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return self.state.messages

    async def send(self, content: str, context: Optional[str] = None) -> SessionState:
        """Send a user message and wait for the reply to finish, fail or be cancelled.

        Raises:
            InvalidInputError: For blank content or while a reply is in flight.
        """
        content = (content or "").strip()
        if not content:
            raise InvalidInputError("Message cannot be empty")
        self._ensure_not_busy()

        self._apply(start_send(self.state, content))
        return await self._run(context)

    async def retry(self, context: Optional[str] = None) -> SessionState:
        """Re-send the last user message.

        A failed or cancelled exchange is re-run against the same history;
        after a successful reply the last user message is sent again.
        """
        self._ensure_not_busy()
        last = self.state.last_user_message()
        if last is None:
            raise InvalidInputError("Nothing to retry")

        if self.state.messages[-1].role == MessageRole.USER:
            self._apply(start_retry(self.state))
            return await self._run(context)
        return await self.send(last.content, context)

    def cancel(self) -> SessionState:
        """Abort the in-flight request and return to idle."""
        if self._task is not None and not self._task.done():
            self._cancel_requested = True
            self._task.cancel()
        self._apply(cancel(self.state))
        return self.state

    def reset(self) -> None:
        """Drop the conversation history."""
        self.cancel()
        self._apply(SessionState())

    def _ensure_not_busy(self) -> None:
        if self.state.is_busy:
            raise InvalidInputError("A reply is already in progress")

    def _on_delta(self, delta: str) -> None:
        self._apply(receive_delta(self.state, delta))

    async def _run(self, context: Optional[str]) -> SessionState:
        self._cancel_requested = False
        messages = list(self.state.messages)
        self._task = asyncio.ensure_future(
            self.client.stream(messages, self._on_delta, context=context or self.context)
        )
        try:
            result = await self._task
        except asyncio.CancelledError:
            if not self._cancel_requested:
                self._apply(cancel(self.state))
                raise
            logger.debug("Reply cancelled")
            return self.state
        except Exception as e:
            error = classify_error(e)
            logger.debug("Reply failed (%s): %s", error.kind.value, error.message)
            self._apply(fail(self.state, error.message, error.kind))
            return self.state
        finally:
            self._task = None

        self._apply(complete(self.state, result.text))
        return self.state
