"""Runs one model request and merges its output into the conversation.

Design:
- A streamed request runs in a single worker thread that owns its own
  asyncio loop and provider client for the lifetime of the request
- The worker's only shared surface is a StreamingState guarded by one lock
- The UI thread polls that state at a fixed interval, rewrites the
  conversation's last message and asks the session to re-render
- Providers that cannot stream (or are configured not to) are called
  once, blocking, behind a transient "thinking" notice

There is no cancellation and no request timeout beyond the provider
client's own; a request runs until it completes or fails.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..llm import ChatMessage as WireMessage
from ..llm import LLMError, LLMProvider, LLMResponse, describe_error
from ..ui.config import CURSOR_GLYPH, POLL_INTERVAL_SECONDS, THINKING_NOTICE
from .context import SessionContext
from .conversation import Conversation, Role

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_NOTICE = "Error: Empty response from AI"


class StreamPhase(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class StreamSnapshot:
    """A consistent copy of StreamingState taken under its lock."""

    text: str
    is_streaming: bool
    completed: bool
    has_error: bool
    error: str | None


class StreamingState:
    """State shared between the UI thread and one worker thread.

    Every read and write happens under ``_lock``, held only for the
    copy or append itself.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._text = ""
        self._is_streaming = False
        self._completed = False
        self._has_error = False
        self._error: str | None = None

    def start(self) -> None:
        with self._lock:
            self._is_streaming = True

    def append_chunk(self, chunk: str) -> None:
        with self._lock:
            self._text += chunk

    def finish(self) -> None:
        with self._lock:
            self._completed = True
            self._is_streaming = False

    def fail(self, reason: str) -> None:
        with self._lock:
            self._has_error = True
            self._error = reason
            self._completed = True
            self._is_streaming = False

    def snapshot(self) -> StreamSnapshot:
        with self._lock:
            return StreamSnapshot(
                text=self._text,
                is_streaming=self._is_streaming,
                completed=self._completed,
                has_error=self._has_error,
                error=self._error,
            )


@dataclass(frozen=True)
class RequestOutcome:
    """How a request ended."""

    phase: StreamPhase
    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.phase is StreamPhase.COMPLETED


class StreamingCoordinator:
    """Runs model requests for one session, one at a time.

    Example:
        coordinator = StreamingCoordinator(context, conversation, on_update=redraw)
        conversation.append(Role.USER, "hello")
        outcome = coordinator.submit("hello")
    """

    def __init__(
        self,
        context: SessionContext,
        conversation: Conversation,
        on_update: Callable[[], None] | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._context = context
        self._conversation = conversation
        self._on_update = on_update or (lambda: None)
        self._poll_interval = poll_interval
        self._phase = StreamPhase.IDLE

    @property
    def phase(self) -> StreamPhase:
        return self._phase

    @property
    def busy(self) -> bool:
        return self._phase is not StreamPhase.IDLE

    def submit(self, user_text: str) -> RequestOutcome:
        """Request a reply to the conversation so far.

        The caller has already appended the user's message. Blocks until
        the reply is complete, re-rendering through ``on_update``.

        Raises:
            RuntimeError: If a request is already in flight
        """
        if self.busy:
            raise RuntimeError("a request is already in flight")

        self._phase = StreamPhase.REQUESTED
        history = self._conversation.history()
        try:
            try:
                provider = self._context.provider_factory()
            except LLMError as e:
                self._conversation.notice(f"Error: {e}")
                return RequestOutcome(StreamPhase.FAILED, error=str(e))

            if provider.supports_streaming and self._streaming_enabled():
                return self._run_streaming(provider, history, user_text)
            return self._run_blocking(provider, history, user_text)
        finally:
            self._phase = StreamPhase.IDLE

    def _streaming_enabled(self) -> bool:
        cfg = self._context.store.get_default_provider()
        return cfg is None or cfg.streaming

    # -- streamed path -----------------------------------------------------

    def _run_streaming(
        self,
        provider: LLMProvider,
        history: list[WireMessage],
        user_text: str,
    ) -> RequestOutcome:
        conversation = self._conversation
        conversation.begin_live(Role.ASSISTANT, CURSOR_GLYPH)

        state = StreamingState()
        state.start()
        worker = threading.Thread(
            target=self._worker,
            args=(provider, history, state),
            name="parley-stream",
            daemon=True,
        )
        self._phase = StreamPhase.STREAMING
        worker.start()
        self._on_update()

        shown = 0
        while True:
            snap = state.snapshot()
            if snap.completed:
                break
            if len(snap.text) > shown:
                conversation.replace_last(snap.text + CURSOR_GLYPH)
                shown = len(snap.text)
                self._on_update()
            time.sleep(self._poll_interval)

        worker.join()
        conversation.end_live()

        if snap.has_error:
            self._phase = StreamPhase.FAILED
            conversation.replace_last(f"Error: Streaming failed ({snap.error})", role=Role.SYSTEM)
            outcome = RequestOutcome(StreamPhase.FAILED, snap.text, snap.error)
        elif not snap.text:
            self._phase = StreamPhase.FAILED
            conversation.replace_last(EMPTY_RESPONSE_NOTICE, role=Role.SYSTEM)
            outcome = RequestOutcome(StreamPhase.FAILED, error="empty response")
        else:
            self._phase = StreamPhase.COMPLETED
            conversation.replace_last(snap.text)
            self._context.add_tokens(user_text, snap.text)
            outcome = RequestOutcome(StreamPhase.COMPLETED, snap.text)

        self._on_update()
        return outcome

    def _worker(
        self,
        provider: LLMProvider,
        history: list[WireMessage],
        state: StreamingState,
    ) -> None:
        try:
            asyncio.run(self._pump(provider, history, state))
        except Exception as e:
            # The worker is the boundary: nothing may escape the thread
            if not isinstance(e, LLMError):
                logger.exception("Unexpected failure while streaming")
            else:
                logger.warning("Streaming request failed: %s", e)
            state.fail(describe_error(e))
        else:
            state.finish()

    @staticmethod
    async def _pump(
        provider: LLMProvider,
        history: list[WireMessage],
        state: StreamingState,
    ) -> None:
        async with provider:
            stream = await provider.chat_completion_stream(history)
            async for chunk in stream:
                state.append_chunk(chunk)

    # -- blocking fallback -------------------------------------------------

    def _run_blocking(
        self,
        provider: LLMProvider,
        history: list[WireMessage],
        user_text: str,
    ) -> RequestOutcome:
        conversation = self._conversation
        conversation.notice(THINKING_NOTICE)
        self._on_update()

        response: LLMResponse | None = None
        error: str | None = None
        try:
            response = asyncio.run(self._complete(provider, history))
        except Exception as e:
            if not isinstance(e, LLMError):
                logger.exception("Unexpected failure during completion")
            else:
                logger.warning("Completion request failed: %s", e)
            error = describe_error(e)

        conversation.pop_last()

        if error is not None:
            self._phase = StreamPhase.FAILED
            conversation.notice(f"Error: {error}")
            outcome = RequestOutcome(StreamPhase.FAILED, error=error)
        elif response is None or not response.content:
            self._phase = StreamPhase.FAILED
            conversation.notice(EMPTY_RESPONSE_NOTICE)
            outcome = RequestOutcome(StreamPhase.FAILED, error="empty response")
        else:
            self._phase = StreamPhase.COMPLETED
            conversation.append(Role.ASSISTANT, response.content)
            self._context.add_tokens(user_text, response.content)
            outcome = RequestOutcome(StreamPhase.COMPLETED, response.content)

        self._on_update()
        return outcome

    @staticmethod
    async def _complete(provider: LLMProvider, history: list[WireMessage]) -> LLMResponse:
        async with provider:
            return await provider.chat_completion(history)
