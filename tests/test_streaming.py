"""Unit tests for the streaming coordinator."""
import threading

from conftest import FakeProvider, NonStreamingFakeProvider
from parley.llm import ChatMessage as WireMessage
from parley.llm import MissingApiKeyError, ProviderTransportError
from parley.session import Conversation, Role, StreamingCoordinator, StreamingState, StreamPhase
from parley.ui.config import CURSOR_GLYPH, THINKING_NOTICE


class Recorder:
    """Collects the last message's content at every re-render."""

    def __init__(self, conversation: Conversation):
        self.conversation = conversation
        self.contents: list[str] = []

    def __call__(self) -> None:
        last = self.conversation.last
        self.contents.append(last.content if last else "")


def run_request(context, text="hi", conversation=None):
    conversation = conversation if conversation is not None else Conversation()
    recorder = Recorder(conversation)
    coordinator = StreamingCoordinator(context, conversation, on_update=recorder, poll_interval=0.0)
    conversation.append(Role.USER, text)
    outcome = coordinator.submit(text)
    return conversation, recorder, outcome, coordinator


class TestStreamingState:
    """Tests for the shared streaming state."""

    def test_initial_snapshot(self):
        """Test a fresh state is empty and incomplete."""
        snap = StreamingState().snapshot()
        assert snap.text == ""
        assert not snap.completed
        assert not snap.has_error

    def test_append_and_finish(self):
        """Test chunks accumulate in order."""
        state = StreamingState()
        state.start()
        state.append_chunk("He")
        state.append_chunk("llo")
        assert state.snapshot().is_streaming
        state.finish()
        snap = state.snapshot()
        assert snap.text == "Hello"
        assert snap.completed and not snap.is_streaming

    def test_fail_completes_with_error(self):
        """Test failure sets both the error flag and completion."""
        state = StreamingState()
        state.fail("boom")
        snap = state.snapshot()
        assert snap.completed and snap.has_error
        assert snap.error == "boom"

    def test_concurrent_appends_are_not_lost(self):
        """Test appends from several threads all land."""
        state = StreamingState()

        def writer():
            for _ in range(500):
                state.append_chunk("x")

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(state.snapshot().text) == 2000


class TestStreamedRequest:
    """Tests for requests served by a streaming provider."""

    def test_chunks_merge_into_reply(self, make_context):
        """Test ["He", "llo"] ends as one assistant message "Hello"."""
        provider = FakeProvider(chunks=["He", "llo"])
        context = make_context(provider)
        conversation, recorder, outcome, _ = run_request(context)

        assert outcome.ok
        assert outcome.phase is StreamPhase.COMPLETED
        assert len(conversation) == 2
        assert conversation.last.role is Role.ASSISTANT
        assert conversation.last.content == "Hello"
        assert not conversation.live
        assert provider.closed

    def test_displayed_content_never_shrinks(self, make_context):
        """Test every intermediate render is a growing prefix of the reply."""
        context = make_context(FakeProvider(chunks=["He", "llo", ", ", "world"]))
        _, recorder, _, _ = run_request(context)

        shown = [c.removesuffix(CURSOR_GLYPH) for c in recorder.contents]
        assert recorder.contents[0] == CURSOR_GLYPH
        for before, after in zip(shown, shown[1:]):
            assert after.startswith(before)
        assert shown[-1] == "Hello, world"

    def test_token_estimate_updated(self, make_context):
        """Test the running estimate adds (chars in + chars out) // 4."""
        context = make_context(FakeProvider(chunks=["abcdefgh"]))
        run_request(context, text="1234")
        assert context.total_tokens == 3

    def test_history_excludes_notices_and_placeholder(self, make_context):
        """Test only user/assistant turns reach the provider."""
        provider = FakeProvider(chunks=["ok"])
        context = make_context(provider)
        conversation = Conversation()
        conversation.notice("Welcome")
        conversation.append(Role.USER, "earlier")
        conversation.append(Role.ASSISTANT, "reply")
        run_request(context, text="now", conversation=conversation)

        assert provider.calls[0] == [
            WireMessage(role="user", content="earlier"),
            WireMessage(role="assistant", content="reply"),
            WireMessage(role="user", content="now"),
        ]

    def test_error_before_any_chunk(self, make_context):
        """Test an immediate failure leaves exactly one system error message."""
        provider = FakeProvider(error=ProviderTransportError("connection refused"))
        context = make_context(provider)
        conversation, _, outcome, _ = run_request(context)

        assert outcome.phase is StreamPhase.FAILED
        assert len(conversation) == 2
        assert conversation.last.role is Role.SYSTEM
        assert conversation.last.content == "Error: Streaming failed (connection refused)"
        assert sum(1 for m in conversation if m.content.startswith("Error")) == 1
        assert context.total_tokens == 0
        assert provider.closed

    def test_error_mid_stream_replaces_partial_reply(self, make_context):
        """Test a failure after some chunks turns the reply into an error."""
        context = make_context(FakeProvider(chunks=["par"], error=ProviderTransportError("reset")))
        conversation, _, _, _ = run_request(context)

        assert len(conversation) == 2
        assert conversation.last.role is Role.SYSTEM
        assert conversation.last.content == "Error: Streaming failed (reset)"

    def test_unexpected_exception_is_contained(self, make_context):
        """Test a non-provider exception in the worker becomes an error message."""
        context = make_context(FakeProvider(error=RuntimeError("boom")))
        conversation, _, _, coordinator = run_request(context)

        assert conversation.last.content == "Error: Streaming failed (RuntimeError: boom)"
        assert coordinator.phase is StreamPhase.IDLE

    def test_empty_stream(self, make_context):
        """Test a stream with no text is reported as empty."""
        context = make_context(FakeProvider(chunks=[]))
        conversation, _, outcome, _ = run_request(context)

        assert not outcome.ok
        assert conversation.last.role is Role.SYSTEM
        assert conversation.last.content == "Error: Empty response from AI"

    def test_busy_while_streaming(self, make_context):
        """Test the coordinator reports busy during a request only."""
        context = make_context(FakeProvider(chunks=["a", "b"]))
        conversation = Conversation()
        seen = []
        coordinator = StreamingCoordinator(
            context, conversation, on_update=lambda: seen.append(coordinator.busy), poll_interval=0.0
        )
        conversation.append(Role.USER, "hi")
        coordinator.submit("hi")

        assert seen and all(seen)
        assert not coordinator.busy


class TestBlockingFallback:
    """Tests for providers that do not stream."""

    def test_thinking_notice_then_reply(self, make_context):
        """Test the thinking notice is shown and then replaced by the reply."""
        context = make_context(NonStreamingFakeProvider(reply="Hi there"))
        conversation, recorder, outcome, _ = run_request(context)

        assert recorder.contents[0] == THINKING_NOTICE
        assert outcome.ok
        assert [(m.role, m.content) for m in conversation] == [
            (Role.USER, "hi"),
            (Role.ASSISTANT, "Hi there"),
        ]
        assert context.total_tokens == (2 + 8) // 4

    def test_streaming_disabled_in_config(self, make_context, store):
        """Test a provider entry with streaming off takes the blocking path."""
        store.get_default_provider().streaming = False
        provider = FakeProvider(chunks=["streamed"], reply="blocking")
        context = make_context(provider)
        conversation, recorder, _, _ = run_request(context)

        assert recorder.contents[0] == THINKING_NOTICE
        assert conversation.last.content == "blocking"

    def test_error_replaces_thinking_notice(self, make_context):
        """Test a failed call leaves an error notice and no thinking notice."""
        context = make_context(NonStreamingFakeProvider(error=ProviderTransportError("HTTP 500")))
        conversation, _, outcome, _ = run_request(context)

        assert outcome.phase is StreamPhase.FAILED
        assert [(m.role, m.content) for m in conversation] == [
            (Role.USER, "hi"),
            (Role.SYSTEM, "Error: HTTP 500"),
        ]

    def test_empty_reply(self, make_context):
        """Test an empty reply is reported."""
        context = make_context(NonStreamingFakeProvider(reply=""))
        conversation, _, _, _ = run_request(context)
        assert conversation.last.content == "Error: Empty response from AI"
        assert conversation.last.role is Role.SYSTEM


class TestProviderResolution:
    """Tests for failures before any request is made."""

    def test_missing_key_becomes_notice(self, make_context):
        """Test a missing key is reported inline without a placeholder."""
        context = make_context(MissingApiKeyError("anthropic", "ANTHROPIC_API_KEY"))
        conversation, _, outcome, coordinator = run_request(context)

        assert outcome.phase is StreamPhase.FAILED
        assert len(conversation) == 2
        assert conversation.last.role is Role.SYSTEM
        assert conversation.last.content == (
            "Error: No API key for anthropic (set ANTHROPIC_API_KEY or use /apikey)"
        )
        assert coordinator.phase is StreamPhase.IDLE

    def test_submit_while_busy_is_refused(self, make_context):
        """Test a nested submission raises instead of queuing."""
        context = make_context(FakeProvider(chunks=["a"]))
        conversation = Conversation()
        errors = []

        def nested():
            try:
                coordinator.submit("again")
            except RuntimeError as e:
                errors.append(e)

        coordinator = StreamingCoordinator(context, conversation, on_update=nested, poll_interval=0.0)
        conversation.append(Role.USER, "hi")
        coordinator.submit("hi")
        assert errors
