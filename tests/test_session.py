"""Unit tests for the conversation and the chat session engine."""
import json

import pytest
from blessed.keyboard import Keystroke

from conftest import FakeProvider
from parley.config import ProviderType
from parley.llm import MissingApiKeyError
from parley.session import Conversation, Role
from parley.ui.app import (
    Backspace,
    ChatSession,
    Interrupt,
    Resize,
    Submit,
    TextInput,
    key_to_event,
)
from parley.ui.config import CLEARED_NOTICE, HELP_HINT_NOTICE, WELCOME_NOTICE


def type_line(session: ChatSession, text: str) -> bool:
    session.handle(TextInput(text))
    return session.handle(Submit())


@pytest.fixture
def frames():
    return []


@pytest.fixture
def session(make_context, frames):
    """Session wired to a fake provider and a frame recorder."""
    def _session(provider=None, run_wizard=None):
        context = make_context(provider or FakeProvider(chunks=["Hel", "lo"]))
        return ChatSession(
            context,
            on_render=frames.append,
            run_wizard=run_wizard,
            poll_interval=0.0,
        )
    return _session


class TestConversation:
    """Tests for the message list."""

    def test_replace_last_on_empty(self):
        """Test rewriting an empty conversation raises."""
        with pytest.raises(IndexError):
            Conversation().replace_last("x")

    def test_replace_last_can_change_role(self):
        """Test the last message may change its role."""
        conversation = Conversation()
        conversation.append(Role.ASSISTANT, "partial")
        conversation.replace_last("Error", role=Role.SYSTEM)
        assert conversation.last.role is Role.SYSTEM
        assert conversation.last.content == "Error"

    def test_pop_live_message_ends_it(self):
        """Test popping the live message clears the live marker."""
        conversation = Conversation()
        conversation.begin_live(Role.ASSISTANT, "")
        conversation.pop_last()
        assert not conversation.live
        assert len(conversation) == 0

    def test_reset_leaves_one_notice(self):
        """Test reset drops everything but a single notice."""
        conversation = Conversation()
        conversation.append(Role.USER, "a")
        conversation.append(Role.ASSISTANT, "b")
        conversation.reset("gone")
        assert [(m.role, m.content) for m in conversation] == [(Role.SYSTEM, "gone")]

    def test_history_skips_live_reply(self):
        """Test the reply being written is not part of the history."""
        conversation = Conversation()
        conversation.append(Role.USER, "q")
        conversation.begin_live(Role.ASSISTANT, "▌")
        assert [m.content for m in conversation.history()] == ["q"]


class TestKeyToEvent:
    """Tests for keystroke translation."""

    @pytest.mark.parametrize("key,event", [
        (Keystroke("a"), TextInput("a")),
        (Keystroke("中"), TextInput("中")),
        (Keystroke("\r"), Submit()),
        (Keystroke("\n", code=343, name="KEY_ENTER"), Submit()),
        (Keystroke("\x7f"), Backspace()),
        (Keystroke("\x08", code=263, name="KEY_BACKSPACE"), Backspace()),
        (Keystroke("\x03"), Interrupt()),
    ])
    def test_translation(self, key, event):
        """Test each handled key maps to its event."""
        assert key_to_event(key) == event

    @pytest.mark.parametrize("key", [
        Keystroke("\x1b[A", code=259, name="KEY_UP"),
        Keystroke("\x01"),
        Keystroke("\t"),
    ])
    def test_ignored_keys(self, key):
        """Test navigation and control keys are ignored."""
        assert key_to_event(key) is None


class TestChatSession:
    """Tests for event handling in the session engine."""

    def test_welcome(self, session):
        """Test the welcome notices name the provider and model."""
        s = session()
        s.welcome()
        assert [m.content for m in s.conversation] == [
            WELCOME_NOTICE,
            "Provider: anthropic | Model: claude-sonnet-4-20250514",
            HELP_HINT_NOTICE,
        ]
        assert all(m.role is Role.SYSTEM for m in s.conversation)

    def test_editing_renders_every_event(self, session, frames):
        """Test typing and deleting update the input line and re-render."""
        s = session()
        s.handle(TextInput("héllo"))
        s.handle(Backspace())
        assert s.input.text == "héll"
        assert len(frames) == 2
        assert frames[-1].row_text(21).rstrip() == "> héll"

    def test_chat_round_trip(self, session):
        """Test a submitted line gets a streamed reply."""
        provider = FakeProvider(chunks=["Hel", "lo"])
        s = session(provider)
        assert type_line(s, "hi")

        assert s.input.text == ""
        assert [(m.role, m.content) for m in s.conversation] == [
            (Role.USER, "hi"),
            (Role.ASSISTANT, "Hello"),
        ]
        assert s.context.total_tokens == (2 + 5) // 4
        assert not s.coordinator.busy

    def test_blank_line_is_ignored(self, session):
        """Test whitespace-only submissions send nothing."""
        provider = FakeProvider(chunks=["x"])
        s = session(provider)
        type_line(s, "   ")
        assert len(s.conversation) == 0
        assert provider.calls == []

    def test_quit_command(self, session):
        """Test /quit stops the session."""
        s = session()
        assert type_line(s, "/quit") is False
        assert not s.running

    def test_interrupt(self, session):
        """Test Ctrl+C stops the session."""
        s = session()
        assert s.handle(Interrupt()) is False
        assert not s.running

    def test_clear_command(self, session):
        """Test /clear leaves only the cleared notice."""
        s = session()
        s.welcome()
        type_line(s, "hi")
        type_line(s, "/clear")
        assert [m.content for m in s.conversation] == [CLEARED_NOTICE]

    def test_clear_keeps_token_estimate(self, session):
        """Test clearing the screen does not reset the token count."""
        s = session(FakeProvider(chunks=["abcdefgh"]))
        type_line(s, "1234")
        type_line(s, "/clear")
        assert s.context.total_tokens == 3

    def test_command_reply_is_a_notice(self, session):
        """Test command output is shown as a system message."""
        s = session()
        type_line(s, "/model")
        assert s.conversation.last.role is Role.SYSTEM
        assert s.conversation.last.content.startswith("Model: ")

    def test_provider_switch_updates_status(self, session, frames):
        """Test the status bar follows a provider switch."""
        s = session()
        type_line(s, "/provider openai")
        assert s.context.store.default_provider is ProviderType.OPENAI
        assert frames[-1].row_text(23).startswith(" Provider: openai | Model: gpt-4o")

    def test_resize(self, session, frames):
        """Test a resize re-renders at the new size."""
        s = session()
        s.handle(Resize(40, 10))
        assert (frames[-1].width, frames[-1].height) == (40, 10)

    def test_measure_overrides_size(self, make_context, frames):
        """Test the measured size is used for each render."""
        s = ChatSession(make_context(), on_render=frames.append, measure=lambda: (30, 8))
        s.refresh()
        assert s.size == (30, 8)
        assert frames[-1].width == 30

    def test_missing_key_is_reported_inline(self, make_context):
        """Test an unconfigured key turns into a notice, not a crash."""
        s = ChatSession(make_context(MissingApiKeyError("anthropic", "ANTHROPIC_API_KEY")), poll_interval=0.0)
        assert type_line(s, "hello")
        assert s.conversation.last.content.startswith("Error: No API key for anthropic")

    def test_submit_while_busy_is_ignored(self, session):
        """Test Enter during a stream does not start a second request."""
        provider = FakeProvider(chunks=["a", "b"])
        s = session(provider)
        nested = []

        def on_render(grid):
            if s.coordinator.busy and not nested:
                nested.append(None)
                s.input.insert("again")
                nested[0] = s.handle(Submit())

        s._on_render = on_render
        type_line(s, "first")

        assert nested == [True]
        assert len(provider.calls) == 1
        assert s.input.text == "again"


class TestSetupCommand:
    """Tests for /config inside the session."""

    def test_without_terminal(self, session):
        """Test /config explains it needs an interactive terminal."""
        s = session()
        type_line(s, "/config")
        assert s.conversation.last.content == "The configuration wizard needs an interactive terminal."

    def test_wizard_success(self, session, config_path):
        """Test a completed wizard reports the new provider and model."""
        def wizard():
            s.context.store.switch_default_provider("deepseek")
            s.context.store.save()
            return True

        s = session(run_wizard=wizard)
        type_line(s, "/config")
        assert s.conversation.last.content == "Config updated: deepseek | deepseek-chat"
        assert json.loads(config_path.read_text())["default_provider"] == "deepseek"

    def test_wizard_cancelled(self, session):
        """Test a cancelled wizard leaves a notice and the old provider."""
        s = session(run_wizard=lambda: False)
        type_line(s, "/config")
        assert s.conversation.last.content == "Configuration cancelled."
        assert s.context.store.default_provider is ProviderType.ANTHROPIC
