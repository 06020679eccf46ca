"""Full-screen chat application.

ChatSession is the terminal-independent engine: it owns the
conversation and input line, handles one event at a time and asks for a
re-render after each. TerminalApp drives it from a blessed terminal.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from blessed import Terminal
from blessed.keyboard import Keystroke

from ..errors import ParleyError
from ..session.commands import Clear, Message, NotACommand, Quit, RunSetupWizard, dispatch
from ..session.context import SessionContext
from ..session.conversation import Conversation, Role
from ..session.editor import InputBuffer
from ..session.streaming import StreamingCoordinator
from .config import (
    CLEARED_NOTICE,
    HELP_HINT_NOTICE,
    KEY_TIMEOUT_SECONDS,
    POLL_INTERVAL_SECONDS,
    WELCOME_NOTICE,
)
from .keys import is_backspace, is_enter, is_interrupt, printable_text
from .render import ScreenGrid, flush, render
from .wizard import TerminalPrompts, run_config_wizard

logger = logging.getLogger(__name__)


class TerminalUnavailableError(ParleyError):
    """The full-screen UI cannot take over the terminal."""


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class Interrupt:
    pass


Event = TextInput | Backspace | Submit | Resize | Interrupt


def key_to_event(key: Keystroke) -> Event | None:
    """Translate a keystroke; None for keys the session ignores."""
    if is_interrupt(key):
        return Interrupt()
    if is_enter(key):
        return Submit()
    if is_backspace(key):
        return Backspace()
    text = printable_text(key)
    if text:
        return TextInput(text)
    return None


class ChatSession:
    """Chat session engine.

    Args:
        context: Shared session context
        size: Initial (width, height) of the render target
        on_render: Receives every freshly rendered grid
        run_wizard: Runs the configuration wizard; returns True if the
            configuration changed. None when no interactive terminal exists.
        measure: Returns the current (width, height), consulted before each
            render so a resize during a stream is picked up
        poll_interval: Seconds between stream polls
    """

    def __init__(
        self,
        context: SessionContext,
        size: tuple[int, int] = (80, 24),
        on_render: Callable[[ScreenGrid], None] | None = None,
        run_wizard: Callable[[], bool] | None = None,
        measure: Callable[[], tuple[int, int]] | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.context = context
        self.conversation = Conversation()
        self.input = InputBuffer()
        self.size = size
        self.running = True
        self._on_render = on_render or (lambda grid: None)
        self._run_wizard = run_wizard
        self._measure = measure
        self.coordinator = StreamingCoordinator(
            context,
            self.conversation,
            on_update=self.refresh,
            poll_interval=poll_interval,
        )

    def welcome(self) -> None:
        status = self.context.status()
        self.conversation.notice(WELCOME_NOTICE)
        self.conversation.notice(f"Provider: {status.provider} | Model: {status.model}")
        self.conversation.notice(HELP_HINT_NOTICE)

    def frame(self) -> ScreenGrid:
        return render(self.conversation, self.input, self.context.status(), self.size)

    def refresh(self) -> None:
        if self._measure is not None:
            self.size = self._measure()
        self._on_render(self.frame())

    def handle(self, event: Event) -> bool:
        """Apply one event and re-render; returns whether to keep running."""
        if isinstance(event, Interrupt):
            self.running = False
        elif isinstance(event, TextInput):
            self.input.insert(event.text)
        elif isinstance(event, Backspace):
            self.input.delete_last()
        elif isinstance(event, Resize):
            self.size = (event.width, event.height)
        elif isinstance(event, Submit):
            self._submit()

        if self.running:
            self.refresh()
        return self.running

    def _submit(self) -> None:
        # Submissions are refused while a reply is in flight
        if self.coordinator.busy:
            return

        line = self.input.text
        self.input.clear()
        if not line.strip():
            return

        result = dispatch(line, self.context)
        if isinstance(result, Quit):
            self.running = False
        elif isinstance(result, Clear):
            self.conversation.reset(CLEARED_NOTICE)
        elif isinstance(result, Message):
            self.conversation.notice(result.text)
        elif isinstance(result, RunSetupWizard):
            self._setup()
        elif isinstance(result, NotACommand):
            self.conversation.append(Role.USER, line)
            self.refresh()
            self.coordinator.submit(line)

    def _setup(self) -> None:
        if self._run_wizard is None:
            self.conversation.notice("The configuration wizard needs an interactive terminal.")
            return

        if self._run_wizard():
            status = self.context.status()
            self.conversation.notice(f"Config updated: {status.provider} | {status.model}")
        else:
            self.conversation.notice("Configuration cancelled.")


class TerminalApp:
    """Runs a ChatSession full-screen on a blessed terminal.

    Example:
        TerminalApp(context).run()
    """

    def __init__(self, context: SessionContext, term: Terminal | None = None):
        self.context = context
        self.term = term or Terminal()

    def run(self) -> None:
        """Run until the user quits.

        Raises:
            TerminalUnavailableError: If stdout is not an interactive terminal
        """
        term = self.term
        if not term.is_a_tty:
            raise TerminalUnavailableError("stdout is not an interactive terminal")

        session = ChatSession(
            self.context,
            size=(term.width, term.height),
            on_render=self._draw,
            run_wizard=self._wizard,
            measure=lambda: (term.width, term.height),
        )

        with term.fullscreen(), term.cbreak():
            print(term.clear, end="", flush=True)
            session.welcome()
            session.refresh()
            try:
                self._loop(session)
            except KeyboardInterrupt:
                # cbreak leaves signals on, so Ctrl+C may arrive as SIGINT
                session.handle(Interrupt())
        logger.debug("Terminal session ended")

    def _loop(self, session: ChatSession) -> None:
        term = self.term
        while session.running:
            key = term.inkey(timeout=KEY_TIMEOUT_SECONDS)
            size = (term.width, term.height)
            if size != session.size:
                print(term.clear, end="", flush=True)
                session.handle(Resize(*size))
            if not key:
                continue
            event = key_to_event(key)
            if event is not None:
                session.handle(event)

    def _draw(self, grid: ScreenGrid) -> None:
        flush(grid, self.term)

    def _wizard(self) -> bool:
        term = self.term
        print(term.clear, end="", flush=True)
        try:
            return run_config_wizard(self.context.store, TerminalPrompts(term))
        finally:
            print(term.clear, end="", flush=True)
