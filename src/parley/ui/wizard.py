"""Interactive configuration wizard.

Walks the user through choosing a provider, entering its API key and
picking a model, then saves the configuration.

Design:
- SelectPrompt and TextPrompt are terminal-independent: they consume
  keystrokes and draw onto a ScreenGrid
- TerminalPrompts runs them against a blessed terminal; the caller owns
  fullscreen and cbreak mode
- run_config_wizard only talks to a Prompts object, so the flow is
  testable with scripted answers
- Nothing is written to the store until every answer is in; cancelling
  at any step leaves the configuration untouched
"""

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from blessed import Terminal
from blessed.keyboard import Keystroke

from ..config import KEYLESS_PROVIDERS, ConfigPersistenceError, ConfigStore, ProviderType
from ..llm import ModelInfo, fetch_models
from ..session.editor import InputBuffer, display_width
from .config import KEY_TIMEOUT_SECONDS, Color
from .keys import is_backspace, is_enter, is_escape, is_interrupt, printable_text
from .render import ScreenGrid, flush

logger = logging.getLogger(__name__)

WIZARD_PROVIDERS = (
    ProviderType.ANTHROPIC,
    ProviderType.OPENAI,
    ProviderType.DEEPSEEK,
    ProviderType.OLLAMA,
)

PROMPT_MIN_WIDTH = 20
PROMPT_MIN_HEIGHT = 5

SELECT_HINT = "Use arrow keys to move, Enter to select, Esc to cancel"
INPUT_HINT = "Enter to confirm, Esc to cancel"


class SelectPrompt:
    """Pick one entry from a list."""

    def __init__(self, title: str, options: Sequence[str]):
        if not options:
            raise ValueError("SelectPrompt needs at least one option")
        self.title = title
        self.options = list(options)
        self.index = 0
        self.done = False
        self.result: int | None = None

    def handle(self, key: Keystroke) -> None:
        if is_interrupt(key) or is_escape(key):
            self.done = True
        elif is_enter(key):
            self.result = self.index
            self.done = True
        elif key.name == "KEY_UP" or str(key) == "k":
            self.index = max(0, self.index - 1)
        elif key.name == "KEY_DOWN" or str(key) == "j":
            self.index = min(len(self.options) - 1, self.index + 1)

    def draw(self, width: int, height: int) -> ScreenGrid:
        grid = ScreenGrid(width, height)
        if height < PROMPT_MIN_HEIGHT or width < PROMPT_MIN_WIDTH:
            return grid

        # Title, blank, options, hint
        visible = min(len(self.options), height - 3)
        top = min(max(0, self.index - visible + 1), len(self.options) - visible)
        content_height = visible + 3
        start = (height - content_height) // 2 if height > content_height else 0

        grid.puts(2, start, "? ", fg=Color.GREEN, bold=True)
        grid.puts(4, start, self.title, fg=Color.WHITE, bold=True)

        for row, i in enumerate(range(top, top + visible), start=start + 2):
            if i == self.index:
                grid.puts(2, row, "  > ", fg=Color.CYAN, bold=True)
                grid.puts(6, row, self.options[i], fg=Color.CYAN, bold=True)
            else:
                grid.puts(6, row, self.options[i], fg=Color.GRAY)

        grid.puts(2, start + 2 + visible, SELECT_HINT, fg=Color.GRAY)
        return grid


class TextPrompt:
    """Read one line of text, optionally masked."""

    def __init__(self, title: str, masked: bool = False):
        self.title = title
        self.masked = masked
        self.buffer = InputBuffer()
        self.done = False
        self.result: str | None = None

    def handle(self, key: Keystroke) -> None:
        if is_interrupt(key) or is_escape(key):
            self.done = True
        elif is_enter(key):
            # Empty answers are not accepted
            if self.buffer:
                self.result = self.buffer.text
                self.done = True
        elif is_backspace(key):
            self.buffer.delete_last()
        else:
            text = printable_text(key)
            if text:
                self.buffer.insert(text)

    def shown_text(self) -> str:
        text = self.buffer.text
        return "*" * len(text) if self.masked else text

    def draw(self, width: int, height: int) -> ScreenGrid:
        grid = ScreenGrid(width, height)
        if height < PROMPT_MIN_HEIGHT or width < PROMPT_MIN_WIDTH:
            return grid

        start = height // 2 - 1
        grid.puts(2, start, "? ", fg=Color.GREEN, bold=True)
        grid.puts(4, start, self.title, fg=Color.WHITE, bold=True)

        row = start + 2
        shown = self.shown_text()
        grid.puts(2, row, "> ", fg=Color.CYAN, bold=True)
        grid.puts(4, row, shown)
        grid.cursor = (min(display_width(shown) + 4, width - 1), row)

        grid.puts(2, start + 4, INPUT_HINT, fg=Color.GRAY)
        return grid


class Prompts(Protocol):
    def select(self, title: str, options: Sequence[str]) -> int | None: ...

    def ask(self, title: str, masked: bool = False) -> str | None: ...


class TerminalPrompts:
    """Runs wizard prompts on a blessed terminal already in cbreak mode."""

    def __init__(self, term: Terminal):
        self._term = term

    def select(self, title: str, options: Sequence[str]) -> int | None:
        return self._run(SelectPrompt(title, options))

    def ask(self, title: str, masked: bool = False) -> str | None:
        return self._run(TextPrompt(title, masked))

    def _run(self, prompt: SelectPrompt | TextPrompt):
        term = self._term
        size = None
        dirty = True
        while not prompt.done:
            if (term.width, term.height) != size:
                size = (term.width, term.height)
                print(term.clear, end="", flush=True)
                dirty = True
            if dirty:
                flush(prompt.draw(*size), term)
                dirty = False
            key = term.inkey(timeout=KEY_TIMEOUT_SECONDS)
            if key:
                prompt.handle(key)
                dirty = True
        return prompt.result


def run_config_wizard(
    store: ConfigStore,
    prompts: Prompts,
    list_models: Callable[..., list[ModelInfo]] = fetch_models,
) -> bool:
    """Run the provider / key / model wizard.

    Args:
        store: Configuration store to update and save
        prompts: Where questions are asked
        list_models: Model catalogue lookup (``fetch_models`` signature)

    Returns:
        True if the configuration was updated, False if cancelled
    """
    names = [p.value for p in WIZARD_PROVIDERS]
    choice = prompts.select("Select AI Provider:", names)
    if choice is None:
        return False

    provider = WIZARD_PROVIDERS[choice]
    cfg = store.get_provider(provider.value)
    if cfg is None:
        logger.warning("Wizard picked %s but it has no config entry", provider.value)
        return False

    api_key = None
    if provider not in KEYLESS_PROVIDERS:
        api_key = prompts.ask("Enter API Key:", masked=True)
        if api_key is None:
            return False

    models = list_models(provider.value, cfg.base_url, api_key)
    if not models:
        models = [ModelInfo(id=cfg.model, name=cfg.model)]

    model_choice = prompts.select("Select Model:", [m.name for m in models])
    if model_choice is None:
        return False

    store.switch_default_provider(provider.value)
    if api_key:
        store.set_api_key(provider.value, api_key)
    store.set_model(provider.value, models[model_choice].id)

    try:
        store.save()
    except ConfigPersistenceError as e:
        logger.warning("Failed to save config: %s", e)
    return True
