"""Slash-command dispatch.

A submitted line is either a chat message or a slash command. Commands
are plain functions registered under their verb and aliases; each takes
the argument string (possibly empty) and the session context and returns
a CommandResult for the event loop to act on.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..config import ConfigPersistenceError, ProviderNotConfiguredError, ProviderType, mask_key
from .context import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotACommand:
    """The line is a chat message."""


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class RunSetupWizard:
    pass


@dataclass(frozen=True)
class Message:
    """Show ``text`` as a system notice."""

    text: str


CommandResult = NotACommand | Quit | Clear | RunSetupWizard | Message

CommandFn = Callable[[str, SessionContext], CommandResult]

_COMMANDS: dict[str, CommandFn] = {}

KNOWN_PROVIDERS = ", ".join(p.value for p in ProviderType if p is not ProviderType.CUSTOM)

HELP_TEXT = """Commands:
  /help, /h, /?             - Show this help
  /config                   - Run interactive configuration wizard
  /provider, /p             - Show current provider
  /provider <name>          - Switch provider (anthropic/openai/deepseek/ollama)
  /apikey <key>             - Set API key for current provider
  /apikey <provider> <key>  - Set API key for specific provider
  /model, /m                - Show current model
  /clear, /c                - Clear messages
  /quit, /exit, /q          - Exit"""


def command(*names: str) -> Callable[[CommandFn], CommandFn]:
    """Register a handler under a verb and its aliases."""
    def register(fn: CommandFn) -> CommandFn:
        for name in names:
            _COMMANDS[name] = fn
        return fn
    return register


def parse(line: str) -> tuple[str, str] | None:
    """Split a command line into verb and argument string.

    Returns:
        (verb, argument) for lines starting with '/', otherwise None
    """
    if not line.startswith("/"):
        return None
    verb, _, arg = line[1:].partition(" ")
    return verb, arg.strip()


def dispatch(line: str, context: SessionContext) -> CommandResult:
    """Classify and execute a submitted line."""
    parsed = parse(line)
    if parsed is None:
        return NotACommand()

    verb, arg = parsed
    handler = _COMMANDS.get(verb)
    if handler is None:
        return Message(f"Unknown command: /{verb}\nType /help for available commands.")
    return handler(arg, context)


def _persist(context: SessionContext) -> bool:
    try:
        context.store.save()
    except ConfigPersistenceError as e:
        logger.warning("Failed to save config: %s", e)
        return False
    return True


def _saved_suffix(saved: bool) -> str:
    return "(saved)" if saved else "(not saved, see log)"


@command("quit", "exit", "q")
def _quit(arg: str, context: SessionContext) -> CommandResult:
    return Quit()


@command("clear", "c")
def _clear(arg: str, context: SessionContext) -> CommandResult:
    return Clear()


@command("help", "h", "?")
def _help(arg: str, context: SessionContext) -> CommandResult:
    return Message(HELP_TEXT)


@command("config")
def _config(arg: str, context: SessionContext) -> CommandResult:
    return RunSetupWizard()


@command("provider", "p")
def _provider(arg: str, context: SessionContext) -> CommandResult:
    store = context.store
    if not arg:
        return Message(
            f"Current: {store.default_provider.value} ({store.default_model()})\n"
            f"Available: {', '.join(store.provider_names())}"
        )

    name = arg.lower()
    if ProviderType.from_string(name) is None:
        return Message(f"Unknown provider. Available: {KNOWN_PROVIDERS}")

    try:
        cfg = store.switch_default_provider(name)
    except ProviderNotConfiguredError as e:
        return Message(str(e))

    saved = _persist(context)
    return Message(f"Switched to {name} ({cfg.model}) {_saved_suffix(saved)}")


@command("model", "m")
def _model(arg: str, context: SessionContext) -> CommandResult:
    cfg = context.store.get_default_provider()
    if cfg is None:
        return Message("No provider configured")
    return Message(f"Model: {cfg.model}\nProvider: {context.store.default_provider.value}")


@command("apikey", "key", "k")
def _apikey(arg: str, context: SessionContext) -> CommandResult:
    store = context.store
    if not arg:
        name = store.default_provider.value
        source = store.api_key_source(name)
        if source == "config":
            status = mask_key(store.api_key_for(name) or "")
        elif source:
            status = f"from {source}"
        else:
            status = "not set"
        return Message(
            f"API key for {name}: {status}\n"
            "Usage: /apikey <key> or /apikey <provider> <key>"
        )

    first, _, second = arg.partition(" ")
    second = second.strip()

    if not second:
        name = store.default_provider.value
        api_key = first
    else:
        if ProviderType.from_string(first) is None:
            return Message("Unknown provider. Use: /apikey <provider> <key>")
        name, api_key = first.lower(), second

    try:
        store.set_api_key(name, api_key)
    except ProviderNotConfiguredError as e:
        return Message(str(e))

    saved = _persist(context)
    return Message(f"API key set for {name} {_saved_suffix(saved)}")
