"""Line-oriented chat mode.

Used with ``--simple`` and whenever the full-screen UI cannot take over
the terminal. Replies are printed as they stream in.
"""

import asyncio
import logging
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..config import ProviderNotConfiguredError, ProviderType
from ..llm import LLMError, LLMProvider, describe_error
from ..session import Conversation, Role, SessionContext
from ..session.commands import KNOWN_PROVIDERS

logger = logging.getLogger(__name__)

SIMPLE_HELP = """Commands:
  /quit, /exit - Exit the program
  /help        - Show this help
  /clear       - Clear conversation
  /provider    - Show current provider"""


class SimpleChat:
    """Read-eval-print chat loop on a rich console.

    Args:
        context: Shared session context
        console: Where output goes
        read_line: Returns the next line of input; raises EOFError at end
    """

    def __init__(
        self,
        context: SessionContext,
        console: Console | None = None,
        read_line: Callable[[str], str] | None = None,
    ):
        self.context = context
        self.console = console or Console()
        self.read_line = read_line or self.console.input
        self.conversation = Conversation()

    def run(self) -> None:
        status = self.context.status()
        self.console.print(Panel.fit("[bold cyan]Parley - AI Chat Assistant[/bold cyan]"))
        self.console.print(f"  Provider: {status.provider}\n  Model: {status.model}\n")
        self.console.print("[dim]Type /help for commands, /quit or Ctrl+C to exit[/dim]\n")

        while True:
            try:
                line = self.read_line("[bold yellow]> [/bold yellow]").strip()
            except (KeyboardInterrupt, EOFError):
                self.console.print("\n[dim]Goodbye![/dim]")
                break

            if not line:
                continue
            if line.startswith("/"):
                if not self.handle_command(line):
                    self.console.print("\n[dim]Goodbye![/dim]")
                    break
                continue

            self.chat(line)

    def handle_command(self, line: str) -> bool:
        """Run a slash command; returns False when the loop should stop."""
        verb, _, arg = line[1:].partition(" ")
        arg = arg.strip()

        if verb in ("quit", "exit"):
            return False
        if verb == "help":
            self.console.print(SIMPLE_HELP, highlight=False)
        elif verb == "clear":
            self.conversation.clear()
            self.console.print("[dim]Conversation cleared.[/dim]")
        elif verb == "provider":
            self._provider(arg)
        else:
            self.console.print(f"[yellow]Unknown command: /{escape(verb)}[/yellow] (type /help)")
        return True

    def _provider(self, arg: str) -> None:
        store = self.context.store
        if not arg:
            self.console.print(f"Provider: {store.default_provider.value} ({store.default_model()})")
            return
        if ProviderType.from_string(arg) is None:
            self.console.print(f"[yellow]Unknown provider. Available: {KNOWN_PROVIDERS}[/yellow]")
            return
        try:
            cfg = store.switch_default_provider(arg.lower())
        except ProviderNotConfiguredError as e:
            self.console.print(f"[yellow]{escape(str(e))}[/yellow]")
            return
        self.console.print(f"Switched to {arg.lower()} ({cfg.model})")

    def chat(self, text: str) -> str | None:
        """Send one message and print the reply; returns the reply text."""
        self.conversation.append(Role.USER, text)
        try:
            provider = self.context.provider_factory()
        except LLMError as e:
            self.conversation.pop_last()
            self.console.print(f"[red]Error: {escape(str(e))}[/red]")
            return None

        self.console.print("[bold blue]< [/bold blue]", end="")
        try:
            reply = asyncio.run(self._reply(provider))
        except Exception as e:
            if not isinstance(e, LLMError):
                logger.exception("Unexpected failure during chat request")
            self.conversation.pop_last()
            self.console.print(f"\n[red]Error: {escape(describe_error(e))}[/red]")
            return None
        self.console.print()

        if not reply:
            self.conversation.pop_last()
            self.console.print("[red]Error: Empty response from AI[/red]")
            return None

        self.conversation.append(Role.ASSISTANT, reply)
        self.context.add_tokens(text, reply)
        return reply

    async def _reply(self, provider: LLMProvider) -> str:
        history = self.conversation.history()
        cfg = self.context.store.get_default_provider()
        async with provider:
            if provider.supports_streaming and (cfg is None or cfg.streaming):
                parts = []
                stream = await provider.chat_completion_stream(history)
                async for chunk in stream:
                    parts.append(chunk)
                    self.console.print(chunk, end="", markup=False, highlight=False)
                return "".join(parts)

            response = await provider.chat_completion(history)
            self.console.print(response.content, end="", markup=False, highlight=False)
            return response.content
