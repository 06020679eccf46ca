"""Main CLI application using Typer."""
import logging
from pathlib import Path

import typer
from blessed import Terminal
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from ..config import ConfigStore, default_data_path
from ..session import SessionContext
from ..ui.app import TerminalApp, TerminalUnavailableError
from ..ui.wizard import TerminalPrompts, run_config_wizard
from .providers import provider_factory
from .simple import SimpleChat

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Create Typer app
app = typer.Typer(
    name="parley",
    help="Terminal chat with Anthropic, OpenAI, DeepSeek and Ollama models",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Console for rich output
console = Console()


def log_file_path() -> Path:
    return default_data_path() / "parley.log"


def configure_logging(verbose: bool, full_screen: bool) -> None:
    """Route log records away from the screen the UI owns.

    Simple mode logs to stderr through rich; full-screen mode appends to
    the log file under the user's data directory.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler: logging.Handler
    if full_screen:
        path = log_file_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError:
            # Nowhere safe to write; stay silent rather than corrupt the screen
            handler = logging.NullHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)

    logging.basicConfig(level=level, handlers=[handler], force=True)


def run_simple(context: SessionContext) -> None:
    SimpleChat(context, console).run()


def first_run_setup(store: ConfigStore, term: Terminal) -> None:
    console.print("\n  Welcome to Parley! Let's configure your AI provider.\n")
    with term.fullscreen(), term.cbreak():
        configured = run_config_wizard(store, TerminalPrompts(term))
    if not configured:
        console.print("\n  Setup cancelled. You can run /config later to configure.")
        console.print("  Or set ANTHROPIC_API_KEY / OPENAI_API_KEY environment variable.\n")


@app.command()
def main(
    simple: bool = typer.Option(
        False,
        "--simple",
        "-s",
        help="Run in simple line mode (no full-screen UI)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output"
    ),
):
    """Chat with a language model in your terminal.

    Full-screen mode keys: Enter sends, Backspace deletes, Ctrl+C exits.
    Type /help in a session for the slash commands.
    """
    load_dotenv()

    # Logging is routed before the config is read so load warnings are kept
    term = None if simple else Terminal()
    full_screen = term is not None and term.is_a_tty
    configure_logging(verbose, full_screen=full_screen)
    if term is not None and not full_screen:
        logger.debug("stdout is not a terminal; using simple mode")

    store = ConfigStore()
    loaded = store.load()
    context = SessionContext(store=store, provider_factory=provider_factory(store))

    if not full_screen:
        run_simple(context)
        return

    if not loaded and not store.has_credentials():
        first_run_setup(store, term)

    try:
        TerminalApp(context, term).run()
    except TerminalUnavailableError as e:
        logger.warning("Full-screen mode unavailable (%s), falling back to simple mode", e)
        configure_logging(verbose, full_screen=False)
        run_simple(context)


def run():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
