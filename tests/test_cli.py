"""Tests for the command line entry point."""
import json
import logging

import pytest
from rich.logging import RichHandler
from typer.testing import CliRunner

from parley.cli.app import app, configure_logging, log_file_path
from parley.config import ConfigStore

runner = CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the user's home directory at a temporary one."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def root_logger():
    """Restore the root logger after a test reconfigures it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCommand:
    """Tests for the parley command."""

    def test_help(self):
        """Test the help text lists the options."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--simple" in result.output
        assert "--verbose" in result.output

    def test_simple_mode_session(self, home, root_logger):
        """Test a scripted simple-mode session runs to /quit."""
        result = runner.invoke(app, ["--simple"], input="/provider\n/quit\n")
        assert result.exit_code == 0
        assert "Parley - AI Chat Assistant" in result.output
        assert "Provider: anthropic (claude-sonnet-4-20250514)" in result.output
        assert "Goodbye!" in result.output

    def test_reads_saved_config(self, home, root_logger):
        """Test the saved default provider is used."""
        path = home / ".config" / "parley" / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"default_provider": "ollama"}))

        result = runner.invoke(app, ["-s"], input="/provider\n")
        assert "Provider: ollama (codellama)" in result.output

    def test_logging_is_routed_before_config_is_read(self, home, monkeypatch):
        """Test warnings from loading the config reach the configured handler."""
        calls = []

        def record_logging(verbose, full_screen):
            calls.append(("logging", full_screen))

        def record_load(store):
            calls.append(("load", None))
            return False

        monkeypatch.setattr("parley.cli.app.configure_logging", record_logging)
        monkeypatch.setattr(ConfigStore, "load", record_load)

        result = runner.invoke(app, ["-s"], input="/quit\n")
        assert result.exit_code == 0
        assert calls == [("logging", False), ("load", None)]


class TestConfigureLogging:
    """Tests for log routing."""

    def test_simple_mode_logs_to_stderr(self, root_logger):
        """Test simple mode installs a rich handler at WARNING."""
        configure_logging(verbose=False, full_screen=False)
        assert isinstance(root_logger.handlers[0], RichHandler)
        assert root_logger.level == logging.WARNING

    def test_full_screen_logs_to_file(self, home, root_logger):
        """Test full-screen mode writes records to the log file."""
        configure_logging(verbose=True, full_screen=True)
        assert root_logger.level == logging.DEBUG

        logging.getLogger("parley.test").debug("written to file")
        for handler in root_logger.handlers:
            handler.flush()
        assert "written to file" in log_file_path().read_text()
