"""Keystroke classification shared by the chat screen and the wizard prompts.

Works on ``blessed.keyboard.Keystroke`` values: ``str(key)`` is the raw
text and ``key.name`` the decoded special-key name, if any.
"""

from blessed.keyboard import Keystroke

CTRL_C = "\x03"
BACKSPACE_CHARS = ("\x7f", "\x08")
ENTER_CHARS = ("\r", "\n")


def is_interrupt(key: Keystroke) -> bool:
    return str(key) == CTRL_C


def is_escape(key: Keystroke) -> bool:
    return key.name == "KEY_ESCAPE" or str(key) == "\x1b"


def is_enter(key: Keystroke) -> bool:
    return key.name == "KEY_ENTER" or str(key) in ENTER_CHARS


def is_backspace(key: Keystroke) -> bool:
    return key.name == "KEY_BACKSPACE" or str(key) in BACKSPACE_CHARS


def printable_text(key: Keystroke) -> str:
    """Text a keystroke inserts, or '' for control and special keys."""
    if key.is_sequence:
        return ""
    text = str(key)
    return text if text and text.isprintable() else ""
