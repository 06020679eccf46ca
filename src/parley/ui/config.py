"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""


class Color:
    """Terminal palette indices (the basic 16-colour set).

    Rendered through ``blessed.Terminal.color``/``on_color``, so they
    degrade sensibly on 8-colour terminals.
    """

    BLACK = 0
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    CYAN = 6
    GRAY = 8
    WHITE = 15


# Streaming configuration
POLL_INTERVAL_SECONDS = 0.05  # How often the UI thread checks a running stream
CURSOR_GLYPH = "▌"  # Appended to a reply while it is still arriving
THINKING_NOTICE = "⏳ Thinking..."

# Layout
MIN_WIDTH = 20
MIN_HEIGHT = 6
GUTTER_WIDTH = 2
INPUT_PROMPT = "> "
SEPARATOR_CHAR = "─"
TAB_WIDTH = 4
TITLE = " Parley - AI Chat Assistant "
STATUS_FORMAT = " Provider: {provider} | Model: {model} | Tokens: {tokens} "

# Key polling (blessed.Terminal.inkey timeout); also how often resizes are noticed
KEY_TIMEOUT_SECONDS = 0.1

# Session notices
WELCOME_NOTICE = "Welcome to Parley - AI Chat Assistant"
HELP_HINT_NOTICE = "Type /help for commands. Ctrl+C to exit."
CLEARED_NOTICE = "Messages cleared."
