"""Viewport renderer.

Turns the session state into a grid of styled cells, then writes that
grid to a blessed terminal. Building the grid touches no terminal, so
layout is testable at any size.

Design:
- Layout top to bottom: title, message viewport, separator, input row,
  separator, status row
- Below the minimum size, chrome is dropped least important first
  (status separator, status, input separator, title); the input row
  survives while there is any row at all
- Messages are split on newlines, never soft-wrapped; each display line
  is right-truncated and only the tail of the line list is shown
- A wide character occupies two cells, the second an empty continuation
  cell; if only one column is left it is not drawn
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from blessed import Terminal

from ..session.context import SessionStatus
from ..session.conversation import ChatMessage, Role
from ..session.editor import InputBuffer, char_width, display_width, head_fitting, tail_fitting
from .config import (
    GUTTER_WIDTH,
    INPUT_PROMPT,
    MIN_HEIGHT,
    MIN_WIDTH,
    SEPARATOR_CHAR,
    STATUS_FORMAT,
    TAB_WIDTH,
    TITLE,
    Color,
)

ROLE_PREFIX = {
    Role.USER: "> ",
    Role.ASSISTANT: "< ",
    Role.SYSTEM: "  ",
}

ROLE_COLOR = {
    Role.USER: Color.GREEN,
    Role.ASSISTANT: Color.BLUE,
    Role.SYSTEM: Color.GRAY,
}

# Continuation cell to the right of a wide character
WIDE_CONTINUATION = ""


@dataclass
class Cell:
    char: str = " "
    fg: int | None = None
    bg: int | None = None
    bold: bool = False

    @property
    def style(self) -> tuple[int | None, int | None, bool]:
        return self.fg, self.bg, self.bold


class ScreenGrid:
    """A width x height grid of cells plus an optional cursor position."""

    def __init__(self, width: int, height: int):
        self.width = max(0, width)
        self.height = max(0, height)
        self.cells = [[Cell() for _ in range(self.width)] for _ in range(self.height)]
        self.cursor: tuple[int, int] | None = None

    def put(self, x: int, y: int, char: str, fg: int | None = None,
            bg: int | None = None, bold: bool = False) -> int:
        """Write one character; returns the columns it took (0 if clipped)."""
        if not (0 <= y < self.height and 0 <= x < self.width):
            return 0
        w = char_width(char)
        if x + w > self.width:
            return 0
        self.cells[y][x] = Cell(char, fg, bg, bold)
        if w == 2:
            self.cells[y][x + 1] = Cell(WIDE_CONTINUATION, fg, bg, bold)
        return w

    def puts(self, x: int, y: int, text: str, fg: int | None = None,
             bg: int | None = None, bold: bool = False) -> int:
        """Write text left to right, stopping at the first character that does not fit."""
        col = x
        for c in text:
            w = self.put(col, y, c, fg, bg, bold)
            if w == 0:
                break
            col += w
        return col - x

    def fill_row(self, y: int, char: str = " ", fg: int | None = None,
                 bg: int | None = None, bold: bool = False) -> None:
        for x in range(self.width):
            self.put(x, y, char, fg, bg, bold)

    def row_text(self, y: int) -> str:
        """The characters of row ``y`` as a string."""
        return "".join(cell.char for cell in self.cells[y])


@dataclass(frozen=True)
class Layout:
    """Row assignment for one terminal size (None means the row is dropped)."""

    title: int | None = None
    messages: range = field(default_factory=lambda: range(0))
    input_separator: int | None = None
    input: int | None = None
    status_separator: int | None = None
    status: int | None = None


# Optional rows, most important first; kept while there is room
_CHROME = ("title", "input_separator", "status", "status_separator")


def compute_layout(width: int, height: int) -> Layout:
    if width <= 0 or height <= 0:
        return Layout()

    if width < MIN_WIDTH:
        kept: set[str] = set()
    else:
        # One row each for the input line and the smallest viewport
        room = min(height - 2, MIN_HEIGHT - 2)
        kept = set(_CHROME[:max(0, room)])

    bottom = height - 1
    status = status_separator = None
    if "status" in kept:
        status, bottom = bottom, bottom - 1
    if "status_separator" in kept:
        status_separator, bottom = bottom, bottom - 1

    input_row, bottom = bottom, bottom - 1
    input_separator = None
    if "input_separator" in kept:
        input_separator, bottom = bottom, bottom - 1

    title = 0 if "title" in kept else None
    top = 1 if title is not None else 0

    return Layout(
        title=title,
        messages=range(top, max(top, bottom + 1)),
        input_separator=input_separator,
        input=input_row,
        status_separator=status_separator,
        status=status,
    )


def printable_line(line: str) -> str:
    """Expand tabs and drop control characters so every cell is one glyph."""
    line = line.expandtabs(TAB_WIDTH)
    return "".join(c for c in line if c.isprintable())


def display_lines(messages: Iterable[ChatMessage]) -> list[tuple[Role, bool, str]]:
    """Flatten messages into (role, is_first_line, text) display lines.

    CRLF and bare CR end a line like LF does.
    """
    lines = []
    for msg in messages:
        content = msg.content.replace("\r\n", "\n").replace("\r", "\n")
        for i, line in enumerate(content.split("\n")):
            lines.append((msg.role, i == 0, printable_line(line)))
    return lines


def status_text(status: SessionStatus) -> str:
    return STATUS_FORMAT.format(
        provider=status.provider,
        model=status.model,
        tokens=status.total_tokens,
    )


def render(
    conversation: Iterable[ChatMessage],
    input_buffer: InputBuffer,
    status: SessionStatus,
    size: tuple[int, int],
) -> ScreenGrid:
    """Lay out the whole screen for a terminal of ``size`` (width, height)."""
    width, height = size
    grid = ScreenGrid(width, height)
    layout = compute_layout(grid.width, grid.height)
    if layout.input is None:
        return grid

    if layout.title is not None:
        start = (grid.width - len(TITLE)) // 2 if grid.width > len(TITLE) else 0
        grid.puts(start, layout.title, TITLE, fg=Color.BLACK, bg=Color.CYAN, bold=True)

    _render_messages(grid, conversation, layout.messages)

    for row in (layout.input_separator, layout.status_separator):
        if row is not None:
            grid.fill_row(row, SEPARATOR_CHAR, fg=Color.GRAY)

    _render_input(grid, input_buffer, layout.input)

    if layout.status is not None:
        grid.fill_row(layout.status, bg=Color.GRAY)
        grid.puts(0, layout.status, status_text(status), fg=Color.WHITE, bg=Color.GRAY)

    return grid


def _render_messages(grid: ScreenGrid, conversation: Iterable[ChatMessage], rows: range) -> None:
    if not rows:
        return
    lines = display_lines(conversation)[-len(rows):]
    max_width = max(0, grid.width - GUTTER_WIDTH)
    for row, (role, first, text) in zip(rows, lines, strict=False):
        color = ROLE_COLOR[role]
        if first:
            grid.puts(0, row, ROLE_PREFIX[role], fg=color, bold=True)
        grid.puts(GUTTER_WIDTH, row, head_fitting(text, max_width), fg=color)


def _render_input(grid: ScreenGrid, input_buffer: InputBuffer, row: int) -> None:
    grid.puts(0, row, INPUT_PROMPT, fg=Color.YELLOW, bold=True)
    text = input_buffer.text
    max_width = max(0, grid.width - len(INPUT_PROMPT))
    grid.puts(len(INPUT_PROMPT), row, tail_fitting(text, max_width))
    col = min(display_width(text) + len(INPUT_PROMPT), grid.width - 1)
    grid.cursor = (max(0, col), row)


def _style_sequence(term: Terminal, style: tuple[int | None, int | None, bool]) -> str:
    fg, bg, bold = style
    seq = term.normal
    if bold:
        seq += term.bold
    if fg is not None:
        seq += term.color(fg)
    if bg is not None:
        seq += term.on_color(bg)
    return seq


def flush(grid: ScreenGrid, term: Terminal) -> None:
    """Write ``grid`` to the terminal in one print, then place the cursor."""
    out = [term.home]
    for y, cells in enumerate(grid.cells):
        out.append(term.move_xy(0, y))
        current = None
        for cell in cells:
            if cell.char == WIDE_CONTINUATION:
                continue
            if cell.style != current:
                current = cell.style
                out.append(_style_sequence(term, current))
            out.append(cell.char)
        out.append(term.normal)
    if grid.cursor is not None:
        out.append(term.move_xy(*grid.cursor))
    print("".join(out), end="", flush=True)
