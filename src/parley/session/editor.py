"""Input line editing and display-width arithmetic.

The buffer stores UTF-8 bytes, the unit the terminal delivers, and
guarantees it ends on a character boundary after every mutation. Width
helpers decide how many terminal columns text occupies, so the renderer
can truncate without splitting a character.
"""

# Code point ranges drawn two columns wide
WIDE_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),    # CJK unified ideographs
    (0x3400, 0x4DBF),    # CJK extension A
    (0x20000, 0x2A6DF),  # CJK extension B
    (0xFF00, 0xFFEF),    # fullwidth forms
    (0x3000, 0x303F),    # CJK punctuation
)


def char_width(char: str) -> int:
    """Columns taken by a single character (1 or 2)."""
    cp = ord(char)
    for low, high in WIDE_RANGES:
        if low <= cp <= high:
            return 2
    return 1


def display_width(text: str) -> int:
    """Total columns taken by ``text``."""
    return sum(char_width(c) for c in text)


def head_fitting(text: str, max_width: int) -> str:
    """Longest prefix of ``text`` whose width is at most ``max_width``."""
    width = 0
    for i, c in enumerate(text):
        w = char_width(c)
        if width + w > max_width:
            return text[:i]
        width += w
    return text


def tail_fitting(text: str, max_width: int) -> str:
    """Longest suffix of ``text`` whose width is at most ``max_width``."""
    width = 0
    start = len(text)
    while start > 0:
        w = char_width(text[start - 1])
        if width + w > max_width:
            break
        width += w
        start -= 1
    return text[start:]


def _is_char_start(byte: int) -> bool:
    # ASCII (0xxxxxxx) or a multi-byte lead (11xxxxxx)
    return (byte & 0x80) == 0 or (byte & 0xC0) == 0xC0


class InputBuffer:
    """The in-progress input line.

    Example:
        buf = InputBuffer()
        buf.insert("héllo")
        buf.delete_last()   # removes "o"
        buf.text            # "héll"
    """

    def __init__(self, text: str = ""):
        self._data = bytearray(text.encode("utf-8"))

    def insert(self, text: str) -> None:
        """Append text as it arrived from the terminal."""
        self._data += text.encode("utf-8")

    def delete_last(self) -> int:
        """Remove the final complete character.

        Returns:
            Number of bytes removed (0 if the buffer was empty)
        """
        if not self._data:
            return 0
        i = len(self._data)
        while i > 0:
            i -= 1
            if _is_char_start(self._data[i]):
                removed = len(self._data) - i
                del self._data[i:]
                return removed
        # No start byte at all; drop exactly one byte
        del self._data[-1:]
        return 1

    def clear(self) -> None:
        """Empty the buffer (the bytearray keeps its allocation)."""
        del self._data[:]

    @property
    def text(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    def display_width(self) -> int:
        return display_width(self.text)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __repr__(self) -> str:
        return f"InputBuffer({self.text!r})"
