"""
Two-pane frame: the song list on the left, player info on the right.
"""

import os
import unicodedata
from functools import lru_cache
from typing import List, Optional

import constants as cv

MIN_WIDTH = 24
MIN_HEIGHT = 8


def printable(name: str) -> str:
    """Replace undecodable bytes in a file name for display"""
    try:
        return os.fsencode(name).decode("utf-8", "replace")
    except UnicodeEncodeError:
        return name.encode("utf-8", "replace").decode("utf-8")


@lru_cache(maxsize=4096)
def _char_width(ch: str) -> int:
    """Terminal cells taken by one character (0, 1 or 2)"""
    if unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("F", "W"):
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(_char_width(ch) for ch in text)


def _fit(text: str, width: int) -> str:
    """Cut or pad *text* to exactly *width* cells"""
    if width <= 0:
        return ""
    if display_width(text) > width:
        target = width - 1
        out = []
        used = 0
        for ch in text:
            cells = _char_width(ch)
            if used + cells > target:
                break
            out.append(ch)
            used += cells
        text = "".join(out) + "…"
    return text + " " * (width - display_width(text))


def _wrap_text(text: str, width: int) -> list:
    """Wrap text to multiple lines if needed

    Args:
        text: Text to wrap
        width: Maximum width per line

    Returns:
        list: Lines of wrapped text
    """
    if display_width(text) <= width:
        return [text]

    lines = []
    current_line = ""
    for word in text.split():
        test_line = f"{current_line} {word}".strip()
        if display_width(test_line) <= width:
            current_line = test_line
        else:
            if current_line:
                lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines


def _box(title: str, rows: List[str], width: int, height: int) -> List[str]:
    """Draw a bordered block; *rows* are already fitted to ``width - 2``"""
    inner = width - 2
    heading = f"─{title}"[:inner]
    top = "┌" + heading + "─" * (inner - len(heading)) + "┐"
    body = [f"│{row}│" for row in rows[: height - 2]]
    while len(body) < height - 2:
        body.append("│" + " " * inner + "│")
    bottom = "└" + "─" * inner + "┘"
    return [top] + body + [bottom]


def scroll_offset(cursor: Optional[int], visible: int) -> int:
    """First list index to show so that the cursor stays on screen"""
    if cursor is None or visible <= 0:
        return 0
    return max(0, cursor - visible + 1)


def song_rows(state, width: int, height: int) -> List[str]:
    """Rows of the song pane, two per entry: a rule and the name"""
    library = state.library
    visible = max(1, height // 2)
    offset = scroll_offset(library.cursor, visible)

    rows = []
    for index, name in enumerate(library.items[offset : offset + visible], start=offset):
        item = [_fit("-" * width, width), _fit(printable(name), width)]
        if index == library.cursor:
            item = [f"{cv.HIGHLIGHT}{line}{cv.RESET}" for line in item]
        rows.extend(item)
    return rows


def info_rows(state, width: int) -> List[str]:
    """Rows of the player info pane"""
    lines = [f"Song: {printable(state.now_playing)}", f"Paused: {state.is_paused}"]
    if state.backend is None:
        lines.append("Playback unavailable")
    if state.status:
        lines.append("")
        lines.extend(_wrap_text(printable(state.status), width))
    lines.append("")
    lines.extend(_wrap_text(cv.KEY_HELP, width))
    return [_fit(line, width) for line in lines]


def build_frame(state, width: int, height: int) -> List[str]:
    """Lay out *state* on a ``width`` x ``height`` screen

    Returns:
        list: ``height`` lines of text
    """
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        message = _fit("Terminal too small", width)
        return [message] + [" " * width] * (height - 1)

    margin = cv.SCREEN_MARGIN
    inner_width = width - 2 * margin
    inner_height = height - 2 * margin
    left_width = inner_width // 2
    right_width = inner_width - left_width

    left = _box(
        "Songs",
        song_rows(state, left_width - 2, inner_height - 2),
        left_width,
        inner_height,
    )
    right = _box(
        "Player Info",
        info_rows(state, right_width - 2),
        right_width,
        inner_height,
    )

    blank = " " * width
    pad = " " * margin
    frame = [blank] * margin
    frame.extend(f"{pad}{l}{r}{pad}" for l, r in zip(left, right))
    frame.extend([blank] * margin)
    return frame


class RenderAdapter:
    """Draws the application state through a terminal"""

    def __init__(self, terminal):
        self.terminal = terminal
        self._last_frame = None
        self._last_size = None

    def draw(self, state) -> bool:
        """Draw *state*; skipped if the frame did not change

        Returns:
            bool: True if anything was written
        """
        size = self.terminal.size()
        frame = "\n".join(build_frame(state, *size))
        if frame == self._last_frame and size == self._last_size:
            return False

        prefix = "\033[2J\033[H" if size != self._last_size else "\033[H"
        self.terminal.write(prefix + frame)
        self._last_frame = frame
        self._last_size = size
        return True
