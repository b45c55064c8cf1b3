"""
Raw terminal handling: alternate screen, key polling and frame output.

``Terminal`` is a context manager; leaving it always restores the original
terminal mode, also when the session ends with an exception.
"""

import os
import select
import shutil
import sys
import termios
import tty
from typing import Optional, Tuple

import constants as cv
from logging_config import TerminalSetupError, get_logger

logger = get_logger("terminal")

ENTER_SCREEN = "\033[?1049h\033[?25l\033[2J\033[H"
LEAVE_SCREEN = "\033[?25h\033[?1049l"

_ARROWS = {
    "A": cv.KEY_UP,
    "B": cv.KEY_DOWN,
    "C": cv.KEY_RIGHT,
    "D": cv.KEY_LEFT,
}


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def split_key(data: bytes) -> Tuple[Optional[str], bytes]:
    """Decode the first key in *data*

    Arrow keys come back as ``up``/``down``/``left``/``right``, Return as
    ``enter``, a lone ESC as ``escape`` and printable input as the character
    itself. Other escape sequences, including Alt chords such as ``ESC q``,
    are consumed whole and returned verbatim.

    Returns:
        tuple: (key name or None when *data* is empty, remaining bytes)
    """
    if not data:
        return None, b""

    if data[:1] == b"\x1b":
        if len(data) == 1:
            return cv.KEY_ESCAPE, b""
        if data[1:2] in (b"[", b"O"):
            # CSI / SS3: parameters then a final byte in 0x40-0x7e
            for end in range(2, len(data)):
                if 0x40 <= data[end] <= 0x7E:
                    sequence = data[: end + 1]
                    final = chr(data[end])
                    if end == 2 and final in _ARROWS:
                        return _ARROWS[final], data[end + 1 :]
                    return sequence.decode("ascii", "replace"), data[end + 1 :]
            return data.decode("ascii", "replace"), b""
        if data[1:2] == b"\x1b":
            return cv.KEY_ESCAPE, data[1:]
        # Alt chord: ESC plus one character
        end = 1 + _utf8_length(data[1])
        return "\x1b" + data[1:end].decode("utf-8", "replace"), data[end:]

    if data[:1] in (b"\r", b"\n"):
        return cv.KEY_ENTER, data[1:]

    length = _utf8_length(data[0])
    return data[:length].decode("utf-8", "replace"), data[length:]


def decode_key(data: bytes) -> Optional[str]:
    """Decode a single key press, ignoring anything after it"""
    return split_key(data)[0]


class Terminal:
    """Terminal in cbreak mode on the alternate screen"""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.fd = None
        self._saved = None
        self._buffer = b""

    def __enter__(self):
        if not self.stdin.isatty() or not self.stdout.isatty():
            raise TerminalSetupError("tapedeck must run in an interactive terminal")

        try:
            self.fd = self.stdin.fileno()
            self._saved = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
            self.write(ENTER_SCREEN)
        except (termios.error, OSError, ValueError) as e:
            self._restore()
            raise TerminalSetupError(f"Cannot prepare terminal: {e}") from e

        logger.debug("Terminal in cbreak mode on the alternate screen")
        return self

    def __exit__(self, exc_type, exc, tb):
        self._restore()
        return False

    def _restore(self):
        if self._saved is None:
            return
        try:
            self.write(LEAVE_SCREEN)
        finally:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None
            logger.debug("Terminal restored")

    def size(self) -> Tuple[int, int]:
        columns, lines = shutil.get_terminal_size()
        return columns, lines

    def write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _read_available(self) -> bytes:
        """Read whatever arrived; escape sequences come in one burst"""
        data = os.read(self.fd, 64)
        if not data:
            raise EOFError("Terminal input closed")
        while data.endswith(b"\x1b") or data[-2:] in (b"\x1b[", b"\x1bO"):
            if not select.select([self.fd], [], [], 0.02)[0]:
                break
            data += os.read(self.fd, 64)
        return data

    def poll_key(self, timeout: float) -> Optional[str]:
        """Wait up to *timeout* seconds for a key press

        Returns:
            str: Key name, or None if nothing was pressed
        """
        if not self._buffer:
            if not select.select([self.fd], [], [], max(0.0, timeout))[0]:
                return None
            self._buffer = self._read_available()

        key, self._buffer = split_key(self._buffer)
        return key
