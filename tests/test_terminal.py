"""Tests for terminal module - key decoding and setup failures"""

import io

import pytest

import constants as cv
from logging_config import TerminalSetupError
from terminal import Terminal, decode_key, split_key


@pytest.mark.parametrize(
    "data, key",
    [
        (b"\x1b[A", cv.KEY_UP),
        (b"\x1b[B", cv.KEY_DOWN),
        (b"\x1b[C", cv.KEY_RIGHT),
        (b"\x1b[D", cv.KEY_LEFT),
        (b"\x1bOA", cv.KEY_UP),
        (b"\x1bOB", cv.KEY_DOWN),
        (b"\r", cv.KEY_ENTER),
        (b"\n", cv.KEY_ENTER),
        (b"\x1b", cv.KEY_ESCAPE),
        (b"q", "q"),
        (b"p", "p"),
        (b"o", "o"),
        ("é".encode("utf-8"), "é"),
        (b"", None),
    ],
)
def test_decode_key(data, key):
    assert decode_key(data) == key


def test_split_keeps_remaining_input():
    """Test that a burst of keys is decoded one at a time"""
    data = b"\x1b[Bq\r"

    key, rest = split_key(data)
    assert key == cv.KEY_DOWN
    key, rest = split_key(rest)
    assert key == "q"
    key, rest = split_key(rest)
    assert key == cv.KEY_ENTER
    assert rest == b""


def test_other_sequences_are_consumed():
    key, rest = split_key(b"\x1b[5~x")

    assert key == "\x1b[5~"
    assert rest == b"x"


def test_alt_chord_is_one_key():
    """Test that Alt+q is not read as Escape followed by q"""
    key, rest = split_key(b"\x1bqp")

    assert key == "\x1bq"
    assert rest == b"p"


def test_alt_chord_with_utf8_character():
    key, rest = split_key(b"\x1b" + "é".encode("utf-8"))

    assert key == "\x1bé"
    assert rest == b""


def test_double_escape():
    key, rest = split_key(b"\x1b\x1b[A")

    assert key == cv.KEY_ESCAPE
    assert split_key(rest)[0] == cv.KEY_UP


def test_requires_tty():
    """Test that a non-interactive stream is rejected before touching termios"""
    stream = io.StringIO()

    with pytest.raises(TerminalSetupError):
        with Terminal(stdin=stream, stdout=stream):
            pass
