"""Taking over the terminal to interact with a running session."""

from __future__ import annotations

import fcntl
import struct
import sys
import termios
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from argus.session import Session, SessionError

HEADER_HEIGHT = 1
DETACH_KEY = 0x11  # ctrl+q

_FLAME_LEFT = "░▒▓▞▚"
_FLAME_RIGHT = "▚▞▓▒░"
_HINT = "ctrl+q detach"
_LEFT_FIXED = 2
_RIGHT_FIXED = 3
_DEFAULT_ROWS = 24
_DEFAULT_COLS = 80


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    if width > 3:
        return text[: width - 3] + "..."
    return text[:width]


@dataclass
class HeaderWriter:
    """Passes output through to a writer and draws the header line on request.

    The header is drawn once; redrawing it on every write would fight with
    the child's cursor movements.
    """

    inner: BinaryIO
    task_name: str
    cols: int
    rows: int

    def write(self, data: bytes) -> int:
        """Write data to the inner writer and return the byte count."""
        written = self.inner.write(data)
        flush = getattr(self.inner, "flush", None)
        if flush is not None:
            flush()
        return len(data) if written is None else written

    def draw_header(self) -> None:
        """Draw the header on the first row: task name, title, detach hint."""
        center_width = len(_FLAME_LEFT + " ARGUS " + _FLAME_RIGHT)

        avail = max(self.cols - center_width - 2, 0)
        left_avail = avail * 6 // 10 - _LEFT_FIXED
        right_avail = avail - left_avail - _LEFT_FIXED - _RIGHT_FIXED
        left_avail = max(left_avail, 0)
        right_avail = max(right_avail, 0)

        task = _truncate(self.task_name, left_avail)
        hint = _truncate(_HINT, right_avail)

        left_content = f" {task} "
        right_content = f" {hint} "

        left_pad = avail // 2 + 1 - len(left_content)
        right_pad = (
            self.cols - len(left_content) - left_pad - center_width - len(right_content)
        )
        left_side = left_content + " " * max(left_pad, 0)
        right_side = " " * max(right_pad, 0) + right_content

        line = (
            "\x1b[1;1H\x1b[2K"
            "\x1b[48;5;235m"
            f"\x1b[38;5;252m{left_side}"
            "\x1b[38;5;208m░▒\x1b[38;5;202m▓\x1b[38;5;196m▞\x1b[38;5;87m▚"
            "\x1b[1;38;5;87m ARGUS "
            "\x1b[22;38;5;87m▚\x1b[38;5;196m▞\x1b[38;5;202m▓\x1b[38;5;208m▒░"
            f"\x1b[38;5;241m{right_side}"
            "\x1b[K"
            "\x1b[0m"
        )
        self.write(line.encode("utf-8"))


class DetachReader:
    """Reads input and detaches the session when ctrl+q is seen.

    The ctrl+q byte is removed from the data; once it has been seen every
    later read returns end of input.
    """

    def __init__(self, reader: BinaryIO, session: Session) -> None:
        self.reader = reader
        self.session = session
        self.detached = False

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes, stripping a ctrl+q and detaching on it."""
        if self.detached:
            return b""
        read = getattr(self.reader, "read1", None) or self.reader.read
        data = read(size)
        if not data:
            return b""
        index = data.find(bytes([DETACH_KEY]))
        if index < 0:
            return data
        self.detached = True
        self.session.detach()
        return data[:index] + data[index + 1:]


def _stdin_fd() -> int | None:
    try:
        return sys.stdin.fileno()
    except (OSError, ValueError, AttributeError):
        return None


@contextmanager
def _raw_input(fd: int | None) -> Iterator[None]:
    """Put the terminal into raw input mode, keeping output processing."""
    original = None
    if fd is not None:
        try:
            original = termios.tcgetattr(fd)
        except termios.error:
            original = None
    if original is None:
        yield
        return

    raw = list(original)
    raw[0] &= ~(
        termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
    )
    raw[2] |= termios.CS8
    raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    control = list(original[6])
    control[termios.VMIN] = 1
    control[termios.VTIME] = 0
    raw[6] = control
    try:
        termios.tcsetattr(fd, termios.TCSANOW, raw)
    except termios.error:
        pass
    try:
        yield
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSANOW, original)
        except termios.error:
            pass


def _terminal_size(fd: int | None) -> tuple[int, int]:
    """Return (rows, cols) of the terminal, falling back to 24x80."""
    if fd is None:
        return _DEFAULT_ROWS, _DEFAULT_COLS
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\0" * 8)
    except OSError:
        return _DEFAULT_ROWS, _DEFAULT_COLS
    rows, cols, _, _ = struct.unpack("HHHH", packed)
    return rows, cols


@dataclass
class AttachCommand:
    """Takes over the terminal and connects it to a session until detach."""

    session: Session
    task_name: str = ""
    stdin: BinaryIO | None = None
    stdout: BinaryIO | None = None

    def run(self) -> None:
        """Attach the terminal below a header line until ctrl+q or exit.

        Returns on detach or clean exit; raises the process error otherwise.
        """
        stdin = self.stdin if self.stdin is not None else sys.stdin.buffer
        stdout = self.stdout if self.stdout is not None else sys.stdout.buffer
        fd = _stdin_fd()

        with _raw_input(fd):
            rows, cols = _terminal_size(fd)
            header = HeaderWriter(stdout, self.task_name, cols, rows)
            header.write(b"\x1b[2J\x1b[H")
            header.draw_header()
            first = HEADER_HEIGHT + 1
            header.write(f"\x1b[{first};{rows}r\x1b[{first};1H".encode())

            try:
                self.session.resize(max(rows - HEADER_HEIGHT, 1), cols)
            except (SessionError, OSError):
                pass

            try:
                self.session.attach(DetachReader(stdin, self.session), header)
            finally:
                header.write(b"\x1b[r")