"""Agent processes running on a pseudo-terminal, with output capture and attach."""

from __future__ import annotations

import fcntl
import os
import select
import signal as signals
import struct
import subprocess
import termios
import threading
import time
from typing import BinaryIO

from argus.command import AgentCommand
from argus.ringbuffer import RingBuffer

DEFAULT_BUFFER_SIZE = 256 * 1024
IDLE_THRESHOLD = 3.0
DEFAULT_TERM_ROWS = 24
DEFAULT_TERM_COLS = 80

_READ_CHUNK = 4096
_POLL_INTERVAL = 0.05
_DRAIN_TIMEOUT = 1.0


class SessionError(Exception):
    """Base class of session errors."""


class AlreadyAttachedError(SessionError):
    """Raised when attaching to a session that is already attached."""

    def __init__(self, message: str = "session is already attached") -> None:
        super().__init__(message)


class NotRunningError(SessionError):
    """Raised when the session's process is no longer running."""

    def __init__(self, message: str = "process is not running") -> None:
        super().__init__(message)


class SessionNotFoundError(SessionError):
    """Raised when no session exists for a task."""

    def __init__(self, message: str = "session not found") -> None:
        super().__init__(message)


def _set_winsize(fd: int, rows: int, cols: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def _acquire_controlling_tty() -> None:
    request = getattr(termios, "TIOCSCTTY", None)
    if request is None:
        return
    try:
        fcntl.ioctl(0, request, 0)
    except OSError:
        pass


class Session:
    """One agent process on a pseudo-terminal.

    Output is continuously read into a ring buffer and, while attached,
    also copied to the attached writer.
    """

    def __init__(
        self,
        task_id: str,
        command: AgentCommand,
        process: subprocess.Popen,
        master_fd: int,
        rows: int,
        cols: int,
    ) -> None:
        self.task_id = task_id
        self.command = command
        self.idle_threshold = IDLE_THRESHOLD
        self._process = process
        self._master = master_fd
        self._lock = threading.Lock()
        self._fd_lock = threading.Lock()
        self._buffer = RingBuffer(DEFAULT_BUFFER_SIZE)
        self._tee: BinaryIO | None = None
        self._last_output: float | None = None
        self._rows = rows
        self._cols = cols
        self._exited = threading.Event()
        self._done = threading.Event()
        self._error: subprocess.CalledProcessError | None = None
        self._attached = False
        self._detached = False
        self._wake: threading.Event | None = None
        self._reader = threading.Thread(
            target=self._read_loop, name=f"session-read-{task_id}", daemon=True
        )
        self._waiter = threading.Thread(
            target=self._wait_loop, name=f"session-wait-{task_id}", daemon=True
        )

    def _start(self) -> None:
        self._reader.start()
        self._waiter.start()

    def _read_loop(self) -> None:
        fd = self._master
        drain_deadline: float | None = None
        while True:
            try:
                ready, _, _ = select.select([fd], [], [], _POLL_INTERVAL)
            except (OSError, ValueError):
                return
            if self._exited.is_set():
                if drain_deadline is None:
                    drain_deadline = time.monotonic() + _DRAIN_TIMEOUT
                if not ready or time.monotonic() >= drain_deadline:
                    return
            if not ready:
                continue
            try:
                chunk = os.read(fd, _READ_CHUNK)
            except OSError:
                return
            if not chunk:
                return
            with self._lock:
                self._buffer.write(chunk)
                self._last_output = time.monotonic()
                tee = self._tee
            if tee is not None:
                try:
                    tee.write(chunk)
                except (OSError, ValueError):
                    pass

    def _wait_loop(self) -> None:
        returncode = self._process.wait()
        self._exited.set()
        self._reader.join()
        with self._fd_lock:
            os.close(self._master)
            self._master = -1
        if returncode:
            self._error = subprocess.CalledProcessError(returncode, self.command.args)
        self._done.set()
        with self._lock:
            wake = self._wake
        if wake is not None:
            wake.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the process exits; return whether it has exited."""
        return self._done.wait(timeout)

    def alive(self) -> bool:
        """Return True while the process is running."""
        return not self._done.is_set()

    def error(self) -> subprocess.CalledProcessError | None:
        """Return the exit error of the process, or None if it exited with 0."""
        return self._error

    def is_idle(self) -> bool:
        """Return True if the process is alive but has been silent for a while."""
        if not self.alive():
            return False
        with self._lock:
            last = self._last_output
        if last is None:
            return False
        return time.monotonic() - last >= self.idle_threshold

    def pid(self) -> int:
        """Return the process ID."""
        return self._process.pid or 0

    def _write_all(self, data: bytes) -> None:
        with self._fd_lock:
            if self._master < 0:
                raise NotRunningError()
            view = memoryview(data)
            while view:
                written = os.write(self._master, view)
                view = view[written:]

    def _copy_input(
        self, stdin: BinaryIO, wake: threading.Event, failures: list[BaseException]
    ) -> None:
        read = getattr(stdin, "read1", None) or stdin.read
        try:
            while True:
                try:
                    chunk = read(_READ_CHUNK)
                except EOFError:
                    break
                if wake.is_set() or not chunk:
                    break
                self._write_all(chunk)
        except (OSError, ValueError, SessionError) as exc:
            failures.append(exc)
        wake.set()

    def attach(self, stdin: BinaryIO, stdout: BinaryIO) -> None:
        """Connect stdin and stdout to the terminal until detach or exit.

        Recent output is replayed first. Returns on detach or clean exit;
        raises the process error if the process failed, or the input error
        if reading or forwarding stdin failed.
        """
        wake = threading.Event()
        with self._lock:
            if self._attached:
                raise AlreadyAttachedError()
            self._attached = True
            self._detached = False
            self._wake = wake
            replay = self._buffer.getvalue()
            self._tee = stdout

        failures: list[BaseException] = []
        try:
            if replay:
                stdout.write(replay)
            if self._done.is_set():
                wake.set()
            threading.Thread(
                target=self._copy_input,
                args=(stdin, wake, failures),
                name=f"session-input-{self.task_id}",
                daemon=True,
            ).start()
            wake.wait()

            with self._lock:
                detached = self._detached
            if detached:
                return
            if self._done.is_set():
                if self._error is not None:
                    raise self._error
                return
            if failures:
                raise failures[0]
        finally:
            with self._lock:
                self._tee = None
                self._attached = False
                self._wake = None
            wake.set()

    def detach(self) -> None:
        """End an active attach; does nothing when not attached."""
        with self._lock:
            if self._attached and self._wake is not None:
                self._detached = True
                self._wake.set()

    def signal(self, sig: int) -> None:
        """Send a signal to the process; raise NotRunningError if it has exited."""
        if self._exited.is_set() or self._process.returncode is not None:
            raise NotRunningError()
        self._process.send_signal(sig)

    def stop(self) -> None:
        """Send SIGTERM to the process if it is still running."""
        if not self.alive():
            return
        try:
            self.signal(signals.SIGTERM)
        except NotRunningError:
            pass

    def recent_output(self) -> bytes:
        """Return the buffered recent output, oldest first."""
        with self._lock:
            return self._buffer.getvalue()

    def total_written(self) -> int:
        """Return the count of all output bytes received so far."""
        with self._lock:
            return self._buffer.total_written()

    def work_dir(self) -> str:
        """Return the command's directory, or the inherited working directory."""
        if self.command.cwd:
            return self.command.cwd
        try:
            return os.getcwd()
        except OSError:
            return ""

    def resize(self, rows: int, cols: int) -> None:
        """Set the terminal size."""
        with self._lock:
            self._rows = rows
            self._cols = cols
        with self._fd_lock:
            if self._master < 0:
                raise NotRunningError()
            _set_winsize(self._master, rows, cols)

    def pty_size(self) -> tuple[int, int]:
        """Return the current terminal size as (cols, rows)."""
        with self._lock:
            return self._cols, self._rows

    def write_input(self, data: bytes) -> int:
        """Write raw bytes to the process's terminal input; return the count."""
        self._write_all(data)
        return len(data)


def start_session(
    task_id: str, command: AgentCommand, rows: int, cols: int
) -> Session:
    """Start command on a new pseudo-terminal of the given size.

    A zero row or column count falls back to 80x24.
    """
    if not rows or not cols:
        rows, cols = DEFAULT_TERM_ROWS, DEFAULT_TERM_COLS

    master, slave = os.openpty()
    try:
        _set_winsize(slave, rows, cols)
        process = subprocess.Popen(
            command.args,
            stdin=slave,
            stdout=slave,
            stderr=slave,
            cwd=command.cwd or None,
            start_new_session=True,
            preexec_fn=_acquire_controlling_tty,
            close_fds=True,
        )
    except BaseException:
        os.close(master)
        raise
    finally:
        os.close(slave)

    session = Session(task_id, command, process, master, rows, cols)
    session._start()
    return session