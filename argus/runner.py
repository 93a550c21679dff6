"""Management of agent sessions keyed by task ID."""

from __future__ import annotations

import threading
from typing import BinaryIO, Callable, Optional

from argus.command import build_command
from argus.config import Config
from argus.session import (
    Session,
    SessionError,
    SessionNotFoundError,
    start_session,
)
from argus.task import Task

FinishCallback = Callable[[str, Optional[BaseException], bool, bytes], None]


class Runner:
    """Starts, tracks and stops agent sessions, one per task.

    ``on_finish`` is called from a background thread when a session's
    process exits, with the task ID, the process error (or None), whether
    the session was stopped explicitly, and the last buffered output.
    """

    def __init__(self, on_finish: FinishCallback | None = None) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._stopped: set[str] = set()
        self._on_finish = on_finish

    def start(
        self,
        task: Task,
        cfg: Config,
        rows: int = 0,
        cols: int = 0,
        resume: bool = False,
    ) -> Session:
        """Launch an agent session for the task.

        A zero row or column count falls back to 80x24. With resume the
        agent reconnects to its earlier conversation. Raises SessionError
        if the task already has a session.
        """
        with self._lock:
            if task.id in self._sessions:
                raise SessionError(f"session already exists for task {task.id}")

        command = build_command(task, cfg, resume)
        session = start_session(task.id, command, rows, cols)

        with self._lock:
            self._sessions[task.id] = session

        threading.Thread(
            target=self._watch,
            args=(task.id, session),
            name=f"runner-watch-{task.id}",
            daemon=True,
        ).start()
        return session

    def _watch(self, task_id: str, session: Session) -> None:
        session.wait()
        last_output = session.recent_output()
        with self._lock:
            self._sessions.pop(task_id, None)
            was_stopped = task_id in self._stopped
            self._stopped.discard(task_id)
        if self._on_finish is not None:
            self._on_finish(task_id, session.error(), was_stopped, last_output)

    def get(self, task_id: str) -> Session | None:
        """Return the session of a task, or None."""
        with self._lock:
            return self._sessions.get(task_id)

    def attach(self, task_id: str, stdin: BinaryIO, stdout: BinaryIO) -> None:
        """Connect stdin and stdout to a task's session until detach or exit."""
        session = self.get(task_id)
        if session is None:
            raise SessionNotFoundError()
        session.attach(stdin, stdout)

    def detach(self, task_id: str) -> None:
        """Disconnect from a task's session without stopping it."""
        session = self.get(task_id)
        if session is not None:
            session.detach()

    def stop(self, task_id: str) -> None:
        """Send SIGTERM to a task's session; raise SessionNotFoundError if none."""
        with self._lock:
            session = self._sessions.get(task_id)
            if session is None:
                raise SessionNotFoundError()
            self._stopped.add(task_id)
        session.stop()

    def stop_all(self) -> None:
        """Stop every running session."""
        for task_id in self.running():
            try:
                self.stop(task_id)
            except SessionNotFoundError:
                pass

    def running(self) -> list[str]:
        """Return the task IDs of all active sessions."""
        with self._lock:
            return list(self._sessions)

    def idle(self) -> list[str]:
        """Return the task IDs of sessions that are alive but silent."""
        with self._lock:
            sessions = list(self._sessions.items())
        return [task_id for task_id, session in sessions if session.is_idle()]

    def work_dir(self, task_id: str) -> str:
        """Return the working directory of a task's session, or ""."""
        session = self.get(task_id)
        return session.work_dir() if session is not None else ""

    def has_session(self, task_id: str) -> bool:
        """Return whether the task has a session."""
        with self._lock:
            return task_id in self._sessions