"""Tasks: units of work handed to an agent."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from argus.status import Status

_MINUTE = timedelta(minutes=1)
_HOUR = timedelta(hours=1)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    """A unit of work to be completed by an agent."""

    id: str = ""
    name: str = ""
    status: Status = Status.PENDING
    project: str = ""
    branch: str = ""
    prompt: str = ""
    backend: str = ""
    worktree: str = ""
    agent_pid: int = 0
    session_id: str = ""
    created_at: datetime | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None

    def elapsed(self) -> timedelta:
        """Return time since the task started, or zero if it has not started."""
        if self.started_at is None:
            return timedelta(0)
        if self.ended_at is not None:
            return self.ended_at - self.started_at
        return _now() - self.started_at

    def elapsed_string(self) -> str:
        """Return the elapsed time as a short human-readable string."""
        delta = self.elapsed()
        if not delta:
            return ""
        seconds = delta.total_seconds()
        if delta < _MINUTE:
            return f"{int(seconds)}s"
        if delta < _HOUR:
            return f"{int(seconds / 60)}m"
        hours = int(seconds / 3600)
        if hours < 24:
            return f"{hours}h"
        return f"{hours // 24}d"

    def set_status(self, status: Status) -> None:
        """Change the status, stamping start and end times as needed."""
        self.status = status
        now = _now()
        if status is Status.IN_PROGRESS:
            if self.started_at is None:
                self.started_at = now
        elif status is Status.COMPLETE:
            self.ended_at = now


def generate_session_id() -> str:
    """Return a new random UUID version 4 as a session ID."""
    return str(uuid.uuid4())