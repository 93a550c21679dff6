"""SQLite-backed store for tasks, projects, backends and settings."""

from __future__ import annotations

import os
import re
import sqlite3
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable

from argus.config import Backend, Config, Project, default_config
from argus.status import Status, parse_status
from argus.task import Task

SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS tasks (
    id         TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    status     TEXT NOT NULL DEFAULT 'pending',
    project    TEXT NOT NULL DEFAULT '',
    branch     TEXT NOT NULL DEFAULT '',
    prompt     TEXT NOT NULL DEFAULT '',
    backend    TEXT NOT NULL DEFAULT '',
    worktree   TEXT NOT NULL DEFAULT '',
    agent_pid  INTEGER NOT NULL DEFAULT 0,
    session_id TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    started_at TEXT NOT NULL DEFAULT '',
    ended_at   TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS projects (
    name    TEXT PRIMARY KEY,
    path    TEXT NOT NULL,
    branch  TEXT NOT NULL DEFAULT '',
    backend TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS backends (
    name        TEXT PRIMARY KEY,
    command     TEXT NOT NULL,
    prompt_flag TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS config (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_TASK_COLUMNS = (
    "id, name, status, project, branch, prompt, backend, worktree, "
    "agent_pid, session_id, created_at, started_at, ended_at"
)

_STRING_KEYS = (
    "defaults.backend",
    "keybindings.new",
    "keybindings.attach",
    "keybindings.status",
    "keybindings.delete",
    "keybindings.quit",
    "keybindings.help",
    "keybindings.filter",
    "keybindings.prompt",
    "keybindings.worktree",
    "ui.theme",
)

_BOOL_KEYS = ("ui.show_elapsed", "ui.show_icons")

_PLACEHOLDER_COMMANDS = frozenset({"echo", "cat", "true"})

_TIME_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


class TaskNotFoundError(LookupError):
    """Raised when no task has the requested ID."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


def data_dir() -> str:
    """Return the data directory (~/.argus)."""
    return str(Path.home() / ".argus")


def default_path() -> str:
    """Return the default database path."""
    return os.path.join(data_dir(), "data.sql")


def _format_time(value: datetime | None) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.astimezone()
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = int(abs(offset).total_seconds()) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(text: str) -> datetime | None:
    if not text:
        return None
    match = _TIME_PATTERN.match(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), micro, tzinfo=tz,
        )
    except ValueError:
        return None


def _generate_id() -> str:
    return str(time.time_ns())


def _row_to_task(row: tuple) -> Task:
    (task_id, name, status, project, branch, prompt, backend, worktree,
     agent_pid, session_id, created_at, started_at, ended_at) = row
    try:
        parsed_status = parse_status(status)
    except ValueError:
        parsed_status = Status.PENDING
    return Task(
        id=task_id,
        name=name,
        status=parsed_status,
        project=project,
        branch=branch,
        prompt=prompt,
        backend=backend,
        worktree=worktree,
        agent_pid=agent_pid,
        session_id=session_id,
        created_at=_parse_time(created_at),
        started_at=_parse_time(started_at),
        ended_at=_parse_time(ended_at),
    )


def _tasks_from(rows: Iterable[tuple]) -> list[Task]:
    return [_row_to_task(row) for row in rows]


class Database:
    """Data store for tasks, projects, backends and configuration values."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._lock = threading.RLock()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _create_tables(self) -> None:
        self._conn.executescript(_DDL)

    # --- Tasks ---

    def tasks(self) -> list[Task]:
        """Return all tasks, oldest first."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY created_at ASC"
                ).fetchall()
            except sqlite3.Error:
                return []
        return _tasks_from(rows)

    def add(self, task: Task) -> None:
        """Insert a task, filling in its ID and creation time if missing."""
        with self._lock:
            if not task.id:
                task.id = _generate_id()
            if task.created_at is None:
                task.created_at = datetime.now(timezone.utc)
            self._conn.execute(
                f"INSERT INTO tasks ({_TASK_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    task.id, task.name, task.status.value, task.project,
                    task.branch, task.prompt, task.backend, task.worktree,
                    task.agent_pid, task.session_id,
                    _format_time(task.created_at),
                    _format_time(task.started_at),
                    _format_time(task.ended_at),
                ),
            )

    def update(self, task: Task) -> None:
        """Overwrite a stored task; raise TaskNotFoundError if absent."""
        with self._lock:
            cursor = self._conn.execute(
                "UPDATE tasks SET name=?, status=?, project=?, branch=?, "
                "prompt=?, backend=?, worktree=?, agent_pid=?, session_id=?, "
                "created_at=?, started_at=?, ended_at=? WHERE id=?",
                (
                    task.name, task.status.value, task.project, task.branch,
                    task.prompt, task.backend, task.worktree, task.agent_pid,
                    task.session_id,
                    _format_time(task.created_at),
                    _format_time(task.started_at),
                    _format_time(task.ended_at),
                    task.id,
                ),
            )
            if cursor.rowcount == 0:
                raise TaskNotFoundError(task.id)

    def delete(self, task_id: str) -> None:
        """Delete a task; raise TaskNotFoundError if absent."""
        with self._lock:
            cursor = self._conn.execute("DELETE FROM tasks WHERE id=?", (task_id,))
            if cursor.rowcount == 0:
                raise TaskNotFoundError(task_id)

    def get(self, task_id: str) -> Task:
        """Return the task with the given ID; raise TaskNotFoundError if absent."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id=?", (task_id,)
            ).fetchone()
        if row is None:
            raise TaskNotFoundError(task_id)
        return _row_to_task(row)

    def prune_completed(self) -> list[Task]:
        """Delete completed tasks and return them."""
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE status='complete'"
            ).fetchall()
            pruned = _tasks_from(rows)
            if not pruned:
                return []
            self._conn.execute("DELETE FROM tasks WHERE status='complete'")
        return pruned

    # --- Projects ---

    def projects(self) -> dict[str, Project]:
        """Return all projects keyed by name."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT name, path, branch, backend FROM projects ORDER BY name"
                ).fetchall()
            except sqlite3.Error:
                return {}
        return {
            name: Project(path=path, branch=branch, backend=backend)
            for name, path, branch, backend in rows
        }

    def set_project(self, name: str, project: Project) -> None:
        """Insert or replace a project."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO projects (name, path, branch, backend) "
                "VALUES (?, ?, ?, ?)",
                (name, project.path, project.branch, project.backend),
            )

    def delete_project(self, name: str) -> None:
        """Remove a project if it exists."""
        with self._lock:
            self._conn.execute("DELETE FROM projects WHERE name=?", (name,))

    # --- Backends ---

    def backends(self) -> dict[str, Backend]:
        """Return all backends keyed by name."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT name, command, prompt_flag FROM backends ORDER BY name"
                ).fetchall()
            except sqlite3.Error:
                return {}
        return {
            name: Backend(command=command, prompt_flag=prompt_flag)
            for name, command, prompt_flag in rows
        }

    def set_backend(self, name: str, backend: Backend) -> None:
        """Insert or replace a backend."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO backends (name, command, prompt_flag) "
                "VALUES (?, ?, ?)",
                (name, backend.command, backend.prompt_flag),
            )

    # --- Configuration ---

    def config(self) -> Config:
        """Assemble the full configuration from the stored values."""
        cfg = default_config()
        cfg.backends = self.backends()
        cfg.projects = self.projects()

        with self._lock:
            try:
                rows = self._conn.execute("SELECT key, value FROM config").fetchall()
            except sqlite3.Error:
                return cfg
        values = dict(rows)

        for key in _STRING_KEYS:
            if key in values:
                section, attribute = key.split(".")
                setattr(getattr(cfg, section), attribute, values[key])
        for key in _BOOL_KEYS:
            if key in values:
                section, attribute = key.split(".")
                setattr(getattr(cfg, section), attribute, values[key] == "true")
        if "ui.cleanup_worktrees" in values:
            cfg.ui.cleanup_worktrees = values["ui.cleanup_worktrees"] == "true"
        return cfg

    def set_config_value(self, key: str, value: str) -> None:
        """Store a single configuration value."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                (key, value),
            )

    # --- Migration ---

    def _migrate(self) -> None:
        with self._lock:
            row = self._conn.execute(
                "SELECT version FROM schema_version LIMIT 1"
            ).fetchone()
            if row is not None:
                return
            self.seed_defaults()
            self._conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )

    def seed_defaults(self) -> None:
        """Insert default backends and settings if missing; safe to repeat.

        Placeholder backend commands ("echo", "cat", "true") are replaced
        with the default command.
        """
        cfg = default_config()
        with self._lock:
            for name, backend in cfg.backends.items():
                row = self._conn.execute(
                    "SELECT command FROM backends WHERE name=?", (name,)
                ).fetchone()
                if row is None:
                    self._conn.execute(
                        "INSERT INTO backends (name, command, prompt_flag) "
                        "VALUES (?, ?, ?)",
                        (name, backend.command, backend.prompt_flag),
                    )
                elif row[0] in _PLACEHOLDER_COMMANDS:
                    self._conn.execute(
                        "UPDATE backends SET command=?, prompt_flag=? WHERE name=?",
                        (backend.command, backend.prompt_flag, name),
                    )

            (count,) = self._conn.execute("SELECT COUNT(*) FROM config").fetchone()
            if count:
                return
            defaults = {
                "defaults.backend": cfg.defaults.backend,
                "keybindings.new": cfg.keybindings.new,
                "keybindings.attach": cfg.keybindings.attach,
                "keybindings.status": cfg.keybindings.status,
                "keybindings.delete": cfg.keybindings.delete,
                "keybindings.quit": cfg.keybindings.quit,
                "keybindings.help": cfg.keybindings.help,
                "keybindings.filter": cfg.keybindings.filter,
                "keybindings.prompt": cfg.keybindings.prompt,
                "keybindings.worktree": cfg.keybindings.worktree,
                "ui.theme": cfg.ui.theme,
                "ui.show_elapsed": "true" if cfg.ui.show_elapsed else "false",
                "ui.show_icons": "true" if cfg.ui.show_icons else "false",
            }
            self._conn.executemany(
                "INSERT OR IGNORE INTO config (key, value) VALUES (?, ?)",
                defaults.items(),
            )

    def fixup_backends(self) -> None:
        """Repair known-outdated settings of the default backends."""
        cfg = default_config()
        with self._lock:
            for name, want in cfg.backends.items():
                row = self._conn.execute(
                    "SELECT command, prompt_flag FROM backends WHERE name=?", (name,)
                ).fetchone()
                if row is None:
                    continue
                command, prompt_flag = row
                needs_update = (
                    (
                        "claude" in command
                        and "--dangerously-skip-permissions" not in command
                    )
                    or (prompt_flag == "-p" and want.prompt_flag == "")
                    or "--worktree" in command
                    or " -w" in command
                )
                if needs_update:
                    self._conn.execute(
                        "UPDATE backends SET command=?, prompt_flag=? WHERE name=?",
                        (want.command, want.prompt_flag, name),
                    )


def open_database(path: str | os.PathLike[str]) -> Database:
    """Open or create the database at path, migrating and repairing it."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    connection = sqlite3.connect(
        os.fspath(path), timeout=5.0, isolation_level=None, check_same_thread=False
    )
    database = Database(connection)
    try:
        connection.execute("PRAGMA journal_mode=wal")
        connection.execute("PRAGMA busy_timeout=5000")
        database._create_tables()
        database._migrate()
        database.fixup_backends()
    except BaseException:
        connection.close()
        raise
    return database


def open_in_memory() -> Database:
    """Create an in-memory database seeded with defaults."""
    connection = sqlite3.connect(
        ":memory:", isolation_level=None, check_same_thread=False
    )
    database = Database(connection)
    try:
        database._create_tables()
        database.seed_defaults()
    except BaseException:
        connection.close()
        raise
    return database