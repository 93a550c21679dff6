"""Resolution of agent backends and construction of agent commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from argus.config import Backend, Config
from argus.task import Task


class BackendError(LookupError):
    """Raised when no usable backend can be resolved for a task."""


@dataclass
class AgentCommand:
    """A command line to run, and the directory to run it in ("" for inherited)."""

    args: list[str] = field(default_factory=list)
    cwd: str = ""


def resolve_backend(task: Task, cfg: Config) -> Backend:
    """Return the backend for a task.

    The task's own backend wins over the project's, which wins over the default.
    """
    name = cfg.defaults.backend

    if task.project:
        project = cfg.projects.get(task.project)
        if project is not None and project.backend:
            name = project.backend

    if task.backend:
        name = task.backend

    if not name:
        raise BackendError("no backend configured")

    try:
        return cfg.backends[name]
    except KeyError:
        raise BackendError(f'backend "{name}" not found in config') from None


def resolve_dir(task: Task, cfg: Config) -> str:
    """Return the configured project path of the task, or ""."""
    if not task.project:
        return ""
    project = cfg.projects.get(task.project)
    return project.path if project is not None else ""


def build_command(task: Task, cfg: Config, resume: bool) -> AgentCommand:
    """Build the shell command that runs an agent on a task.

    With resume and a session ID the agent reconnects with --resume and the
    prompt is not passed. Otherwise a known session ID is pinned with
    --session-id and the prompt is appended.
    """
    backend = resolve_backend(task, cfg)
    command_line = backend.command

    if resume and task.session_id:
        command_line += " --resume " + shell_quote(task.session_id)
    else:
        if task.session_id:
            command_line += " --session-id " + shell_quote(task.session_id)
        if task.prompt:
            if backend.prompt_flag:
                command_line += f" {backend.prompt_flag} {shell_quote(task.prompt)}"
            else:
                command_line += " " + shell_quote(task.prompt)

    return AgentCommand(args=["sh", "-c", command_line], cwd=task.worktree)


def shell_quote(text: str) -> str:
    """Wrap text in single quotes, escaping embedded single quotes."""
    return "'" + text.replace("'", "'\\''") + "'"