"""Configuration structures and their defaults."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Defaults:
    """Fallback settings applied when nothing more specific is set."""

    backend: str = ""


@dataclass
class Backend:
    """How to launch an agent: the shell command and its prompt flag."""

    command: str = ""
    prompt_flag: str = ""


@dataclass
class Project:
    """A registered project directory."""

    path: str = ""
    branch: str = ""
    backend: str = ""


@dataclass
class Keybindings:
    """Keys bound to user interface actions."""

    new: str = ""
    attach: str = ""
    status: str = ""
    delete: str = ""
    quit: str = ""
    help: str = ""
    filter: str = ""
    prompt: str = ""
    worktree: str = ""


@dataclass
class UIConfig:
    """User interface preferences."""

    theme: str = ""
    show_elapsed: bool = False
    show_icons: bool = False
    cleanup_worktrees: bool | None = None

    def should_cleanup_worktrees(self) -> bool:
        """Whether worktrees are removed on task delete; true unless set."""
        if self.cleanup_worktrees is None:
            return True
        return self.cleanup_worktrees


@dataclass
class Config:
    """Top-level configuration."""

    defaults: Defaults = field(default_factory=Defaults)
    backends: dict[str, Backend] = field(default_factory=dict)
    projects: dict[str, Project] = field(default_factory=dict)
    keybindings: Keybindings = field(default_factory=Keybindings)
    ui: UIConfig = field(default_factory=UIConfig)


def default_keybindings() -> Keybindings:
    """Return the default key bindings."""
    return Keybindings(
        new="n",
        attach="enter",
        status="s",
        delete="d",
        quit="q",
        help="?",
        filter="/",
        prompt="p",
        worktree="w",
    )


def default_config() -> Config:
    """Return a configuration with sensible defaults."""
    return Config(
        defaults=Defaults(backend="claude"),
        backends={
            "claude": Backend(
                command="claude --dangerously-skip-permissions",
                prompt_flag="",
            ),
        },
        projects={},
        keybindings=default_keybindings(),
        ui=UIConfig(theme="default", show_elapsed=True, show_icons=True),
    )