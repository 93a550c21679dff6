"""Task store, git worktrees and PTY sessions for running coding agents."""

__version__ = "0.1.0"