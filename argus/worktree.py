"""Git worktrees dedicated to tasks."""

from __future__ import annotations

import os
import subprocess

from argus.db import data_dir

_MAX_SUFFIX = 99


class WorktreeError(RuntimeError):
    """Raised when a worktree cannot be created."""


def worktree_dir(project_name: str, task_name: str) -> str:
    """Return the worktree path of a task: ~/.argus/worktrees/<project>/<task>."""
    return os.path.join(data_dir(), "worktrees", project_name, task_name)


def _git(project_path: str, *args: str) -> tuple[bool, str, str]:
    """Run git in project_path; return (success, combined output, failure text)."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=project_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        return False, "", str(exc)
    output = result.stdout.decode(errors="replace")
    if result.returncode != 0:
        return False, output, f"exit status {result.returncode}"
    return True, output, ""


def create_worktree(
    project_path: str,
    project_name: str,
    task_name: str,
    base_branch: str = "",
) -> tuple[str, str]:
    """Create a worktree on branch argus/<name> and return (path, final name).

    When the path is already taken, the suffixes -1, -2, ... up to -99 are
    tried in turn. If the branch already exists, the worktree is attached to
    it instead of creating a new one.
    """
    base = base_branch or "HEAD"

    for index in range(_MAX_SUFFIX + 1):
        candidate = task_name if index == 0 else f"{task_name}-{index}"
        path = worktree_dir(project_name, candidate)
        if os.path.exists(path):
            continue

        try:
            os.makedirs(os.path.dirname(path), mode=0o755, exist_ok=True)
        except OSError as exc:
            raise WorktreeError(f"creating worktree parent dir: {exc}") from exc

        branch = f"argus/{candidate}"
        ok, first_output, failure = _git(
            project_path, "worktree", "add", "-b", branch, path, base
        )
        if not ok:
            ok, second_output, _ = _git(project_path, "worktree", "add", path, branch)
            if not ok:
                raise WorktreeError(
                    f"git worktree add: {failure}\n{first_output}{second_output}"
                )
        return path, candidate

    raise WorktreeError(
        f'could not create worktree: too many name conflicts for "{task_name}"'
    )