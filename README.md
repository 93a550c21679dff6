# argus

A library for managing coding-agent tasks. It keeps tasks, projects,
backends and settings in a SQLite database, creates a git worktree per
task, and runs each agent inside its own pseudo-terminal so that its
output can be watched and it can be attached to, detached from and
stopped.

Requires Python 3.10 or later on a POSIX system (it uses `termios`,
`fcntl` and `os.openpty`). It has no third-party dependencies. Creating
worktrees needs `git` on the `PATH`; agent commands are run with `sh -c`.

## Install

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## Modules

- `argus.status` – `Status`, a string enum of the workflow states
  `pending`, `in_progress`, `in_review` and `complete`, with `next()`,
  `prev()`, `display()`, `display_alt()` (Nerd Font icons) and `badge()`.
  `parse_status()` turns a name into a `Status` and raises `ValueError`
  for unknown names.
- `argus.task` – the `Task` dataclass, with `elapsed()`,
  `elapsed_string()` (such as `30s`, `5m`, `2h`, `2d`) and `set_status()`,
  which stamps `started_at` on the first move to in progress and
  `ended_at` on completion. `generate_session_id()` returns a random
  UUID4 string.
- `argus.namegen` – `generate_name_from_prompt()` builds a kebab-case
  name from up to four keywords of a prompt (for example
  `fix-authentication-token-refresh`), capped at 40 characters, and falls
  back to a random adjective-noun-noun name from `generate_name()`.
  `extract_keywords()` does the keyword step alone.
- `argus.config` – the dataclasses `Config`, `Defaults`, `Backend`,
  `Project`, `Keybindings` and `UIConfig`, plus `default_config()` and
  `default_keybindings()`. `UIConfig.should_cleanup_worktrees()` is true
  unless `cleanup_worktrees` is explicitly false.
- `argus.detect` – `detect()`, `detect_icon()` and `detect_language()`
  guess a project's icon and language from marker files such as
  `go.mod`, `Cargo.toml` or `pyproject.toml`; the first match wins.
- `argus.db` – `open_database(path)` opens or creates a database file,
  seeding defaults on first use and repairing outdated default backends
  on every open; `open_in_memory()` gives a seeded in-memory one.
  A `Database` stores tasks (`add`, `get`, `update`, `delete`, `tasks`,
  `prune_completed`), projects (`projects`, `set_project`,
  `delete_project`), backends (`backends`, `set_backend`) and settings
  (`set_config_value`), and assembles a `Config` with `config()`. Missing
  tasks raise `TaskNotFoundError`. It can be used as a context manager.
  `data_dir()` is `~/.argus` and `default_path()` is `~/.argus/data.sql`.
- `argus.command` – `resolve_backend()` picks the task's backend, else the
  project's, else the default, raising `BackendError` when none is found;
  `resolve_dir()` returns the project path; `build_command()` returns an
  `AgentCommand` (`args` for `sh -c` and the task's worktree as `cwd`),
  adding `--resume` or `--session-id` and the quoted prompt.
  `shell_quote()` single-quotes a string for the shell.
- `argus.worktree` – `create_worktree()` makes a git worktree at
  `worktree_dir(project, task)`, that is
  `~/.argus/worktrees/<project>/<task>`, on branch `argus/<task>`, trying
  the suffixes `-1` to `-99` when the path is taken and reusing an
  existing branch. It returns the path and the final name, and raises
  `WorktreeError` on failure.
- `argus.ringbuffer` – `RingBuffer`, a fixed-size byte buffer that keeps
  the most recent bytes and counts all bytes ever written.
- `argus.session` – `start_session()` runs an `AgentCommand` on a new
  pseudo-terminal (80x24 when a size is zero) and keeps its last 256 KiB
  of output. A `Session` offers `wait()`, `alive()`, `error()`,
  `is_idle()` (alive but silent for three seconds), `pid()`,
  `attach()`/`detach()`, `signal()`, `stop()`, `recent_output()`,
  `total_written()`, `work_dir()`, `resize()`, `pty_size()` and
  `write_input()`. Errors are `SessionError` subclasses:
  `AlreadyAttachedError`, `NotRunningError` and `SessionNotFoundError`.
- `argus.runner` – `Runner` starts one session per task, tracks them by
  task ID and calls an optional callback with the task ID, the process
  error, whether it was stopped, and the last output when a session ends.
- `argus.attach` – `AttachCommand.run()` puts the terminal into raw input
  mode, draws a one-line header with `HeaderWriter` and connects the
  terminal to a session below it; `DetachReader` detaches on Ctrl+Q.

## Example

    from argus.db import open_database, default_path
    from argus.task import Task
    from argus.namegen import generate_name_from_prompt
    from argus.runner import Runner

    db = open_database(default_path())
    prompt = "fix the authentication token refresh bug"
    task = Task(name=generate_name_from_prompt(prompt), prompt=prompt)
    db.add(task)

    def finished(task_id, error, stopped, last_output):
        print(task_id, "finished", "(stopped)" if stopped else "")

    runner = Runner(finished)
    session = runner.start(task, db.config(), 24, 80, False)
    print(runner.running())
    runner.stop_all()
    db.close()

## What it does not do

This is a library only. It has no command-line program and no
interactive task-list screen: there is nothing to run from the shell,
and listing tasks, choosing one and starting or attaching to its agent
is left to the code that uses these modules.