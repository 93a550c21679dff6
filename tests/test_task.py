import uuid
from datetime import datetime, timedelta, timezone

import pytest

from argus.status import Status
from argus.task import Task, generate_session_id


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_elapsed_not_started():
    assert Task().elapsed() == timedelta(0)


def test_elapsed_running():
    task = Task(started_at=datetime.now(timezone.utc) - timedelta(seconds=5))
    elapsed = task.elapsed()
    assert timedelta(seconds=4) <= elapsed <= timedelta(seconds=6)


def test_elapsed_completed():
    start = _utc(2025, 1, 1)
    task = Task(started_at=start, ended_at=start + timedelta(minutes=10))
    assert task.elapsed() == timedelta(minutes=10)


@pytest.mark.parametrize(
    "task, expected",
    [
        (Task(), ""),
        (Task(started_at=_utc(2025, 1, 1), ended_at=_utc(2025, 1, 1, 0, 5)), "5m"),
        (Task(started_at=_utc(2025, 1, 1), ended_at=_utc(2025, 1, 1, 2)), "2h"),
        (Task(started_at=_utc(2025, 1, 1), ended_at=_utc(2025, 1, 3)), "2d"),
    ],
    ids=["not started", "minutes", "hours", "days"],
)
def test_elapsed_string(task, expected):
    assert task.elapsed_string() == expected


def test_elapsed_string_seconds():
    task = Task(started_at=datetime.now(timezone.utc) - timedelta(seconds=30))
    assert task.elapsed_string() == "30s"


def test_set_status_in_progress():
    task = Task()
    task.set_status(Status.IN_PROGRESS)
    assert task.status is Status.IN_PROGRESS
    assert isinstance(task.started_at, datetime)
    assert task.ended_at is None


def test_set_status_in_progress_preserves_started_at():
    original = _utc(2025, 1, 1)
    task = Task(started_at=original)
    task.set_status(Status.IN_PROGRESS)
    assert task.started_at == original


def test_set_status_complete():
    task = Task()
    task.set_status(Status.COMPLETE)
    assert task.status is Status.COMPLETE
    assert isinstance(task.ended_at, datetime)


def test_set_status_pending_no_timestamps():
    task = Task()
    task.set_status(Status.PENDING)
    assert task.started_at is None
    assert task.ended_at is None


def test_generate_session_id_format():
    session_id = generate_session_id()
    parsed = uuid.UUID(session_id)
    assert len(session_id) == 36
    assert str(parsed) == session_id
    assert parsed.version == 4
    assert parsed.variant == uuid.RFC_4122


def test_generate_session_id_unique():
    ids = {generate_session_id() for _ in range(50)}
    assert len(ids) == 50