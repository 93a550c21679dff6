"""Workflow states of a task."""

from __future__ import annotations

from enum import Enum


class Status(str, Enum):
    """The workflow state of a task, in workflow order."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETE = "complete"

    def __str__(self) -> str:
        return self.value

    def display(self) -> str:
        """Return the Nerd Font icon for this status."""
        return _DISPLAY[self]

    def display_alt(self) -> str:
        """Return the alternate animation frame of the status icon."""
        return _DISPLAY_ALT[self]

    def badge(self) -> str:
        """Return a plain-text badge for this status."""
        return _BADGES[self]

    def next(self) -> Status:
        """Return the following status; complete stays complete."""
        members = list(Status)
        index = members.index(self)
        return members[min(index + 1, len(members) - 1)]

    def prev(self) -> Status:
        """Return the preceding status; pending stays pending."""
        members = list(Status)
        index = members.index(self)
        return members[max(index - 1, 0)]


_DISPLAY = {
    Status.PENDING: "\uf10c",
    Status.IN_PROGRESS: "\uf10c",
    Status.IN_REVIEW: "\uf06e",
    Status.COMPLETE: "\uf00c",
}

_DISPLAY_ALT = {
    Status.PENDING: "\uf10c",
    Status.IN_PROGRESS: "\uf192",
    Status.IN_REVIEW: "\uf06e",
    Status.COMPLETE: "\uf00c",
}

_BADGES = {
    Status.PENDING: "○",
    Status.IN_PROGRESS: "●",
    Status.IN_REVIEW: "●",
    Status.COMPLETE: "✓",
}


def parse_status(text: str) -> Status:
    """Convert a status name into a Status, raising ValueError if unknown."""
    for status in Status:
        if status.value == text:
            return status
    raise ValueError(f"unknown status: {text!r}")