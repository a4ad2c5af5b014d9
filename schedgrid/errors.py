"""
Error types raised by the scheduling core.

Every error carries a human readable ``message`` (safe to show to the user)
and an optional ``details`` dict for callers that want more context.
"""

from __future__ import annotations

from typing import Any, Optional


class ScheduleError(Exception):
    """Base class for all schedgrid errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnsupportedFormat(ScheduleError):
    """Raised when a file extension is not handled by the tabular reader."""

    def __init__(self, extension: str):
        super().__init__(f"Unsupported file format: {extension or '(none)'}", {"extension": extension})


class UnreadableFile(ScheduleError):
    """Raised when a file has a supported extension but its content cannot be decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}", {"path": path, "reason": reason})


class HeaderNotFound(ScheduleError):
    """Raised when no sheet of a file yields a recognizable header row."""


class RowRejected(ScheduleError):
    """A data row failed required-field or time/day validation."""

    def __init__(self, message: str, row_index: Optional[int] = None):
        super().__init__(message, {"row_index": row_index})
        self.row_index = row_index


class InvalidMoveRequest(ScheduleError):
    """A relocation request violates the course's day-class constraint."""


class ValidationRejected(ScheduleError):
    """
    Raised by add/edit requests. ``errors`` maps field name -> message,
    so a form can show each problem next to its field.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid course data ({summary})", {"errors": self.errors})
