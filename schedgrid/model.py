"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects that flow between
the ingestion, conflict, slot-mapping and export layers so that:
- all modules share the same field names
- the row shape of a loaded file is captured once (ColumnMapping / FormatInfo)
  and never re-inferred downstream
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence


# Semantic fields a spreadsheet column can be bound to. These are also the
# only columns the exporter rewrites in single-sheet mode.
FIELDS = (
    "courseNum",
    "courseName",
    "faculty",
    "days",
    "startTime",
    "endTime",
    "fte",
    "term",
    "room",
)

SEPARATE_SHEETS = "separate-sheets"
SINGLE_SHEET_TERM = "single-sheet-term"


@dataclass(frozen=True)
class ColumnMapping:
    """
    Field name -> column index, produced once per sheet by header detection.
    """

    indexes: Dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.indexes)

    def __contains__(self, name: object) -> bool:
        return name in self.indexes

    def index_of(self, name: str) -> Optional[int]:
        return self.indexes.get(name)

    def cell(self, row: Sequence[str], name: str) -> str:
        """
        Return the trimmed cell bound to `name`, or "" if the field is unbound
        or the row is too short.
        """
        idx = self.indexes.get(name)
        if idx is None or idx >= len(row):
            return ""
        value = row[idx]
        return "" if value is None else str(value).strip()


@dataclass
class NormalizedRow:
    """
    One data row after column mapping. All values are still strings.
    """

    course_num: str
    course_name: str
    faculty: str
    days: str
    start_time: str
    end_time: str
    fte: str
    room: str = ""
    term: Optional[str] = None
    source_row_index: Optional[int] = None
    source_row_raw: Optional[List[str]] = None


@dataclass
class Course:
    """
    Represents one scheduled meeting pattern.

    `days` is a canonical string over "mtwrf" (fixed order, no repeats),
    times are minutes since midnight.
    """

    id: int
    course_num: str
    course_name: str
    faculty_key: str
    faculty_full: str
    days: str
    start_minute: int
    end_minute: int
    fte: float = 1.0
    room: str = ""
    has_faculty_overlap: bool = False
    has_room_overlap: bool = False
    overlap_peers: set[int] = field(default_factory=set)
    source_row_index: Optional[int] = None
    source_row_raw: Optional[List[str]] = None

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def has_overlap(self) -> bool:
        return self.has_faculty_overlap or self.has_room_overlap


@dataclass
class Semester:
    """
    A named bucket of courses (fall, spring, ... or a custom slug).
    """

    name: str
    courses: List[Course] = field(default_factory=list)

    @property
    def faculty(self) -> List[str]:
        # distinct faculty keys, sorted for stable display
        return sorted({c.faculty_key for c in self.courses if c.faculty_key})


@dataclass
class FormatInfo:
    """
    How to rebuild the original tabular shape of a loaded file on export.

    For SEPARATE_SHEETS nothing else is needed. For SINGLE_SHEET_TERM the
    original header row, column mapping and one original term code per
    semester are kept.
    """

    mode: str = SEPARATE_SHEETS
    sheet_name: Optional[str] = None
    headers: List[str] = field(default_factory=list)
    header_row_index: int = 0
    column_mapping: ColumnMapping = field(default_factory=ColumnMapping)
    term_codes: Dict[str, str] = field(default_factory=dict)

    @property
    def is_single_sheet(self) -> bool:
        return self.mode == SINGLE_SHEET_TERM


@dataclass(frozen=True)
class TimeSlot:
    """A fixed display interval [start_minute, end_minute)."""

    label: str
    start_minute: int
    end_minute: int

    def contains(self, minute: int) -> bool:
        return self.start_minute <= minute < self.end_minute
