"""
Course model builder.

Turns a NormalizedRow (all strings) into a Course (canonical days, minutes,
faculty key, float FTE). Rows whose days or times cannot be parsed produce
no course.
"""

from __future__ import annotations

import itertools
import logging
import math
from typing import Optional

from schedgrid.errors import RowRejected
from schedgrid.model import Course, NormalizedRow
from schedgrid.temporal import InvalidTimeFormat, parse_day_set, parse_time_of_day

logger = logging.getLogger(__name__)

# Process-wide id source, ids are never reused.
_course_ids = itertools.count(1)


def next_course_id() -> int:
    return next(_course_ids)


def extract_last_name(faculty: str) -> str:
    """
    "Last, First" -> "Last"
    "First Last"  -> "Last"
    anything else is returned as-is (trimmed)
    """
    text = (faculty or "").strip()
    if not text:
        return ""

    if "," in text:
        return text.split(",", 1)[0].strip()

    parts = text.split()
    if len(parts) > 1:
        return parts[-1].strip()

    return text


def parse_fte(text: str, default: float = 1.0) -> float:
    """Parse an FTE cell. Blank, unparseable or negative values give `default`."""
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or math.isinf(value) or value < 0:
        return default
    return value


def course_from_row(row: NormalizedRow) -> Course:
    """
    Build a Course from a normalized row, raising RowRejected when days,
    start or end cannot be parsed or the end is not after the start.
    """
    if not (row.course_num and row.days):
        raise RowRejected("missing course number or days", row.source_row_index)

    days = parse_day_set(row.days)
    if not days:
        raise RowRejected(f"unreadable days {row.days!r}", row.source_row_index)

    try:
        start = parse_time_of_day(row.start_time)
        end = parse_time_of_day(row.end_time)
    except InvalidTimeFormat as exc:
        raise RowRejected(str(exc), row.source_row_index) from exc

    if end <= start:
        raise RowRejected(f"end {row.end_time!r} is not after start {row.start_time!r}", row.source_row_index)

    return Course(
        id=next_course_id(),
        course_num=row.course_num,
        course_name=row.course_name,
        faculty_key=extract_last_name(row.faculty),
        faculty_full=row.faculty,
        days=days,
        start_minute=start,
        end_minute=end,
        fte=parse_fte(row.fte),
        room=row.room,
        source_row_index=row.source_row_index,
        source_row_raw=list(row.source_row_raw) if row.source_row_raw is not None else None,
    )


def build_course(row: NormalizedRow) -> Optional[Course]:
    """
    Like course_from_row, but a rejected row gives None and a warning.
    """
    try:
        return course_from_row(row)
    except RowRejected as exc:
        logger.warning("Invalid course data %s %r: %s", row.course_num, row.course_name, exc.message)
        return None
