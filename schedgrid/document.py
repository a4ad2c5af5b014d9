"""
The schedule document: the one object that owns the loaded semesters.

It ties the pieces together for a front end:

    load / load_file      sheets -> semesters (all or nothing)
    recompute             conflict flags for every semester
    add / update / move   validated mutations, nothing changes on failure
    export / save         tables in the shape the file was loaded from
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

from schedgrid.conflicts import detect_all
from schedgrid.courses import build_course, extract_last_name, next_course_id, parse_fte
from schedgrid.errors import HeaderNotFound, InvalidMoveRequest, ValidationRejected
from schedgrid.export import Table, export_semesters, save_tables
from schedgrid.fte import aggregate_fte
from schedgrid.model import Course, FormatInfo, Semester
from schedgrid.moves import move_rejection, relocation_class, SINGLE_DAY
from schedgrid.parse import Sheets, detect_semesters
from schedgrid.reader import read_sheets
from schedgrid.settings import Settings
from schedgrid.temporal import InvalidTimeFormat, is_valid_day_string, parse_day_set, parse_time_of_day
from schedgrid.timeblocks import find_slot

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440
EDITABLE_FIELDS = (
    "course_num",
    "course_name",
    "faculty",
    "days",
    "start_time",
    "end_time",
    "length",
    "fte",
    "room",
)


def _given(fields: Mapping[str, Any], name: str) -> Optional[str]:
    """Stripped value of a field, None when missing or blank."""
    value = fields.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _validate(fields: Mapping[str, Any], base: Optional[Course]) -> dict[str, Any]:
    """
    Check add/edit fields and return the parsed values to apply.

    `base` is the course being edited (None when adding). Raises
    ValidationRejected with one message per bad field.
    """
    errors: dict[str, str] = {}
    out: dict[str, Any] = {}

    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    for name in unknown:
        errors[name] = "Unknown field."

    course_num = _given(fields, "course_num")
    if course_num is not None:
        out["course_num"] = course_num
    elif base is None:
        errors["course_num"] = "Course number is required."

    course_name = _given(fields, "course_name")
    if course_name is not None:
        out["course_name"] = course_name

    faculty = _given(fields, "faculty")
    if faculty is not None:
        out["faculty_full"] = faculty
        out["faculty_key"] = extract_last_name(faculty)

    days_text = _given(fields, "days")
    if days_text is not None:
        if is_valid_day_string(days_text):
            out["days"] = parse_day_set(days_text)
        else:
            errors["days"] = "Days must be MTWRF with no repeats (5 or fewer days)."
    elif base is None:
        errors["days"] = "Days are required."

    start: Optional[int] = None
    start_text = _given(fields, "start_time")
    if start_text is not None:
        try:
            start = parse_time_of_day(start_text)
        except InvalidTimeFormat:
            errors["start_time"] = "Invalid start time."
    elif base is None:
        errors["start_time"] = "Start time is required."

    end: Optional[int] = None
    end_text = _given(fields, "end_time")
    length_text = _given(fields, "length")
    if end_text is not None:
        try:
            end = parse_time_of_day(end_text)
        except InvalidTimeFormat:
            errors["end_time"] = "Invalid end time."
    elif length_text is not None:
        try:
            length = int(length_text)
        except ValueError:
            length = 0
        if length <= 0:
            errors["length"] = "Length must be a positive number of minutes."
        else:
            anchor = start if start is not None else (base.start_minute if base else None)
            if anchor is not None:
                end = anchor + length
    elif base is None:
        errors["end_time"] = "End time or length is required."

    if "start_time" not in errors and "end_time" not in errors and "length" not in errors:
        new_start = start if start is not None else (base.start_minute if base else None)
        if end is None and base is not None and new_start is not None:
            # a moved start keeps the duration
            end = new_start + base.duration_minutes
        if new_start is not None and end is not None:
            if end <= new_start:
                errors["end_time"] = "End time must be after start time."
            elif end > MINUTES_PER_DAY:
                errors["end_time"] = "Course must end by midnight."
            else:
                out["start_minute"] = new_start
                out["end_minute"] = end

    fte_text = _given(fields, "fte")
    if fte_text is not None:
        value = parse_fte(fte_text, default=-1.0)
        if value < 0:
            errors["fte"] = "FTE must be a non-negative number."
        else:
            out["fte"] = value

    if "room" in fields and fields["room"] is not None:
        out["room"] = str(fields["room"]).strip()

    if errors:
        raise ValidationRejected(errors)
    return out


class ScheduleDocument:
    """
    Owns the active semester map and the FormatInfo of the loaded file.

    Mutations are processed one at a time; each either completes fully
    or raises without touching state. Conflict flags are recomputed after
    every successful mutation.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.semesters: dict[str, Semester] = {}
        self.format_info = FormatInfo()
        self.file_name: Optional[str] = None

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    def load(self, sheets: Sheets, file_name: str = "") -> None:
        """
        Replace the document content with the data of `sheets`.

        Raises HeaderNotFound (keeping the previous content) if no sheet
        contributes any course.
        """
        result = detect_semesters(sheets, file_name)

        semesters: dict[str, Semester] = {}
        for name, rows in result.semesters.items():
            courses = [c for c in (build_course(row) for row in rows) if c is not None]
            if len(courses) < len(rows):
                logger.warning("Semester %r: %d row(s) rejected", name, len(rows) - len(courses))
            semesters[name] = Semester(name=name, courses=courses)

        if not semesters:
            raise HeaderNotFound(f"No schedule data found in {file_name or 'input'}", {"sheets": list(sheets)})

        self.semesters = semesters
        self.format_info = result.format_info
        self.file_name = file_name
        self.recompute()
        logger.info("Loaded %s: %s", file_name or "sheets",
                    ", ".join(f"{n} ({len(s.courses)})" for n, s in semesters.items()))

    def load_file(self, path: str | Path) -> None:
        p = Path(path)
        self.load(read_sheets(p), p.name)

    async def load_file_async(self, path: str | Path) -> None:
        """Like load_file, but the file read runs off the event loop."""
        p = Path(path)
        sheets = await asyncio.to_thread(read_sheets, p)
        self.load(sheets, p.name)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def recompute(self) -> None:
        detect_all(self.semesters, include_tba=self.settings.include_tba)

    def semester(self, name: str) -> Semester:
        try:
            return self.semesters[name]
        except KeyError:
            raise KeyError(f"Unknown semester: {name!r}") from None

    def semester_of(self, course: Course) -> Semester:
        for semester in self.semesters.values():
            if any(c is course for c in semester.courses):
                return semester
        raise KeyError(f"Course {course.id} is not part of this document")

    def fte(self, semester_name: str) -> dict[str, float]:
        return aggregate_fte(self.semester(semester_name).courses)

    def find_courses(self, semester_name: str, course_num: str) -> list[Course]:
        wanted = course_num.strip().upper()
        return [c for c in self.semester(semester_name).courses if c.course_num.strip().upper() == wanted]

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def add_course(self, semester_name: str, fields: Mapping[str, Any]) -> Course:
        """
        Create a course from raw form fields and append it to a semester.
        """
        if semester_name not in self.semesters:
            raise ValidationRejected({"semester": f"Unknown semester: {semester_name}"})

        values = _validate(fields, base=None)
        faculty = values.get("faculty_full", "TBA")
        course = Course(
            id=next_course_id(),
            course_num=values["course_num"],
            course_name=values.get("course_name", ""),
            faculty_key=values.get("faculty_key", extract_last_name(faculty)),
            faculty_full=faculty,
            days=values["days"],
            start_minute=values["start_minute"],
            end_minute=values["end_minute"],
            fte=values.get("fte", 1.0),
            room=values.get("room", ""),
        )
        self.semesters[semester_name].courses.append(course)
        self.recompute()
        return course

    def update_course(self, course: Course, fields: Mapping[str, Any]) -> Course:
        """
        Apply a partial edit. Blank fields are left unchanged.
        """
        self.semester_of(course)
        values = _validate(fields, base=course)
        for name, value in values.items():
            setattr(course, name, value)
        self.recompute()
        return course

    def move_course(self, course: Course, target_day: str, target_slot_label: str) -> Course:
        """
        Move a course to the start of a display slot, keeping its duration.
        Single-day courses also take the target day.
        """
        self.semester_of(course)
        target_day = (target_day or "").strip().lower()

        reason = move_rejection(course, target_day)
        if reason:
            raise InvalidMoveRequest(reason, {"course_id": course.id, "target_day": target_day})

        slot = find_slot(target_day, target_slot_label)
        if slot is None:
            raise InvalidMoveRequest(f"Unknown time slot {target_slot_label!r} for day {target_day.upper()}",
                                     {"course_id": course.id, "slot": target_slot_label})

        new_end = slot.start_minute + course.duration_minutes
        if new_end > MINUTES_PER_DAY:
            raise InvalidMoveRequest("Course would run past midnight.", {"course_id": course.id})

        course.start_minute = slot.start_minute
        course.end_minute = new_end
        if relocation_class(course.days) == SINGLE_DAY:
            course.days = target_day
        self.recompute()
        return course

    def delete_course(self, course: Course) -> None:
        semester = self.semester_of(course)
        semester.courses = [c for c in semester.courses if c is not course]
        self.recompute()

    # -----------------------------------------------------------------------
    # Export
    # -----------------------------------------------------------------------

    def export(self, today: Optional[date] = None) -> dict[str, Table]:
        return export_semesters(self.semesters, self.format_info, today=today)

    def save(self, path: str | Path, today: Optional[date] = None) -> list[Path]:
        return save_tables(self.export(today=today), path)
