"""
Time-block mapping.

The display grid has a fixed set of slots for MWF days and another for TR
days. A course-day is placed in the slot that contains its start minute; if
no slot contains it, the slot with the nearest start is used when it is at
most 30 minutes away. Anything else is "homeless" and returned as None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from schedgrid.model import Course, TimeSlot

MWF = "mwf"
TR = "tr"

MWF_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot("8:30", 510, 580),
    TimeSlot("9:40", 580, 650),
    TimeSlot("10:50", 650, 720),
    TimeSlot("12:20", 740, 790),
    TimeSlot("1:10", 790, 840),
    TimeSlot("2:00", 840, 910),
    TimeSlot("3:40", 940, 980),
)

TR_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot("8:30", 510, 610),
    TimeSlot("10:10", 610, 710),
    TimeSlot("12:20", 740, 790),
    TimeSlot("1:10", 790, 840),
    TimeSlot("2:00", 840, 940),
    TimeSlot("3:40", 940, 980),
)

SLOT_TABLES: dict[str, tuple[TimeSlot, ...]] = {MWF: MWF_SLOTS, TR: TR_SLOTS}

NEAREST_SLOT_TOLERANCE = 30


@dataclass(frozen=True)
class SlotAssignment:
    day: str
    day_class: str
    index: int
    slot: TimeSlot

    @property
    def label(self) -> str:
        return self.slot.label


def day_class(day: str) -> str:
    """'m', 'w', 'f' -> 'mwf'; 't', 'r' -> 'tr'"""
    if day in MWF:
        return MWF
    if day in TR:
        return TR
    raise ValueError(f"Not a schedulable day: {day!r}")


def _classes_for(course: Course, day: str) -> list[str]:
    has_mwf = any(d in MWF for d in course.days)
    has_tr = any(d in TR for d in course.days)
    if has_mwf and has_tr:
        return [MWF, TR]
    return [day_class(day)]


def map_to_slot(
    course: Course,
    day: str,
    tables: dict[str, Sequence[TimeSlot]] = SLOT_TABLES,
    tolerance: int = NEAREST_SLOT_TOLERANCE,
) -> Optional[SlotAssignment]:
    """
    Return the display slot of `course` on `day`, or None if homeless.

    Courses meeting on both MWF and TR days search the MWF table first.
    """
    if day not in course.days:
        raise ValueError(f"Course {course.course_num} does not meet on {day!r}")

    start = course.start_minute
    classes = _classes_for(course, day)

    # exact containment
    for cls in classes:
        for idx, slot in enumerate(tables[cls]):
            if slot.contains(start):
                return SlotAssignment(day, cls, idx, slot)

    # nearest slot start, first one wins on ties
    best: Optional[SlotAssignment] = None
    best_distance = None
    for cls in classes:
        for idx, slot in enumerate(tables[cls]):
            distance = abs(slot.start_minute - start)
            if best_distance is None or distance < best_distance:
                best = SlotAssignment(day, cls, idx, slot)
                best_distance = distance

    if best is not None and best_distance is not None and best_distance <= tolerance:
        return best
    return None


def assign_slots(course: Course, tables: dict[str, Sequence[TimeSlot]] = SLOT_TABLES) -> dict[str, Optional[SlotAssignment]]:
    """day -> slot (or None) for every day the course meets."""
    return {day: map_to_slot(course, day, tables) for day in course.days}


def find_homeless(courses: Sequence[Course], tables: dict[str, Sequence[TimeSlot]] = SLOT_TABLES) -> list[tuple[Course, str]]:
    """(course, day) pairs that do not fit any slot."""
    out: list[tuple[Course, str]] = []
    for course in courses:
        for day in course.days:
            if map_to_slot(course, day, tables) is None:
                out.append((course, day))
    return out


def find_slot(day: str, label: str, tables: dict[str, Sequence[TimeSlot]] = SLOT_TABLES) -> Optional[TimeSlot]:
    """Look up a slot by label in the table of `day`'s class."""
    for slot in tables[day_class(day)]:
        if slot.label == label:
            return slot
    return None
