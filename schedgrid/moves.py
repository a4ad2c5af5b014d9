"""
Move validation.

A course's day set decides where it may be dragged:
- single day   -> anywhere
- exactly MWF  -> only to M, W or F
- exactly TR   -> only to T or R
- other combos -> never (edit the days/time directly instead)
"""

from __future__ import annotations

from schedgrid.model import Course

SINGLE_DAY = "single-day"
MWF_LOCKED = "mwf-locked"
TR_LOCKED = "tr-locked"
NON_STANDARD = "non-standard"

MSG_CLASS_SWITCH = "Can't switch MWF and TR courses. Change day/time manually."
MSG_UNUSUAL_DAYS = "Course has unusual days. Change day/time manually."


def relocation_class(days: str) -> str:
    if len(days) == 1:
        return SINGLE_DAY
    if days == "mwf":
        return MWF_LOCKED
    if days == "tr":
        return TR_LOCKED
    return NON_STANDARD


def can_move(course: Course, target_day: str) -> bool:
    """True if `course` may be relocated to `target_day`. No side effects."""
    return move_rejection(course, target_day) is None


def move_rejection(course: Course, target_day: str) -> str | None:
    """The user-facing reason a move is refused, or None if it is allowed."""
    if not target_day or len(target_day) != 1 or target_day not in "mtwrf":
        return f"Not a valid target day: {target_day!r}"

    cls = relocation_class(course.days)
    if cls == SINGLE_DAY:
        return None
    if cls == MWF_LOCKED:
        return None if target_day in "mwf" else MSG_CLASS_SWITCH
    if cls == TR_LOCKED:
        return None if target_day in "tr" else MSG_CLASS_SWITCH
    return MSG_UNUSUAL_DAYS
