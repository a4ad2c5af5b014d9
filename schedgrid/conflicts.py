"""
Conflict detection.

Two courses of the same semester conflict when they share a day and their
time intervals overlap, and either
- they are taught by the same faculty key (faculty conflict), or
- they use the same non-empty room (room conflict).

Overlap rule:
    start < other_end AND end > other_start
"""

from __future__ import annotations

from typing import Iterable, Mapping

from schedgrid.model import Course, Semester

UNASSIGNED_FACULTY = ("TBA", "TBD")


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # touching endpoints (end == start) is not an overlap
    return a_start < b_end and a_end > b_start


def _share_day(a: Course, b: Course) -> bool:
    return bool(set(a.days) & set(b.days))


def courses_overlap(a: Course, b: Course) -> bool:
    """True if the two courses meet on a common day at overlapping times."""
    if not _share_day(a, b):
        return False
    return _overlaps(a.start_minute, a.end_minute, b.start_minute, b.end_minute)


def is_unassigned(faculty_key: str) -> bool:
    return faculty_key.strip().upper() in UNASSIGNED_FACULTY


def clear_conflicts(courses: Iterable[Course]) -> None:
    for course in courses:
        course.has_faculty_overlap = False
        course.has_room_overlap = False
        course.overlap_peers = set()


def conflict_kinds(a: Course, b: Course, include_tba: bool = True) -> tuple[bool, bool]:
    """
    Which conflicts one pair has: (same faculty, same room). Both are False
    unless the two courses share a day at overlapping times.
    """
    same_faculty = a.faculty_key == b.faculty_key
    if same_faculty and not include_tba and is_unassigned(a.faculty_key):
        same_faculty = False

    same_room = bool(a.room) and a.room == b.room

    if not (same_faculty or same_room) or not courses_overlap(a, b):
        return False, False
    return same_faculty, same_room


def detect_conflicts(courses: list[Course], include_tba: bool = True) -> None:
    """
    Annotate `courses` (one semester) in place.

    Previous annotations are always cleared first, so running this twice
    gives the same result. With include_tba=False, courses whose shared
    faculty is TBA/TBD are not reported as faculty conflicts.
    """
    clear_conflicts(courses)

    # O(n^2) is fine for one semester of a department
    for i in range(len(courses)):
        a = courses[i]
        for j in range(i + 1, len(courses)):
            b = courses[j]

            same_faculty, same_room = conflict_kinds(a, b, include_tba)
            if not (same_faculty or same_room):
                continue

            if same_faculty:
                a.has_faculty_overlap = True
                b.has_faculty_overlap = True
            if same_room:
                a.has_room_overlap = True
                b.has_room_overlap = True
            a.overlap_peers.add(b.id)
            b.overlap_peers.add(a.id)


def detect_all(semesters: Mapping[str, Semester], include_tba: bool = True) -> None:
    """Run detect_conflicts for every semester bucket."""
    for semester in semesters.values():
        detect_conflicts(semester.courses, include_tba=include_tba)


def find_conflicts(courses: list[Course]) -> list[tuple[Course, Course]]:
    """
    Conflicting pairs (a, b) of already annotated courses, each pair once,
    in list order.
    """
    pairs: list[tuple[Course, Course]] = []
    for i, a in enumerate(courses):
        for b in courses[i + 1:]:
            if b.id in a.overlap_peers:
                pairs.append((a, b))
    return pairs
