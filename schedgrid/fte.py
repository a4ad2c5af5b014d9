"""FTE (teaching load) totals per faculty."""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from schedgrid.model import Course


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def aggregate_fte(courses: Iterable[Course]) -> dict[str, float]:
    """faculty key -> summed FTE, rounded to 2 decimals."""
    totals: dict[str, float] = defaultdict(float)
    for course in courses:
        if not course.faculty_key:
            continue
        totals[course.faculty_key] += course.fte
    return {faculty: round_half_up(total) for faculty, total in totals.items()}
