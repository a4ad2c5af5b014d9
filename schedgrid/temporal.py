"""
Time-of-day and day-of-week parsing.

Spreadsheets write the same meeting in many ways ("8:30 AM", "0830",
"8.30 a.m.", "MWF", "Mon Wed Fri", "Tuesday Thursday" ...). This module turns
those strings into canonical values:

- times  -> minutes since midnight (int)
- days   -> a string over "mtwrf" in that fixed order, no repeats
"""

from __future__ import annotations

import re


DAY_ORDER = "mtwrf"

# Whole words and 2-4 letter abbreviations. Weekend names are recognized
# (so they are not letter-scanned) but contribute no schedulable day.
DAY_WORDS = {
    "monday": "m",
    "mon": "m",
    "mo": "m",
    "tuesday": "t",
    "tues": "t",
    "tue": "t",
    "tu": "t",
    "wednesday": "w",
    "wed": "w",
    "we": "w",
    "thursday": "r",
    "thurs": "r",
    "thur": "r",
    "thu": "r",
    "th": "r",
    "friday": "f",
    "fri": "f",
    "fr": "f",
    "saturday": "",
    "sat": "",
    "sunday": "",
    "sun": "",
}

_DAY_SEPARATORS = re.compile(r"[\s,;/&+\-]+")
_MERIDIEM = re.compile(r"\s*([AP])\.?\s*(?:M\.?)?$")
_CLOCK = re.compile(r"^(\d{1,2})[:.]?(\d{2})(?::\d{2})?$")
_HOUR_ONLY = re.compile(r"^(\d{1,2})$")


class InvalidTimeFormat(ValueError):
    """Raised when a time-of-day string cannot be understood."""


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------


def parse_time_of_day(text: str) -> int:
    """
    Convert a free-form time string to minutes since midnight.

    Accepts H:MM, HH:MM, HMM, HHMM and H.MM, optionally followed by
    AM/PM/A/P/A.M./P.M. (any case). Without a suffix the value is read as
    24-hour time. Raises InvalidTimeFormat for anything else.
    """
    if text is None:
        raise InvalidTimeFormat("Empty time value")

    raw = re.sub(r"\s+", " ", str(text).strip().upper())
    if not raw:
        raise InvalidTimeFormat("Empty time value")

    meridiem = None
    m = _MERIDIEM.search(raw)
    if m and m.start() > 0:
        meridiem = m.group(1)
        raw = raw[: m.start()].strip()

    clock = _CLOCK.match(raw)
    if clock:
        hours = int(clock.group(1))
        minutes = int(clock.group(2))
    elif meridiem and _HOUR_ONLY.match(raw):
        # "8 AM"
        hours = int(raw)
        minutes = 0
    else:
        raise InvalidTimeFormat(f"Invalid time format: {text!r}")

    if not 0 <= minutes <= 59:
        raise InvalidTimeFormat(f"Invalid minute value: {text!r}")

    if meridiem:
        if not 1 <= hours <= 12:
            raise InvalidTimeFormat(f"Invalid hour for 12-hour time: {text!r}")
        if meridiem == "A" and hours == 12:
            hours = 0
        elif meridiem == "P" and hours != 12:
            hours += 12
    elif not 0 <= hours <= 23:
        raise InvalidTimeFormat(f"Invalid hour value: {text!r}")

    return hours * 60 + minutes


def format_time_12h(minute: int) -> str:
    """480 -> '8:00 AM'"""
    hours, minutes = divmod(int(minute) % 1440, 60)
    suffix = "PM" if hours >= 12 else "AM"
    hours = hours % 12 or 12
    return f"{hours}:{minutes:02d} {suffix}"


def format_time_24h(minute: int) -> str:
    """480 -> '08:00'"""
    hours, minutes = divmod(int(minute) % 1440, 60)
    return f"{hours:02d}:{minutes:02d}"


# ---------------------------------------------------------------------------
# Day sets
# ---------------------------------------------------------------------------


def canonical_days(letters: str) -> str:
    """Deduplicate and reorder day letters to m,t,w,r,f."""
    present = set(letters)
    return "".join(d for d in DAY_ORDER if d in present)


def _scan_letters(token: str) -> str:
    # "tth" / "mwth": a trailing or embedded "th" means Thursday here
    token = token.replace("th", "r")
    if not token or any(ch not in DAY_ORDER for ch in token):
        return ""
    return token


def parse_day_set(text: str) -> str:
    """
    Parse a day-of-week string into the canonical day string.

    Each token is first looked up as a whole word or abbreviation
    ("Monday", "Tues", "Th"); tokens that are not words are scanned letter
    by letter over m,t,w,r,f ("MWF", "TR"). A bare "TH" is read as TR.
    Returns "" when nothing usable is found.
    """
    if text is None:
        return ""

    raw = str(text).strip().lower()
    if not raw:
        return ""
    # a lone "TH" is the Tuesday/Thursday pair, inside a list it is Thursday
    if raw == "th":
        return "tr"

    letters = ""
    for token in _DAY_SEPARATORS.split(raw):
        if not token:
            continue
        token = token.rstrip(".")
        if token in DAY_WORDS:
            letters += DAY_WORDS[token]
        else:
            letters += _scan_letters(token)

    return canonical_days(letters)


def format_days(days: str) -> str:
    """'mwf' -> 'MWF'"""
    return (days or "").upper()


def is_valid_day_string(value: str) -> bool:
    """
    Strict check used by edit forms: only m/t/w/r/f letters, no repeats,
    at most five of them.
    """
    chars = list((value or "").strip().lower())
    if not chars:
        return False
    if any(c not in DAY_ORDER for c in chars):
        return False
    return len(set(chars)) == len(chars) <= 5


# ---------------------------------------------------------------------------
# Edit form choices
# ---------------------------------------------------------------------------


def available_start_times() -> list[tuple[str, str]]:
    """
    (display, value) pairs from 7:00 AM to 9:50 PM in 10 minute steps,
    e.g. ("8:30 AM", "08:30").
    """
    out: list[tuple[str, str]] = []
    for minute in range(7 * 60, 22 * 60, 10):
        out.append((format_time_12h(minute), format_time_24h(minute)))
    return out


def available_lengths() -> list[tuple[str, int]]:
    """(display, minutes) pairs from 0:50 to 4:00 in 10 minute steps."""
    out: list[tuple[str, int]] = []
    for minutes in range(50, 241, 10):
        hours, rest = divmod(minutes, 60)
        out.append((f"{hours}:{rest:02d}", minutes))
    return out
