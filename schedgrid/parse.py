"""
Parsing (raw sheet rows -> normalized rows per semester).

- Finds the header row of each sheet by matching cells against column aliases
- Converts every data row into a NormalizedRow through the ColumnMapping
- Splits the rows into semester buckets:
  1. by sheet name ("Fall 2024", "Spring"...)
  2. by a term column inside a single sheet ("2024SEM1", "2024SEM2"...)
  3. otherwise one bucket per sheet (named from the file name if possible)

Important rules:
- the header row is searched in the first 5 rows only
- a header needs at least 3 recognized columns
- the first sheet with a term column wins in single-sheet mode
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

from schedgrid.model import (
    SEPARATE_SHEETS,
    SINGLE_SHEET_TERM,
    ColumnMapping,
    FormatInfo,
    NormalizedRow,
)

logger = logging.getLogger(__name__)

Rows = List[List[str]]
Sheets = Mapping[str, Rows]
PatternTable = Mapping[str, Tuple[Pattern[str], ...]]


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

COLUMN_ALIASES: Mapping[str, Tuple[str, ...]] = {
    "courseNum": ("class", "course", "course number", "number", "course num", "course #", "course code", "code", "section"),
    "courseName": ("description", "name", "course name", "title", "course title", "course description"),
    "faculty": ("faculty", "instructor1", "instructor", "professor", "teacher", "taught by", "lecturer", "staff"),
    "days": ("days", "day", "meeting days", "meets", "schedule", "meeting pattern", "pattern"),
    "startTime": ("start", "start time", "begin", "from", "begins", "start_time", "begin time"),
    "endTime": ("end", "end time", "until", "ends", "end_time", "finish", "finish time"),
    "fte": ("fte", "load", "teaching load", "workload", "fte1"),
    "term": ("term", "semester", "session", "academic term", "term code"),
    "room": ("room", "classroom", "location", "building", "room number", "room #"),
}


def _patterns(*exprs: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(e, re.IGNORECASE) for e in exprs)


# Sheet names / file names -> semester
SEMESTER_PATTERNS: PatternTable = {
    "fall": _patterns(r"fall", r"autumn", r"^fa\d*", r"^f\d{2}"),
    "spring": _patterns(r"spring", r"^sp\d*", r"^s\d{2}"),
    "winter": _patterns(r"winter", r"^wi\d*", r"^w\d{2}"),
    "summer": _patterns(r"summer", r"^su\d*", r"^sum"),
}

# Term column values -> semester ("2024SEM1" = fall, "2024SEM2" = spring)
TERM_CODE_PATTERNS: PatternTable = {
    "fall": _patterns(r"sem1$", r"fall", r"autumn", r"^fa\d*"),
    "spring": _patterns(r"sem2$", r"spring", r"^sp\d*"),
    "winter": _patterns(r"sem3$", r"winter", r"^wi\d*"),
    "summer": _patterns(r"sem4$", r"summer", r"^su\d*"),
}

HEADER_SCAN_ROWS = 5
MIN_HEADER_FIELDS = 3
DEFAULT_FACULTY = "TBA"
DEFAULT_FTE = "1"


@dataclass
class ParsedSheet:
    """Normalized rows of one sheet plus the header data they came from."""

    rows: List[NormalizedRow] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    header_row_index: int = 0
    column_mapping: Optional[ColumnMapping] = None


@dataclass
class IngestResult:
    """semester name -> normalized rows, plus the detected file format."""

    semesters: Dict[str, List[NormalizedRow]] = field(default_factory=dict)
    format_info: FormatInfo = field(default_factory=FormatInfo)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def slugify(name: str) -> str:
    """'Fall 2024 ' -> 'fall_2024'"""
    return re.sub(r"\s+", "_", str(name).strip().lower())


def _is_empty_row(row: Sequence[str]) -> bool:
    return all(cell is None or not str(cell).strip() for cell in row)


def _match_table(text: str, table: PatternTable) -> Optional[str]:
    for semester, patterns in table.items():
        for pattern in patterns:
            if pattern.search(text):
                return semester
    return None


def detect_semester_from_name(name: str, patterns: PatternTable = SEMESTER_PATTERNS) -> Optional[str]:
    """
    Detect a semester from a sheet name or file name, None if nothing matches.
    """
    return _match_table(str(name).strip().lower(), patterns)


def detect_semester_from_term_code(code: str, patterns: PatternTable = TERM_CODE_PATTERNS) -> str:
    """
    Map a term code to a semester name. Codes no pattern knows are kept
    as a slug of themselves so distinct codes stay distinct buckets.
    """
    text = str(code or "").strip()
    if not text:
        return "unknown"
    return _match_table(text, patterns) or slugify(text) or "unknown"


# ---------------------------------------------------------------------------
# Header detection (CORE LOGIC)
# ---------------------------------------------------------------------------


def detect_column_mapping(
    header_row: Sequence[str],
    aliases: Mapping[str, Sequence[str]] = COLUMN_ALIASES,
) -> ColumnMapping:
    """
    Bind semantic fields to columns of a candidate header row.

    A field binds to the first column whose lower-cased text equals or
    contains one of its aliases. Bound fields are never rebound.
    """
    indexes: Dict[str, int] = {}

    for col, cell in enumerate(header_row):
        header = "" if cell is None else str(cell).strip().lower()
        if not header:
            continue

        for name, names in aliases.items():
            if name in indexes:
                continue
            if any(header == alias or alias in header for alias in names):
                indexes[name] = col

    return ColumnMapping(indexes)


def find_header(
    rows: Sequence[Sequence[str]],
    aliases: Mapping[str, Sequence[str]] = COLUMN_ALIASES,
) -> Optional[Tuple[int, ColumnMapping]]:
    """
    Return (row index, mapping) of the first of the first 5 rows with at
    least 3 bound fields, or None.
    """
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        mapping = detect_column_mapping(row, aliases)
        logger.debug("Row %d mapping: %s", i, mapping.indexes)
        if len(mapping) >= MIN_HEADER_FIELDS:
            return i, mapping
    return None


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------


def normalize_rows(
    rows: Sequence[Sequence[str]],
    aliases: Mapping[str, Sequence[str]] = COLUMN_ALIASES,
    sheet_name: str = "",
) -> ParsedSheet:
    """
    Convert raw rows of one sheet to NormalizedRow objects.

    Returns an empty ParsedSheet (column_mapping None) when no header row is
    found. When a term column is bound, each row keeps its raw cells and row
    index so it can be written back unchanged later.
    """
    if len(rows) < 2:
        logger.warning("Sheet %r: not enough rows (%d)", sheet_name, len(rows))
        return ParsedSheet()

    found = find_header(rows, aliases)
    if found is None:
        logger.warning("Sheet %r: could not detect column headers", sheet_name)
        return ParsedSheet()

    header_row_index, mapping = found
    headers = ["" if c is None else str(c) for c in rows[header_row_index]]
    keep_raw = "term" in mapping

    out: List[NormalizedRow] = []
    for i in range(header_row_index + 1, len(rows)):
        row = rows[i]
        if not row or _is_empty_row(row):
            continue

        normalized = NormalizedRow(
            course_num=mapping.cell(row, "courseNum"),
            course_name=mapping.cell(row, "courseName"),
            faculty=mapping.cell(row, "faculty") or DEFAULT_FACULTY,
            days=mapping.cell(row, "days"),
            start_time=mapping.cell(row, "startTime"),
            end_time=mapping.cell(row, "endTime"),
            fte=mapping.cell(row, "fte") or DEFAULT_FTE,
            room=mapping.cell(row, "room"),
        )

        if keep_raw:
            normalized.term = mapping.cell(row, "term")
            normalized.source_row_raw = ["" if c is None else str(c) for c in row]
            normalized.source_row_index = i

        # Rows without a course number or days carry no schedulable course
        if not (normalized.course_num and normalized.days):
            logger.debug("Sheet %r row %d dropped: missing course number or days", sheet_name, i)
            continue

        out.append(normalized)

    return ParsedSheet(
        rows=out,
        headers=headers,
        header_row_index=header_row_index,
        column_mapping=mapping,
    )


def split_by_term(
    rows: Sequence[NormalizedRow],
    patterns: PatternTable = TERM_CODE_PATTERNS,
) -> Dict[str, Tuple[List[NormalizedRow], str]]:
    """
    Group rows by semester of their term code.

    Returns semester -> (rows, first term code seen for that semester).
    """
    out: Dict[str, Tuple[List[NormalizedRow], str]] = {}
    for row in rows:
        code = row.term or ""
        semester = detect_semester_from_term_code(code, patterns)
        if semester not in out:
            out[semester] = ([], code)
        out[semester][0].append(row)
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_semesters(
    sheets: Sheets,
    file_name: str = "",
    aliases: Mapping[str, Sequence[str]] = COLUMN_ALIASES,
    semester_patterns: PatternTable = SEMESTER_PATTERNS,
    term_patterns: PatternTable = TERM_CODE_PATTERNS,
) -> IngestResult:
    """
    Split the sheets of one file into semester buckets of normalized rows.

    The three strategies are tried in order and the first that yields any
    data wins (see module docstring).
    """
    result = IngestResult()
    sheet_names = list(sheets.keys())

    # 1. Semester from sheet names
    for sheet_name in sheet_names:
        semester = detect_semester_from_name(sheet_name, semester_patterns)
        if not semester:
            continue
        parsed = normalize_rows(sheets[sheet_name], aliases, sheet_name)
        if parsed.rows:
            if semester in result.semesters:
                logger.warning("Sheet %r: semester %r already loaded from another sheet, merging", sheet_name, semester)
                result.semesters[semester].extend(parsed.rows)
            else:
                result.semesters[semester] = parsed.rows

    if result.semesters:
        logger.info("Detected %d semester(s) from sheet names", len(result.semesters))
        return result

    # 2. Single sheet with a term column
    for sheet_name in sheet_names:
        parsed = normalize_rows(sheets[sheet_name], aliases, sheet_name)
        if not parsed.rows or parsed.column_mapping is None or "term" not in parsed.column_mapping:
            continue

        by_term = split_by_term(parsed.rows, term_patterns)
        term_codes: Dict[str, str] = {}
        for semester, (rows, code) in by_term.items():
            result.semesters[semester] = rows
            term_codes[semester] = code

        result.format_info = FormatInfo(
            mode=SINGLE_SHEET_TERM,
            sheet_name=sheet_name,
            headers=parsed.headers,
            header_row_index=parsed.header_row_index,
            column_mapping=parsed.column_mapping,
            term_codes=term_codes,
        )
        logger.info("Sheet %r: single-sheet term format, semesters %s", sheet_name, sorted(term_codes))
        return result

    # 3. Every sheet with data is its own bucket
    file_semester = detect_semester_from_name(_file_stem(file_name), semester_patterns) if file_name else None
    for sheet_name in sheet_names:
        parsed = normalize_rows(sheets[sheet_name], aliases, sheet_name)
        if not parsed.rows:
            continue

        if file_semester:
            name = file_semester
        elif len(sheet_names) == 1:
            name = "schedule"
        else:
            name = slugify(sheet_name) or "schedule"

        if name in result.semesters:
            # file-name semester shared by several sheets
            name = f"{name}_{slugify(sheet_name)}"
        result.semesters[name] = parsed.rows

    result.format_info = FormatInfo(mode=SEPARATE_SHEETS)
    return result


def _file_stem(file_name: str) -> str:
    base = re.split(r"[\\/]", str(file_name))[-1]
    return base.rsplit(".", 1)[0] if "." in base else base


__all__ = [
    "COLUMN_ALIASES",
    "IngestResult",
    "ParsedSheet",
    "SEMESTER_PATTERNS",
    "TERM_CODE_PATTERNS",
    "detect_column_mapping",
    "detect_semester_from_name",
    "detect_semester_from_term_code",
    "detect_semesters",
    "find_header",
    "normalize_rows",
    "slugify",
    "split_by_term",
]
