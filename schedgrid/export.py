"""
Export (semesters -> tables of string cells -> CSV / XLSX).

Two output shapes, chosen by the FormatInfo captured at load time:

- separate sheets: one table per semester with a fixed header, rows sorted
  by start time then course number
- single sheet with a term column: one table with the file's original
  header; rows keep their original order and every column the loader did
  not interpret is copied through untouched
"""

from __future__ import annotations

import csv
import io
import re
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

import openpyxl
from openpyxl.utils import get_column_letter

from schedgrid.errors import UnsupportedFormat
from schedgrid.model import FIELDS, Course, FormatInfo, Semester
from schedgrid.temporal import format_days, format_time_12h

Table = list[list[str]]

EXPORT_HEADERS = ["Class", "Description", "Faculty", "Days", "Start", "End", "FTE", "Room"]
EXPORT_COLUMN_WIDTHS = [12, 35, 25, 8, 12, 12, 6, 12]

# Semester -> suffix used when a term code has to be invented ("2025SEM2")
TERM_CODE_SUFFIXES = {
    "fall": "SEM1",
    "spring": "SEM2",
    "winter": "SEM3",
    "summer": "SEM4",
}

_YEAR = re.compile(r"(\d{4})")
_SHEET_TITLE_BAD_CHARS = re.compile(r"[\[\]:*?/\\]")


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------


def format_fte(value: float) -> str:
    """1.0 -> '1', 0.5 -> '0.5'"""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"


def course_values(course: Course) -> dict[str, str]:
    """Field name -> exported text for the tracked columns of a course."""
    return {
        "courseNum": course.course_num,
        "courseName": course.course_name,
        "faculty": course.faculty_full or course.faculty_key,
        "days": format_days(course.days),
        "startTime": format_time_12h(course.start_minute),
        "endTime": format_time_12h(course.end_minute),
        "fte": format_fte(course.fte),
        "room": course.room,
    }


# ---------------------------------------------------------------------------
# Separate sheets
# ---------------------------------------------------------------------------


def semester_table(courses: list[Course]) -> Table:
    """Fixed-header table for one semester."""
    table: Table = [list(EXPORT_HEADERS)]
    for course in sorted(courses, key=lambda c: (c.start_minute, c.course_num)):
        v = course_values(course)
        table.append([
            v["courseNum"],
            v["courseName"],
            v["faculty"],
            v["days"],
            v["startTime"],
            v["endTime"],
            v["fte"],
            v["room"],
        ])
    return table


def sheet_title(semester_name: str) -> str:
    return semester_name[:1].upper() + semester_name[1:]


# ---------------------------------------------------------------------------
# Single sheet with term column
# ---------------------------------------------------------------------------


def infer_year(format_info: FormatInfo, today: Optional[date] = None) -> int:
    """First 4-digit year found in the preserved term codes, else this year."""
    for code in format_info.term_codes.values():
        m = _YEAR.search(code or "")
        if m:
            return int(m.group(1))
    return (today or date.today()).year


def term_code_for(semester: str, format_info: FormatInfo, today: Optional[date] = None) -> str:
    """
    The term code written for `semester`: the originally observed code when
    there is one, otherwise YEAR + suffix ("2024SEM2").
    """
    # an observed code is kept even when it was blank
    if semester in format_info.term_codes:
        return format_info.term_codes[semester]
    suffix = TERM_CODE_SUFFIXES.get(semester)
    if suffix is None:
        return semester.upper()
    return f"{infer_year(format_info, today)}{suffix}"


def single_sheet_table(
    semesters: Mapping[str, Semester],
    format_info: FormatInfo,
    today: Optional[date] = None,
) -> Table:
    headers = list(format_info.headers)
    mapping = format_info.column_mapping

    tagged: list[tuple[tuple[int, int], Course, str]] = []
    added = 0
    for name, semester in semesters.items():
        code = term_code_for(name, format_info, today)
        for course in semester.courses:
            if course.source_row_index is not None:
                key = (0, course.source_row_index)
            else:
                # new courses go last, in the order they were added
                key = (1, added)
                added += 1
            tagged.append((key, course, code))
    tagged.sort(key=lambda item: item[0])

    width = max([len(headers)] + [idx + 1 for idx in mapping.indexes.values()])

    table: Table = [headers]
    for _, course, code in tagged:
        if course.source_row_raw is not None:
            row = list(course.source_row_raw)
        else:
            row = []
        if len(row) < width:
            row.extend([""] * (width - len(row)))

        values = course_values(course)
        values["term"] = code
        for name in FIELDS:
            idx = mapping.index_of(name)
            if idx is not None:
                row[idx] = values[name]
        table.append(row)

    return table


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def export_semesters(
    semesters: Mapping[str, Semester],
    format_info: FormatInfo,
    today: Optional[date] = None,
) -> dict[str, Table]:
    """
    Build the output tables: sheet name -> rows of string cells.
    """
    if format_info.is_single_sheet:
        return {format_info.sheet_name or "Schedule": single_sheet_table(semesters, format_info, today)}

    return {sheet_title(name): semester_table(semester.courses) for name, semester in semesters.items()}


def to_csv_text(table: Table) -> str:
    """
    Comma separated, quoted only when a cell holds a comma, quote or newline.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerows(table)
    return buf.getvalue()


def write_csv(table: Table, out_path: str | Path) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_csv_text(table), encoding="utf-8")
    return out


def _safe_sheet_title(name: str) -> str:
    return _SHEET_TITLE_BAD_CHARS.sub("_", name)[:31] or "Sheet"


def write_xlsx(tables: Mapping[str, Table], out_path: str | Path) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, table in tables.items():
        ws = wb.create_sheet(_safe_sheet_title(name))
        for row in table:
            ws.append(row)
        if table and table[0] == EXPORT_HEADERS:
            for i, width in enumerate(EXPORT_COLUMN_WIDTHS, start=1):
                ws.column_dimensions[get_column_letter(i)].width = width

    wb.save(out)
    return out


def save_tables(tables: Mapping[str, Table], out_path: str | Path) -> list[Path]:
    """
    Write tables to `out_path` (.xlsx: one workbook; .csv: one file, or
    <stem>_<sheet>.csv per table when there are several). Returns the
    files written.
    """
    out = Path(out_path)
    ext = out.suffix.lower().lstrip(".")

    if ext == "xlsx":
        return [write_xlsx(tables, out)]

    if ext == "csv":
        if len(tables) == 1:
            return [write_csv(next(iter(tables.values())), out)]
        written: list[Path] = []
        for name, table in tables.items():
            slug = re.sub(r"\s+", "_", name.strip().lower())
            written.append(write_csv(table, out.with_name(f"{out.stem}_{slug}.csv")))
        return written

    raise UnsupportedFormat(ext)
