"""
Tabular file reading (CSV / XLSX -> sheets of string cells).

The rest of the package only ever sees:

    {sheet name: [[cell, cell, ...], ...]}

CSV files become a single sheet called "Sheet1". Workbooks keep their sheet
names and order. Completely empty rows are dropped.
"""

from __future__ import annotations

import csv
import logging
import zipfile
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from schedgrid.errors import UnreadableFile, UnsupportedFormat

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = ("csv",)
XLSX_EXTENSIONS = ("xlsx", "xlsm")

# Excel stores bare times as datetimes on its epoch day
_EXCEL_EPOCH_DATES = (date(1899, 12, 30), date(1899, 12, 31), date(1900, 1, 1))


def _extension(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def _is_blank(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)


def cell_text(value: Any) -> str:
    """
    Render one worksheet value the way it would read on screen.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.date() in _EXCEL_EPOCH_DATES:
            return value.strftime("%H:%M")
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_csv(path: str | Path) -> list[list[str]]:
    """
    Read a UTF-8 CSV (a BOM is allowed). Other encodings raise UnreadableFile.
    """
    rows: list[list[str]] = []
    try:
        with Path(path).open(encoding="utf-8-sig", newline="") as f:
            for row in csv.reader(f):
                cells = [cell.strip() for cell in row]
                if not cells or _is_blank(cells):
                    continue
                rows.append(cells)
    except UnicodeDecodeError as exc:
        raise UnreadableFile(str(path), f"not UTF-8 text (byte {exc.start}), save it as CSV UTF-8") from exc
    return rows


def read_xlsx(path: str | Path) -> dict[str, list[list[str]]]:
    try:
        wb = openpyxl.load_workbook(Path(path), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException) as exc:
        raise UnreadableFile(str(path), "not a valid Excel workbook") from exc
    try:
        sheets: dict[str, list[list[str]]] = {}
        for ws in wb.worksheets:
            rows: list[list[str]] = []
            for values in ws.iter_rows(values_only=True):
                cells = [cell_text(v) for v in values]
                if not cells or _is_blank(cells):
                    continue
                rows.append(cells)
            sheets[ws.title] = rows
            logger.debug("Sheet %r: %d rows", ws.title, len(rows))
        return sheets
    finally:
        wb.close()


def read_sheets(path: str | Path) -> dict[str, list[list[str]]]:
    """
    Read a CSV or Excel workbook into sheets of string rows.

    Raises UnsupportedFormat for other extensions (including legacy .xls).
    """
    p = Path(path)
    ext = _extension(p)

    if ext in CSV_EXTENSIONS:
        return {"Sheet1": read_csv(p)}
    if ext in XLSX_EXTENSIONS:
        return read_xlsx(p)
    raise UnsupportedFormat(ext)
