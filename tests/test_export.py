import tempfile
import unittest
from datetime import date
from pathlib import Path

import openpyxl

from schedgrid.courses import build_course
from schedgrid.export import (
    EXPORT_HEADERS,
    export_semesters,
    format_fte,
    save_tables,
    term_code_for,
    to_csv_text,
)
from schedgrid.model import (
    SINGLE_SHEET_TERM,
    ColumnMapping,
    Course,
    FormatInfo,
    NormalizedRow,
    Semester,
)


def _course(num: str, start: str, end: str, days: str = "MWF", **extra) -> Course:
    row = NormalizedRow(
        course_num=num,
        course_name=f"{num} name",
        faculty="Smith, J.",
        days=days,
        start_time=start,
        end_time=end,
        fte="1",
        room=extra.pop("room", ""),
        **extra,
    )
    course = build_course(row)
    assert course is not None
    return course


class TestSeparateSheets(unittest.TestCase):
    def test_header_and_sorting(self) -> None:
        semesters = {
            "fall": Semester("fall", [
                _course("CS200", "9:40 AM", "10:30 AM"),
                _course("CS150", "8:30 AM", "9:20 AM", room="B12"),
                _course("CS100", "9:40 AM", "10:30 AM"),
            ]),
            "spring": Semester("spring", []),
        }
        tables = export_semesters(semesters, FormatInfo())
        self.assertEqual(list(tables), ["Fall", "Spring"])
        fall = tables["Fall"]
        self.assertEqual(fall[0], EXPORT_HEADERS)
        self.assertEqual([r[0] for r in fall[1:]], ["CS150", "CS100", "CS200"])
        self.assertEqual(fall[1], ["CS150", "CS150 name", "Smith, J.", "MWF", "8:30 AM", "9:20 AM", "1", "B12"])
        self.assertEqual(tables["Spring"], [EXPORT_HEADERS])

    def test_fte_format(self) -> None:
        self.assertEqual(format_fte(1.0), "1")
        self.assertEqual(format_fte(0.5), "0.5")
        self.assertEqual(format_fte(0.0), "0")


class TestSingleSheet(unittest.TestCase):
    def _info(self, codes: dict) -> FormatInfo:
        return FormatInfo(
            mode=SINGLE_SHEET_TERM,
            sheet_name="COURSES",
            headers=["TERM", "CLASS", "DAYS", "START", "END", "NOTES"],
            header_row_index=0,
            column_mapping=ColumnMapping({"term": 0, "courseNum": 1, "days": 2, "startTime": 3, "endTime": 4}),
            term_codes=codes,
        )

    def test_original_rows_pass_through_and_new_rows_go_last(self) -> None:
        raw2 = ["2024SEM1", "CS2", "MWF", "9:40 AM", "10:30 AM", "second"]
        raw1 = ["2025SEM2", "CS1", "TR", "8:30 AM", "9:45 AM", "first, with comma"]
        fall = Semester("fall", [_course("CS2", "9:40 AM", "10:30 AM", source_row_index=2, source_row_raw=raw2)])
        spring = Semester("spring", [_course("CS1", "8:30 AM", "9:45 AM", "TR", source_row_index=1, source_row_raw=raw1)])
        fall.courses.append(_course("CS9", "1:10 PM", "2:00 PM"))

        tables = export_semesters({"fall": fall, "spring": spring}, self._info({"fall": "2024SEM1", "spring": "2025SEM2"}))
        table = tables["COURSES"]
        self.assertEqual(table[0], ["TERM", "CLASS", "DAYS", "START", "END", "NOTES"])
        self.assertEqual(table[1], raw1)
        self.assertEqual(table[2], raw2)
        self.assertEqual(table[3], ["2024SEM1", "CS9", "MWF", "1:10 PM", "2:00 PM", ""])

    def test_edited_tracked_columns_only(self) -> None:
        raw = ["2024SEM1", "CS2", "MWF", "9:40 AM", "10:30 AM", "note"]
        course = _course("CS2", "9:40 AM", "10:30 AM", source_row_index=1, source_row_raw=raw)
        course.start_minute, course.end_minute = 790, 840
        table = export_semesters({"fall": Semester("fall", [course])}, self._info({"fall": "2024SEM1"}))["COURSES"]
        self.assertEqual(table[1], ["2024SEM1", "CS2", "MWF", "1:10 PM", "2:00 PM", "note"])

    def test_term_code_synthesis(self) -> None:
        info = self._info({"fall": "2024SEM1"})
        self.assertEqual(term_code_for("fall", info), "2024SEM1")
        self.assertEqual(term_code_for("spring", info), "2024SEM2")
        empty = self._info({})
        self.assertEqual(term_code_for("summer", empty, today=date(2026, 5, 1)), "2026SEM4")
        self.assertEqual(term_code_for("intersession", empty), "INTERSESSION")
        blank = self._info({"fall": "2024SEM1", "unknown": ""})
        self.assertEqual(term_code_for("unknown", blank), "")


class TestWriters(unittest.TestCase):
    def test_csv_quoting(self) -> None:
        text = to_csv_text([["a", "b,c", 'say "hi"', "line\nbreak"]])
        self.assertEqual(text, 'a,"b,c","say ""hi""","line\nbreak"\n')

    def test_save_csv_per_sheet_and_xlsx(self) -> None:
        tables = {"Fall": [EXPORT_HEADERS], "Spring": [EXPORT_HEADERS]}
        with tempfile.TemporaryDirectory() as d:
            written = save_tables(tables, Path(d) / "out.csv")
            self.assertEqual(sorted(p.name for p in written), ["out_fall.csv", "out_spring.csv"])

            xlsx = save_tables(tables, Path(d) / "out.xlsx")[0]
            wb = openpyxl.load_workbook(xlsx)
            self.assertEqual(wb.sheetnames, ["Fall", "Spring"])
            self.assertEqual(wb["Fall"]["A1"].value, "Class")


if __name__ == "__main__":
    unittest.main()
