"""
End-to-end tests for the schedule document: load, mutate, export.
"""

import asyncio
import tempfile
import unittest
from pathlib import Path

from schedgrid.document import ScheduleDocument
from schedgrid.errors import HeaderNotFound, InvalidMoveRequest, UnsupportedFormat, ValidationRejected
from schedgrid.export import to_csv_text
from schedgrid.model import SINGLE_SHEET_TERM
from schedgrid.settings import Settings

HEADER = ["Class", "Description", "Faculty", "Days", "Start", "End", "FTE", "Room"]

TWO_ROWS = [
    HEADER,
    ["CS101", "Intro", "Smith, J.", "MWF", "8:30 AM", "9:30 AM", "1", ""],
    ["CS102", "Data Structures", "J. Smith", "MW", "9:00 AM", "10:00 AM", "1", ""],
]

TERM_SHEET = [
    ["Course schedule 2024/25"],
    ["TERM", "CRN", "CLASS", "DESCRIPTION", "INSTRUCTOR1", "DAYS", "START TIME", "END TIME", "FTE1", "ROOM", "NOTES"],
    ["2024SEM1", "40011", "CS101", "Intro", "Smith, J.", "MWF", "8:30 AM", "9:20 AM", "1", "B12", "lab fee"],
    ["2025SEM2", "40012", "CS102", "Data Structures", "Lee, K.", "TR", "10:10 AM", "11:50 AM", "1", "B14", ""],
    ["2024SEM1", "40013", "CS103", "Architecture", "Lee, K.", "MWF", "9:40 AM", "10:30 AM", "0.5", "B12", "x"],
    ["2024SEM1", "40014", "CS104", "Broken", "Lee, K.", "MWF", "whenever", "10:30 AM", "1", "", "dropped"],
]


def _loaded(rows=TWO_ROWS, name="courses.csv", settings=None) -> ScheduleDocument:
    doc = ScheduleDocument(settings=settings)
    doc.load({"Sheet1": rows}, name)
    return doc


class TestLoad(unittest.TestCase):
    def test_end_to_end_faculty_conflict(self) -> None:
        doc = _loaded()
        a, b = doc.semester("schedule").courses
        self.assertEqual(a.faculty_key, "Smith")
        self.assertEqual(b.faculty_key, "Smith")
        self.assertTrue(a.has_faculty_overlap)
        self.assertTrue(b.has_faculty_overlap)
        self.assertIn(b.id, a.overlap_peers)
        self.assertIn(a.id, b.overlap_peers)
        self.assertEqual(doc.fte("schedule"), {"Smith": 2.0})
        self.assertEqual(doc.semester("schedule").faculty, ["Smith"])

    def test_failed_load_keeps_previous_state(self) -> None:
        doc = _loaded()
        before = doc.semesters
        with self.assertRaises(HeaderNotFound):
            doc.load({"Sheet1": [["nothing"], ["here"]]}, "other.csv")
        self.assertIs(doc.semesters, before)
        self.assertEqual(doc.file_name, "courses.csv")

    def test_load_file_csv_and_unsupported(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "spring.csv"
            p.write_text(to_csv_text(TWO_ROWS), encoding="utf-8")
            doc = ScheduleDocument()
            doc.load_file(p)
            self.assertEqual(list(doc.semesters), ["spring"])

            with self.assertRaises(UnsupportedFormat):
                doc.load_file(Path(d) / "spring.ods")
            self.assertEqual(list(doc.semesters), ["spring"])

    def test_load_file_async(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.csv"
            p.write_text(to_csv_text(TWO_ROWS), encoding="utf-8")
            doc = ScheduleDocument()
            asyncio.run(doc.load_file_async(p))
            self.assertEqual(len(doc.semester("schedule").courses), 2)

    def test_tba_setting_is_applied(self) -> None:
        rows = [HEADER,
                ["CS1", "a", "", "TR", "10:10", "11:00", "1", ""],
                ["CS2", "b", "", "TR", "10:30", "11:20", "1", ""]]
        doc = _loaded(rows, settings=Settings(include_tba=False))
        self.assertFalse(any(c.has_overlap for c in doc.semester("schedule").courses))


class TestMutations(unittest.TestCase):
    def test_add_course(self) -> None:
        doc = _loaded()
        course = doc.add_course("schedule", {
            "course_num": "CS300",
            "course_name": "Compilers",
            "faculty": "Ada Lovelace",
            "days": "TR",
            "start_time": "10:10 AM",
            "length": "100",
        })
        self.assertEqual(course.faculty_key, "Lovelace")
        self.assertEqual((course.start_minute, course.end_minute), (610, 710))
        self.assertIsNone(course.source_row_raw)
        self.assertIn(course, doc.semester("schedule").courses)

    def test_add_course_reports_every_bad_field(self) -> None:
        doc = _loaded()
        with self.assertRaises(ValidationRejected) as ctx:
            doc.add_course("schedule", {"days": "xyz", "start_time": "soon", "end_time": "9:00"})
        self.assertEqual(set(ctx.exception.errors), {"course_num", "days", "start_time"})
        self.assertEqual(len(doc.semester("schedule").courses), 2)

    def test_add_to_unknown_semester(self) -> None:
        with self.assertRaises(ValidationRejected):
            _loaded().add_course("winter", {"course_num": "X"})

    def test_update_course_keeps_duration_and_clears_conflict(self) -> None:
        doc = _loaded()
        a, b = doc.semester("schedule").courses
        doc.update_course(b, {"start_time": "1:10 PM"})
        self.assertEqual((b.start_minute, b.end_minute), (790, 850))
        self.assertFalse(a.has_faculty_overlap)
        self.assertFalse(b.has_faculty_overlap)

    def test_update_course_is_atomic(self) -> None:
        doc = _loaded()
        a = doc.semester("schedule").courses[0]
        with self.assertRaises(ValidationRejected) as ctx:
            doc.update_course(a, {"course_num": "CS999", "end_time": "8:00 AM"})
        self.assertIn("end_time", ctx.exception.errors)
        self.assertEqual(a.course_num, "CS101")
        self.assertEqual(a.end_minute, 570)

    def test_update_rejects_loose_day_strings(self) -> None:
        doc = _loaded()
        a = doc.semester("schedule").courses[0]
        for bad in ("mm", "MMWF", "Mon Wed", "MSF"):
            with self.subTest(days=bad):
                with self.assertRaises(ValidationRejected) as ctx:
                    doc.update_course(a, {"days": bad})
                self.assertEqual(set(ctx.exception.errors), {"days"})
                self.assertEqual(a.days, "mwf")
        doc.update_course(a, {"days": "RT"})
        self.assertEqual(a.days, "tr")

    def test_update_faculty(self) -> None:
        doc = _loaded()
        b = doc.semester("schedule").courses[1]
        doc.update_course(b, {"faculty": "Jones, P."})
        self.assertEqual((b.faculty_key, b.faculty_full), ("Jones", "Jones, P."))
        self.assertFalse(b.has_faculty_overlap)

    def test_move_within_mwf(self) -> None:
        doc = _loaded()
        a = doc.semester("schedule").courses[0]
        doc.move_course(a, "w", "1:10")
        self.assertEqual(a.days, "mwf")
        self.assertEqual((a.start_minute, a.end_minute), (790, 850))

    def test_move_rejected_leaves_course(self) -> None:
        doc = _loaded()
        a = doc.semester("schedule").courses[0]
        with self.assertRaises(InvalidMoveRequest):
            doc.move_course(a, "t", "10:10")
        with self.assertRaises(InvalidMoveRequest):
            doc.move_course(a, "m", "7:00")
        self.assertEqual((a.days, a.start_minute), ("mwf", 510))

    def test_move_single_day_changes_day(self) -> None:
        doc = _loaded([HEADER, ["CS5", "Lab", "Kim", "T", "2:00 PM", "4:50 PM", "1", ""]])
        course = doc.semester("schedule").courses[0]
        doc.move_course(course, "f", "8:30")
        self.assertEqual(course.days, "f")
        self.assertEqual((course.start_minute, course.end_minute), (510, 680))

    def test_delete_course(self) -> None:
        doc = _loaded()
        a, b = doc.semester("schedule").courses
        doc.delete_course(a)
        self.assertEqual(doc.semester("schedule").courses, [b])
        self.assertFalse(b.has_faculty_overlap)


class TestRoundTrip(unittest.TestCase):
    def test_single_sheet_export_preserves_untracked_columns(self) -> None:
        doc = ScheduleDocument()
        doc.load({"COURSE SCHEDULE": TERM_SHEET}, "all_terms.xlsx")
        self.assertEqual(doc.format_info.mode, SINGLE_SHEET_TERM)
        self.assertEqual(sorted(doc.semesters), ["fall", "spring"])

        table = doc.export()["COURSE SCHEDULE"]
        self.assertEqual(table[0], TERM_SHEET[1])
        # the unparseable CS104 row is not a course any more
        self.assertEqual([r[2] for r in table[1:]], ["CS101", "CS102", "CS103"])
        for out_row, src_row in zip(table[1:], TERM_SHEET[2:5]):
            self.assertEqual(out_row[1], src_row[1])
            self.assertEqual(out_row[10], src_row[10])
            self.assertEqual(out_row, src_row)

    def test_blank_term_cells_survive_export(self) -> None:
        rows = [
            ["TERM", "CLASS", "DAYS", "START", "END", "NOTES"],
            ["2024SEM1", "CS1", "MWF", "8:30 AM", "9:20 AM", "a"],
            ["", "CS2", "TR", "10:10 AM", "11:50 AM", "b"],
        ]
        doc = ScheduleDocument()
        doc.load({"Sheet1": rows}, "terms.csv")
        self.assertEqual(sorted(doc.semesters), ["fall", "unknown"])
        self.assertEqual(doc.export()["Sheet1"], rows)

    def test_added_course_in_single_sheet_export(self) -> None:
        doc = ScheduleDocument()
        doc.load({"COURSE SCHEDULE": TERM_SHEET}, "all_terms.xlsx")
        doc.add_course("spring", {"course_num": "CS400", "days": "M", "start_time": "14:00", "end_time": "15:10"})
        last = doc.export()["COURSE SCHEDULE"][-1]
        self.assertEqual(last[0], "2025SEM2")
        self.assertEqual(last[1], "")
        self.assertEqual(last[2], "CS400")
        self.assertEqual(last[4], "TBA")
        self.assertEqual(last[5:8], ["M", "2:00 PM", "3:10 PM"])
        self.assertEqual(len(last), len(TERM_SHEET[1]))

    def test_save_xlsx_and_reload(self) -> None:
        doc = _loaded()
        with tempfile.TemporaryDirectory() as d:
            out = doc.save(Path(d) / "out.xlsx")[0]
            again = ScheduleDocument()
            again.load_file(out)
        self.assertEqual(list(again.semesters), ["schedule"])
        self.assertEqual([c.course_num for c in again.semester("schedule").courses], ["CS101", "CS102"])


if __name__ == "__main__":
    unittest.main()
