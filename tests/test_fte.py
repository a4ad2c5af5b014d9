import unittest

from schedgrid.fte import aggregate_fte, round_half_up
from schedgrid.model import Course


def _course(faculty: str, fte: float) -> Course:
    return Course(
        id=1,
        course_num="X",
        course_name="",
        faculty_key=faculty,
        faculty_full=faculty,
        days="m",
        start_minute=510,
        end_minute=560,
        fte=fte,
    )


class TestFte(unittest.TestCase):
    def test_sums_per_faculty(self) -> None:
        totals = aggregate_fte([_course("Smith", 1.0), _course("Smith", 0.5), _course("Lee", 0.25)])
        self.assertEqual(totals, {"Smith": 1.5, "Lee": 0.25})

    def test_float_noise_is_rounded(self) -> None:
        totals = aggregate_fte([_course("Smith", 0.1), _course("Smith", 0.2)])
        self.assertEqual(totals["Smith"], 0.3)

    def test_empty_faculty_skipped(self) -> None:
        self.assertEqual(aggregate_fte([_course("", 1.0)]), {})

    def test_round_half_away_from_zero(self) -> None:
        self.assertEqual(round_half_up(0.125), 0.13)
        self.assertEqual(round_half_up(2.675), 2.68)
        self.assertEqual(round_half_up(-0.125), -0.13)


if __name__ == "__main__":
    unittest.main()
