"""
CLI (Command Line Interface).

This module provides quick terminal commands around a schedule file, e.g.:

    schedgrid show <file>
    schedgrid conflicts <file>
    schedgrid fte <file>
    schedgrid export <file> <out.xlsx|out.csv>
    schedgrid move <file> <semester> <course_num> <day> <slot> --out <out>
    schedgrid settings --exclude-tba

Note:
- Reading/writing files happens only here and in schedgrid.reader/export
- Output is rendered with rich tables
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from schedgrid.conflicts import conflict_kinds, find_conflicts
from schedgrid.document import ScheduleDocument
from schedgrid.errors import ScheduleError
from schedgrid.export import format_fte
from schedgrid.model import Semester
from schedgrid.settings import Settings, load_settings, save_settings
from schedgrid.temporal import format_days, format_time_12h
from schedgrid.timeblocks import map_to_slot

console = Console()


def _load(path: str, settings: Settings) -> ScheduleDocument:
    doc = ScheduleDocument(settings=settings)
    doc.load_file(path)
    return doc


def _pick_semesters(doc: ScheduleDocument, name: Optional[str]) -> list[Semester]:
    if not name:
        return list(doc.semesters.values())
    return [doc.semester(name.strip().lower())]


def _slot_text(course, day: str) -> str:
    slot = map_to_slot(course, day)
    return slot.label if slot else "-"


def _cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print every course of the selected semester(s) with slots and conflict flags.
    """
    doc = _load(args.file, settings)
    query = (settings.course_filter or "").strip().lower()

    for semester in _pick_semesters(doc, args.semester):
        table = Table(title=f"{semester.name} ({len(semester.courses)} courses)", box=box.SIMPLE_HEAVY)
        for col in ("Class", "Description", "Faculty", "Days", "Start", "End", "FTE", "Room", "Slots", "!"):
            table.add_column(col)

        for c in sorted(semester.courses, key=lambda c: (c.start_minute, c.course_num)):
            if not settings.is_visible(c.faculty_key):
                continue
            if query and query not in f"{c.course_num} {c.course_name}".lower():
                continue

            flags = ("F" if c.has_faculty_overlap else "") + ("R" if c.has_room_overlap else "")
            slots = " ".join(f"{d.upper()}:{_slot_text(c, d)}" for d in c.days)
            table.add_row(
                c.course_num,
                c.course_name,
                c.faculty_full,
                format_days(c.days),
                format_time_12h(c.start_minute),
                format_time_12h(c.end_minute),
                format_fte(c.fte),
                c.room,
                slots,
                f"[red]{flags}[/red]" if flags else "",
            )
        console.print(table)

    return 0


def _cmd_conflicts(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print all detected conflicts per semester.
    """
    doc = _load(args.file, settings)

    total = 0
    for semester in _pick_semesters(doc, args.semester):
        pairs = find_conflicts(semester.courses)
        if not pairs:
            continue
        total += len(pairs)
        console.print(f"[bold]{semester.name}[/bold]: {len(pairs)} conflict(s)")
        for a, b in pairs:
            same_faculty, same_room = conflict_kinds(a, b, settings.include_tba)
            kinds = []
            if same_faculty:
                kinds.append(f"faculty {a.faculty_key}")
            if same_room:
                kinds.append(f"room {a.room}")
            console.print(
                f"- {a.course_num} {format_days(a.days)} {format_time_12h(a.start_minute)}-{format_time_12h(a.end_minute)}"
                f"  <->  {b.course_num} {format_days(b.days)} {format_time_12h(b.start_minute)}-{format_time_12h(b.end_minute)}"
                f"  ({', '.join(kinds)})"
            )

    if total == 0:
        console.print("No conflicts found.")
    return 0


def _cmd_fte(args: argparse.Namespace, settings: Settings) -> int:
    doc = _load(args.file, settings)

    for semester in _pick_semesters(doc, args.semester):
        table = Table(title=f"FTE – {semester.name}", box=box.SIMPLE)
        table.add_column("Faculty")
        table.add_column("FTE", justify="right")
        for faculty, total in sorted(doc.fte(semester.name).items()):
            table.add_row(faculty, format_fte(total))
        console.print(table)
    return 0


def _cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    """
    Re-export the file (same layout as loaded) to .xlsx or .csv.
    """
    doc = _load(args.file, settings)
    written = doc.save(args.out)
    for path in written:
        console.print(f"Exported to: {path}")
    return 0


def _cmd_move(args: argparse.Namespace, settings: Settings) -> int:
    """
    Move one course to another day/slot and write the result to --out.
    """
    doc = _load(args.file, settings)
    matches = doc.find_courses(args.semester.strip().lower(), args.course_num)
    if not matches:
        console.print(f"Course not found: {args.course_num}")
        return 1
    if len(matches) > 1:
        console.print(f"Course number {args.course_num} is ambiguous ({len(matches)} sections); moving the first.")

    course = doc.move_course(matches[0], args.day, args.slot)
    console.print(
        f"Moved {course.course_num} to {format_days(course.days)} "
        f"{format_time_12h(course.start_minute)}-{format_time_12h(course.end_minute)}"
    )
    for path in doc.save(args.out):
        console.print(f"Saved: {path}")
    return 0


def _cmd_settings(args: argparse.Namespace, settings: Settings) -> int:
    changed = False
    if args.include_tba is not None:
        settings.include_tba = args.include_tba
        changed = True
    if args.filter is not None:
        settings.course_filter = args.filter
        changed = True
    for faculty in args.hide or []:
        settings.hidden_faculty.add(faculty)
        changed = True
    for faculty in args.unhide or []:
        settings.hidden_faculty.discard(faculty)
        changed = True

    if changed:
        save_settings(settings, args.settings)

    console.print(f"include_tba     : {settings.include_tba}")
    console.print(f"course_filter   : {settings.course_filter!r}")
    console.print(f"hidden_faculty  : {', '.join(sorted(settings.hidden_faculty)) or '-'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schedgrid", description="Course schedule checker")
    parser.add_argument("--settings", type=Path, default=None, help="Path of settings.json")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    sub = parser.add_subparsers(dest="command", required=True)

    p_show = sub.add_parser("show", help="Show courses with slots and conflict flags")
    p_show.add_argument("file", type=str, help="Schedule file (.csv or .xlsx)")
    p_show.add_argument("--semester", "-s", type=str, default=None)

    p_conf = sub.add_parser("conflicts", help="List faculty and room conflicts")
    p_conf.add_argument("file", type=str)
    p_conf.add_argument("--semester", "-s", type=str, default=None)

    p_fte = sub.add_parser("fte", help="FTE totals per faculty")
    p_fte.add_argument("file", type=str)
    p_fte.add_argument("--semester", "-s", type=str, default=None)

    p_export = sub.add_parser("export", help="Re-export in the original layout")
    p_export.add_argument("file", type=str)
    p_export.add_argument("out", type=str, help="Output path (.xlsx or .csv)")

    p_move = sub.add_parser("move", help="Move a course to another day/slot")
    p_move.add_argument("file", type=str)
    p_move.add_argument("semester", type=str)
    p_move.add_argument("course_num", type=str)
    p_move.add_argument("day", type=str, help="Target day letter (m, t, w, r, f)")
    p_move.add_argument("slot", type=str, help="Target slot label (e.g. 9:40)")
    p_move.add_argument("--out", required=True, type=str, help="Where to save the result")

    p_settings = sub.add_parser("settings", help="Show or change preferences")
    tba = p_settings.add_mutually_exclusive_group()
    tba.add_argument("--include-tba", dest="include_tba", action="store_const", const=True, default=None)
    tba.add_argument("--exclude-tba", dest="include_tba", action="store_const", const=False)
    p_settings.add_argument("--filter", type=str, default=None, help="Only show matching course numbers/names")
    p_settings.add_argument("--hide", action="append", help="Hide a faculty key")
    p_settings.add_argument("--unhide", action="append", help="Show a hidden faculty key again")

    return parser


COMMANDS = {
    "show": _cmd_show,
    "conflicts": _cmd_conflicts,
    "fte": _cmd_fte,
    "export": _cmd_export,
    "move": _cmd_move,
    "settings": _cmd_settings,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING if args.verbose == 0 else logging.INFO if args.verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    settings = load_settings(args.settings)
    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args, settings))
    except ScheduleError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise SystemExit(1)
    except KeyError as exc:
        console.print(f"[red]Error:[/red] {exc.args[0] if exc.args else exc}")
        raise SystemExit(1)
    except OSError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)
