"""
Tests for the day-index tracker, row parsing and whole-table parsing.
"""

import pytest

from school_timetable.dom import load_document
from school_timetable.errors import RowParseError
from school_timetable.models import EndTimePolicy, ExtractionMode, Lesson, ParseOptions
from school_timetable.parser import (
    DayIndexTracker,
    parse_row,
    parse_schedule_html,
    parse_schedule_page,
    parse_span,
)


def _td(*paragraphs: str, colspan: int | None = None) -> str:
    span = f' colspan="{colspan}"' if colspan is not None else ""
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return f"<td{span}>{body}</td>"


def _row_cells(*tds: str):
    document = load_document(f"<table><tbody><tr>{''.join(tds)}</tr></tbody></table>")
    return document.select_one("tr").find_all("td")


class TestDayIndexTracker:
    """Weekday attribution of physical cells."""

    def test_one_cell_per_day(self):
        tracker = DayIndexTracker([1, 1, 1, 1, 1])
        days = []
        for position in range(5):
            days.append(tracker.day)
            tracker.advance(position)
        assert days == [0, 1, 2, 3, 4]

    def test_advance_moves_exactly_one_day(self):
        tracker = DayIndexTracker([1] * 5)
        tracker.advance(0)
        assert tracker.day == 1

    def test_half_day_cells_share_a_day(self):
        tracker = DayIndexTracker([1, 1, 2, 2, 2, 2])
        days = []
        for position in range(6):
            days.append(tracker.day)
            tracker.advance(position)
        assert days == [0, 0, 1, 2, 3, 4]

    def test_last_cell_of_wide_row_does_not_advance(self):
        tracker = DayIndexTracker([2] * 6)
        for position in range(6):
            tracker.advance(position)
        assert tracker.current_day == 6

    def test_skip_ignores_half_day_rule(self):
        tracker = DayIndexTracker([1, 1, 2, 2, 2, 2])
        tracker.skip()
        assert tracker.day == 1


class TestParseSpan:
    def test_values(self):
        cells = _row_cells(_td("a", colspan=2), _td("b"), '<td colspan="x"></td>', '<td colspan="0"></td>')
        assert [parse_span(c) for c in cells] == [2, 1, 1, 1]


class TestParseRow:
    """Parsing of a single row."""

    def test_unparseable_start_time_aborts_row(self):
        cells = _row_cells("<td>Lunedì</td>", _td("Mathematics", "Rossi"))
        with pytest.raises(RowParseError):
            parse_row(cells, 0)

    def test_start_time_without_minutes_aborts_row(self):
        cells = _row_cells("<td>8.</td>", _td("Mathematics", "Rossi"))
        with pytest.raises(RowParseError):
            parse_row(cells, 0)

    def test_lessons_carry_times_and_fields(self):
        cells = _row_cells(
            "<td>7.55</td>",
            _td("Mathematics", "Rossi", "AULA 12"),
            _td("Physics", "Bianchi"),
        )
        lessons = parse_row(cells, 0, class_name="5BINF")
        assert lessons == [
            Lesson("5BINF", 0, "07:55", "08:45", "Mathematics", "Rossi", "AULA 12"),
            Lesson("5BINF", 1, "07:55", "08:45", "Physics", "Bianchi", ""),
        ]

    def test_deferred_end_time(self):
        cells = _row_cells("<td>7.55</td>", _td("Mathematics", "Rossi"))
        options = ParseOptions(end_time_policy=EndTimePolicy.DEFERRED)
        assert parse_row(cells, 0, options)[0].end_time == ""

    def test_empty_cell_still_advances_day(self):
        cells = _row_cells(
            "<td>8.00</td>",
            _td("&nbsp;"),
            _td("Physics", "Bianchi"),
        )
        lessons = parse_row(cells, 0)
        assert [lesson.day for lesson in lessons] == [1]

    def test_insufficient_cell_does_not_abort_row(self):
        cells = _row_cells(
            "<td>8.00</td>",
            _td("Gym"),
            _td("Physics", "Bianchi"),
            _td("Art", "Gallo"),
        )
        lessons = parse_row(cells, 0)
        assert [(lesson.day, lesson.subject) for lesson in lessons] == [(1, "Physics"), (2, "Art")]

    def test_merged_row_yields_five_distinct_days(self):
        spans = [1, 1, 2, 1, 1, 2, 2]
        cells = _row_cells(
            "<td>8.00</td>",
            *(_td(f"Subject{i}", "Rossi", colspan=span) for i, span in enumerate(spans))
        )
        lessons = parse_row(cells, 0)
        days = [lesson.day for lesson in lessons]
        assert days == [0, 1, 2, 3, 4]
        assert all(0 <= day <= 4 for day in days)

    @pytest.mark.parametrize("first_cell", [_td("&nbsp;", colspan=1), _td("Gym", colspan=1)])
    def test_cell_without_lesson_in_wide_row_moves_to_next_day(self, first_cell):
        cells = _row_cells(
            "<td>8.00</td>",
            first_cell,
            _td("Mathematics", "Rossi", colspan=1),
            *(_td(f"Subject{i}", "Rossi", colspan=2) for i in range(4))
        )
        lessons = parse_row(cells, 0)
        assert [(lesson.day, lesson.subject) for lesson in lessons] == [
            (1, "Mathematics"), (2, "Subject0"), (3, "Subject1"), (4, "Subject2"),
        ]

    def test_slot_past_friday_is_dropped(self):
        cells = _row_cells(
            "<td>8.00</td>",
            *(_td(f"Subject{i}", "Rossi", colspan=2) for i in range(6))
        )
        lessons = parse_row(cells, 0)
        assert [lesson.day for lesson in lessons] == [0, 1, 2, 3, 4]
        assert lessons[-1].subject == "Subject4"

    def test_flat_mode(self):
        cells = _row_cells(
            "<td>8.00</td>",
            '<td><p>Mathematics</p><p><a href="r.html">Rossi</a> AULA 3</p></td>',
        )
        lessons = parse_row(cells, 0, ParseOptions(extraction_mode=ExtractionMode.FLAT))
        assert lessons[0].teacher == "Rossi AULA 3"
        assert lessons[0].room == ""


class TestParseScheduleHtml:
    """End-to-end parsing of a class page."""

    @pytest.fixture
    def sample_html(self):
        return """
        <html><body>
        <table>
        <thead><tr><th></th><th>Lunedì</th><th>Martedì</th><th>Mercoledì</th><th>Giovedì</th><th>Venerdì</th></tr></thead>
        <tbody>
        <tr>
            <td>8.00</td>
            <td><p>Mathematics</p><p><a href="rossi.html">Rossi</a></p><p>AULA 12</p></td>
            <td><p>&nbsp;</p></td>
            <td><p>Physics</p><p><a href="bianchi.html">Bianchi</a></p></td>
            <td><p>History</p><p>Verdi</p><p>LAB 2</p></td>
            <td><p>English</p><p>Neri</p></td>
        </tr>
        <tr>
            <td>9.00</td>
            <td><p>Gym</p></td>
            <td><p>Chemistry</p><p>Verdi</p><p>Neri</p><p>LAB</p><p>3</p></td>
            <td><p>Art</p><p>Gallo</p></td>
            <td><p>Music</p><p>Conti</p></td>
            <td><p>Latin</p><p>Marino</p></td>
        </tr>
        </tbody>
        </table>
        </body></html>
        """

    def test_lesson_count(self, sample_html):
        lessons = parse_schedule_html(sample_html, "3^AINF")
        assert len(lessons) == 2 * 5 - 2

    def test_lesson_contents(self, sample_html):
        lessons = parse_schedule_html(sample_html, "3^AINF")
        first_row = [lesson for lesson in lessons if lesson.start_time == "08:00"]
        second_row = [lesson for lesson in lessons if lesson.start_time == "09:00"]

        assert [lesson.day for lesson in first_row] == [0, 2, 3, 4]
        assert [lesson.day for lesson in second_row] == [1, 2, 3, 4]
        assert {lesson.end_time for lesson in first_row} == {"08:50"}
        assert {lesson.end_time for lesson in second_row} == {"10:00"}

        chemistry = second_row[0]
        assert chemistry.subject == "Chemistry"
        assert chemistry.teacher == "Verdi, Neri"
        assert chemistry.room == "LAB3"
        assert all(lesson.class_name == "3^AINF" for lesson in lessons)

    def test_rows_without_start_time_are_skipped(self):
        html = """
        <table><tbody>
        <tr><td>Ora</td><td><p>Mathematics</p><p>Rossi</p></td></tr>
        <tr><td>10.00</td><td><p>Physics</p><p>Bianchi</p></td></tr>
        </tbody></table>
        """
        lessons = parse_schedule_html(html, "4AINF")
        assert [(lesson.start_time, lesson.subject) for lesson in lessons] == [("10:00", "Physics")]

    def test_table_without_tbody(self):
        html = "<table><tr><td>8.00</td><td><p>Mathematics</p><p>Rossi</p></td></tr></table>"
        assert len(parse_schedule_html(html, "4AINF")) == 1

    def test_no_table(self):
        assert parse_schedule_html("<html><body>Nothing here</body></html>", "4AINF") == []

    def test_page_reports_rows_with_cells(self):
        html = """
        <table><tbody>
        <tr><th>Ora</th><th>Lunedì</th></tr>
        <tr><td>8.00</td><td><p>&nbsp;</p></td></tr>
        <tr><td>9.00</td><td><p>Gym</p></td></tr>
        </tbody></table>
        """
        lessons, rows = parse_schedule_page(html, "4AINF")
        assert lessons == []
        assert rows == 2
