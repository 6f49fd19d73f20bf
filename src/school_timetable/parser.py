"""
Timetable table parsing: rows of <td> cells -> Lesson records.

Table layout: the first cell of each row holds the start time ("8.00"), the
following cells are the weekday slots. Usually there is one cell per day,
but a day may be split into two narrow cells (colspan=1) when the rest of
the row uses wider cells, giving rows with more than five day cells.
"""

from typing import Optional

import structlog

from .cells import decompose_cell
from .classifier import classify_tokens
from .dom import HtmlElement, load_document
from .errors import RowParseError, SlotParseError
from .models import Lesson, ParseOptions
from .utils import compute_end_time, normalize_text, parse_start_time

logger = structlog.get_logger()

WEEKDAYS = 5


def parse_span(cell: HtmlElement) -> int:
    """Colspan of a cell; missing or malformed values count as 1."""
    try:
        return max(1, int(cell.attr("colspan", "1")))
    except (TypeError, ValueError):
        return 1


class DayIndexTracker:
    """
    Tracks which weekday the next cell of a row belongs to.

    current_day is 1-based (1 = Monday); `day` is the 0-based index stored
    on lessons. When a row has more day cells than weekdays, two adjacent
    cells that both have colspan=1 are halves of the same day, so the day
    only moves on at a boundary where at least one of the two cells is wider.
    That rule only follows an emitted lesson; a cell that yields no lesson
    always moves on by one day.
    """

    def __init__(self, spans: list[int]):
        """
        Args:
            spans: Colspan of every day cell of the row (time cell excluded)
        """
        self.spans = spans
        self.current_day = 1
        self.compensating = len(spans) > WEEKDAYS

    @property
    def day(self) -> int:
        return self.current_day - 1

    def advance(self, position: int) -> None:
        """
        Move past the day cell at position (0-based among day cells).
        """
        if not self.compensating:
            self.current_day += 1
            return

        if position + 1 >= len(self.spans):
            return

        if not (self.spans[position] == 1 and self.spans[position + 1] == 1):
            self.current_day += 1

    def skip(self) -> None:
        """Move past a cell that produced no lesson."""
        self.current_day += 1


def parse_row(
        cells: list[HtmlElement],
        row_position: int,
        options: Optional[ParseOptions] = None,
        class_name: str = ""
) -> list[Lesson]:
    """
    Parse one timetable row.

    Args:
        cells: All <td> cells of the row, time cell first
        row_position: Index of the row in the table (selects the duration)
        options: Parsing policies
        class_name: Class the lessons belong to

    Returns:
        Lessons of the row, days strictly increasing within [0, 4]

    Raises:
        RowParseError: The time cell does not hold a start time
    """
    options = options or ParseOptions()
    if not cells:
        return []

    raw_time = normalize_text(cells[0].text())
    start_time = parse_start_time(raw_time)
    if not start_time:
        raise RowParseError(f"Missing start time in row {row_position}: {raw_time!r}")

    end_time = compute_end_time(row_position, start_time, options.end_time_policy)

    day_cells = cells[1:]
    tracker = DayIndexTracker([parse_span(cell) for cell in day_cells])
    lessons: list[Lesson] = []
    last_day = -1

    for position, cell in enumerate(day_cells):
        day = tracker.day
        tokens = decompose_cell(cell, options.extraction_mode)

        if not tokens:
            tracker.skip()
            continue

        try:
            fields = classify_tokens(tokens, options.four_token_policy)
        except SlotParseError as e:
            logger.info(
                "slot_skipped",
                class_name=class_name,
                row=row_position,
                day=day,
                reason=str(e),
                tokens=e.tokens
            )
            tracker.skip()
            continue

        if not 0 <= day < WEEKDAYS or day <= last_day:
            logger.warning(
                "slot_out_of_range",
                class_name=class_name,
                row=row_position,
                day=day,
                previous_day=last_day,
                tokens=tokens
            )
            tracker.skip()
            continue

        lessons.append(Lesson(
            class_name=class_name,
            day=day,
            start_time=start_time,
            end_time=end_time,
            subject=fields.subject,
            teacher=fields.teacher,
            room=fields.room,
        ))
        last_day = day
        logger.debug(
            "lesson_parsed",
            class_name=class_name,
            row=row_position,
            day=day,
            subject=fields.subject,
            teacher=fields.teacher,
            room=fields.room
        )

        tracker.advance(position)

    return lessons


def table_rows(document: HtmlElement) -> list[HtmlElement]:
    """Body rows of the timetable; every <tr> when the markup has no <tbody>."""
    rows = document.select("tbody tr")
    if not rows:
        rows = document.select("tr")
    return rows


def parse_schedule_page(
        html: str,
        class_name: str,
        options: Optional[ParseOptions] = None
) -> tuple[list[Lesson], int]:
    """
    Parse the timetable page of one class.

    Rows without a start time are logged and skipped.

    Args:
        html: Page markup
        class_name: Class the page belongs to
        options: Parsing policies

    Returns:
        All lessons of the class row by row, and the number of table rows
        holding <td> cells
    """
    options = options or ParseOptions()
    document = load_document(html)

    lessons: list[Lesson] = []
    rows_total = 0
    rows_skipped = 0

    for row_position, row in enumerate(table_rows(document)):
        cells = row.find_all("td")
        if not cells:
            continue

        rows_total += 1
        try:
            lessons.extend(parse_row(cells, row_position, options, class_name))
        except RowParseError as e:
            rows_skipped += 1
            logger.info(
                "row_skipped",
                class_name=class_name,
                row=row_position,
                reason=str(e)
            )

    logger.info(
        "schedule_parsing_stats",
        class_name=class_name,
        rows=rows_total,
        rows_skipped=rows_skipped,
        lessons=len(lessons)
    )

    return lessons, rows_total


def parse_schedule_html(
        html: str,
        class_name: str,
        options: Optional[ParseOptions] = None
) -> list[Lesson]:
    """Lessons of one class timetable page."""
    lessons, _ = parse_schedule_page(html, class_name, options)
    return lessons
