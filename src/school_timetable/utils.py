"""
Text and time helpers shared by the parsing components, plus logging setup.
"""
import logging
import re

import structlog

from .models import EndTimePolicy

# Lesson length in minutes by row position in the timetable
ROW_DURATIONS = (50, 60, 55, 55, 55, 55, 50)
DEFAULT_DURATION = 50


def normalize_text(text: str) -> str:
    """
    Clean a text fragment extracted from the page.

    Non-breaking spaces and zero-width spaces are removed outright (the
    timetable generator pads empty cells with "&nbsp;"), whitespace runs are
    collapsed and the result is trimmed.

    Args:
        text: Raw text

    Returns:
        Normalized text, "" for None or blank input
    """
    if not text:
        return ""

    text = text.replace('\xa0', '').replace('\u200b', '')
    text = re.sub(r'\s+', ' ', text)

    return text.strip()


def parse_start_time(raw: str) -> str:
    """
    Convert a start time token like "8.00" into "08:00".

    Args:
        raw: Time cell text, "H.MM"

    Returns:
        "HH:MM", or "" when the hour or minute part is missing
    """
    parts = normalize_text(raw).split('.')
    if len(parts) < 2:
        return ""

    hour, minute = parts[0].strip(), parts[1].strip()
    if not hour or not minute or not hour.isdigit() or not minute.isdigit():
        return ""

    return f"{hour.zfill(2)}:{minute.zfill(2)}"


def add_minutes(time_str: str, minutes: int) -> str:
    """
    Add minutes to an "HH:MM" string.

    The hour is not wrapped at midnight.

    Examples:
    - add_minutes("07:55", 50) -> "08:45"
    - add_minutes("23:30", 50) -> "24:20"
    """
    hour_str, minute_str = time_str.split(':')
    hour = int(hour_str)
    minute = int(minute_str) + minutes

    while minute >= 60:
        minute -= 60
        hour += 1

    return f"{hour:02d}:{minute:02d}"


def compute_end_time(
        row_position: int,
        start_time: str,
        policy: EndTimePolicy = EndTimePolicy.FIXED
) -> str:
    """
    Compute the end time of a lesson.

    Args:
        row_position: Index of the row inside the timetable
        start_time: Start time "HH:MM"
        policy: FIXED uses ROW_DURATIONS, DEFERRED leaves the end time empty

    Returns:
        "HH:MM" or ""
    """
    if policy is EndTimePolicy.DEFERRED or not start_time:
        return ""

    if 0 <= row_position < len(ROW_DURATIONS):
        duration = ROW_DURATIONS[row_position]
    else:
        duration = DEFAULT_DURATION

    return add_minutes(start_time, duration)


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog.

    Args:
        log_level: Logging level name
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
