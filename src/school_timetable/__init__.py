"""
School Timetable - scraper for weekly class timetables published as HTML.

Main entry points:
- seed_timetables(store) - discover every class, parse and store its lessons
- parse_schedule_html(html, class_name) - parse one class timetable page

Usage:
    from school_timetable import seed_timetables, get_database, configure_logging

    configure_logging("INFO")
    summary = await seed_timetables(await get_database())
"""

from .seeder import seed_timetables, seed_class
from .parser import parse_schedule_html, parse_schedule_page, parse_row, DayIndexTracker
from .discovery import discover_sources
from .classifier import classify_tokens, looks_like_classroom
from .models import (
    Lesson,
    ScheduleSource,
    ParseOptions,
    EndTimePolicy,
    ExtractionMode,
    FourTokenPolicy,
    ClassResult,
    SeedSummary,
)
from .errors import (
    TimetableError,
    DiscoveryError,
    FetchError,
    RowParseError,
    SlotParseError,
    PersistenceError,
)
from .db import get_database, Database
from .config import Config, get_config
from .utils import configure_logging

__version__ = "1.0.0"

__all__ = [
    # Pipeline
    "seed_timetables",
    "seed_class",

    # Parsing
    "parse_schedule_html",
    "parse_schedule_page",
    "parse_row",
    "DayIndexTracker",
    "discover_sources",
    "classify_tokens",
    "looks_like_classroom",

    # Data models
    "Lesson",
    "ScheduleSource",
    "ParseOptions",
    "EndTimePolicy",
    "ExtractionMode",
    "FourTokenPolicy",
    "ClassResult",
    "SeedSummary",

    # Errors
    "TimetableError",
    "DiscoveryError",
    "FetchError",
    "RowParseError",
    "SlotParseError",
    "PersistenceError",

    # Database
    "get_database",
    "Database",

    # Configuration
    "Config",
    "get_config",

    # Utilities
    "configure_logging",
]
