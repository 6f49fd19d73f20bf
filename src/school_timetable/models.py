"""
Data models for the timetable seeder.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EndTimePolicy(str, Enum):
    """How the end time of a lesson is obtained."""
    FIXED = "fixed"
    DEFERRED = "deferred"


class ExtractionMode(str, Enum):
    """How tokens are pulled out of a cell paragraph."""
    FLAT = "flat"
    LINKS = "links"


class FourTokenPolicy(str, Enum):
    """Which token becomes the room when a cell has exactly four tokens."""
    HEURISTIC = "heuristic"
    POSITIONAL = "positional"


class TokenKind(str, Enum):
    """Classification of a single cell token."""
    SUBJECT = "subject"
    TEACHER = "teacher"
    ROOM = "room"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ParseOptions:
    """
    Parsing policies for one run.

    Attributes:
        end_time_policy: Fixed per-row durations or end time left empty
        extraction_mode: One token per paragraph or link-aware tokens
        four_token_policy: Room/teacher rule for four-token cells
    """
    end_time_policy: EndTimePolicy = EndTimePolicy.FIXED
    extraction_mode: ExtractionMode = ExtractionMode.LINKS
    four_token_policy: FourTokenPolicy = FourTokenPolicy.HEURISTIC


@dataclass(frozen=True)
class ScheduleSource:
    """A class and the URL of its timetable page."""
    name: str
    url: str


@dataclass(frozen=True)
class TaggedToken:
    """A cell token together with the field it was classified into."""
    kind: TokenKind
    text: str


@dataclass(frozen=True)
class SlotFields:
    """Subject, teacher(s) and room of one timetable slot."""
    subject: str
    teacher: str
    room: str = ""


@dataclass(frozen=True)
class Lesson:
    """
    One lesson of a class timetable.

    Attributes:
        class_name: Name of the class the lesson belongs to
        day: Weekday index, 0 (Monday) to 4 (Friday)
        start_time: Start time "HH:MM"
        end_time: End time "HH:MM" or "" when it is computed downstream
        subject: Subject name
        teacher: Teacher name(s), several joined with ", "
        room: Room designation, may be empty
    """
    class_name: str
    day: int
    start_time: str
    end_time: str
    subject: str
    teacher: str
    room: str = ""

    def __repr__(self) -> str:
        return (
            f"Lesson({self.class_name} day={self.day} "
            f"{self.start_time}-{self.end_time or '?'} "
            f"{self.subject} | {self.teacher} | {self.room})"
        )


@dataclass
class ClassResult:
    """
    Outcome of the pipeline for one class.

    Attributes:
        status: Whether the class was seeded
        class_name: Name of the class
        details: Human readable description of the outcome
        lessons_added: Number of lessons written
        errors: Error description, if any
    """
    status: bool
    class_name: str
    details: str
    lessons_added: int = 0
    errors: Optional[str] = None

    def __repr__(self) -> str:
        status_str = "✓" if self.status else "✗"
        return (
            f"ClassResult({status_str} {self.class_name}, "
            f"lessons={self.lessons_added}, errors={self.errors})"
        )


@dataclass
class SeedSummary:
    """Counters of a whole seeding run."""
    results: list[ClassResult] = field(default_factory=list)

    @property
    def seeded(self) -> int:
        return sum(1 for r in self.results if r.status)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if not r.status)

    @property
    def total_lessons(self) -> int:
        return sum(r.lessons_added for r in self.results)
