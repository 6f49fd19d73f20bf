"""
Error hierarchy for the timetable seeder.

Each error marks the scope it aborts:
- DiscoveryError: the whole run (no class can be processed)
- FetchError / PersistenceError: one class
- RowParseError: one table row
- SlotParseError: one cell
"""


class TimetableError(Exception):
    """Base exception for all seeder errors."""


class DiscoveryError(TimetableError):
    """No class schedule links could be found on the index page."""


class FetchError(TimetableError):
    """A page could not be retrieved (timeout, connection error, bad status)."""


class RowParseError(TimetableError):
    """A table row has no usable start time."""


class SlotParseError(TimetableError):
    """
    A cell's tokens cannot be turned into a lesson.

    Attributes:
        tokens: Tokens extracted from the offending cell
    """

    def __init__(self, message: str, tokens: list[str] | None = None):
        super().__init__(message)
        self.tokens = list(tokens or [])


class PersistenceError(TimetableError):
    """Writing a class or its lessons to the database failed."""
