from __future__ import annotations


class CalendarError(Exception):
    """Base class for every error raised by zonecal."""


class InvalidArgument(CalendarError, ValueError):
    """A primitive was called with a malformed unit, value or step."""


class UnresolvedTimezone(CalendarError):
    """The environment did not report a usable IANA zone."""


class AmbiguousLocalTime(CalendarError):
    """A wall-clock time falls in a DST fold or gap and strict resolution was requested."""

    def __init__(self, message: str, kind: str):
        super().__init__(message)
        self.kind = kind


class FormatterContractViolation(CalendarError, TypeError):
    """A format strategy returned something other than a string or None."""


class EventValidationError(CalendarError, ValueError):
    """Form values cannot be turned into a valid event."""
