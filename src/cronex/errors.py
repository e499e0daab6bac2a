"""Exceptions raised by cronex.

Parse-time errors derive from ``CronParseError`` (itself a ``ValueError``)
and are raised eagerly by the parser. ``UnsatisfiableSpecError`` is raised
lazily, when enumeration reaches a field combination no calendar date can
satisfy.
"""

from __future__ import annotations


class CronError(Exception):
    """Base class for all cronex errors."""

    pass


# =============================================================================
# Parse Errors
# =============================================================================


class CronParseError(CronError, ValueError):
    """Raised when cron expression parsing fails.

    Attributes:
        expression: Text that failed to parse (full expression when known).
        field: Name of the offending field, if any.
        position: Index of the offending field, or -1.
    """

    def __init__(
        self,
        message: str,
        expression: str = "",
        field: str | None = None,
        position: int = -1,
    ) -> None:
        self.expression = expression
        self.field = field
        self.position = position
        super().__init__(message)

    def in_field(self, field: str, position: int, expression: str) -> "CronParseError":
        """Return a copy of this error attributed to a field of an expression."""
        return type(self)(
            f"{field}: {self}",
            expression=expression,
            field=field,
            position=position,
        )


class CronSyntaxError(CronParseError):
    """Malformed atom or list (stray characters, empty entries)."""

    pass


class CronRangeError(CronParseError):
    """Atom is well formed but its values fall outside the field's domain."""

    pass


class CronFormatError(CronParseError):
    """Expression does not have the five required fields."""

    pass


# =============================================================================
# Evaluation Errors
# =============================================================================


class InvalidSpecificationError(CronError, ValueError):
    """A field has no legal values at all."""

    pass


class UnsatisfiableSpecError(CronError, RuntimeError):
    """No valid calendar date was found within the repair budget.

    Attributes:
        attempts: Number of rejected candidates.
        candidate: Last rejected (year, month, day).
    """

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        candidate: tuple[int, int, int] | None = None,
    ) -> None:
        self.attempts = attempts
        self.candidate = candidate
        super().__init__(message)
