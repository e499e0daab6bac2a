"""Cron specification: parsing and evaluation entry points.

A specification is a crontab line such as::

    */15 0 1,15 * 1-5 /usr/bin/find

Five fields (minute, hour, day of month, month, day of week) separated by
spaces or tabs, optionally followed by free text (usually a command) that
is kept verbatim as ``context``.

Usage:
    >>> from cronex import CronSpec
    >>>
    >>> spec = CronSpec.parse("0 9 * * 1-5 backup.sh")
    >>> spec.next_from(datetime(2024, 1, 13))     # Saturday
    datetime.datetime(2024, 1, 15, 9, 0)
    >>> spec.next_n(3, datetime(2024, 1, 15, 9, 0))
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterator

from cronex.config import IteratorConfig
from cronex.errors import CronFormatError, CronParseError
from cronex.fields import FIELD_DOMAINS, FieldSpec, FieldType, parse_field
from cronex.iterator import CronIterator, CronSpecIterator, cron_weekday


# fields are separated by runs of spaces and tabs only
_FIELD_SEPARATOR = re.compile(r"[ \t]+")

FIELD_ORDER: tuple[FieldType, ...] = (
    FieldType.MINUTE,
    FieldType.HOUR,
    FieldType.DAY_OF_MONTH,
    FieldType.MONTH,
    FieldType.DAY_OF_WEEK,
)


# =============================================================================
# Cron Spec
# =============================================================================


class CronSpec:
    """Parsed crontab entry.

    CronSpec is immutable; a single instance can be shared between threads
    and used for any number of enumerations.

    Example:
        >>> spec = CronSpec.parse("0 0 29 2 *")
        >>> spec.next_from(datetime(2021, 1, 1))
        datetime.datetime(2024, 2, 29, 0, 0)
        >>> list(spec.iter(datetime(2021, 1, 1), limit=2))
        [datetime.datetime(2024, 2, 29, 0, 0), datetime.datetime(2028, 2, 29, 0, 0)]
    """

    __slots__ = (
        "_minutes",
        "_hours",
        "_days_of_month",
        "_months",
        "_days_of_week",
        "_context",
        "_expression",
    )

    def __init__(
        self,
        minutes: FieldSpec,
        hours: FieldSpec,
        days_of_month: FieldSpec,
        months: FieldSpec,
        days_of_week: FieldSpec,
        context: str = "",
        expression: str = "",
    ) -> None:
        self._minutes = minutes
        self._hours = hours
        self._days_of_month = days_of_month
        self._months = months
        self._days_of_week = days_of_week
        self._context = context
        self._expression = expression

    @classmethod
    def parse(cls, text: str) -> "CronSpec":
        """Parse a crontab entry.

        Raises:
            CronSyntaxError: If any field is malformed.
            CronRangeError: If any field is out of range.
            CronFormatError: If there are fewer than five fields.
        """
        return CronSpecParser(text).parse()

    @property
    def minutes(self) -> FieldSpec:
        return self._minutes

    @property
    def hours(self) -> FieldSpec:
        return self._hours

    @property
    def days_of_month(self) -> FieldSpec:
        return self._days_of_month

    @property
    def months(self) -> FieldSpec:
        return self._months

    @property
    def days_of_week(self) -> FieldSpec:
        return self._days_of_week

    @property
    def context(self) -> str:
        """Free text following the schedule (usually the command)."""
        return self._context

    @property
    def expression(self) -> str:
        """Original expression text."""
        return self._expression

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        """Field specifications in expression order."""
        return (
            self._minutes,
            self._hours,
            self._days_of_month,
            self._months,
            self._days_of_week,
        )

    def get_field(self, field_type: FieldType) -> FieldSpec:
        return self.fields[FIELD_ORDER.index(field_type)]

    def matches(self, dt: datetime) -> bool:
        """Check if a datetime is an occurrence of this specification."""
        if dt.second or dt.microsecond:
            return False
        return (
            dt.minute in self._minutes
            and dt.hour in self._hours
            and dt.day in self._days_of_month
            and dt.month in self._months
            and cron_weekday(dt) in self._days_of_week
        )

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def enumerate_from(
        self,
        start: datetime,
        inclusive: bool = True,
        config: IteratorConfig | None = None,
    ) -> Iterator[datetime]:
        """Enumerate all occurrences from start.

        The sequence is lazy, strictly ascending and ends only when the
        supported year range is exhausted.

        Args:
            start: Reference time.
            inclusive: If False, start itself is guaranteed not to be included.
            config: Iterator configuration.

        Returns:
            Iterator over occurrences.
        """
        return CronSpecIterator.enumerate_from(self, start, inclusive, config)

    def enumerate_after(
        self,
        start: datetime,
        config: IteratorConfig | None = None,
    ) -> Iterator[datetime]:
        """Enumerate all occurrences strictly after start."""
        return self.enumerate_from(start, False, config)

    def next_from(
        self,
        start: datetime,
        inclusive: bool = True,
        config: IteratorConfig | None = None,
    ) -> datetime | None:
        """First occurrence from start.

        Args:
            start: Reference time.
            inclusive: If False, start itself is never returned.
            config: Iterator configuration.

        Returns:
            First occurrence, or None if there is none in the supported range.
        """
        return CronSpecIterator.next_from(self, start, inclusive, config)

    def next_after(
        self,
        start: datetime,
        config: IteratorConfig | None = None,
    ) -> datetime | None:
        """First occurrence strictly after start."""
        return self.next_from(start, False, config)

    def next_n(
        self,
        n: int,
        start: datetime | None = None,
        inclusive: bool = False,
        config: IteratorConfig | None = None,
    ) -> list[datetime]:
        """Get the next n occurrences.

        Args:
            n: Number of occurrences to find.
            start: Reference time (default: now).
            inclusive: Whether start itself may be included.
            config: Iterator configuration.

        Returns:
            List of at most n occurrences.
        """
        return list(self.iter(start, limit=n, inclusive=inclusive, config=config))

    def iter(
        self,
        start: datetime | None = None,
        limit: int | None = None,
        inclusive: bool = False,
        config: IteratorConfig | None = None,
    ) -> CronIterator:
        """Create an iterator over occurrences.

        Args:
            start: Reference time (default: now).
            limit: Maximum number of occurrences.
            inclusive: Whether start itself may be included.
            config: Iterator configuration.
        """
        return CronIterator(self, start, limit, inclusive, config)

    def __repr__(self) -> str:
        return f"CronSpec({self._expression!r})"

    def __str__(self) -> str:
        return self._expression

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CronSpec):
            return (self.fields, self._context) == (other.fields, other._context)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.fields, self._context))


# =============================================================================
# Cron Spec Parser
# =============================================================================


class CronSpecParser:
    """Parser for whole crontab entries, like "1/15 0 1,15 * 1-5 /usr/bin/find"."""

    FIELD_COUNT = len(FIELD_ORDER)

    def __init__(self, expression: str) -> None:
        """Initialize parser with expression.

        Args:
            expression: Cron expression string.
        """
        if expression is None:
            raise TypeError("Cron expression must not be None")
        self._expression = expression

    def parse(self) -> CronSpec:
        """Parse the expression.

        Returns:
            Parsed CronSpec.

        Raises:
            CronParseError: If the expression is invalid.
        """
        text = self._expression.strip(" \t")
        parts = _FIELD_SEPARATOR.split(text, maxsplit=self.FIELD_COUNT) if text else []

        if len(parts) < self.FIELD_COUNT:
            raise CronFormatError(
                f"Invalid number of fields: {len(parts)}. "
                f"Expected at least {self.FIELD_COUNT} fields.",
                self._expression,
            )

        fields = [
            self._parse_field(position, part, field_type)
            for position, (part, field_type) in enumerate(zip(parts, FIELD_ORDER))
        ]
        context = parts[self.FIELD_COUNT].rstrip() if len(parts) > self.FIELD_COUNT else ""

        return CronSpec(*fields, context=context, expression=self._expression.strip())

    def _parse_field(self, position: int, part: str, field_type: FieldType) -> FieldSpec:
        try:
            return parse_field(part, FIELD_DOMAINS[field_type])
        except CronParseError as e:
            raise e.in_field(field_type.label, position, self._expression) from e


# =============================================================================
# Module Functions
# =============================================================================


def parse(text: str) -> CronSpec:
    """Parse a crontab entry into a CronSpec."""
    return CronSpecParser(text).parse()


def validate_expression(expression: str) -> list[str]:
    """Validate a cron expression.

    Args:
        expression: Cron expression to validate.

    Returns:
        List of validation errors (empty if valid).
    """
    errors = []

    try:
        CronSpec.parse(expression)
    except CronParseError as e:
        errors.append(str(e))

    return errors


def is_valid_expression(expression: str) -> bool:
    """Check if a cron expression is valid."""
    try:
        CronSpec.parse(expression)
        return True
    except CronParseError:
        return False
