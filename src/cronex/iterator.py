"""Next-occurrence engine.

The engine is an odometer of five rotors, least significant first::

    index   0       1     2              3      4
    digit   minute  hour  day-of-month   month  year

Minute, hour, day-of-month and month are ``MaskRotor``s over the legal
values of their fields; year is an unbounded ``CounterRotor``. Advancing a
digit that wraps around carries into the next digit, and every digit below
an advanced one is reset to its lowest legal value.

Day-of-week is not a digit. It constrains the weekday of a fully resolved
date, so it is applied as a filter together with the days-in-month check.
Rejected dates are skipped by advancing the day-of-month digit, at most
``IteratorConfig.max_invalid_dates`` times.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, tzinfo
from typing import TYPE_CHECKING, Iterator

from cronex.config import IteratorConfig
from cronex.errors import InvalidSpecificationError, UnsatisfiableSpecError
from cronex.rotor import CounterRotor, MaskRotor, Rotor

if TYPE_CHECKING:
    from cronex.spec import CronSpec


logger = logging.getLogger(__name__)

MINUTE, HOUR, DAY_OF_MONTH, MONTH, YEAR = range(5)


def cron_weekday(value: date) -> int:
    """Weekday in cron numbering (0 = Sunday, 6 = Saturday)."""
    # Python weekday: Monday=0, Sunday=6
    return (value.weekday() + 1) % 7


# =============================================================================
# Cron Spec Iterator
# =============================================================================


class CronSpecIterator:
    """Stateful cursor over the occurrences of a cron specification.

    Call ``reset`` to position the cursor at (or after) a point in time,
    then ``next`` to step forward. ``current`` is None once the supported
    year range is left.

    Instances are not thread-safe; create one per enumeration.

    Example:
        >>> iterator = CronSpecIterator(CronSpec.parse("0 0 * * 3"))
        >>> iterator.reset(datetime(2021, 1, 1))
        >>> iterator.current
        datetime.datetime(2021, 1, 6, 0, 0)
        >>> iterator.next()
        datetime.datetime(2021, 1, 13, 0, 0)
    """

    def __init__(self, spec: "CronSpec", config: IteratorConfig | None = None) -> None:
        """Initialize iterator.

        Args:
            spec: Parsed cron specification.
            config: Iterator configuration (defaults if omitted).

        Raises:
            InvalidSpecificationError: If any field has no legal values.
        """
        self._config = config or IteratorConfig()
        self._rotors: tuple[Rotor, ...] = (
            MaskRotor.from_field(spec.minutes),
            MaskRotor.from_field(spec.hours),
            MaskRotor.from_field(spec.days_of_month),
            MaskRotor.from_field(spec.months),
            CounterRotor(self._config.min_year),
        )
        self._dow = spec.days_of_week.mask
        if self._dow == 0:
            raise InvalidSpecificationError("No valid days of week")
        self._tzinfo: tzinfo | None = None
        self._current: datetime | None = None

    @property
    def config(self) -> IteratorConfig:
        return self._config

    @property
    def current(self) -> datetime | None:
        """Current occurrence, or None when exhausted (or not reset yet)."""
        return self._current

    @property
    def year(self) -> int:
        return self._rotors[YEAR].value

    @property
    def month(self) -> int:
        return self._rotors[MONTH].value

    @property
    def day(self) -> int:
        return self._rotors[DAY_OF_MONTH].value

    @property
    def hour(self) -> int:
        return self._rotors[HOUR].value

    @property
    def minute(self) -> int:
        return self._rotors[MINUTE].value

    def reset(self, time: datetime) -> datetime | None:
        """Move to the first occurrence at or after time.

        Args:
            time: Reference time. Its tzinfo is carried over to results.

        Returns:
            The new current occurrence.
        """
        min_year = self._config.min_year
        self._rotors[YEAR].seek(max(time.year, min_year))
        moved = time.year < min_year

        # once a digit moved past the requested value, lower digits of the
        # reference carry no information and start from their minimum
        components = (time.minute, time.hour, time.day, time.month)
        for index in (MONTH, DAY_OF_MONTH, HOUR, MINUTE):
            rotor = self._rotors[index]
            if moved:
                rotor.seek(0)
                continue
            target = components[index]
            moved = rotor.seek(target)
            if rotor.value < target:
                self._advance(index + 1)
                moved = True

        self._tzinfo = time.tzinfo
        self._skip_invalid_dates()
        self._update_current()

        while self._current is not None and self._current < time:
            self.next()

        logger.debug("Iterator reset to %s, current occurrence %s", time, self._current)
        return self._current

    def next(self) -> datetime | None:
        """Move to the next occurrence.

        Returns:
            The new current occurrence, or None when exhausted.

        Raises:
            UnsatisfiableSpecError: If no valid date is found within budget.
        """
        if self._current is None:
            return None

        self._advance(MINUTE)
        self._skip_invalid_dates()
        self._update_current()

        if self._current is None:
            logger.debug("Iterator exhausted after year %d", self._config.max_year)
        return self._current

    def _advance(self, index: int) -> None:
        """Advance digit at index, carrying overflow into higher digits."""
        for position, rotor in enumerate(self._rotors):
            if position < index:
                rotor.seek(0)
            elif not rotor.advance():
                return

    def _skip_invalid_dates(self) -> None:
        failed = 0
        while self._config.contains_year(self.year) and not self._is_valid_date():
            failed += 1
            if failed > self._config.max_invalid_dates:
                candidate = (self.year, self.month, self.day)
                logger.warning(
                    "Giving up after %d invalid dates, last candidate %04d-%02d-%02d",
                    failed,
                    *candidate,
                )
                raise UnsatisfiableSpecError(
                    "Cron spec generates too many invalid dates",
                    attempts=failed,
                    candidate=candidate,
                )
            self._advance(DAY_OF_MONTH)

    def _is_valid_date(self) -> bool:
        year, month, day = self.year, self.month, self.day
        if not 1 <= day <= calendar.monthrange(year, month)[1]:
            return False
        return bool(self._dow >> cron_weekday(date(year, month, day)) & 1)

    def _update_current(self) -> None:
        if not self._config.contains_year(self.year):
            self._current = None
            return

        self._current = datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            tzinfo=self._tzinfo,
        )

    # -------------------------------------------------------------------------
    # Enumeration helpers
    # -------------------------------------------------------------------------

    @classmethod
    def enumerate_from(
        cls,
        spec: "CronSpec",
        start: datetime,
        inclusive: bool = True,
        config: IteratorConfig | None = None,
    ) -> Iterator[datetime]:
        """Lazily enumerate occurrences from start.

        Args:
            spec: Cron specification.
            start: Reference time.
            inclusive: If False, start itself is never yielded.
            config: Iterator configuration.

        Yields:
            Occurrences in strictly ascending order.
        """
        iterator = cls(spec, config)
        current = iterator.reset(start)
        while current is not None:
            if inclusive or current > start:
                yield current
            current = iterator.next()

    @classmethod
    def next_from(
        cls,
        spec: "CronSpec",
        start: datetime,
        inclusive: bool = True,
        config: IteratorConfig | None = None,
    ) -> datetime | None:
        """First occurrence from start, or None if there is none."""
        iterator = cls(spec, config)
        current = iterator.reset(start)
        while current is not None and not inclusive and current <= start:
            current = iterator.next()
        return current

    def __repr__(self) -> str:
        return f"CronSpecIterator(current={self._current!r})"


# =============================================================================
# Cron Iterator
# =============================================================================


class CronIterator(Iterator[datetime]):
    """Iterator over matching datetimes with an optional limit.

    Efficiently iterates without storing all matches in memory.
    """

    def __init__(
        self,
        spec: "CronSpec",
        start: datetime | None = None,
        limit: int | None = None,
        inclusive: bool = False,
        config: IteratorConfig | None = None,
    ) -> None:
        """Initialize iterator.

        Args:
            spec: Cron specification.
            start: Reference time (default: now).
            limit: Maximum number of occurrences.
            inclusive: Whether start itself may be yielded.
            config: Iterator configuration.
        """
        if start is None:
            start = datetime.now().replace(second=0, microsecond=0)
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")

        self._spec = spec
        self._start = start
        self._limit = limit
        self._count = 0
        self._occurrences = CronSpecIterator.enumerate_from(spec, start, inclusive, config)

    @property
    def count(self) -> int:
        """Number of occurrences yielded so far."""
        return self._count

    def __iter__(self) -> "CronIterator":
        return self

    def __next__(self) -> datetime:
        if self._limit is not None and self._count >= self._limit:
            raise StopIteration

        next_dt = next(self._occurrences)
        self._count += 1
        return next_dt
