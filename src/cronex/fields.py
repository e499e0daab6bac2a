"""Field domains and frequency atoms.

Every atom of a cron field (``*``, ``*/n``, ``a``, ``a-b``, ``a/n``,
``a-b/n``) is reduced to a single canonical triple ``a-b/n``::

    *     -> min-max/1
    */n   -> min-max/n
    7     -> 7-7/1
    5/5   -> 5-max/5
    3-9   -> 3-9/1

so enumeration and masking are the same for every shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from functools import cached_property
from typing import Callable, Iterable, Iterator

from cronex.errors import CronRangeError, CronSyntaxError, InvalidSpecificationError


# =============================================================================
# Field Domains
# =============================================================================


class FieldType(Enum):
    """Cron fields, in expression order."""

    MINUTE = auto()
    HOUR = auto()
    DAY_OF_MONTH = auto()
    MONTH = auto()
    DAY_OF_WEEK = auto()

    @property
    def domain(self) -> "FieldDomain":
        return FIELD_DOMAINS[self]

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class FieldDomain:
    """Inclusive range of values allowed in a field."""

    min_value: int
    max_value: int

    def contains(self, value: int) -> bool:
        """Check if value is within the domain."""
        return self.min_value <= value <= self.max_value

    def __contains__(self, value: int) -> bool:
        return self.contains(value)

    def __str__(self) -> str:
        return f"[{self.min_value},{self.max_value}]"


FIELD_DOMAINS: dict[FieldType, FieldDomain] = {
    FieldType.MINUTE: FieldDomain(0, 59),
    FieldType.HOUR: FieldDomain(0, 23),
    FieldType.DAY_OF_MONTH: FieldDomain(1, 31),
    FieldType.MONTH: FieldDomain(1, 12),
    FieldType.DAY_OF_WEEK: FieldDomain(0, 6),  # 0 = Sunday
}

MASK_BITS = 64


# =============================================================================
# Frequency Atom
# =============================================================================


@dataclass(frozen=True)
class FreqAtom:
    """Canonical ``min-max/step`` form of a single field atom.

    Values are not validated on construction; use ``is_valid`` (the parser
    always does).

    Attributes:
        min_value: Lower bound, "a" in "a-b/n" (inclusive).
        max_value: Upper bound, "b" in "a-b/n" (inclusive).
        step: Step, "n" in "a-b/n".
        domain: Domain used to expand ``*`` and validate bounds.
    """

    min_value: int
    max_value: int
    step: int
    domain: FieldDomain

    @classmethod
    def star(cls, domain: FieldDomain, step: int | None = None) -> "FreqAtom":
        """``*`` or ``*/n``."""
        return cls(domain.min_value, domain.max_value, 1 if step is None else step, domain)

    @classmethod
    def single(cls, domain: FieldDomain, value: int) -> "FreqAtom":
        """``a``."""
        return cls(value, value, 1, domain)

    @classmethod
    def ranged(
        cls,
        domain: FieldDomain,
        min_value: int,
        max_value: int | None = None,
        step: int | None = None,
    ) -> "FreqAtom":
        """``a/n``, ``a-b`` or ``a-b/n``."""
        return cls(
            min_value,
            domain.max_value if max_value is None else max_value,
            1 if step is None else step,
            domain,
        )

    def is_valid(self, domain: FieldDomain | None = None) -> bool:
        """Validate the triple against a domain (its own by default)."""
        domain = domain or self.domain
        return (
            0 <= self.min_value <= self.max_value
            and domain.contains(self.min_value)
            and domain.contains(self.max_value)
            and self.step > 0
        )

    def enumerate(self) -> Iterator[int]:
        """Yield ``min, min+step, ...`` up to and including ``max``."""
        return iter(range(self.min_value, self.max_value + 1, self.step))

    def to_mask(self) -> int:
        """Convert to a 64-bit membership mask (bit v set for each value v).

        Raises:
            ValueError: If max_value does not fit into 64 bits.
        """
        if self.max_value >= MASK_BITS:
            raise ValueError(f"Max value {self.max_value} is too big for a mask")

        mask = 0
        for value in self.enumerate():
            mask |= 1 << value
        return mask

    def __str__(self) -> str:
        return f"{self.min_value}-{self.max_value}/{self.step}"


# =============================================================================
# Field Specification
# =============================================================================


@dataclass(frozen=True)
class FieldSpec:
    """Non-empty list of atoms describing the legal values of one field."""

    atoms: tuple[FreqAtom, ...]

    def __post_init__(self) -> None:
        if not self.atoms:
            raise InvalidSpecificationError("Field specification has no atoms")

    @cached_property
    def mask(self) -> int:
        """Union of all atom masks."""
        mask = 0
        for atom in self.atoms:
            mask |= atom.to_mask()
        return mask

    def values(self) -> list[int]:
        """Distinct legal values in ascending order."""
        return enumerate_values(self.atoms)

    def contains(self, value: int) -> bool:
        return 0 <= value < MASK_BITS and bool(self.mask >> value & 1)

    def __contains__(self, value: int) -> bool:
        return self.contains(value)

    def __iter__(self) -> Iterator[FreqAtom]:
        return iter(self.atoms)

    def __len__(self) -> int:
        return len(self.atoms)

    def __getitem__(self, index: int) -> FreqAtom:
        return self.atoms[index]


def enumerate_values(atoms: Iterable[FreqAtom]) -> list[int]:
    """All values produced by the atoms, without duplicates, sorted."""
    values: set[int] = set()
    for atom in atoms:
        values.update(atom.enumerate())
    return sorted(values)


# =============================================================================
# Parsing
# =============================================================================

# *, */n, a, a-b, a/n, a-b/n
_ATOM_PATTERN = re.compile(
    r"\s*(?:(?P<all>\*)|(?P<min>\d+)(?:-(?P<max>\d+))?)(?:/(?P<step>\d+))?\s*",
    re.ASCII,
)


def _group_int(match: re.Match[str], name: str) -> int | None:
    value = match.group(name)
    return None if value is None else int(value)


def parse_atom(text: str, domain: FieldDomain) -> FreqAtom:
    """Parse a single atom: ``*``, ``*/n``, ``a``, ``a-b``, ``a/n`` or ``a-b/n``.

    Lists (``,``) are handled by ``parse_field``.

    Args:
        text: Atom text.
        domain: Allowed range, used to expand ``*`` and validate bounds.

    Returns:
        Canonical FreqAtom.

    Raises:
        TypeError: If text is None.
        CronSyntaxError: If text is not a well-formed atom.
        CronRangeError: If the atom is well formed but not within domain.
    """
    if text is None:
        raise TypeError("Atom text must not be None")

    match = _ATOM_PATTERN.fullmatch(text)
    if match is None:
        raise CronSyntaxError(f"Expression {text!r} is not valid", text)

    min_value = _group_int(match, "min")
    max_value = _group_int(match, "max")
    step = _group_int(match, "step")

    if min_value is None:
        atom = FreqAtom.star(domain, step)
    elif max_value is None and step is None:
        atom = FreqAtom.single(domain, min_value)
    else:
        atom = FreqAtom.ranged(domain, min_value, max_value, step)

    if not atom.is_valid(domain):
        raise CronRangeError(
            f"Expression {text.strip()!r} is not valid for range {domain}",
            text,
        )

    return atom


def parse_field(
    text: str,
    domain: FieldDomain,
    parser: Callable[[str, FieldDomain], FreqAtom] | None = None,
) -> FieldSpec:
    """Parse a comma separated list of atoms.

    Args:
        text: Field text, e.g. ``"1,2-8/3,*/15"``.
        domain: Allowed range for every atom.
        parser: Atom parser, ``parse_atom`` by default.

    Returns:
        FieldSpec with one atom per list entry, in order.

    Raises:
        CronSyntaxError: If any entry is empty or malformed.
        CronRangeError: If any entry is out of range.
    """
    if text is None:
        raise TypeError("Field text must not be None")

    parse = parser or parse_atom
    atoms = []
    for segment in text.split(","):
        if not segment.strip():
            raise CronSyntaxError(f"Empty entry in list {text!r}", text)
        atoms.append(parse(segment, domain))

    return FieldSpec(tuple(atoms))
