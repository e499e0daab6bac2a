"""Rotors: stepping cursors over the legal values of one calendar digit.

A rotor behaves like one wheel of a mechanical odometer. ``advance`` moves
it to the next legal value and reports whether it wrapped around, so the
caller can carry into the next, more significant, wheel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cronex.errors import InvalidSpecificationError
from cronex.fields import MASK_BITS, FieldSpec


# =============================================================================
# Bit Operations
# =============================================================================


def trailing_zeros(value: int) -> int:
    """Number of trailing zero bits (64 for zero)."""
    if value == 0:
        return MASK_BITS
    return (value & -value).bit_length() - 1


def next_set_bit(mask: int, position: int) -> int:
    """Lowest set bit strictly above position, wrapping to the lowest set bit.

    Returns -1 for an empty mask.
    """
    if mask == 0:
        return -1
    shift = max(position + 1, 0)
    above = mask >> shift if shift < MASK_BITS else 0
    if above == 0:
        return trailing_zeros(mask)
    return trailing_zeros(above) + shift


# =============================================================================
# Rotors
# =============================================================================


class Rotor(ABC):
    """Cursor over the legal values of one digit."""

    __slots__ = ()

    @property
    @abstractmethod
    def value(self) -> int:
        """Currently selected value."""
        pass

    @abstractmethod
    def advance(self) -> bool:
        """Move to the next legal value.

        Returns:
            True if the rotor wrapped (overflow into the next digit).
        """
        pass

    @abstractmethod
    def seek(self, target: int) -> bool:
        """Select the smallest legal value greater or equal to target.

        Returns:
            True if the selected value is greater than target, meaning that
            target itself was not legal.
        """
        pass

    @abstractmethod
    def accepts(self, value: int) -> bool:
        """Check if value is legal for this rotor."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value})"


class MaskRotor(Rotor):
    """Rotor over the set bits of a 64-bit mask.

    When no legal value is left above the current position the rotor wraps
    around to its lowest legal value.
    """

    __slots__ = ("_mask", "_index")

    def __init__(self, mask: int) -> None:
        if mask == 0:
            raise InvalidSpecificationError("No valid rotor values")
        if mask < 0 or mask >> MASK_BITS:
            raise ValueError(f"Mask {mask:#x} does not fit into {MASK_BITS} bits")

        self._mask = mask
        self._index = next_set_bit(mask, -1)

    @classmethod
    def from_field(cls, field: FieldSpec) -> "MaskRotor":
        return cls(field.mask)

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def value(self) -> int:
        return self._index

    @property
    def lowest(self) -> int:
        return trailing_zeros(self._mask)

    def advance(self) -> bool:
        before = self._index
        self._index = next_set_bit(self._mask, before)
        return self._index <= before

    def seek(self, target: int) -> bool:
        self._index = next_set_bit(self._mask, target - 1)
        return self._index > target

    def accepts(self, value: int) -> bool:
        return 0 <= value < MASK_BITS and bool(self._mask >> value & 1)


class CounterRotor(Rotor):
    """Unbounded counter, used for years.

    It has no upper bound, so it never overflows.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def advance(self) -> bool:
        self._value += 1
        return False

    def seek(self, target: int) -> bool:
        self._value = target
        return False

    def accepts(self, value: int) -> bool:
        return True
