"""
Exact rational durations.

A Rate expresses a beat length as a fraction of the reference beat.
"""

from fractions import Fraction

from .errors import SheetRangeError


class Rate:
    """
    Mutable fraction ``a / b``.

    ``simplify()`` works in place; callers that must keep the original value
    should ``copy()`` first.

    Attributes:
        a: Numerator
        b: Denominator, never zero
    """

    __slots__ = ('a', '_b')

    def __init__(self, a: int = 1, b: int = 1):
        self.a = a
        self.b = b

    @property
    def b(self) -> int:
        return self._b

    @b.setter
    def b(self, value: int) -> None:
        if value == 0:
            raise SheetRangeError("The denominator cannot be zero")
        self._b = value

    def simplify(self) -> 'Rate':
        """Divide both fields by their greatest common divisor and return self."""
        big = max(abs(self.a), abs(self.b))
        small = min(abs(self.a), abs(self.b))
        while small:
            big, small = small, big % small
        self.a //= big
        self.b //= big
        return self

    def copy(self) -> 'Rate':
        return Rate(self.a, self.b)

    def to_fraction(self) -> Fraction:
        return Fraction(self.a, self.b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self.a == other.a and self.b == other.b

    def __repr__(self) -> str:
        return f"Rate({self.a}, {self.b})"
