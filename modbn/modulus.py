"""
Attached moduli and the rule that carries them from operands to results.

A Modulus is an immutable handle. Values derived from a reduced value share
the same handle object; nothing can change it after construction, so
sharing is never observable.
"""

from typing import Optional

from .errors import ArgumentError


class Modulus:
    """Non-zero modulus shared by reduced values."""

    __slots__ = ("_n",)

    def __init__(self, n: int):
        if n == 0:
            raise ArgumentError("setmod", "modulus must be non-zero")
        self._n = int(n)

    @property
    def n(self) -> int:
        return self._n

    def reduce(self, x: int) -> int:
        """Canonical residue of x in [0, |n|)."""
        return x % abs(self._n)

    def bit_length(self) -> int:
        return abs(self._n).bit_length()

    def __eq__(self, other):
        if isinstance(other, Modulus):
            return self._n == other._n
        return NotImplemented

    def __hash__(self):
        return hash(("modulus", self._n))

    def __repr__(self) -> str:
        return f"Modulus({self._n})"


# (left is reduced, right is reduced) -> operand whose modulus the result takes
INHERIT_TABLE = {
    (True, True): "left",
    (True, False): "left",
    (False, True): None,
    (False, False): None,
}


def inherit(a, b=None) -> Optional[Modulus]:
    """Result modulus for an operation on a (and b, for binary ops).

    Unary and scalar-word operations pass only ``a`` and take its modulus.
    """
    left = a.modulus
    if b is None:
        return left
    source = INHERIT_TABLE[(left is not None, b.modulus is not None)]
    if source == "left":
        return left
    return None
