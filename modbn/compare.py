"""
Three-way comparison and the 0 / 1 fast-path predicates.

Comparisons look at the integer value only; an attached modulus plays no
part. Scalar equality accepts any non-negative word; scalar ordering is
defined for 0 and 1 only.
"""

from .errors import ArgumentError
from .value import Bn


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_zero(a: Bn) -> bool:
    return a.value == 0


def is_one(a: Bn) -> bool:
    return a.value == 1


def is_negative(a: Bn) -> bool:
    return a.value < 0


def is_negative_or_zero(a: Bn) -> bool:
    return a.value <= 0


def is_negative_or_zero_or_one(a: Bn) -> bool:
    return a.value <= 1


# ---------------------------------------------------------------------------
# Value comparison
# ---------------------------------------------------------------------------

def cmp(a: Bn, b: Bn) -> int:
    """-1, 0 or 1 as a is less than, equal to or greater than b."""
    return (a.value > b.value) - (a.value < b.value)


def eq_value(a: Bn, b: Bn) -> bool:
    return cmp(a, b) == 0


def lt_value(a: Bn, b: Bn) -> bool:
    return cmp(a, b) < 0


def le_value(a: Bn, b: Bn) -> bool:
    return cmp(a, b) <= 0


# ---------------------------------------------------------------------------
# Scalar comparison
# ---------------------------------------------------------------------------

_EQ = {0: is_zero, 1: is_one}
_LT = {0: is_negative, 1: is_negative_or_zero}
_LE = {0: is_negative_or_zero, 1: is_negative_or_zero_or_one}


def _scalar(table, name: str, a: Bn, n: int) -> bool:
    try:
        predicate = table[n]
    except (KeyError, TypeError):
        raise ArgumentError(name, f"scalar comparison supports 0 and 1 only, got {n!r}") from None
    return predicate(a)


def eq_scalar(a: Bn, n: int) -> bool:
    """Equality with a non-negative word; 0 and 1 use the fast predicates."""
    if n in _EQ:
        return _EQ[n](a)
    if not isinstance(n, int) or n < 0:
        raise ArgumentError("eq", f"scalar must be a non-negative word, got {n!r}")
    return a.value == n


def lt_scalar(a: Bn, n: int) -> bool:
    return _scalar(_LT, "lt", a, n)


def le_scalar(a: Bn, n: int) -> bool:
    return _scalar(_LE, "le", a, n)
