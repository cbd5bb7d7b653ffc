"""
Bignum values.

A value is either ``Plain(value)`` or ``Reduced(value, modulus)``. Both are
immutable; every operation builds a new value. Reduced values are kept in
canonical form, 0 <= value < |modulus|.

Python operators are mapped onto the operation set in ``modbn.operand``:

    a = parse_decimal("10").with_modulus(13)
    b = a + 5          # Reduced(2, 13)
    c = 1 / a          # modular inverse of 10 mod 13
"""

from dataclasses import dataclass
from typing import Optional

from .modulus import Modulus


@dataclass(frozen=True, eq=False)
class Bn:
    """Arbitrary-precision signed integer."""
    value: int

    @property
    def modulus(self) -> Optional[Modulus]:
        return None

    @property
    def is_reduced(self) -> bool:
        return self.modulus is not None

    # -- modulus handling ---------------------------------------------------

    def with_modulus(self, m) -> "Reduced":
        """Return a copy of this value reduced and carrying modulus ``m``.

        ``m`` may be a Modulus, a value, an int or a literal string.
        """
        if not isinstance(m, Modulus):
            from .operand import resolve_value
            m = Modulus(resolve_value(m).value)
        return Reduced(self.value, m)

    def without_modulus(self) -> "Plain":
        return Plain(self.value)

    def copy(self) -> "Bn":
        return make(self.value, self.modulus)

    # -- queries --------------------------------------------------------------

    def bit_length(self) -> int:
        from .codec import bit_length
        return bit_length(self)

    def is_odd(self) -> bool:
        from .codec import is_odd
        return is_odd(self)

    def to_hex(self) -> str:
        from .codec import to_hex_string
        return to_hex_string(self)

    def to_bytes(self) -> bytes:
        from .codec import to_bytes
        return to_bytes(self)

    def isprime(self, checks: Optional[int] = None, ctx=None) -> bool:
        from .prime import isprime
        return isprime(self, checks, ctx=ctx)

    def gcd(self, other) -> "Bn":
        from .operand import gcd
        return gcd(self, other)

    def rmod(self, other) -> "Bn":
        from .operand import rmod
        return rmod(self, other)

    # -- Python protocol ------------------------------------------------------

    def __str__(self) -> str:
        from .codec import to_decimal_string
        return to_decimal_string(self)

    def __repr__(self) -> str:
        if self.modulus is None:
            return f"Bn({self.value})"
        return f"Bn({self.value}, mod={self.modulus.n})"

    def __int__(self) -> int:
        return self.value

    def __bool__(self) -> bool:
        return self.value != 0

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return self.bit_length()

    def __hash__(self):
        return hash(self.value)

    def __neg__(self):
        from .engine import neg
        return neg(self)

    def __abs__(self):
        from .engine import abs_
        return abs_(self)

    def __eq__(self, other):
        from . import operand
        if not operand.comparable(other):
            return NotImplemented
        return operand.eq(self, other)

    def __lt__(self, other):
        from . import operand
        if not operand.comparable(other):
            return NotImplemented
        return operand.lt(self, other)

    def __le__(self, other):
        from . import operand
        if not operand.comparable(other):
            return NotImplemented
        return operand.le(self, other)

    def __gt__(self, other):
        from . import operand
        if not operand.comparable(other):
            return NotImplemented
        return not operand.le(self, other)

    def __ge__(self, other):
        from . import operand
        if not operand.comparable(other):
            return NotImplemented
        return not operand.lt(self, other)


def _binary(name: str, reflected: bool = False):
    def method(self, other):
        from . import operand
        if not operand.accepts(other):
            return NotImplemented
        fn = getattr(operand, name)
        return fn(other, self) if reflected else fn(self, other)
    method.__name__ = f"__{'r' if reflected else ''}{name}__"
    return method


for _dunder, _op in [
    ("add", "add"), ("sub", "sub"), ("mul", "mul"), ("truediv", "div"),
    ("mod", "mod"), ("pow", "pow_"), ("lshift", "lshift"), ("rshift", "rshift"),
]:
    setattr(Bn, f"__{_dunder}__", _binary(_op))
    setattr(Bn, f"__r{_dunder}__", _binary(_op, reflected=True))
del _dunder, _op


@dataclass(frozen=True, eq=False)
class Plain(Bn):
    """Value without an attached modulus."""


@dataclass(frozen=True, eq=False)
class Reduced(Bn):
    """Value carrying a modulus; always in [0, |modulus|)."""
    mod: Modulus = None

    def __post_init__(self):
        if not isinstance(self.mod, Modulus):
            raise TypeError(f"Reduced needs a Modulus, got {self.mod!r}")
        object.__setattr__(self, "value", self.mod.reduce(self.value))

    @property
    def modulus(self) -> Modulus:
        return self.mod


def make(value: int, modulus: Optional[Modulus] = None) -> Bn:
    """Build a Plain or Reduced value depending on ``modulus``."""
    if modulus is None:
        return Plain(value)
    return Reduced(value, modulus)


def new() -> Plain:
    """Fresh zero value with no modulus."""
    return Plain(0)
