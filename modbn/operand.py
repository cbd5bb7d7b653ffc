"""
Operand boundary between host values and the engine.

Host operands are classified once into one of three kinds:

  - Handle(value)  an existing Bn, used as-is
  - Word(n)        an int in [0, 2**word_bits) where a scalar fast path exists
  - Literal(text)  a string; ``x``/``X`` prefix means hex, otherwise decimal

and resolved into concrete values before exactly one engine operation runs.
Other ints are taken as plain values directly. Anything else is an
ArgumentError.
"""

from dataclasses import dataclass
from typing import Optional, Union

from . import compare, engine
from .prime import isprime as _isprime
from .codec import coerce, is_literal
from .context import BnContext, default_context
from .errors import ArgumentError
from .value import Bn, Plain


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Handle:
    value: Bn


@dataclass(frozen=True)
class Word:
    n: int


Operand = Union[Literal, Handle, Word]


def accepts(x) -> bool:
    """True for host types the boundary knows how to resolve."""
    return isinstance(x, (Bn, int, str))


def comparable(x) -> bool:
    """Like ``accepts`` but strings must be well-formed literals."""
    if isinstance(x, str):
        return is_literal(x)
    return isinstance(x, (Bn, int))


def classify(x, ctx: Optional[BnContext] = None, scalar: bool = False) -> Operand:
    """Classify a host operand; ints become Words only when ``scalar``."""
    if isinstance(x, Bn):
        return Handle(x)
    if isinstance(x, int):
        ctx = ctx or default_context()
        if scalar and ctx.is_word(x):
            return Word(int(x))
        return Handle(Plain(int(x)))
    if isinstance(x, str):
        return Literal(x)
    raise ArgumentError("operand", f"unsupported operand type {type(x).__name__}")


def resolve(operand: Operand) -> Bn:
    if isinstance(operand, Handle):
        return operand.value
    if isinstance(operand, Literal):
        return coerce(operand.text)
    return Plain(operand.n)


def resolve_value(x, ctx: Optional[BnContext] = None) -> Bn:
    return resolve(classify(x, ctx))


# ---------------------------------------------------------------------------
# Binary operations
# ---------------------------------------------------------------------------

def _binary(a, b, value_op, scalar_op, ctx: Optional[BnContext]):
    ctx = ctx or default_context()
    left = resolve_value(a, ctx)
    right = classify(b, ctx, scalar=True)
    if isinstance(right, Word):
        return scalar_op(left, right.n, ctx=ctx)
    return value_op(left, resolve(right), ctx=ctx)


def add(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.add_value, engine.add_scalar, ctx)


def sub(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.sub_value, engine.sub_scalar, ctx)


def mul(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.mul_value, engine.mul_scalar, ctx)


def div(a, b, ctx: Optional[BnContext] = None) -> Bn:
    """``n / value`` with a scalar on the left asks for a modular inverse."""
    ctx = ctx or default_context()
    left = classify(a, ctx, scalar=True)
    if isinstance(left, Word) and isinstance(b, Bn):
        return engine.div_scalar_value(left.n, b, ctx=ctx)
    return _binary(resolve(left), b, engine.div_value, engine.div_scalar, ctx)


def mod(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.mod_value, engine.mod_scalar, ctx)


def rmod(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.rmod_value, engine.rmod_scalar, ctx)


def gcd(a, b, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, b, engine.gcd_value, engine.gcd_scalar, ctx)


def pow_(a, e, ctx: Optional[BnContext] = None) -> Bn:
    return _binary(a, e, engine.pow_value, engine.pow_scalar, ctx)


def _count(n) -> int:
    if isinstance(n, Bn):
        return n.value
    if isinstance(n, str):
        return coerce(n).value
    return n


def lshift(a, n, ctx: Optional[BnContext] = None) -> Bn:
    return engine.lshift(resolve_value(a, ctx), _count(n), ctx=ctx)


def rshift(a, n, ctx: Optional[BnContext] = None) -> Bn:
    return engine.rshift(resolve_value(a, ctx), _count(n), ctx=ctx)


# ---------------------------------------------------------------------------
# Comparison: words compare for equality as scalars; ordering takes the
# scalar fast paths only for 0 and 1
# ---------------------------------------------------------------------------

def _is_fast_scalar(b) -> bool:
    return isinstance(b, int) and b in (0, 1)


def eq(a, b, ctx: Optional[BnContext] = None) -> bool:
    left = resolve_value(a, ctx)
    right = classify(b, ctx, scalar=True)
    if isinstance(right, Word):
        return compare.eq_scalar(left, right.n)
    return compare.eq_value(left, resolve(right))


def lt(a, b, ctx: Optional[BnContext] = None) -> bool:
    left = resolve_value(a, ctx)
    if _is_fast_scalar(b):
        return compare.lt_scalar(left, b)
    return compare.lt_value(left, resolve_value(b, ctx))


def le(a, b, ctx: Optional[BnContext] = None) -> bool:
    left = resolve_value(a, ctx)
    if _is_fast_scalar(b):
        return compare.le_scalar(left, b)
    return compare.le_value(left, resolve_value(b, ctx))


# ---------------------------------------------------------------------------
# Unary
# ---------------------------------------------------------------------------

def neg(a, ctx: Optional[BnContext] = None) -> Bn:
    return engine.neg(resolve_value(a, ctx), ctx=ctx)


def abs_(a, ctx: Optional[BnContext] = None) -> Bn:
    return engine.abs_(resolve_value(a, ctx), ctx=ctx)


def isprime(a, checks: Optional[int] = None, ctx: Optional[BnContext] = None) -> bool:
    return _isprime(resolve_value(a, ctx), checks, ctx=ctx)
