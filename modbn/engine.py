"""
Arithmetic engine.

Every operation has explicitly named variants: ``*_value`` takes two values,
``*_scalar`` takes a value and a machine word (0 <= n < 2**word_bits). The
engine never inspects host types; ``modbn.operand`` picks the variant.

Result moduli follow ``modbn.modulus.inherit``: when the left operand is
reduced, the result carries the same modulus and the modular variant of the
primitive is used. ``mod``, ``rmod`` and ``gcd`` always return plain values.

All operations accept ``ctx=`` (a BnContext); the thread default is used
when omitted.
"""

import functools
import math
import time
from typing import Optional

from .context import BnContext, default_context
from .errors import (
    AllocationFailure, ArgumentError, BnError, DivisionByZero, OperationFailure,
)
from .modulus import Modulus, inherit
from .value import Bn, Plain, make


# ---------------------------------------------------------------------------
# Primitive wrapper
# ---------------------------------------------------------------------------

def _bits(x) -> int:
    if isinstance(x, Bn):
        return abs(x.value).bit_length()
    return abs(x).bit_length()


def _record(op: str, args, result, elapsed: float) -> dict:
    record = {
        "op": op,
        "arg_bits": [_bits(a) for a in args if isinstance(a, (Bn, int))],
        "elapsed_us": round(elapsed * 1e6, 3),
    }
    if isinstance(result, Bn):
        record["result_bits"] = _bits(result)
        if result.modulus is not None:
            record["modulus_bits"] = result.modulus.bit_length()
    else:
        record["result"] = result
    return record


def primitive(op: str):
    """Resolve the context, map Python arithmetic errors onto BnError
    subclasses and trace the call when the context has a logger."""
    def decorate(fn):
        @functools.wraps(fn)
        def wrapper(*args, ctx: Optional[BnContext] = None, **kwargs):
            ctx = ctx or default_context()
            t0 = time.perf_counter()
            try:
                try:
                    result = fn(*args, ctx=ctx, **kwargs)
                except BnError:
                    raise
                except ZeroDivisionError as exc:
                    raise DivisionByZero(op, "division by zero") from exc
                except MemoryError as exc:
                    raise AllocationFailure(op, "out of memory") from exc
            except BnError as exc:
                if ctx.logger is not None:
                    ctx.logger.log_failure({
                        "op": op,
                        "error": type(exc).__name__,
                        "message": str(exc),
                    })
                raise
            if ctx.logger is not None:
                ctx.logger.log_op(_record(op, args, result, time.perf_counter() - t0))
            return result
        return wrapper
    return decorate


def _check_word(op: str, n, ctx: BnContext) -> int:
    if not ctx.is_word(n):
        raise ArgumentError(op, f"scalar must be a word in [0, 2^{ctx.config.word_bits}), got {n!r}")
    return n


def _check_count(op: str, n) -> int:
    if not isinstance(n, int) or n < 0:
        raise ArgumentError(op, f"shift count must be a non-negative int, got {n!r}")
    return n


def _tdiv(x: int, y: int) -> int:
    """Quotient truncated toward zero."""
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q


def _tmod(x: int, y: int) -> int:
    """Remainder of truncated division; sign follows x."""
    r = abs(x) % abs(y)
    return -r if x < 0 else r


def _mod_inverse(op: str, x: int, m: Modulus) -> int:
    try:
        return pow(x, -1, abs(m.n))
    except ValueError:
        raise OperationFailure(op, f"{x} has no inverse modulo {m.n}") from None


def _exp(op: str, base: Bn, e: int, m: Optional[Modulus]) -> Bn:
    if m is not None:
        if e < 0:
            base = make(_mod_inverse(op, base.value, m), m)
            e = -e
        return make(pow(base.value, e, abs(m.n)), m)
    if e < 0:
        raise OperationFailure(op, "negative exponent needs a modulus")
    return Plain(base.value ** e)


# ---------------------------------------------------------------------------
# add / sub / mul
# ---------------------------------------------------------------------------

@primitive("add_value")
def add_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    return make(a.value + b.value, inherit(a, b))


@primitive("add_scalar")
def add_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    return make(a.value + _check_word("add_scalar", n, ctx), inherit(a))


@primitive("sub_value")
def sub_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    return make(a.value - b.value, inherit(a, b))


@primitive("sub_scalar")
def sub_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    return make(a.value - _check_word("sub_scalar", n, ctx), inherit(a))


@primitive("mul_value")
def mul_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    return make(a.value * b.value, inherit(a, b))


@primitive("mul_scalar")
def mul_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    return make(a.value * _check_word("mul_scalar", n, ctx), inherit(a))


# ---------------------------------------------------------------------------
# div / mod / rmod / gcd
# ---------------------------------------------------------------------------

@primitive("div_value")
def div_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    """Truncated quotient, or a * b^-1 when a carries a modulus."""
    if b.value == 0:
        raise DivisionByZero("div_value", "division by zero")
    m = inherit(a, b)
    if m is None:
        return Plain(_tdiv(a.value, b.value))
    return make(a.value * _mod_inverse("mod_div", b.value, m), m)


@primitive("div_scalar")
def div_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    """Word division truncated toward zero."""
    if _check_word("div_scalar", n, ctx) == 0:
        raise DivisionByZero("div_scalar", "division by zero")
    return make(_tdiv(a.value, n), inherit(a))


@primitive("div_scalar_value")
def div_scalar_value(n: int, b: Bn, ctx: BnContext) -> Bn:
    """``1 / b`` under b's modulus: the modular inverse of b."""
    if n != 1 or b.modulus is None:
        raise ArgumentError("mod_inverse", "inverse needs 1 / value with a modulus")
    return make(_mod_inverse("mod_inverse", b.value, b.modulus), b.modulus)


def inverse(b: Bn, ctx: Optional[BnContext] = None) -> Bn:
    return div_scalar_value(1, b, ctx=ctx)


@primitive("mod_value")
def mod_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    if b.value == 0:
        raise DivisionByZero("mod_value", "division by zero")
    return Plain(_tmod(a.value, b.value))


@primitive("mod_scalar")
def mod_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    if _check_word("mod_scalar", n, ctx) == 0:
        raise DivisionByZero("mod_scalar", "division by zero")
    return Plain(_tmod(a.value, n))


@primitive("rmod_value")
def rmod_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    """Non-negative remainder in [0, |b|)."""
    if b.value == 0:
        raise DivisionByZero("rmod_value", "division by zero")
    return Plain(a.value % abs(b.value))


@primitive("rmod_scalar")
def rmod_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    if _check_word("rmod_scalar", n, ctx) == 0:
        raise DivisionByZero("rmod_scalar", "division by zero")
    return Plain(a.value % n)


@primitive("gcd_value")
def gcd_value(a: Bn, b: Bn, ctx: BnContext) -> Bn:
    return Plain(math.gcd(a.value, b.value))


@primitive("gcd_scalar")
def gcd_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    return Plain(math.gcd(a.value, _check_word("gcd_scalar", n, ctx)))


# ---------------------------------------------------------------------------
# pow
# ---------------------------------------------------------------------------

@primitive("pow_scalar")
def pow_scalar(a: Bn, n: int, ctx: BnContext) -> Bn:
    """Squaring for n == 2, general (modular) exponentiation otherwise."""
    m = inherit(a)
    if _check_word("pow_scalar", n, ctx) == 2:
        return make(a.value * a.value, m)
    return _exp("mod_exp" if m else "exp", a, n, m)


@primitive("pow_value")
def pow_value(a: Bn, e: Bn, ctx: BnContext) -> Bn:
    m = inherit(a, e)
    return _exp("mod_exp" if m else "exp", a, e.value, m)


# ---------------------------------------------------------------------------
# shifts
# ---------------------------------------------------------------------------

def _lshift1(x: int) -> int:
    return x + x


def _rshift1(x: int) -> int:
    """Halve a non-negative magnitude."""
    return x // 2


@primitive("lshift")
def lshift(a: Bn, n: int, ctx: BnContext) -> Bn:
    if _check_count("lshift", n) == 1:
        return make(_lshift1(a.value), inherit(a))
    return make(a.value << n, inherit(a))


@primitive("rshift")
def rshift(a: Bn, n: int, ctx: BnContext) -> Bn:
    """Shift the magnitude right; negative values round toward zero."""
    if _check_count("rshift", n) == 1:
        shifted = _rshift1(abs(a.value))
    else:
        shifted = abs(a.value) >> n
    return make(-shifted if a.value < 0 else shifted, inherit(a))


# ---------------------------------------------------------------------------
# unary
# ---------------------------------------------------------------------------

@primitive("neg")
def neg(a: Bn, ctx: BnContext) -> Bn:
    """``0 - a``; the plain left operand means the result is always plain."""
    return Plain(-a.value)


def abs_(a: Bn, ctx: Optional[BnContext] = None) -> Bn:
    """The operand itself when non-negative, else its negation."""
    if a.value >= 0:
        return a
    return neg(a, ctx=ctx)
