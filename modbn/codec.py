"""
Decimal / hexadecimal conversion, byte encoding and bit queries.

Hex output is ``x`` + optional ``-`` + uppercase digits (``x1F``, ``x-1F``,
``x0``) so that formatted values coerce back through ``coerce()``.
"""

import re
import sys

from .errors import ParseError
from .value import Bn, Plain

_DEC_RE = re.compile(r"-?[0-9]+")
_HEX_RE = re.compile(r"-?[0-9a-fA-F]+")

# log10(2), used to size decimal conversions
_LOG10_2 = 0.30103


def _allow_str_digits(n_digits: int):
    """Lift CPython's int<->str digit limit (3.11+) to at least n_digits."""
    if not hasattr(sys, 'set_int_max_str_digits'):
        return
    current = sys.get_int_max_str_digits()
    if current and n_digits > current:
        sys.set_int_max_str_digits(n_digits)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_decimal(text: str) -> Plain:
    """Parse ``-?[0-9]+`` into a plain value."""
    if not isinstance(text, str) or not _DEC_RE.fullmatch(text):
        raise ParseError("dec2bn", f"malformed decimal literal {text!r}")
    _allow_str_digits(len(text))
    return Plain(int(text, 10))


def parse_hex(text: str) -> Plain:
    """Parse ``[xX]?-?[0-9a-fA-F]+`` into a plain value."""
    if not isinstance(text, str):
        raise ParseError("hex2bn", f"malformed hex literal {text!r}")
    digits = text[1:] if text[:1] in ("x", "X") else text
    if not _HEX_RE.fullmatch(digits):
        raise ParseError("hex2bn", f"malformed hex literal {text!r}")
    return Plain(int(digits, 16))


def coerce(text: str) -> Plain:
    """Literal coercion: ``x``/``X`` prefix means hex, anything else decimal."""
    if isinstance(text, str) and text[:1] in ("x", "X"):
        return parse_hex(text)
    return parse_decimal(text)


def is_literal(text) -> bool:
    """True when ``coerce`` would accept ``text``."""
    if not isinstance(text, str):
        return False
    if text[:1] in ("x", "X"):
        return _HEX_RE.fullmatch(text[1:]) is not None
    return _DEC_RE.fullmatch(text) is not None


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def to_decimal_string(a: Bn) -> str:
    _allow_str_digits(int(bit_length(a) * _LOG10_2) + 2)
    return str(a.value)


def to_hex_string(a: Bn) -> str:
    sign = "-" if a.value < 0 else ""
    return f"x{sign}{abs(a.value):X}"


def to_bytes(a: Bn) -> bytes:
    """Big-endian magnitude, minimal length; the sign is dropped."""
    n = abs(a.value)
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


# ---------------------------------------------------------------------------
# Bit queries
# ---------------------------------------------------------------------------

def bit_length(a: Bn) -> int:
    """Number of significant bits of the magnitude (0 for zero)."""
    return abs(a.value).bit_length()


def is_odd(a: Bn) -> bool:
    return abs(a.value) & 1 == 1
