"""
Error classes raised by the bignum engine.

Every failure names the primitive that failed so the caller can tell a
division by zero in ``div`` apart from one in ``mod``.
"""

from typing import Optional


class BnError(Exception):
    """Base class for all bignum failures."""

    def __init__(self, primitive: str, reason: Optional[str] = None):
        self.primitive = primitive
        self.reason = reason or "failed"
        super().__init__(f"(bn) {primitive}: {self.reason}")


class AllocationFailure(BnError, MemoryError):
    """Value or workspace allocation failed."""


class OperationFailure(BnError, ArithmeticError):
    """An arithmetic primitive failed internally."""


class DivisionByZero(OperationFailure, ZeroDivisionError):
    pass


class ArgumentError(BnError, ValueError):
    """Wrong operand kind, missing modulus or unsupported scalar."""


class ParseError(ArgumentError):
    """Malformed decimal or hexadecimal literal."""
