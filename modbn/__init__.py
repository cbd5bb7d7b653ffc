"""
modbn: arbitrary-precision integers with modulus inheritance.

A value may carry a modulus. Binary operations whose left operand carries
one produce a result reduced by the same modulus, so modular chains need
the modulus only once:

    n = parse_decimal("3233")
    m = parse_decimal("65").with_modulus(n)
    c = m ** 17          # RSA encrypt, result carries modulus 3233
    d = 1 / (parse_decimal("17").with_modulus(3120))   # inverse

Randomness comes only from the OS CSPRNG.
"""

__version__ = "0.3.0"

from .errors import (
    BnError, AllocationFailure, OperationFailure, DivisionByZero,
    ArgumentError, ParseError,
)
from .config import BnConfig, load_config
from .logging import OpLogger, SessionManifest, create_manifest
from .modulus import Modulus, inherit
from .value import Bn, Plain, Reduced, make, new
from .context import BnContext, default_context, set_default_context, small_primes
from .codec import (
    parse_decimal, parse_hex, coerce,
    to_decimal_string, to_hex_string, to_bytes,
    bit_length, is_odd,
)
from .compare import (
    cmp, eq_value, lt_value, le_value, eq_scalar, lt_scalar, le_scalar,
    is_zero, is_one, is_negative, is_negative_or_zero, is_negative_or_zero_or_one,
)
from .engine import (
    add_value, add_scalar, sub_value, sub_scalar, mul_value, mul_scalar,
    div_value, div_scalar, div_scalar_value, inverse,
    mod_value, mod_scalar, rmod_value, rmod_scalar, gcd_value, gcd_scalar,
    pow_value, pow_scalar,
)
from .prime import random, prime, miller_rabin
from .operand import (
    Literal, Handle, Word, classify, resolve, resolve_value,
    add, sub, mul, div, mod, rmod, gcd, pow_, lshift, rshift,
    eq, lt, le, neg, abs_, isprime,
)
from .program import (
    Opcode, Instruction, BnProgram, BnCompiler,
    compile_rpn, compile_expr, run_program,
)

__all__ = [
    "BnError", "AllocationFailure", "OperationFailure", "DivisionByZero",
    "ArgumentError", "ParseError",
    "BnConfig", "load_config",
    "OpLogger", "SessionManifest", "create_manifest",
    "Modulus", "inherit",
    "Bn", "Plain", "Reduced", "make", "new",
    "BnContext", "default_context", "set_default_context", "small_primes",
    "parse_decimal", "parse_hex", "coerce",
    "to_decimal_string", "to_hex_string", "to_bytes", "bit_length", "is_odd",
    "cmp", "eq_value", "lt_value", "le_value", "eq_scalar", "lt_scalar", "le_scalar",
    "is_zero", "is_one", "is_negative", "is_negative_or_zero",
    "is_negative_or_zero_or_one",
    "add_value", "add_scalar", "sub_value", "sub_scalar", "mul_value", "mul_scalar",
    "div_value", "div_scalar", "div_scalar_value", "inverse",
    "mod_value", "mod_scalar", "rmod_value", "rmod_scalar", "gcd_value", "gcd_scalar",
    "pow_value", "pow_scalar",
    "random", "prime", "miller_rabin",
    "Literal", "Handle", "Word", "classify", "resolve", "resolve_value",
    "add", "sub", "mul", "div", "mod", "rmod", "gcd", "pow_", "lshift", "rshift",
    "eq", "lt", "le", "neg", "abs_", "isprime",
    "Opcode", "Instruction", "BnProgram", "BnCompiler",
    "compile_rpn", "compile_expr", "run_program",
]
