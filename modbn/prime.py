"""
Random values, probable-prime generation and primality testing.

All randomness comes from the context's OS CSPRNG. ``isprime`` runs trial
division by the context's small-prime table followed by Miller-Rabin with
random bases; a False answer is definitive, a True answer is wrong with
probability at most 4**-checks.
"""

from typing import Optional

from .context import BnContext
from .engine import primitive
from .errors import ArgumentError
from .value import Bn, Plain


def miller_rabin(n: int, rounds: int, rng) -> bool:
    """Miller-Rabin probable-prime test for odd n > 3."""
    r, d = 0, n - 1
    while d % 2 == 0:
        r += 1
        d //= 2

    for _ in range(rounds):
        a = rng.randrange(2, n - 1)
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(r - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def _is_probable_prime(n: int, checks: Optional[int], ctx: BnContext) -> bool:
    if n < 2:
        return False
    if n <= ctx.max_small_prime:
        return ctx.is_small_prime(n)
    if ctx.has_small_factor(n):
        return False
    # No factor below the table bound means n is prime when n < bound^2
    if n < ctx.max_small_prime ** 2:
        return True
    rounds = checks if checks is not None else ctx.checks_for_bits(n.bit_length())
    return miller_rabin(n, rounds, ctx.rng)


def _check_bits(op: str, bits, minimum: int) -> int:
    if not isinstance(bits, int) or bits < minimum:
        raise ArgumentError(op, f"bits must be an int >= {minimum}, got {bits!r}")
    return bits


@primitive("random")
def random(bits: Optional[int] = None, ctx: BnContext = None) -> Plain:
    """Non-negative value below 2**bits; the top bit is not forced."""
    if bits is None:
        bits = ctx.config.random_bits
    if _check_bits("random", bits, 0) == 0:
        return Plain(0)
    return Plain(ctx.rng.getrandbits(bits))


@primitive("prime")
def prime(bits: Optional[int] = None, ctx: BnContext = None) -> Plain:
    """Probable prime with exactly ``bits`` significant bits."""
    if bits is None:
        bits = ctx.config.prime_bits
    _check_bits("prime", bits, 2)
    top = 1 << (bits - 1)
    checks = ctx.config.prime_checks

    if bits <= ctx.max_small_prime.bit_length():
        while True:
            candidate = ctx.rng.getrandbits(bits) | top
            if bits > 2:
                candidate |= 1
            if _is_probable_prime(candidate, checks, ctx):
                return Plain(candidate)

    rounds = checks if checks is not None else ctx.checks_for_bits(bits)
    while True:
        start = ctx.rng.getrandbits(bits) | top | 1
        residues = ctx.encode(start)
        for delta in ctx.sieve_offsets(residues, ctx.config.prime_search_window):
            candidate = start + delta
            if candidate.bit_length() > bits:
                break
            if miller_rabin(candidate, rounds, ctx.rng):
                return Plain(candidate)


@primitive("isprime")
def isprime(a: Bn, checks: Optional[int] = None, ctx: BnContext = None) -> bool:
    if checks is not None and (not isinstance(checks, int) or checks < 1):
        raise ArgumentError("isprime", f"checks must be a positive int, got {checks!r}")
    return _is_probable_prime(a.value, checks, ctx)
