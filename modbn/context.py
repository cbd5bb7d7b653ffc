"""
Scratch context shared by multi-step bignum algorithms.

A BnContext owns:
  - the entropy source (OS CSPRNG via ``secrets.SystemRandom``)
  - the small-prime table used for trial division and prime sieving
  - the configuration and an optional operation logger

Contexts are not safe to share between threads. ``default_context()``
hands out one lazily created context per thread; pass ``ctx=`` explicitly
to control lifetime or to attach a logger.
"""

import secrets
import threading
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from .config import BnConfig
from .logging import OpLogger


# ---------------------------------------------------------------------------
# Small-prime table
# ---------------------------------------------------------------------------

def small_primes(limit: int) -> np.ndarray:
    """All primes below ``limit`` as a uint32 array (sieve of Eratosthenes)."""
    sieve = np.ones(limit, dtype=bool)
    sieve[:2] = False
    for i in range(2, int(limit ** 0.5) + 1):
        if sieve[i]:
            sieve[i * i::i] = False
    return np.flatnonzero(sieve).astype(np.uint32)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

class BnContext:
    """Reusable workspace for division, exponentiation and prime testing.

    Usage:
        ctx = BnContext(BnConfig(prime_checks=40))
        p = prime(256, ctx=ctx)
    """

    def __init__(self, config: Optional[BnConfig] = None,
                 logger: Optional[OpLogger] = None):
        self.config = config or BnConfig()
        self.rng = secrets.SystemRandom()
        self.primes = small_primes(self.config.small_prime_limit)
        self.K = len(self.primes)
        self._primes_i64 = self.primes.astype(np.int64)
        self._prime_set = frozenset(self.primes.tolist())

        if logger is None and self.config.trace_dir:
            logger = OpLogger(Path(self.config.trace_dir))
        self.logger = logger

    @property
    def max_small_prime(self) -> int:
        return int(self.primes[-1])

    def is_small_prime(self, n: int) -> bool:
        return n in self._prime_set

    def encode(self, x: int) -> np.ndarray:
        """Residues of |x| modulo every small prime, as int64."""
        x = abs(x)
        return np.array([x % p for p in self.primes.tolist()], dtype=np.int64)

    def has_small_factor(self, x: int) -> bool:
        """True when some small prime divides |x| (x itself excluded)."""
        residues = self.encode(x)
        hits = self.primes[residues == 0]
        return bool(np.any(hits != abs(x)))

    def sieve_offsets(self, residues: np.ndarray, window: int,
                      chunk: int = 512) -> Iterator[int]:
        """Yield even offsets d < window such that no small prime divides x + d.

        ``residues`` is ``encode(x)`` for an odd start x. Offsets are
        produced in ``chunk``-sized blocks to bound the scratch table.
        """
        for start in range(0, window, 2 * chunk):
            stop = min(start + 2 * chunk, window)
            offsets = np.arange(start, stop, 2, dtype=np.int64)
            table = (residues[None, :] + offsets[:, None]) % self._primes_i64[None, :]
            for d in offsets[np.all(table != 0, axis=1)].tolist():
                yield d

    def checks_for_bits(self, bits: int) -> int:
        """Miller-Rabin rounds; false-positive rate is at most 4**-checks."""
        if self.config.prime_checks is not None:
            return self.config.prime_checks
        return 128 if bits > 2048 else 64

    def is_word(self, n) -> bool:
        return isinstance(n, int) and 0 <= n <= self.config.word_max

    def close(self):
        if self.logger is not None:
            self.logger.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ---------------------------------------------------------------------------
# Per-thread default
# ---------------------------------------------------------------------------

_local = threading.local()


def default_context() -> BnContext:
    """This thread's context, created on first use."""
    ctx = getattr(_local, "ctx", None)
    if ctx is None:
        ctx = BnContext()
        _local.ctx = ctx
    return ctx


def set_default_context(ctx: Optional[BnContext]):
    """Replace this thread's context (None resets to a fresh one on next use)."""
    _local.ctx = ctx
