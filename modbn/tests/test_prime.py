"""
Unit tests for random values, prime generation and primality testing.

Known primes and composites, Carmichael numbers, bit lengths of generated
values, and (when SymPy is installed) agreement with sympy.isprime.
"""

import unittest
import random
import sys
import os

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from modbn.config import BnConfig
from modbn.context import BnContext, small_primes
from modbn.errors import ArgumentError
from modbn.prime import isprime, miller_rabin, prime, random as bn_random
from modbn.value import Plain, Reduced
from modbn.modulus import Modulus

HAS_SYMPY = False
try:
    import sympy
    HAS_SYMPY = True
except ImportError:
    pass


SMALL_PRIMES = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 2039]
COMPOSITES = [0, 1, 4, 6, 8, 9, 10, 15, 21, 25, 49, 91, 2047, 2049, 4087]
CARMICHAEL = [561, 1105, 1729, 2465, 2821, 6601, 8911, 41041, 825265,
              321197185, 5394826801, 232250619601, 9746347772161]
LARGE_PRIMES = [
    (1 << 61) - 1,
    (1 << 89) - 1,
    (1 << 127) - 1,
    2 ** 255 - 19,
]


class TestSmallPrimeTable(unittest.TestCase):
    """Sieve used by the scratch context."""

    def test_first_primes(self):
        np.testing.assert_array_equal(small_primes(30),
                                      [2, 3, 5, 7, 11, 13, 17, 19, 23, 29])

    def test_default_table(self):
        ctx = BnContext()
        self.assertEqual(ctx.K, 309)
        self.assertEqual(ctx.max_small_prime, 2039)
        self.assertEqual(ctx.primes.dtype, np.uint32)

    def test_encode(self):
        ctx = BnContext(BnConfig(small_prime_limit=20))
        x = 123456789123456789
        residues = ctx.encode(x)
        self.assertEqual(residues.dtype, np.int64)
        self.assertEqual(residues.tolist(), [x % p for p in [2, 3, 5, 7, 11, 13, 17, 19]])
        self.assertEqual(ctx.encode(-x).tolist(), residues.tolist())

    def test_sieve_offsets(self):
        ctx = BnContext(BnConfig(small_prime_limit=50))
        start = 10 ** 30 + 1
        offsets = list(ctx.sieve_offsets(ctx.encode(start), 2000, chunk=64))
        self.assertTrue(offsets)
        self.assertEqual(offsets, sorted(offsets))
        for d in offsets:
            self.assertEqual(d % 2, 0)
            for p in ctx.primes.tolist():
                self.assertNotEqual((start + d) % p, 0)
        # every even offset not hit by the sieve is reported
        expected = [d for d in range(0, 2000, 2)
                    if all((start + d) % p for p in ctx.primes.tolist())]
        self.assertEqual(offsets, expected)


class TestIsPrime(unittest.TestCase):
    """Primality against known values."""

    def test_small_primes(self):
        for p in SMALL_PRIMES:
            self.assertTrue(isprime(Plain(p)), f"{p} should be prime")

    def test_composites(self):
        for n in COMPOSITES:
            self.assertFalse(isprime(Plain(n)), f"{n} should be composite")

    def test_negative_not_prime(self):
        self.assertFalse(isprime(Plain(-7)))

    def test_carmichael(self):
        for n in CARMICHAEL:
            self.assertFalse(isprime(Plain(n), 20), f"Carmichael {n} passed")

    def test_large_primes(self):
        for p in LARGE_PRIMES:
            self.assertTrue(isprime(Plain(p)))
            self.assertFalse(isprime(Plain(p * LARGE_PRIMES[0])))

    def test_reduced_value(self):
        self.assertTrue(isprime(Reduced(20, Modulus(13))))  # value 7

    def test_method(self):
        self.assertTrue(Plain(2 ** 31 - 1).isprime())
        self.assertFalse(Plain(2 ** 32 + 1).isprime(checks=10))

    def test_bad_checks(self):
        with self.assertRaises(ArgumentError):
            isprime(Plain(7), 0)

    def test_checks_default(self):
        ctx = BnContext()
        self.assertEqual(ctx.checks_for_bits(512), 64)
        self.assertEqual(ctx.checks_for_bits(4096), 128)
        ctx = BnContext(BnConfig(prime_checks=40))
        self.assertEqual(ctx.checks_for_bits(4096), 40)

    def test_miller_rabin_direct(self):
        rng = random.Random(42)
        self.assertTrue(miller_rabin((1 << 61) - 1, 10, rng))
        self.assertFalse(miller_rabin(561, 10, rng))

    @unittest.skipUnless(HAS_SYMPY, "sympy not installed")
    def test_agrees_with_sympy(self):
        rng = random.Random(42)
        for _ in range(300):
            n = rng.getrandbits(rng.randint(2, 80))
            self.assertEqual(isprime(Plain(n)), bool(sympy.isprime(n)), f"n={n}")


class TestRandomAndPrime(unittest.TestCase):
    """Generated values."""

    def test_random_bits(self):
        for bits in [0, 1, 8, 32, 100, 1000]:
            for _ in range(20):
                v = bn_random(bits)
                self.assertGreaterEqual(v.value, 0)
                self.assertLessEqual(v.value.bit_length(), bits)
                self.assertIsNone(v.modulus)

    def test_random_default(self):
        v = bn_random()
        self.assertLess(v.value, 1 << 32)

    def test_random_negative_bits(self):
        with self.assertRaises(ArgumentError):
            bn_random(-1)

    def test_prime_bits(self):
        for bits in [2, 3, 5, 11, 12, 32, 64, 128, 256]:
            for _ in range(3):
                p = prime(bits)
                self.assertEqual(p.value.bit_length(), bits)
                self.assertTrue(isprime(p))

    def test_prime_default(self):
        self.assertEqual(prime().bit_length(), 32)

    @unittest.skipUnless(HAS_SYMPY, "sympy not installed")
    def test_prime_agrees_with_sympy(self):
        for bits in [16, 48, 96]:
            for _ in range(5):
                self.assertTrue(sympy.isprime(prime(bits).value))

    def test_prime_too_small(self):
        with self.assertRaises(ArgumentError):
            prime(1)

    def test_prime_with_config(self):
        ctx = BnContext(BnConfig(prime_bits=40, prime_checks=16,
                                 small_prime_limit=200))
        p = prime(ctx=ctx)
        self.assertEqual(p.bit_length(), 40)
        self.assertTrue(isprime(p, ctx=ctx))


if __name__ == "__main__":
    unittest.main()
