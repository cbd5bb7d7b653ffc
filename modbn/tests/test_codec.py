"""
Unit tests for parsing, formatting and byte encoding.
"""

import unittest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from modbn.codec import (
    parse_decimal, parse_hex, coerce,
    to_decimal_string, to_hex_string, to_bytes, bit_length, is_odd,
)
from modbn.errors import ArgumentError, ParseError
from modbn.modulus import Modulus
from modbn.value import Plain, Reduced


class TestParse(unittest.TestCase):

    def test_decimal(self):
        self.assertEqual(parse_decimal("0").value, 0)
        self.assertEqual(parse_decimal("-42").value, -42)
        self.assertEqual(parse_decimal("007").value, 7)
        self.assertIsNone(parse_decimal("5").modulus)

    def test_hex(self):
        self.assertEqual(parse_hex("ff").value, 255)
        self.assertEqual(parse_hex("xFF").value, 255)
        self.assertEqual(parse_hex("X1f").value, 31)
        self.assertEqual(parse_hex("x-1F").value, -31)

    def test_coerce_prefix(self):
        self.assertEqual(coerce("x10").value, 16)
        self.assertEqual(coerce("10").value, 10)
        self.assertIsInstance(coerce("x10"), Plain)

    def test_malformed(self):
        for bad in ["", "-", "12a", " 12", "1.5", "+3", "0x10"]:
            with self.assertRaises(ParseError, msg=bad):
                parse_decimal(bad)
        for bad in ["", "x", "xg", "x--1", "12 "]:
            with self.assertRaises(ParseError, msg=bad):
                parse_hex(bad)

    def test_parse_error_is_argument_error(self):
        with self.assertRaises(ArgumentError) as cm:
            coerce("xyz")
        self.assertEqual(cm.exception.primitive, "hex2bn")
        with self.assertRaises(ParseError) as cm:
            coerce("12z")
        self.assertEqual(cm.exception.primitive, "dec2bn")


class TestFormat(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(42)

    def test_decimal_round_trip(self):
        for _ in range(100):
            x = self.rng.getrandbits(self.rng.randint(1, 2000))
            if self.rng.random() < 0.5:
                x = -x
            s = str(x)
            self.assertEqual(to_decimal_string(parse_decimal(s)), s)

    def test_decimal_canonical(self):
        self.assertEqual(to_decimal_string(parse_decimal("000123")), "123")
        self.assertEqual(to_decimal_string(parse_decimal("-0")), "0")

    def test_long_decimal(self):
        # Above CPython's default 4300-digit conversion limit
        s = "9" * 6000
        v = parse_decimal(s)
        self.assertEqual(str(v), s)

    def test_hex_format(self):
        self.assertEqual(to_hex_string(Plain(31)), "x1F")
        self.assertEqual(to_hex_string(Plain(-31)), "x-1F")
        self.assertEqual(to_hex_string(Plain(0)), "x0")

    def test_hex_round_trip(self):
        for _ in range(100):
            x = self.rng.getrandbits(300) - (1 << 299)
            self.assertEqual(coerce(to_hex_string(Plain(x))).value, x)

    def test_reduced_formats_value(self):
        a = Reduced(20, Modulus(13))
        self.assertEqual(str(a), "7")
        self.assertEqual(a.to_hex(), "x7")
        self.assertEqual(repr(a), "Bn(7, mod=13)")


class TestBytesAndBits(unittest.TestCase):

    def test_to_bytes(self):
        self.assertEqual(to_bytes(Plain(0)), b"")
        self.assertEqual(to_bytes(Plain(1)), b"\x01")
        self.assertEqual(to_bytes(Plain(0x1234)), b"\x12\x34")
        self.assertEqual(to_bytes(Plain(-0x1234)), b"\x12\x34")
        self.assertEqual(bytes(Plain(256)), b"\x01\x00")

    def test_bit_length(self):
        self.assertEqual(bit_length(Plain(0)), 0)
        self.assertEqual(bit_length(Plain(1)), 1)
        self.assertEqual(bit_length(Plain(-255)), 8)
        self.assertEqual(bit_length(Plain(1 << 1000)), 1001)

    def test_is_odd(self):
        self.assertTrue(is_odd(Plain(3)))
        self.assertTrue(is_odd(Plain(-3)))
        self.assertFalse(is_odd(Plain(0)))
        self.assertFalse(is_odd(Plain(-4)))


if __name__ == "__main__":
    unittest.main()
