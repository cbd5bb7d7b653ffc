"""
Tests for YAML configuration, the JSONL operation trace and the session
manifest.
"""

import json
import os
import sys
import tempfile
import unittest
import warnings
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from modbn.config import BnConfig, load_config
from modbn.context import BnContext, default_context, set_default_context
from modbn.errors import ArgumentError, DivisionByZero
from modbn.logging import OpLogger, create_manifest
from modbn.operand import add, div, isprime, pow_
from modbn.prime import prime
from modbn.value import Plain, Reduced
from modbn.modulus import Modulus

REPO_ROOT = Path(__file__).resolve().parent.parent.parent


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = BnConfig()
        self.assertEqual(config.word_bits, 64)
        self.assertEqual(config.word_max, (1 << 64) - 1)
        self.assertIsNone(config.prime_checks)
        self.assertEqual(config.random_bits, 32)
        self.assertEqual(config.prime_bits, 32)

    def test_validation(self):
        with self.assertRaises(ArgumentError):
            BnConfig(word_bits=4)
        with self.assertRaises(ArgumentError):
            BnConfig(prime_checks=0)
        with self.assertRaises(ArgumentError):
            BnConfig(small_prime_limit=2)

    def test_default_yaml(self):
        config = load_config(REPO_ROOT / "configs" / "default.yaml")
        self.assertEqual(config, BnConfig())

    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bn.yaml"
            path.write_text("bn:\n  word_bits: 32\n  prime_checks: 40\n")
            config = load_config(path)
        self.assertEqual(config.word_bits, 32)
        self.assertEqual(config.prime_checks, 40)

    def test_unknown_keys_warn(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            config = BnConfig.from_dict({"word_bits": 16, "colour": "blue"})
        self.assertEqual(config.word_bits, 16)
        self.assertTrue(any("colour" in str(w.message) for w in caught))

    def test_word_bits_changes_scalar_path(self):
        ctx = BnContext(BnConfig(word_bits=16))
        self.assertTrue(ctx.is_word(65535))
        self.assertFalse(ctx.is_word(65536))
        self.assertEqual(add(Plain(1), 1 << 20, ctx=ctx).value, (1 << 20) + 1)


class TestOpLogger(unittest.TestCase):

    def _read(self, path):
        with open(path) as f:
            return [json.loads(line) for line in f if line.strip()]

    def test_trace_ops_and_failures(self):
        with tempfile.TemporaryDirectory() as tmp:
            logger = OpLogger(Path(tmp))
            with BnContext(logger=logger) as ctx:
                add(Reduced(10, Modulus(13)), 5, ctx=ctx)
                pow_(Plain(3), Plain(100), ctx=ctx)
                with self.assertRaises(DivisionByZero):
                    div(Plain(1), 0, ctx=ctx)
            self.assertEqual(logger.summary, {"ops_logged": 2, "failures_logged": 1})

            ops = self._read(Path(tmp) / "ops.jsonl")
            self.assertEqual([r["op"] for r in ops], ["add_scalar", "pow_value"])
            self.assertEqual(ops[0]["modulus_bits"], 4)
            self.assertEqual(ops[1]["result_bits"], (3 ** 100).bit_length())
            self.assertIn("elapsed_us", ops[0])

            [failure] = self._read(Path(tmp) / "failures.jsonl")
            self.assertEqual(failure["op"], "div_scalar")
            self.assertEqual(failure["error"], "DivisionByZero")

    def test_trace_prime_ops(self):
        with tempfile.TemporaryDirectory() as tmp:
            with BnContext(BnConfig(trace_dir=tmp)) as ctx:
                self.assertTrue(isprime(Plain(7), None, ctx=ctx))
                prime(16, ctx=ctx)
            ops = self._read(Path(tmp) / "ops.jsonl")
        self.assertEqual([r["op"] for r in ops], ["isprime", "prime"])
        self.assertIs(ops[0]["result"], True)
        self.assertEqual(ops[1]["result_bits"], 16)

    def test_trace_dir_from_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            ctx = BnContext(BnConfig(trace_dir=tmp))
            add(Plain(1), Plain(2), ctx=ctx)
            ctx.close()
            self.assertEqual(len(self._read(Path(tmp) / "ops.jsonl")), 1)

    def test_default_context_per_thread(self):
        ctx = BnContext()
        set_default_context(ctx)
        try:
            self.assertIs(default_context(), ctx)
        finally:
            set_default_context(None)
        self.assertIsNot(default_context(), ctx)


class TestManifest(unittest.TestCase):

    def test_manifest(self):
        config = BnConfig().to_dict()
        manifest = create_manifest(config, session_id="test")
        self.assertEqual(manifest.session_id, "test")
        self.assertEqual(manifest.config, config)
        self.assertEqual(len(manifest.config_hash), 16)
        self.assertEqual(manifest.config_hash,
                         create_manifest(config).config_hash)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "run" / "manifest.json"
            manifest.save(path)
            with open(path) as f:
                data = json.load(f)
        self.assertEqual(data["version"], "0.3.0")
        self.assertEqual(data["config"]["word_bits"], 64)


if __name__ == "__main__":
    unittest.main()
