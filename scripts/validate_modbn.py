#!/usr/bin/env python3
"""
Validation script for a modbn installation.

Runs a sequence of checks:
1. Entropy source and small-prime table
2. Arithmetic and modulus inheritance
3. Decimal / hex round-trip
4. Primality and prime generation
5. RPN program evaluation
6. Expression compilation (SymPy, optional)

Usage:
    python scripts/validate_modbn.py
    python scripts/validate_modbn.py --bits 1024
"""

import argparse
import sys
import os
import time
import traceback
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def section(name: str):
    print(f"\n{'='*60}")
    print(f"  {name}")
    print(f"{'='*60}")


def check(name: str, passed: bool, detail: str = ""):
    status = "PASS" if passed else "FAIL"
    mark = "✓" if passed else "✗"
    print(f"  [{status}] {mark} {name}" + (f" -- {detail}" if detail else ""))
    return passed


def main():
    parser = argparse.ArgumentParser(description="modbn validation suite")
    parser.add_argument("--bits", type=int, default=512,
                        help="Bit size for the prime generation check")
    args = parser.parse_args()

    import modbn
    from modbn import BnContext, Modulus, parse_decimal

    print("modbn Validation Suite")
    print(f"Version: {modbn.__version__}")
    print(f"Python: {sys.version}")
    print(f"CWD: {os.getcwd()}")

    results = []
    ctx = BnContext()

    # ---------------------------------------------------------------
    # 1. Context
    # ---------------------------------------------------------------
    section("1. Entropy Source / Small-Prime Table")

    results.append(check("OS CSPRNG entropy", type(ctx.rng).__name__ == "SystemRandom",
                         type(ctx.rng).__name__))
    results.append(check("Small-prime table", ctx.K > 0,
                         f"K={ctx.K}, max={ctx.max_small_prime}"))

    # ---------------------------------------------------------------
    # 2. Arithmetic
    # ---------------------------------------------------------------
    section("2. Arithmetic / Modulus Inheritance")

    try:
        a = parse_decimal("123456789012345678901234567890")
        results.append(check("Big add", str(a + 1) == "123456789012345678901234567891"))

        r = parse_decimal("10").with_modulus(13) + 5
        results.append(check("Reduced add", r == 2 and r.modulus == Modulus(13),
                             repr(r)))

        results.append(check("gcd(48, 18)", parse_decimal("48").gcd(18) == 6))

        inv = 1 / parse_decimal("17").with_modulus(3120)
        results.append(check("Modular inverse", inv == 2753, repr(inv)))

        m = parse_decimal("65").with_modulus(3233)
        c = m ** 17
        results.append(check("RSA round-trip", c ** 2753 == 65, f"c={c}"))
    except Exception as e:
        results.append(check("Arithmetic", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 3. Codec
    # ---------------------------------------------------------------
    section("3. Decimal / Hex Round-trip")

    try:
        from modbn import coerce, random

        ok = True
        for _ in range(100):
            v = random(4096, ctx=ctx) - random(4096, ctx=ctx)
            ok &= coerce(str(v)) == v and coerce(v.to_hex()) == v
        results.append(check("100 random 4096-bit values", ok))
    except Exception as e:
        results.append(check("Codec", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 4. Primes
    # ---------------------------------------------------------------
    section("4. Primality / Prime Generation")

    try:
        from modbn import isprime, prime

        results.append(check("Carmichael 561 rejected", not isprime(561, ctx=ctx)))
        results.append(check("M127 accepted", isprime((1 << 127) - 1, ctx=ctx)))

        t0 = time.time()
        p = prime(args.bits, ctx=ctx)
        elapsed = time.time() - t0
        results.append(check(f"prime({args.bits})",
                             p.bit_length() == args.bits and p.isprime(ctx=ctx),
                             f"{elapsed:.2f}s"))
    except Exception as e:
        results.append(check("Primes", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 5. Programs
    # ---------------------------------------------------------------
    section("5. RPN Program")

    try:
        from modbn import compile_rpn, run_program

        program = compile_rpn("10 13 setmod 5 add".split())
        for line in program.disassemble():
            print(f"    {line}")
        [r] = run_program(program, ctx=ctx)
        results.append(check("10 13 setmod 5 add", r == 2, repr(r)))
    except Exception as e:
        results.append(check("RPN program", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 6. SymPy expressions
    # ---------------------------------------------------------------
    section("6. Expression Compilation (SymPy)")

    try:
        import sympy
        have_sympy = True
    except ImportError:
        have_sympy = False
        print("  sympy not installed, skipping")

    if have_sympy:
        try:
            from modbn import compile_expr, run_program

            program = compile_expr("m**e", inputs=["m", "e", "n"], modulus="n")
            [c] = run_program(program, {"m": 65, "e": 17, "n": 3233}, ctx=ctx)
            results.append(check("m**e mod n", c == 2790, repr(c)))
        except Exception as e:
            results.append(check("Expression compilation", False, str(e)))
            traceback.print_exc()

    # ---------------------------------------------------------------
    # Summary
    # ---------------------------------------------------------------
    section("Summary")

    n_pass = sum(1 for r in results if r)
    n_fail = sum(1 for r in results if not r)
    n_total = len(results)

    print(f"\n  {n_pass}/{n_total} checks passed, {n_fail} failed")

    if n_fail == 0:
        print("\n  All checks PASSED.")
    else:
        print("\n  Some checks FAILED. Review output above.")

    ctx.close()
    return 0 if n_fail == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
