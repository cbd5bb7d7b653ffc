#!/usr/bin/env python3
"""
RPN bignum calculator.

Evaluates an RPN expression (or a SymPy expression with --expr) with
modulus inheritance, and offers random / prime / primality helpers.

Usage:
    python scripts/bn_calc.py 123456789012345678901234567890 1 add
    python scripts/bn_calc.py 10 13 setmod 5 add            # -> 2
    python scripts/bn_calc.py 17 3120 setmod inv            # -> 2753
    python scripts/bn_calc.py --expr "m**e" --input m=65 --input e=17 --mod 3233
    python scripts/bn_calc.py --prime 256 --hex
    python scripts/bn_calc.py --isprime 2305843009213693951
    python scripts/bn_calc.py --config configs/default.yaml --trace-dir ./outputs/bn 2 100 pow
"""

import argparse
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from modbn.config import BnConfig, load_config
from modbn.context import BnContext
from modbn.errors import BnError
from modbn.logging import OpLogger, create_manifest
from modbn.operand import isprime
from modbn.prime import prime, random
from modbn.program import compile_expr, compile_rpn, run_program


def parse_inputs(pairs):
    inputs = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise SystemExit(f"ERROR: --input expects NAME=VALUE, got {pair!r}")
        inputs[name] = value
    return inputs


def show(value, as_hex: bool) -> str:
    text = value.to_hex() if as_hex else str(value)
    if value.modulus is not None:
        text += f"  (mod {value.modulus.n})"
    return text


def main():
    parser = argparse.ArgumentParser(
        description="RPN bignum calculator with modulus inheritance"
    )
    parser.add_argument("tokens", nargs="*",
                        help="RPN tokens, e.g. 10 13 setmod 5 add")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML config file (default: built-in defaults)")
    parser.add_argument("--expr", type=str, default=None,
                        help="SymPy expression instead of RPN tokens")
    parser.add_argument("--input", action="append", metavar="NAME=VALUE",
                        help="Input value for $NAME / expression symbols")
    parser.add_argument("--mod", type=str, default=None,
                        help="Evaluate --expr under this modulus (literal or input name)")
    parser.add_argument("--random", type=int, default=None, metavar="BITS",
                        help="Print a random value of up to BITS bits")
    parser.add_argument("--prime", type=int, default=None, metavar="BITS",
                        help="Print a probable prime of BITS bits")
    parser.add_argument("--isprime", type=str, default=None, metavar="N",
                        help="Test N for primality")
    parser.add_argument("--checks", type=int, default=None,
                        help="Miller-Rabin rounds for --isprime")
    parser.add_argument("--hex", action="store_true",
                        help="Print results in hex (x-prefixed)")
    parser.add_argument("--show-program", action="store_true",
                        help="Print the compiled program before running it")
    parser.add_argument("--trace-dir", type=str, default=None,
                        help="Write ops.jsonl / manifest.json here")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else BnConfig()
    trace_dir = args.trace_dir or config.trace_dir

    logger = None
    if trace_dir:
        manifest = create_manifest(config=config.to_dict())
        manifest.save(Path(trace_dir) / "manifest.json")
        logger = OpLogger(Path(trace_dir))

    ctx = BnContext(config, logger=logger)
    inputs = parse_inputs(args.input)
    t_start = time.time()

    try:
        if args.random is not None:
            print(show(random(args.random, ctx=ctx), args.hex))
        if args.prime is not None:
            print(show(prime(args.prime, ctx=ctx), args.hex))
        if args.isprime is not None:
            verdict = isprime(args.isprime, args.checks, ctx=ctx)
            print("probably prime" if verdict else "composite")

        program = None
        if args.expr is not None:
            names = sorted(inputs)
            program = compile_expr(args.expr, inputs=names, modulus=args.mod)
        elif args.tokens:
            program = compile_rpn(args.tokens)

        if program is not None:
            if args.show_program:
                for line in program.disassemble():
                    print(f"  {line}")
            for value in run_program(program, inputs, ctx=ctx):
                print(show(value, args.hex))
    except BnError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        ctx.close()

    if logger is not None:
        wall = time.time() - t_start
        print(f"Trace: {trace_dir} ({logger.summary['ops_logged']} ops, "
              f"{wall:.3f}s)", file=sys.stderr)


if __name__ == "__main__":
    main()
