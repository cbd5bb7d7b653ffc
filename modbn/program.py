"""
Register programs over bignum values.

Expressions are compiled to a flat list of register instructions and then
evaluated against the engine. Two front ends are provided:

  - compile_rpn:  whitespace-separated RPN tokens, e.g. ``10 13 setmod 5 add``
  - compile_expr: a SymPy expression string over named inputs, optionally
                  evaluated under a modulus, e.g. ``m**e`` mod ``n``

Usage:
    program = compile_expr("a**2 + 3*b", inputs=["a", "b"], modulus="n")
    [result] = run_program(program, {"a": 5, "b": 7, "n": 13})
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from . import engine
from .codec import coerce
from .context import BnContext, default_context
from .errors import ArgumentError
from .operand import resolve_value
from .value import Bn


class Opcode(IntEnum):
    """Register machine opcodes."""
    NOP = 0
    LOAD_IN = 1     # dst = inputs[a]
    LOAD_C = 2      # dst = const_table[a]
    ADD = 3
    SUB = 4
    MUL = 5
    DIV = 6
    MOD = 7
    RMOD = 8
    GCD = 9
    POW = 10
    POW2 = 11
    LSH = 12        # dst = a << int(b)
    RSH = 13
    NEG = 14
    ABS = 15
    INV = 16        # dst = 1 / a under a's modulus
    SETMOD = 17     # dst = a reduced by modulus b
    COPY = 18


@dataclass
class Instruction:
    """Single register instruction."""
    op: int
    dst: int
    a: int = 0
    b: int = 0


@dataclass
class BnProgram:
    """Compiled program ready for evaluation.

    Attributes:
        instructions: Register instructions.
        constants: Literal texts, coerced once per run.
        inputs: Names of the program inputs, in LOAD_IN index order.
        out_reg: Registers holding the results.
        n_reg: Total number of registers used.
        name: Human-readable name (optional).
    """
    instructions: List[Instruction] = field(default_factory=list)
    constants: List[str] = field(default_factory=list)
    inputs: List[str] = field(default_factory=list)
    out_reg: List[int] = field(default_factory=list)
    n_reg: int = 0
    name: str = ""

    def disassemble(self) -> List[str]:
        lines = []
        for instr in self.instructions:
            op = Opcode(instr.op)
            if op == Opcode.LOAD_C:
                lines.append(f"r{instr.dst} = const {self.constants[instr.a]}")
            elif op == Opcode.LOAD_IN:
                lines.append(f"r{instr.dst} = input {self.inputs[instr.a]}")
            elif op in _UNARY:
                lines.append(f"r{instr.dst} = {op.name.lower()} r{instr.a}")
            else:
                lines.append(f"r{instr.dst} = {op.name.lower()} r{instr.a}, r{instr.b}")
        lines.append("out " + ", ".join(f"r{r}" for r in self.out_reg))
        return lines


_UNARY = {Opcode.POW2, Opcode.NEG, Opcode.ABS, Opcode.INV, Opcode.COPY, Opcode.NOP}


class BnCompiler:
    """Builds a BnProgram one instruction at a time.

    Usage:
        compiler = BnCompiler()
        r0 = compiler.load_const("10")
        r1 = compiler.setmod(r0, compiler.load_const("13"))
        compiler.output(compiler.add(r1, compiler.load_const("5")))
        program = compiler.build()
    """

    MAX_REGS = 4096

    def __init__(self, name: str = ""):
        self.name = name
        self.instructions: List[Instruction] = []
        self.constants: Dict[str, int] = {}  # text -> index
        self.inputs: Dict[str, int] = {}     # name -> index
        self.out_reg: List[int] = []
        self.next_reg = 0

    def _alloc_reg(self) -> int:
        if self.next_reg >= self.MAX_REGS:
            raise ArgumentError("compile", "out of registers")
        reg = self.next_reg
        self.next_reg += 1
        return reg

    def _emit(self, op: int, a: int = 0, b: int = 0) -> int:
        dst = self._alloc_reg()
        self.instructions.append(Instruction(op, dst, a, b))
        return dst

    def load_const(self, text: str) -> int:
        text = str(text)
        coerce(text)  # reject malformed literals at compile time
        if text not in self.constants:
            self.constants[text] = len(self.constants)
        return self._emit(Opcode.LOAD_C, self.constants[text])

    def load_input(self, name: str) -> int:
        if name not in self.inputs:
            self.inputs[name] = len(self.inputs)
        return self._emit(Opcode.LOAD_IN, self.inputs[name])

    def binary(self, op: Opcode, r1: int, r2: int) -> int:
        return self._emit(op, r1, r2)

    def unary(self, op: Opcode, r: int) -> int:
        return self._emit(op, r)

    def add(self, r1: int, r2: int) -> int:
        return self._emit(Opcode.ADD, r1, r2)

    def mul(self, r1: int, r2: int) -> int:
        return self._emit(Opcode.MUL, r1, r2)

    def neg(self, r: int) -> int:
        return self._emit(Opcode.NEG, r)

    def setmod(self, r: int, r_mod: int) -> int:
        return self._emit(Opcode.SETMOD, r, r_mod)

    def output(self, r: int):
        self.out_reg.append(r)

    def build(self) -> BnProgram:
        """Build the final BnProgram."""
        const_list = [""] * len(self.constants)
        for text, idx in self.constants.items():
            const_list[idx] = text
        input_list = [""] * len(self.inputs)
        for name, idx in self.inputs.items():
            input_list[idx] = name

        return BnProgram(
            instructions=list(self.instructions),
            constants=const_list,
            inputs=input_list,
            out_reg=list(self.out_reg),
            n_reg=self.next_reg,
            name=self.name,
        )


# ---------------------------------------------------------------------------
# RPN front end
# ---------------------------------------------------------------------------

RPN_BINARY = {
    "add": Opcode.ADD, "+": Opcode.ADD,
    "sub": Opcode.SUB, "-": Opcode.SUB,
    "mul": Opcode.MUL, "*": Opcode.MUL,
    "div": Opcode.DIV, "/": Opcode.DIV,
    "mod": Opcode.MOD, "%": Opcode.MOD,
    "rmod": Opcode.RMOD,
    "gcd": Opcode.GCD,
    "pow": Opcode.POW, "^": Opcode.POW,
    "lsh": Opcode.LSH, "<<": Opcode.LSH,
    "rsh": Opcode.RSH, ">>": Opcode.RSH,
    "setmod": Opcode.SETMOD,
}

RPN_UNARY = {
    "neg": Opcode.NEG,
    "abs": Opcode.ABS,
    "inv": Opcode.INV,
    "sqr": Opcode.POW2,
}


def compile_rpn(tokens: Sequence[str], name: str = "") -> BnProgram:
    """Compile RPN tokens. ``$name`` loads an input; ``dup``/``swap``
    manipulate the stack; everything left on the stack is output."""
    compiler = BnCompiler(name=name or " ".join(tokens))
    stack: List[int] = []

    def pop(token: str) -> int:
        if not stack:
            raise ArgumentError("compile", f"stack underflow at {token!r}")
        return stack.pop()

    for token in tokens:
        key = token.lower()
        if key in RPN_BINARY:
            r2 = pop(token)
            r1 = pop(token)
            stack.append(compiler.binary(RPN_BINARY[key], r1, r2))
        elif key in RPN_UNARY:
            stack.append(compiler.unary(RPN_UNARY[key], pop(token)))
        elif key == "dup":
            r = pop(token)
            stack.extend([r, r])
        elif key == "swap":
            r2 = pop(token)
            r1 = pop(token)
            stack.extend([r2, r1])
        elif token.startswith("$") and len(token) > 1:
            stack.append(compiler.load_input(token[1:]))
        else:
            stack.append(compiler.load_const(token))

    for r in stack:
        compiler.output(r)
    return compiler.build()


# ---------------------------------------------------------------------------
# SymPy front end
# ---------------------------------------------------------------------------

def _compile_quotient(compiler: BnCompiler, factors, inputs: Dict[str, int]) -> int:
    """Compile a plain product, moving every denominator factor into one
    truncating DIV at the end so ``a*b/c`` is ``(a*b) / c``."""
    import sympy as sp

    num, den = [], []
    for f in factors:
        if isinstance(f, sp.Rational) and not isinstance(f, sp.Integer):
            num.append(sp.Integer(f.p))
            den.append(sp.Integer(f.q))
        elif isinstance(f, sp.Pow) and f.exp.is_integer and f.exp.is_negative:
            den.append(sp.Pow(f.base, -f.exp))
        else:
            num.append(f)

    def product(terms) -> int:
        result = _compile_sympy_expr(compiler, terms[0], inputs, None)
        for t in terms[1:]:
            result = compiler.mul(result, _compile_sympy_expr(compiler, t, inputs, None))
        return result

    r = product(num) if num else compiler.load_const("1")
    if not den:
        return r
    return compiler.binary(Opcode.DIV, r, product(den))


def _compile_sympy_expr(compiler: BnCompiler, expr, inputs: Dict[str, int],
                        mod_reg: Optional[int]) -> int:
    """Recursively compile a SymPy expression.

    When ``mod_reg`` is set every leaf is reduced by it, so the whole
    expression is evaluated under that modulus. Exponents are compiled
    with ``mod_reg=None``.
    """
    import sympy as sp

    def leaf(reg: int) -> int:
        return reg if mod_reg is None else compiler.setmod(reg, mod_reg)

    if isinstance(expr, (int, sp.Integer)):
        return leaf(compiler.load_const(str(int(expr))))

    if isinstance(expr, sp.Symbol):
        name = str(expr)
        if name in inputs:
            return leaf(compiler.load_input(name))
        raise ArgumentError("compile", f"unknown symbol: {name}")

    if isinstance(expr, sp.Rational):
        if mod_reg is None:
            raise ArgumentError("compile", f"fraction {expr} has no integer numerator")
        num = leaf(compiler.load_const(str(int(expr.p))))
        den = leaf(compiler.load_const(str(int(expr.q))))
        return compiler.binary(Opcode.DIV, num, den)

    if isinstance(expr, sp.Add):
        args = list(expr.args)
        result = _compile_sympy_expr(compiler, args[0], inputs, mod_reg)
        for arg in args[1:]:
            r = _compile_sympy_expr(compiler, arg, inputs, mod_reg)
            result = compiler.add(result, r)
        return result

    if isinstance(expr, sp.Mul):
        args = list(expr.args)
        if args[0] == -1:
            inner = sp.Mul(*args[1:]) if len(args) > 2 else args[1]
            return leaf(compiler.neg(_compile_sympy_expr(compiler, inner, inputs, mod_reg)))
        if mod_reg is None:
            return _compile_quotient(compiler, args, inputs)
        result = _compile_sympy_expr(compiler, args[0], inputs, mod_reg)
        for arg in args[1:]:
            r = _compile_sympy_expr(compiler, arg, inputs, mod_reg)
            result = compiler.mul(result, r)
        return result

    if isinstance(expr, sp.Pow):
        base, exp = expr.args
        if not exp.is_integer:
            raise ArgumentError("compile", f"non-integer exponent in {expr}")
        if exp.is_negative and mod_reg is None:
            raise ArgumentError("compile", f"{expr} has no integer numerator")
        r = _compile_sympy_expr(compiler, base, inputs, mod_reg)
        if exp == 2:
            return compiler.unary(Opcode.POW2, r)
        if exp == -1:
            return compiler.unary(Opcode.INV, r)
        e = _compile_sympy_expr(compiler, exp, inputs, None)
        return compiler.binary(Opcode.POW, r, e)

    if isinstance(expr, sp.Mod):
        a, m = expr.args
        ra = _compile_sympy_expr(compiler, a, inputs, mod_reg)
        rm = _compile_sympy_expr(compiler, m, inputs, None)
        return compiler.binary(Opcode.RMOD, ra, rm)

    raise ArgumentError("compile", f"unsupported expression type: {type(expr).__name__}: {expr}")


def compile_expr(expr: str, inputs: Sequence[str],
                 modulus: Optional[str] = None, name: str = "") -> BnProgram:
    """Compile a SymPy expression string over named inputs.

    Args:
        expr: Expression such as ``"m**e"`` or ``"a*b + 3"``.
        inputs: Input symbol names.
        modulus: Input name or literal; when given, the expression is
                 evaluated with every operand reduced by it.
        name: Human-readable name.

    Returns:
        Compiled BnProgram with a single output register.
    """
    import sympy as sp

    symbols = {s: sp.Symbol(s, integer=True) for s in inputs}
    parsed = sp.sympify(expr, locals=symbols)

    compiler = BnCompiler(name=name or expr)
    for s in inputs:
        compiler.inputs.setdefault(s, len(compiler.inputs))

    mod_reg = None
    if modulus is not None:
        mod_reg = (compiler.load_input(modulus) if modulus in symbols
                   else compiler.load_const(modulus))

    compiler.output(_compile_sympy_expr(compiler, parsed, compiler.inputs, mod_reg))
    return compiler.build()


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _setmod(a: Bn, m: Bn, ctx: BnContext) -> Bn:
    return a.with_modulus(m)


def _inv(a: Bn, ctx: BnContext) -> Bn:
    return engine.inverse(a, ctx=ctx)


def _pow2(a: Bn, ctx: BnContext) -> Bn:
    return engine.pow_scalar(a, 2, ctx=ctx)


def _copy(a: Bn, ctx: BnContext) -> Bn:
    return a


def _lsh(a: Bn, n: Bn, ctx: BnContext) -> Bn:
    return engine.lshift(a, n.value, ctx=ctx)


def _rsh(a: Bn, n: Bn, ctx: BnContext) -> Bn:
    return engine.rshift(a, n.value, ctx=ctx)


_BINARY_OPS: Dict[Opcode, Callable] = {
    Opcode.ADD: engine.add_value,
    Opcode.SUB: engine.sub_value,
    Opcode.MUL: engine.mul_value,
    Opcode.DIV: engine.div_value,
    Opcode.MOD: engine.mod_value,
    Opcode.RMOD: engine.rmod_value,
    Opcode.GCD: engine.gcd_value,
    Opcode.POW: engine.pow_value,
    Opcode.LSH: _lsh,
    Opcode.RSH: _rsh,
    Opcode.SETMOD: _setmod,
}

_UNARY_OPS: Dict[Opcode, Callable] = {
    Opcode.NEG: engine.neg,
    Opcode.ABS: engine.abs_,
    Opcode.INV: _inv,
    Opcode.POW2: _pow2,
    Opcode.COPY: _copy,
}


def run_program(program: BnProgram, inputs: Optional[Dict[str, Any]] = None,
                ctx: Optional[BnContext] = None) -> List[Bn]:
    """Evaluate a program; returns the values of its output registers.

    Input values may be Bn, int or literal strings.
    """
    ctx = ctx or default_context()
    inputs = inputs or {}
    missing = [n for n in program.inputs if n not in inputs]
    if missing:
        raise ArgumentError("run", f"missing inputs: {missing}")

    consts = [coerce(c) for c in program.constants]
    loaded = [resolve_value(inputs[n], ctx) for n in program.inputs]
    regs: List[Optional[Bn]] = [None] * program.n_reg

    for instr in program.instructions:
        op = Opcode(instr.op)
        if op == Opcode.NOP:
            continue
        if op == Opcode.LOAD_C:
            regs[instr.dst] = consts[instr.a]
        elif op == Opcode.LOAD_IN:
            regs[instr.dst] = loaded[instr.a]
        elif op in _UNARY_OPS:
            regs[instr.dst] = _UNARY_OPS[op](regs[instr.a], ctx=ctx)
        else:
            regs[instr.dst] = _BINARY_OPS[op](regs[instr.a], regs[instr.b], ctx=ctx)

    return [regs[r] for r in program.out_reg]
