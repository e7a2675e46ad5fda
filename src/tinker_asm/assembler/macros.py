"""
Tinker Macro Expander
=====================

Expands the Tinker pseudo-instructions into primitive instructions.

| Macro         | Expansion                               | Size |
|---------------|-----------------------------------------|------|
| in rD, rS     | priv rD, rS, r0, 3                      | 4    |
| out rD, rS    | priv rD, rS, r0, 4                      | 4    |
| clr rD        | xor rD, rD, rD                          | 4    |
| halt          | priv r0, r0, r0, 0                      | 4    |
| push rD       | subi r31, 8 / mov (r31)(0), rD          | 8    |
| pop rD        | mov rD, (r31)(0) / addi r31, 8          | 8    |
| ld rD, V      | xor + 6 x addi + 5 x shftli             | 48   |

push decrements the stack pointer and then stores; pop loads and then
increments, so a push/pop pair leaves r31 where it started.

ld Windows
----------
ld builds a 64-bit value 12 bits at a time, most significant bits
first. After zeroing rD, each window is added and the register shifted
left to make room for the next one:

    bits 63..52  addi rD, w0   shftli rD, 12
    bits 51..40  addi rD, w1   shftli rD, 12
    bits 39..28  addi rD, w2   shftli rD, 12
    bits 27..16  addi rD, w3   shftli rD, 12
    bits 15..4   addi rD, w4   shftli rD, 4
    bits  3..0   addi rD, w5

Five 12-bit windows and a final 4-bit window cover exactly 64 bits,
every chunk fits addi's unsigned 12-bit immediate, and the sequence is
always 12 instructions - the 48 bytes the catalog promises.
"""

from typing import Callable, Optional

from tinker_asm.assembler.parser import Statement
from tinker_asm.cpu import STACK_POINTER


# (width, shift applied after adding the window), most significant first
LD_WINDOWS: tuple[tuple[int, int], ...] = (
    (12, 12),
    (12, 12),
    (12, 12),
    (12, 12),
    (12, 4),
    (4, 0),
)

PRIV_HALT = 0
PRIV_IN = 3
PRIV_OUT = 4

SP = f"r{STACK_POINTER}"


def ld_chunks(value: int) -> list[int]:
    """Split a 64-bit value into its ld windows, most significant first."""
    chunks = []
    remaining = 64
    for width, _ in LD_WINDOWS:
        remaining -= width
        chunks.append((value >> remaining) & ((1 << width) - 1))
    return chunks


def _reg(statement: Statement, index: int) -> str:
    return f"r{statement.operands[index].value}"


def _expand_in(statement: Statement) -> list[str]:
    return [f"priv {_reg(statement, 0)}, {_reg(statement, 1)}, r0, {PRIV_IN}"]


def _expand_out(statement: Statement) -> list[str]:
    return [f"priv {_reg(statement, 0)}, {_reg(statement, 1)}, r0, {PRIV_OUT}"]


def _expand_clr(statement: Statement) -> list[str]:
    rd = _reg(statement, 0)
    return [f"xor {rd}, {rd}, {rd}"]


def _expand_halt(statement: Statement) -> list[str]:
    return [f"priv r0, r0, r0, {PRIV_HALT}"]


def _expand_push(statement: Statement) -> list[str]:
    return [
        f"subi {SP}, 8",
        f"mov ({SP})(0), {_reg(statement, 0)}",
    ]


def _expand_pop(statement: Statement) -> list[str]:
    return [
        f"mov {_reg(statement, 0)}, ({SP})(0)",
        f"addi {SP}, 8",
    ]


def _expand_ld(statement: Statement) -> list[str]:
    rd = _reg(statement, 0)
    value = statement.operands[1].value
    lines = [f"xor {rd}, {rd}, {rd}"]
    for chunk, (_, shift) in zip(ld_chunks(value), LD_WINDOWS):
        lines.append(f"addi {rd}, {chunk}")
        if shift:
            lines.append(f"shftli {rd}, {shift}")
    return lines


EXPANDERS: dict[str, Callable[[Statement], list[str]]] = {
    "in": _expand_in,
    "out": _expand_out,
    "clr": _expand_clr,
    "halt": _expand_halt,
    "push": _expand_push,
    "pop": _expand_pop,
    "ld": _expand_ld,
}


def expand_macro(statement: Statement, out: Optional[list[str]] = None) -> list[str]:
    """
    Expand a validated, label-resolved macro statement.

    Args:
        statement: Macro statement whose operands match its shape and
                   whose label references have been resolved
        out: Optional sink the expansion is appended to

    Returns:
        Primitive instruction lines, without indentation

    Raises:
        KeyError: If the statement is not a macro
    """
    lines = EXPANDERS[statement.mnemonic](statement)
    if out is not None:
        out.extend(lines)
    return lines
