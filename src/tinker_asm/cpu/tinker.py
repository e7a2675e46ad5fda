"""
Tinker Instruction Set Definition
=================================

This module defines the Tinker instruction catalog: every mnemonic the
assembler recognizes, the operand shapes it accepts, and how many bytes
it occupies once assembled.

Tinker is a 64-bit load/store machine with 32 general registers
(r0-r31). Every primitive instruction is 4 bytes; data items are 8
bytes. r31 is the stack pointer by convention.

Operand Slots
-------------
| Slot | Syntax      | Accepted values                        |
|------|-------------|----------------------------------------|
| REG  | rN          | N in 0..31                             |
| U12  | 123         | 0..4095 (unsigned 12-bit)              |
| S12  | -12         | -2048..2047 (signed 12-bit)            |
| U64  | 0x1234      | 0..2**64-1                             |
| MEM  | (rN)(L)     | base register plus signed 12-bit L     |
| ADDR | :LABEL      | label resolved to an absolute address  |
| REL  | :LABEL      | label resolved to a PC-relative offset |

Macros
------
in, out, clr, halt, push, pop and ld are pseudo-instructions. They are
recognized here like any other mnemonic, but the assembler replaces
them with one or more primitive instructions. Their size class states
how many bytes that expansion occupies (4 bytes per instruction).

This catalog is the single source of truth for both assembler passes:
the size model, the operand validator and the macro expander all read
it, so a mnemonic can never be sized one way and expanded another.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Machine Constants
# =============================================================================

REGISTER_COUNT = 32
STACK_POINTER = 31
INSTRUCTION_SIZE = 4
DATA_ITEM_SIZE = 8
DEFAULT_BASE_ADDRESS = 0x1000
MAX_ADDRESS = 0xFFFFFFFF

U12_RANGE = (0, 4095)
S12_RANGE = (-2048, 2047)
U64_RANGE = (0, (1 << 64) - 1)


# =============================================================================
# Size Classes
# =============================================================================

class SizeClass(Enum):
    """
    Size classes for catalog entries.

    FIXED4 covers ordinary instructions and single-instruction macros,
    FIXED8 the two-instruction stack macros, FIXED48 the twelve-
    instruction 'ld' macro and DATA_ITEM8 a data-section item.
    """
    FIXED4 = auto()
    FIXED8 = auto()
    FIXED48 = auto()
    DATA_ITEM8 = auto()

    @property
    def size(self) -> int:
        return {
            SizeClass.FIXED4: 4,
            SizeClass.FIXED8: 8,
            SizeClass.FIXED48: 48,
            SizeClass.DATA_ITEM8: 8,
        }[self]

    @property
    def instruction_count(self) -> int:
        """Number of primitive instructions this size represents."""
        return self.size // INSTRUCTION_SIZE


# =============================================================================
# Operand Slots
# =============================================================================

class Slot(Enum):
    """Kinds of operand an instruction shape can hold."""
    REG = auto()
    U12 = auto()
    S12 = auto()
    U64 = auto()
    MEM = auto()
    ADDR = auto()
    REL = auto()

    def __str__(self) -> str:
        return {
            Slot.REG: "rN",
            Slot.U12: "u12",
            Slot.S12: "s12",
            Slot.U64: "u64",
            Slot.MEM: "(rN)(s12)",
            Slot.ADDR: ":label",
            Slot.REL: ":label",
        }[self]


Shape = tuple[Slot, ...]

IMMEDIATE_RANGES: dict[Slot, tuple[int, int]] = {
    Slot.U12: U12_RANGE,
    Slot.S12: S12_RANGE,
    Slot.U64: U64_RANGE,
}


def format_shape(mnemonic: str, shape: Shape) -> str:
    """Render a shape as it would be written, e.g. 'addi rN, u12'."""
    if not shape:
        return mnemonic
    return f"{mnemonic} " + ", ".join(str(slot) for slot in shape)


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Catalog entry for a mnemonic.

    Attributes:
        mnemonic: The instruction name as written in source
        size_class: Bytes occupied once assembled
        shapes: Accepted operand shapes, tried in order
        is_macro: True for pseudo-instructions that expand
    """
    mnemonic: str
    size_class: SizeClass
    shapes: tuple[Shape, ...]
    is_macro: bool = False

    @property
    def size(self) -> int:
        return self.size_class.size

    def __repr__(self) -> str:
        kind = "macro" if self.is_macro else "instruction"
        return f"InstructionInfo({self.mnemonic!r}, {kind}, size={self.size})"


_R = Slot.REG
_RRR: Shape = (_R, _R, _R)
_RR: Shape = (_R, _R)
_RU: Shape = (_R, Slot.U12)


def _entries(mnemonics: str, shapes: tuple[Shape, ...],
             size_class: SizeClass = SizeClass.FIXED4,
             is_macro: bool = False) -> dict[str, InstructionInfo]:
    return {
        name: InstructionInfo(name, size_class, shapes, is_macro)
        for name in mnemonics.split()
    }


# =============================================================================
# Catalog
# =============================================================================
# Key: mnemonic
# Value: InstructionInfo(mnemonic, size_class, shapes, is_macro)
# =============================================================================

CATALOG: dict[str, InstructionInfo] = {
    # Integer arithmetic and logic
    **_entries("add sub mul div", (_RRR,)),
    **_entries("addi subi", (_RU,)),
    **_entries("and or xor", (_RRR,)),
    **_entries("not", (_RR,)),
    **_entries("shftr shftl", (_RRR,)),
    **_entries("shftri shftli", (_RU,)),

    # Control flow
    **_entries("br call", ((_R,), (Slot.ADDR,))),
    **_entries("brr", ((_R,), (Slot.S12,), (Slot.REL,))),
    **_entries("brnz", (_RR,)),
    **_entries("brgt", (_RRR,)),
    **_entries("return", ((),)),

    # Floating point
    **_entries("addf subf mulf divf", (_RRR,)),

    # Data movement: load, register copy, literal, store
    **_entries("mov", (
        (_R, Slot.MEM),
        (_R, _R),
        (_R, Slot.S12),
        (Slot.MEM, _R),
    )),

    # Privileged
    **_entries("priv", ((_R, _R, _R, Slot.U12),)),

    # Macros
    **_entries("in out", (_RR,), is_macro=True),
    **_entries("clr", ((_R,),), is_macro=True),
    **_entries("halt", ((),), is_macro=True),
    **_entries("push pop", ((_R,),), SizeClass.FIXED8, is_macro=True),
    **_entries("ld", ((_R, Slot.U64), (_R, Slot.ADDR)), SizeClass.FIXED48, is_macro=True),
}

MNEMONICS = frozenset(CATALOG)
MACRO_MNEMONICS = frozenset(name for name, info in CATALOG.items() if info.is_macro)
RELATIVE_BRANCHES = frozenset(
    name for name, info in CATALOG.items()
    if any(Slot.REL in shape for shape in info.shapes)
)


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """Return the catalog entry for a mnemonic, or None if unknown."""
    return CATALOG.get(mnemonic)


def is_valid_instruction(mnemonic: str) -> bool:
    return mnemonic in CATALOG


def is_macro(mnemonic: str) -> bool:
    return mnemonic in MACRO_MNEMONICS


def get_valid_shapes(mnemonic: str) -> list[str]:
    """Return the accepted shapes of a mnemonic rendered for error hints."""
    info = CATALOG.get(mnemonic)
    if info is None:
        return []
    return [format_shape(mnemonic, shape) for shape in info.shapes]
