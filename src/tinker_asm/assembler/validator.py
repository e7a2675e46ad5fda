"""
Tinker Operand Validator
========================

Checks a parsed statement against the instruction catalog and returns
the operand shape it matches.

Validation runs in three steps:

1. **Registers**: every register, including the base of a memory
   operand, must be r0-r31. Fatal (RegisterRangeError).
2. **Shape**: the operand kinds must match one of the shapes listed
   for the mnemonic. A mismatch is fatal for an ordinary instruction
   (OperandShapeError) and recoverable for a macro (MacroError).
3. **Ranges**: immediates of the matched shape must fit their slot
   (U12, S12, U64, memory offset S12). Fatal (ImmediateRangeError).

'mov' has four shapes that differ only in operand kinds, so the first
shape whose kinds line up is the one the line means:

    mov rD, (rS)(L)    load
    mov rD, rS         register copy
    mov rD, L          literal
    mov (rD)(L), rS    store

Validation has no side effects: running it twice on the same statement
gives the same answer, which is what lets pass 2 repeat it.
"""

from typing import Optional

from tinker_asm.errors import (
    ImmediateRangeError,
    MacroError,
    OperandShapeError,
    RegisterRangeError,
    UnknownInstructionError,
)
from tinker_asm.assembler.parser import Operand, OperandKind, Statement
from tinker_asm.cpu import (
    IMMEDIATE_RANGES,
    REGISTER_COUNT,
    S12_RANGE,
    Shape,
    Slot,
    get_instruction_info,
    get_valid_shapes,
)


# Operand kinds each slot accepts before resolution
SLOT_KINDS: dict[Slot, OperandKind] = {
    Slot.REG: OperandKind.REGISTER,
    Slot.U12: OperandKind.IMMEDIATE,
    Slot.S12: OperandKind.IMMEDIATE,
    Slot.U64: OperandKind.IMMEDIATE,
    Slot.MEM: OperandKind.MEMORY,
    Slot.ADDR: OperandKind.LABEL,
    Slot.REL: OperandKind.LABEL,
}

SLOT_NAMES = {
    Slot.U12: "unsigned 12-bit immediate",
    Slot.S12: "signed 12-bit immediate",
    Slot.U64: "64-bit immediate",
}


def _check_registers(statement: Statement) -> None:
    for operand in statement.operands:
        if operand.kind in (OperandKind.REGISTER, OperandKind.MEMORY):
            if not 0 <= operand.value < REGISTER_COUNT:
                raise RegisterRangeError(
                    f"r{operand.value}",
                    location=statement.location_of(operand),
                    source_line=statement.line.raw,
                )


def _matches(operands: tuple[Operand, ...], shape: Shape) -> bool:
    if len(operands) != len(shape):
        return False
    return all(SLOT_KINDS[slot] is operand.kind for slot, operand in zip(shape, operands))


def match_shape(statement: Statement) -> Optional[Shape]:
    """Return the first catalog shape the operands fit, or None."""
    info = get_instruction_info(statement.mnemonic)
    if info is None:
        return None
    for shape in info.shapes:
        if _matches(statement.operands, shape):
            return shape
    return None


def check_immediate(value: int, slot: Slot) -> bool:
    """Return True if an immediate value fits the given slot."""
    low, high = IMMEDIATE_RANGES[slot]
    return low <= value <= high


def _check_ranges(statement: Statement, shape: Shape) -> None:
    for slot, operand in zip(shape, statement.operands):
        if slot in IMMEDIATE_RANGES and not check_immediate(operand.value, slot):
            low, high = IMMEDIATE_RANGES[slot]
            raise ImmediateRangeError(
                operand.value, low, high, SLOT_NAMES[slot],
                location=statement.location_of(operand),
                source_line=statement.line.raw,
            )
        if slot is Slot.MEM:
            low, high = S12_RANGE
            if not low <= operand.offset <= high:
                raise ImmediateRangeError(
                    operand.offset, low, high, "memory offset",
                    location=statement.line.location(operand.offset_start),
                    source_line=statement.line.raw,
                )


def validate(statement: Statement) -> Shape:
    """
    Validate a statement's operands.

    Args:
        statement: Parsed statement

    Returns:
        The matched operand shape

    Raises:
        UnknownInstructionError: Mnemonic not in the catalog
        RegisterRangeError: Register outside r0-r31
        OperandShapeError: No shape matches (ordinary instruction)
        MacroError: No shape matches (macro)
        ImmediateRangeError: Immediate outside its slot's range
    """
    info = get_instruction_info(statement.mnemonic)
    if info is None:
        raise UnknownInstructionError(
            statement.mnemonic, statement.location, statement.line.raw
        )

    _check_registers(statement)

    shape = match_shape(statement)
    if shape is None:
        if info.is_macro:
            raise MacroError(
                f"malformed operands for '{statement.mnemonic}' macro",
                statement.location,
                hint=f"{statement.mnemonic} accepts: "
                     + " | ".join(get_valid_shapes(statement.mnemonic)),
                source_line=statement.line.raw,
            )
        raise OperandShapeError(
            statement.mnemonic,
            location=statement.location,
            source_line=statement.line.raw,
            valid_shapes=get_valid_shapes(statement.mnemonic),
        )

    _check_ranges(statement, shape)
    return shape
