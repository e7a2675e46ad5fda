"""
Tinker CPU Package
==================

This package contains the Tinker instruction set definitions shared by
every stage of the assembler.

Modules:
    tinker: Instruction catalog, operand slots, size classes and
            lookup helpers.

The size model, the operand validator and the macro expander all read
the same catalog, so both assembler passes agree on every mnemonic.

Usage:
    from tinker_asm.cpu import (
        CATALOG,
        SizeClass,
        Slot,
        get_instruction_info,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from tinker_asm.cpu.tinker import (
    # Machine constants
    REGISTER_COUNT,
    STACK_POINTER,
    INSTRUCTION_SIZE,
    DATA_ITEM_SIZE,
    DEFAULT_BASE_ADDRESS,
    MAX_ADDRESS,
    U12_RANGE,
    S12_RANGE,
    U64_RANGE,
    IMMEDIATE_RANGES,
    # Core types
    SizeClass,
    Slot,
    Shape,
    InstructionInfo,
    # Master instruction database
    CATALOG,
    MNEMONICS,
    MACRO_MNEMONICS,
    RELATIVE_BRANCHES,
    # Lookup functions
    format_shape,
    get_instruction_info,
    get_valid_shapes,
    is_valid_instruction,
    is_macro,
)

__all__ = [
    # Machine constants
    "REGISTER_COUNT",
    "STACK_POINTER",
    "INSTRUCTION_SIZE",
    "DATA_ITEM_SIZE",
    "DEFAULT_BASE_ADDRESS",
    "MAX_ADDRESS",
    "U12_RANGE",
    "S12_RANGE",
    "U64_RANGE",
    "IMMEDIATE_RANGES",
    # Core types
    "SizeClass",
    "Slot",
    "Shape",
    "InstructionInfo",
    # Master instruction database
    "CATALOG",
    "MNEMONICS",
    "MACRO_MNEMONICS",
    "RELATIVE_BRANCHES",
    # Lookup functions
    "format_shape",
    "get_instruction_info",
    "get_valid_shapes",
    "is_valid_instruction",
    "is_macro",
]
