"""
Tinker Assembler Toolkit
========================

This package provides a two-pass assembler for the Tinker instruction set
architecture: a 64-bit machine with 32 registers, fixed 4-byte instructions
and 8-byte data items.

Main Components
---------------
- **assembler**: Two-pass assembler (tkasm)
    Resolves labels, expands pseudo-instructions and emits primitive
    Tinker instructions, one per line

- **cpu**: Instruction catalog
    Mnemonics, operand shapes, immediate ranges and instruction sizes

- **errors**: Error hierarchy and diagnostic collection

Quick Start
-----------
Assemble a program:
    >>> from tinker_asm import Assembler
    >>> asm = Assembler()
    >>> lines = asm.assemble_file("prog.tinker")
    >>> asm.write_output("prog.tk")

Or use the command-line tool:
    $ tkasm prog.tinker -o prog.tk -l prog.lst -s prog.sym

Version History
---------------
1.0.0 - Initial release with assembler, listing and symbol output
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from tinker_asm.assembler import (
    Assembler,
    AssemblerConfig,
    assemble,
    assemble_file,
)
from tinker_asm.errors import (
    TinkerError,
    AssemblerError,
    AssemblySyntaxError,
    DirectiveError,
    UnknownInstructionError,
    RegisterRangeError,
    ImmediateRangeError,
    OperandShapeError,
    BranchRangeError,
    AddressOverflowError,
    UndefinedSymbolError,
    MacroError,
    TooManyErrors,
    Severity,
    SourceLocation,
    Diagnostic,
    ErrorCollector,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    # Errors
    "TinkerError",
    "AssemblerError",
    "AssemblySyntaxError",
    "DirectiveError",
    "UnknownInstructionError",
    "RegisterRangeError",
    "ImmediateRangeError",
    "OperandShapeError",
    "BranchRangeError",
    "AddressOverflowError",
    "UndefinedSymbolError",
    "MacroError",
    "TooManyErrors",
    "Severity",
    "SourceLocation",
    "Diagnostic",
    "ErrorCollector",
]
