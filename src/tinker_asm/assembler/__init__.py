"""
Tinker Assembler
================

This module provides a two-pass assembler for the Tinker instruction set.

The assembler turns Tinker source, with labels, label references and
pseudo-instructions, into a flat stream of primitive instructions and
data items that a Tinker loader or simulator can consume.

Main Components
---------------
- **Assembler**: Main assembler class wrapping the code generator and writers
- **classify_line**: Sorts each source line into blank, comment, directive,
  label or content
- **Parser**: Parses a content line into a Statement with typed operands
- **validate**: Checks operands against the instruction catalog
- **CodeGenerator**: Runs both passes and collects diagnostics
- **expand_macro**: Rewrites pseudo-instructions as primitive instructions

Assembly Process
----------------
1. **Pass 1 (symbol collection)**:
   - Track the current section and program counter
   - Size every content line (4 bytes per instruction, 8 per data item)
   - Record each label at the address of the line that follows it
   - Validate every instruction, collecting all errors

2. **Pass 2 (output)**:
   - Resolve ':NAME' references (absolute, or PC-relative for brr)
   - Expand macros
   - Emit directives where the section changes, then the instructions

Example Usage
-------------
>>> from tinker_asm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
... .code
... :LOOP
...     subi r1, 1
...     brr :LOOP
... ''')
['.code', '\\tsubi r1, 1', '\\tbrr -4']

Supported Features
------------------
- Full Tinker primitive instruction set
- Pseudo-instructions: in, out, clr, halt, push, pop, ld
- Code and data sections
- Labels with forward and backward references
- Listing file generation
- Symbol table output
"""

from tinker_asm.assembler.assembler import Assembler, assemble, assemble_file
from tinker_asm.assembler.codegen import CodeGenerator, LineEvent, ListingEntry
from tinker_asm.assembler.config import AssemblerConfig
from tinker_asm.assembler.lexer import (
    Lexer,
    LineKind,
    Section,
    SourceLine,
    Token,
    TokenType,
    classify_line,
)
from tinker_asm.assembler.macros import expand_macro, ld_chunks
from tinker_asm.assembler.parser import Operand, OperandKind, Parser, Statement, parse_statement
from tinker_asm.assembler.resolver import LabelResolver, render
from tinker_asm.assembler.sizing import size_of
from tinker_asm.assembler.symbols import Symbol, SymbolTable
from tinker_asm.assembler.validator import validate

__all__ = [
    # Main interface
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    # Line classification and parsing
    "classify_line",
    "LineKind",
    "Section",
    "SourceLine",
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "Statement",
    "Operand",
    "OperandKind",
    "parse_statement",
    # Passes
    "size_of",
    "validate",
    "expand_macro",
    "ld_chunks",
    "LabelResolver",
    "render",
    "Symbol",
    "SymbolTable",
    "CodeGenerator",
    "LineEvent",
    "ListingEntry",
]
