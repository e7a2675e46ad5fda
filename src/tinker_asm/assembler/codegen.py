"""
Tinker Code Generator
=====================

This module drives the two-pass assembly of Tinker source lines into a
stream of primitive instructions.

Pass 1 (Symbol Collection)
--------------------------
- Classify every line and track the current section
- Size each content line and advance the program counter
- Record each label at the program counter of the line that follows it
- Validate every instruction so errors surface before any output

Pass 2 (Output Generation)
--------------------------
- Walk the same lines with the same section/PC transitions
- Resolve label references against the (now frozen) symbol table
- Expand macros into primitive instructions
- Emit directives, instructions and data items

Both passes consume the same line walker (`_walk`), so section changes
and program counter arithmetic are one code path rather than two that
must be kept in step.

Output Format
-------------
```
.code
	addi r1, 5
	subi r31, 8
	mov (r31)(0), r1
.data
	4096
```
One instruction or data item per line, tab-indented. A section
directive is written only where the section actually changes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence
import logging

from tinker_asm.errors import (
    AssemblerError,
    ErrorCollector,
    UndefinedSymbolError,
)
from tinker_asm.assembler.config import AssemblerConfig
from tinker_asm.assembler.lexer import LineKind, Section, SourceLine, classify_line
from tinker_asm.assembler.macros import expand_macro
from tinker_asm.assembler.parser import Statement, parse_statement
from tinker_asm.assembler.resolver import LabelResolver, render
from tinker_asm.assembler.sizing import size_of
from tinker_asm.assembler.symbols import SymbolTable
from tinker_asm.assembler.validator import validate
from tinker_asm.cpu import Shape


logger = logging.getLogger(__name__)


# =============================================================================
# Pass State
# =============================================================================

@dataclass
class LineEvent:
    """
    One step of the line walker.

    Attributes:
        number: Line number (1-indexed)
        section: Section in force after this line
        pc: Program counter at the start of this line
        line: The classified line (None if classification failed)
        size: Bytes this line occupies
        statement: Parsed statement for code lines
        shape: Operand shape matched by the validator
        error: Problem found while classifying, sizing or validating
    """
    number: int
    section: Section
    pc: int
    line: Optional[SourceLine] = None
    size: int = 0
    statement: Optional[Statement] = None
    shape: Optional[Shape] = None
    error: Optional[AssemblerError] = None


@dataclass
class ListingEntry:
    """Address, source and generated lines of one content line."""
    address: int
    line_number: int
    source: str
    output: list[str] = field(default_factory=list)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Assembles Tinker source lines.

    The code generator maintains:
    - Symbol table with every label address
    - Program counter tracking (through the line walker)
    - Output line buffer
    - Error collection for batch reporting

    Usage:
        codegen = CodeGenerator()
        output = codegen.generate(source.splitlines())
        symbols = codegen.get_symbols()
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the code generator.

        Args:
            config: Assembly options (defaults to AssemblerConfig())
        """
        self._config = config or AssemblerConfig()
        self._symbols = SymbolTable()
        self._resolver = LabelResolver(self._symbols)
        self._errors = ErrorCollector(
            max_errors=self._config.max_errors,
            sink=self._config.diagnostic_sink,
        )
        self._filename = "<input>"
        self._output: list[str] = []
        self._listing: list[ListingEntry] = []
        self._emitted_section: Optional[Section] = None
        self._end_address = self._config.base_address

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def config(self) -> AssemblerConfig:
        return self._config

    @property
    def symbols(self) -> SymbolTable:
        return self._symbols

    def generate(self, lines: Sequence[str], filename: str = "<input>") -> list[str]:
        """
        Assemble source lines into output lines.

        The sequence is traversed twice, once per pass.

        Args:
            lines: Source lines, with or without trailing newlines
            filename: Name used in diagnostics

        Returns:
            Output lines (without trailing newlines)

        Raises:
            AssemblerError: If any fatal error was found (also check has_errors())
        """
        self._filename = filename
        self._symbols.clear()
        self._errors.clear()
        self._output.clear()
        self._listing.clear()
        self._emitted_section = None
        self._end_address = self._config.base_address

        logger.debug("pass 1: %s", filename)
        self._pass1(lines)

        if self._errors.has_errors():
            raise AssemblerError(
                f"Assembly failed with {self._errors.error_count()} errors:\n\n"
                f"{self._errors.report()}"
            )

        self._symbols.freeze()
        logger.debug(
            "pass 1 complete: %d labels, end address 0x%X",
            len(self._symbols), self._end_address,
        )

        logger.debug("pass 2: %s", filename)
        self._pass2(lines)

        if self._errors.has_errors():
            raise AssemblerError(
                f"Assembly failed with {self._errors.error_count()} errors:\n\n"
                f"{self._errors.report()}"
            )

        logger.debug("pass 2 complete: %d output lines", len(self._output))
        return list(self._output)

    def get_output(self) -> list[str]:
        return list(self._output)

    def get_symbols(self) -> dict[str, int]:
        return self._symbols.as_dict()

    def get_code_size(self) -> int:
        """Bytes laid out from the base address by the last run."""
        return self._end_address - self._config.base_address

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        return self._errors.report()

    @property
    def errors(self) -> ErrorCollector:
        return self._errors

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, source lines and the
            instructions each line produced, followed by the symbols.
        """
        lines = []
        lines.append("Tinker Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr      Line  Source / Output")
        lines.append("-" * 60)
        for entry in self._listing:
            lines.append(f"{entry.address:08X}  {entry.line_number:4d}  {entry.source}")
            if entry.output != [entry.source]:
                for text in entry.output:
                    lines.append(f"{'':16s}    {text}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for symbol in sorted(self._symbols, key=lambda s: s.name):
            lines.append(f"{symbol.name:20s} = 0x{symbol.address:08X}")
        return "\n".join(lines)

    def write_listing(self, filepath: str | Path) -> None:
        with open(filepath, "w") as f:
            f.write(self.get_listing())
            f.write("\n")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: NAME = 0xADDR (decimal), sorted by address
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by tkasm\n")
            for symbol in sorted(self._symbols, key=lambda s: (s.address, s.name)):
                f.write(f"{symbol.name} = 0x{symbol.address:08X} ({symbol.address})\n")

    # =========================================================================
    # Line Walker
    # =========================================================================

    def _walk(self, lines: Sequence[str]) -> Iterator[LineEvent]:
        """
        Step through the source, applying section and PC transitions.

        Directive lines change the section, label and other non-content
        lines leave the PC alone, content lines advance it by their size.
        Problems are attached to the event rather than raised, so the
        walk always covers the whole source.
        """
        section = Section.NONE
        pc = self._config.base_address

        for number, raw in enumerate(lines, start=1):
            event = LineEvent(number, section, pc)
            try:
                event.line = classify_line(raw, self._filename, number)
                if event.line.kind is LineKind.DIRECTIVE:
                    section = event.line.section
                    event.section = section
                elif event.line.kind is LineKind.CONTENT:
                    self._measure(event)
            except AssemblerError as e:
                event.error = e
            pc += event.size
            yield event

        self._end_address = pc

    def _measure(self, event: LineEvent) -> None:
        """Size, parse and validate a content line."""
        line = event.line
        if event.section is not Section.CODE:
            event.size = size_of(event.section, line.text)
            return

        size = size_of(Section.CODE, line.text, line.location(), line.raw)
        statement = parse_statement(line)
        event.shape = validate(statement)
        event.statement = statement
        event.size = size

    # =========================================================================
    # Pass 1: Symbol Collection
    # =========================================================================

    def _pass1(self, lines: Sequence[str]) -> None:
        """
        First pass: collect labels and validate every line.

        Fatal errors are collected so that all of them are reported;
        generate() stops before pass 2 if there were any. Recoverable
        errors (malformed macro operands) are reported here, once; the
        line is skipped and occupies no space.
        """
        for event in self._walk(lines):
            if event.error is not None:
                self._errors.add(event.error)
                continue

            line = event.line
            if line.kind is LineKind.LABEL:
                self._define_label(line, event.pc)
            elif line.kind is LineKind.CONTENT and event.section is Section.NONE:
                self._errors.add_warning(
                    f"'{line.text}' appears before any .code or .data directive and is ignored",
                    line.location(),
                )

    def _define_label(self, line: SourceLine, address: int) -> None:
        """Define a label in the symbol table (last definition wins)."""
        try:
            previous = self._symbols.define(line.name, address, line.location())
        except AssemblerError as e:
            self._errors.add(e)
            return

        if previous is not None:
            self._errors.add_warning(
                f"label '{line.name}' redefined; address 0x{previous.address:X} "
                f"from {previous.location} replaced by 0x{address:X}",
                line.location(),
            )
        logger.debug("label %s = 0x%X", line.name, address)

    # =========================================================================
    # Pass 2: Output Generation
    # =========================================================================

    def _pass2(self, lines: Sequence[str]) -> None:
        """Second pass: resolve, expand and emit."""
        for event in self._walk(lines):
            if event.error is not None:
                # Recoverable problems were reported in pass 1
                if event.error.is_fatal:
                    self._errors.add(event.error)
                continue
            try:
                self._pass2_line(event)
            except AssemblerError as e:
                self._errors.add(e)

    def _pass2_line(self, event: LineEvent) -> None:
        line = event.line
        kind = line.kind

        if kind is LineKind.DIRECTIVE:
            if event.section is not self._emitted_section:
                self._output.append(f".{event.section}")
                self._emitted_section = event.section

        elif kind is LineKind.LABEL:
            if self._config.keep_labels:
                self._output.append(f"{line.name}:")

        elif kind is LineKind.CONTENT:
            if event.section is Section.DATA:
                self._emit(event, [self._generate_data(line)])
            elif event.section is Section.CODE:
                self._emit(event, self._generate_statement(event))

    def _emit(self, event: LineEvent, lines: list[str]) -> None:
        self._listing.append(
            ListingEntry(event.pc, event.number, event.line.text, list(lines))
        )
        self._output.extend(f"\t{text}" for text in lines)

    def _generate_statement(self, event: LineEvent) -> list[str]:
        """Resolve and, for macros, expand one code line."""
        statement = event.statement
        try:
            resolved = self._resolver.resolve(statement, event.shape, event.pc)
        except UndefinedSymbolError as e:
            return [self._unresolved(e, statement.text)]

        if statement.is_macro:
            return expand_macro(resolved)
        return [render(resolved)]

    def _generate_data(self, line: SourceLine) -> str:
        try:
            return self._resolver.substitute_data(line)
        except UndefinedSymbolError as e:
            return self._unresolved(e, line.text)

    def _unresolved(self, error: UndefinedSymbolError, text: str) -> str:
        """
        Apply the undefined-label policy.

        Fatal by default. When undefined labels are allowed the error is
        reported and the line goes out verbatim, reference and all.
        """
        if not self._config.allow_undefined_labels:
            raise error
        self._errors.add(error.downgraded())
        return text
