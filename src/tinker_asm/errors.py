"""
Tinker Assembler Error Hierarchy
================================

This module defines the exception hierarchy for the Tinker assembler.
All exceptions inherit from TinkerError, allowing callers to catch all
assembler-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
TinkerError (base)
└── AssemblerError (assembler-related, fatal unless noted)
    ├── AssemblySyntaxError - malformed line or operand token
    ├── DirectiveError - unknown section directive
    ├── UnknownInstructionError - mnemonic not in the catalog
    ├── RegisterRangeError - register index outside r0-r31
    ├── ImmediateRangeError - immediate outside its operand's range
    ├── OperandShapeError - operands match no accepted shape
    ├── BranchRangeError - relative branch target too far
    ├── AddressOverflowError - label address beyond 32 bits
    ├── UndefinedSymbolError - reference to undefined label
    ├── MacroError - malformed macro operands (recoverable)
    └── TooManyErrors - error limit reached

Severities
----------
Every AssemblerError carries a severity:

- FATAL: aborts the run, no output is produced
- ERROR: reported, the offending line is skipped, the run continues
- WARNING: informational, output is unaffected

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class TinkerError(Exception):
    """
    Base exception for all Tinker assembler errors.

    Callers can catch every error raised by the package with a single
    except clause:

        try:
            assembler.assemble_file("program.tka")
        except TinkerError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


class Severity(Enum):
    """How a diagnostic affects the assembly run."""
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(TinkerError):
    """
    Base exception for all assembler-related errors.

    This class provides common functionality for error messages including
    source location tracking and optional hint messages.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
        severity: FATAL for everything except the recoverable subclasses
    """

    severity = Severity.FATAL

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.tka:4:9: error: register 'r40' is out of range
                addi r40, 5
                     ^
            hint: registers are r0 through r31
        """
        label = "error" if self.severity is not Severity.WARNING else "warning"
        parts = []

        if self.location:
            parts.append(f"{self.location}: {label}: {self.message}")
        else:
            parts.append(f"{label}: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - ':' not followed by a label name
        - Invalid character in an operand
        - Unbalanced parentheses in a memory operand
    """
    pass


class DirectiveError(AssemblerError):
    """
    Unknown or malformed section directive.

    Only '.code' and '.data' are recognized.
    """
    pass


class UnknownInstructionError(AssemblerError):
    """Raised when the leading mnemonic of a code line is not in the catalog."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        hint = None
        if similar:
            hint = "did you mean " + ", ".join(f"'{s}'" for s in similar[:3]) + "?"
        super().__init__(
            f"unrecognized instruction '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class RegisterRangeError(AssemblerError):
    """Register index outside r0-r31."""

    def __init__(
        self,
        register: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.register = register
        super().__init__(
            f"register '{register}' is out of range",
            location=location,
            hint="registers are r0 through r31",
            source_line=source_line,
        )


class ImmediateRangeError(AssemblerError):
    """
    Immediate value outside the range its operand slot allows.

    Unsigned 12-bit operands (addi, subi, shftri, shftli, priv) accept
    0 to 4095. Signed 12-bit operands (brr displacement, mov literal,
    memory offsets) accept -2048 to 2047.
    """

    def __init__(
        self,
        value: int,
        low: int,
        high: int,
        what: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.low = low
        self.high = high
        super().__init__(
            f"{what} {value} is out of range",
            location=location,
            hint=f"valid range is {low} to {high}",
            source_line=source_line,
        )


class OperandShapeError(AssemblerError):
    """
    Operands do not match any shape the instruction accepts.

    Example:
        addi r1, r2   ; Error: addi takes a register and an immediate
    """

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_shapes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.valid_shapes = valid_shapes or []

        hint = None
        if self.valid_shapes:
            hint = f"{mnemonic} accepts: " + " | ".join(self.valid_shapes)

        super().__init__(
            f"invalid operands for '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class BranchRangeError(AssemblerError):
    """
    Relative branch target is out of range.

    brr encodes a signed 12-bit displacement from its own address,
    limiting the reach to -2048 to +2047 bytes. Load the target with
    'ld' and use 'br' with a register for longer jumps.
    """

    def __init__(
        self,
        target: str,
        offset: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset

        hint = (
            f"branch offset is {offset}, but range is -2048 to +2047; "
            f"load the address with 'ld' and branch through a register"
        )

        super().__init__(
            f"branch target '{target}' is out of range (offset: {offset})",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class AddressOverflowError(AssemblerError):
    """Program counter grew past the 32-bit address space."""
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an undefined label.

    Raised during the second pass when a ':NAME' reference cannot be
    resolved. Similarly-named labels are offered as a hint to catch
    typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
        severity: Severity = Severity.FATAL,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []
        self.severity = severity

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )

    def downgraded(self) -> "UndefinedSymbolError":
        """Return a copy reported as a recoverable error."""
        return UndefinedSymbolError(
            self.symbol,
            location=self.location,
            hint=self.hint,
            source_line=self.source_line,
            similar_symbols=self.similar_symbols,
            severity=Severity.ERROR,
        )


class MacroError(AssemblerError):
    """
    Macro operands could not be parsed into the macro's expected shape.

    This error is recoverable: the line is reported and skipped, and
    assembly continues with the next line.

    Examples:
        push 5        ; push takes a register
        ld r1         ; ld needs a value or label
    """

    severity = Severity.ERROR


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem."""
    severity: Severity
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        return self.message


DiagnosticSink = Callable[[Severity, str], None]


class ErrorCollector:
    """
    Collects diagnostics for batch reporting.

    The assembler uses this to keep scanning after an error, so that
    every problem in a pass is reported together. Fatal errors are
    kept as exceptions (to re-raise or report), recoverable errors and
    warnings are kept as Diagnostic records.

    Every diagnostic is forwarded to the optional sink as a
    (severity, message) pair.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(RegisterRangeError("r40"))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100, sink: Optional[DiagnosticSink] = None):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum fatal errors to collect before raising TooManyErrors
            sink: Optional callable receiving every diagnostic
        """
        self.errors: list[AssemblerError] = []
        self.diagnostics: list[Diagnostic] = []
        self.max_errors = max_errors
        self._sink = sink

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Recoverable errors are recorded as diagnostics only; fatal errors
        also count towards has_errors().

        Raises:
            TooManyErrors: If max_errors fatal errors have been reached
        """
        self._record(Diagnostic(error.severity, str(error), error.location))
        if not error.is_fatal:
            return
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"Too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        text = f"{location}: warning: {message}" if location else f"warning: {message}"
        self._record(Diagnostic(Severity.WARNING, text, location))

    def _record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        logger.debug("%s: %s", diagnostic.severity, diagnostic.message.splitlines()[0])
        if self._sink is not None:
            self._sink(diagnostic.severity, diagnostic.message)

    def has_errors(self) -> bool:
        """Return True if any fatal errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of fatal errors."""
        return len(self.errors)

    def recoverable(self) -> list[Diagnostic]:
        """Return recoverable (non-fatal) errors."""
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        """Return warnings."""
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings())

    def report(self) -> str:
        """
        Format all diagnostics for display.

        Returns:
            Formatted string with all errors and warnings
        """
        lines = []

        for diagnostic in self.diagnostics:
            lines.append(diagnostic.message)
            lines.append("")

        error_total = self.error_count() + len(self.recoverable())
        warning_total = self.warning_count()
        error_word = "error" if error_total == 1 else "errors"
        warning_word = "warning" if warning_total == 1 else "warnings"
        lines.append(f"{error_total} {error_word}, {warning_total} {warning_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected diagnostics."""
        self.errors.clear()
        self.diagnostics.clear()


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.

    This prevents the assembler from flooding the user when there are
    fundamental problems with the source code.
    """

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)
