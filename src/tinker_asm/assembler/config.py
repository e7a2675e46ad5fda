"""
Tinker Assembler - Configuration
================================

Options that shape a single assembly run. Configuration comes from:
- Default values (defined here)
- Keyword arguments when embedding the assembler
- Command-line flags of the tkasm tool
"""

from dataclasses import dataclass
from typing import Optional

from tinker_asm.cpu import DEFAULT_BASE_ADDRESS, MAX_ADDRESS
from tinker_asm.errors import DiagnosticSink


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        base_address: Address of the first byte of output (default: 0x1000)
        keep_labels: Re-emit label definitions as 'NAME:' lines in the output
        allow_undefined_labels: Report undefined label references as
            recoverable errors and pass the line through unresolved,
            instead of failing the run (default: False)
        max_errors: Fatal errors to collect before giving up (default: 100)
        diagnostic_sink: Called with (severity, message) for every
            diagnostic as it is reported
    """

    base_address: int = DEFAULT_BASE_ADDRESS
    keep_labels: bool = False
    allow_undefined_labels: bool = False
    max_errors: int = 100
    diagnostic_sink: Optional[DiagnosticSink] = None

    def __post_init__(self) -> None:
        if not 0 <= self.base_address <= MAX_ADDRESS:
            raise ValueError(
                f"base address 0x{self.base_address:X} does not fit in 32 bits"
            )
        if self.max_errors < 1:
            raise ValueError("max_errors must be at least 1")
