"""
Tinker Assembler - Main Interface
=================================

This module provides the main Assembler class, which is the primary interface
for assembling Tinker source code. It wraps the two-pass code generator and
the output writers.

Example Usage
-------------
>>> from tinker_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> lines = asm.assemble_string('''
... .code
... :START
...     addi r1, 5
...     push r1
...     pop r2
...     brr :START
... ''')
>>> lines[-1]
'\\tbrr -20'
>>> asm.get_symbols()
{'START': 4096}
>>>
>>> asm.write_output("prog.tk")

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ tkasm prog.tinker -o prog.tk -l prog.lst -s prog.sym

Options:
    -o, --output FILE      Output file (default: INPUT with .tk suffix)
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    --base-address N       Address of the first byte (default: 0x1000)
    --keep-labels          Keep label definitions in the output
    --allow-undefined      Pass lines with undefined labels through
    -v, --verbose          Verbose output
"""

from pathlib import Path
from typing import Optional, Sequence
import logging

from tinker_asm.assembler.codegen import CodeGenerator
from tinker_asm.assembler.config import AssemblerConfig
from tinker_asm.errors import Diagnostic


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main Tinker assembler class.

    The assembler supports:
    - The full Tinker instruction catalog
    - Pseudo-instruction (macro) expansion
    - Absolute and PC-relative label references
    - Multiple output formats (instruction text, listing, symbols)

    Options are taken either as an AssemblerConfig or as keyword
    arguments naming its fields:

        Assembler(keep_labels=True)
        Assembler(AssemblerConfig(base_address=0x2000))
    """

    def __init__(self, config: Optional[AssemblerConfig] = None,
                 verbose: bool = False, **options):
        """
        Initialize the assembler.

        Args:
            config: Assembly options
            verbose: Log progress at INFO level
            **options: AssemblerConfig fields, used when config is omitted

        Raises:
            TypeError: config and keyword options were both given
        """
        if config is not None and options:
            raise TypeError("pass either config or keyword options, not both")
        self._config = config or AssemblerConfig(**options)
        self._verbose = verbose
        self._source_file: Optional[Path] = None
        self._codegen = CodeGenerator(self._config)

    @property
    def config(self) -> AssemblerConfig:
        return self._config

    def _progress(self, message: str, *args) -> None:
        logger.log(logging.INFO if self._verbose else logging.DEBUG, message, *args)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(self, lines: Sequence[str], filename: str = "<input>") -> list[str]:
        """
        Assemble a sequence of source lines.

        Args:
            lines: Source lines
            filename: Virtual filename for error messages

        Returns:
            Output lines

        Raises:
            AssemblerError: If assembly fails
        """
        output = self._codegen.generate(lines, filename)
        self._progress(
            "Assembled %s: %d bytes, %d labels, %d output lines",
            filename, self.get_code_size(), len(self.get_symbols()), len(output),
        )
        return output

    def assemble_string(self, source: str, filename: str = "<input>") -> list[str]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Output lines

        Raises:
            AssemblerError: If assembly fails
        """
        return self.assemble_lines(source.splitlines(), filename)

    def assemble_file(self, filepath: str | Path) -> list[str]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Output lines

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath
        self._progress("Assembling %s...", filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_output(self) -> list[str]:
        """Output lines of the last assembly."""
        return self._codegen.get_output()

    def get_text(self) -> str:
        """Output of the last assembly as file contents."""
        return "".join(f"{line}\n" for line in self._codegen.get_output())

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to addresses
        """
        return self._codegen.get_symbols()

    def get_code_size(self) -> int:
        return self._codegen.get_code_size()

    def get_end_address(self) -> int:
        """Address just past the last byte laid out."""
        return self._config.base_address + self._codegen.get_code_size()

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, source and expanded instructions
        """
        return self._codegen.get_listing()

    def write_output(self, filepath: str | Path) -> None:
        """
        Write the assembled instructions.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_text())
        self._progress("Wrote %s", filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows:
        - Addresses
        - Source lines and their expansions
        - Symbol table

        Args:
            filepath: Output file path
        """
        self._codegen.write_listing(filepath)
        self._progress("Wrote listing %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Args:
            filepath: Output file path
        """
        self._codegen.write_symbols(filepath)
        self._progress("Wrote symbols %s", filepath)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def has_errors(self) -> bool:
        """True if the last assembly hit a fatal error."""
        return self._codegen.has_errors()

    def get_diagnostics(self) -> list[Diagnostic]:
        """Every diagnostic of the last assembly, in report order."""
        return list(self._codegen.errors.diagnostics)

    def get_warnings(self) -> list[Diagnostic]:
        return self._codegen.errors.warnings()

    def get_recoverable_errors(self) -> list[Diagnostic]:
        """Errors that were reported without stopping the assembly."""
        return self._codegen.errors.recoverable()

    def get_error_report(self) -> str:
        return self._codegen.get_error_report()


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", **options) -> list[str]:
    """
    Assemble a source string in one call.

    Args:
        source: Assembly source code
        filename: Virtual filename for error messages
        **options: AssemblerConfig fields

    Returns:
        Output lines
    """
    return Assembler(**options).assemble_string(source, filename)


def assemble_file(filepath: str | Path, output: str | Path | None = None,
                  **options) -> list[str]:
    """
    Assemble a file, optionally writing the result.

    Args:
        filepath: Path to assembly source file
        output: Output file path (not written if None)
        **options: AssemblerConfig fields

    Returns:
        Output lines
    """
    asm = Assembler(**options)
    lines = asm.assemble_file(filepath)
    if output is not None:
        asm.write_output(output)
    return lines
