"""
tkasm - Tinker Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the Tinker assembler.

Usage Examples
--------------
Basic assembly:
    $ tkasm prog.tinker

With output file:
    $ tkasm prog.tinker -o prog.tk

Generate all output files:
    $ tkasm prog.tinker -o prog.tk -l prog.lst -s prog.sym

Different load address:
    $ tkasm --base-address 0x2000 prog.tinker

Verbose mode:
    $ tkasm -v prog.tinker
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from tinker_asm import __version__
from tinker_asm.assembler import Assembler, AssemblerConfig
from tinker_asm.cli.errors import ExitCode, handle_cli_exception
from tinker_asm.cpu import DEFAULT_BASE_ADDRESS, MAX_ADDRESS


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def parse_address(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> int:
    """Parse a decimal or 0x-prefixed hex address option."""
    if value is None:
        return DEFAULT_BASE_ADDRESS
    try:
        address = int(value, 0)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a number")
    if not 0 <= address <= MAX_ADDRESS:
        raise click.BadParameter(f"0x{address:X} does not fit in 32 bits")
    return address


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input.tk)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--base-address",
    callback=parse_address,
    metavar="ADDR",
    help="Address of the first byte, decimal or 0x hex (default: 0x1000)",
)
@click.option(
    "--keep-labels",
    is_flag=True,
    help="Keep label definitions in the output as NAME: lines",
)
@click.option(
    "--allow-undefined",
    is_flag=True,
    help="Report undefined labels and pass their lines through unresolved "
         "instead of failing",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="tkasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    base_address: int,
    keep_labels: bool,
    allow_undefined: bool,
    verbose: bool,
) -> None:
    """
    Assemble Tinker source code.

    INPUT_FILE is the assembly source file to assemble.

    Labels are resolved and pseudo-instructions (in, out, clr, halt,
    push, pop, ld) are expanded, producing one primitive Tinker
    instruction per line.

    \b
    Examples:
        tkasm prog.tinker              # Outputs prog.tk
        tkasm prog.tinker -o out.tk    # Specify output file
        tkasm prog.tinker -l prog.lst  # Also write a listing
    """
    setup_logging(verbose)

    output_file = output if output is not None else input_file.with_suffix(".tk")

    config = AssemblerConfig(
        base_address=base_address,
        keep_labels=keep_labels,
        allow_undefined_labels=allow_undefined,
    )
    asm = Assembler(config, verbose=verbose)

    if verbose:
        click.echo(f"Base address: 0x{base_address:X}")
        if allow_undefined:
            click.echo("Undefined labels: reported, lines passed through")

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)

        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        asm.write_output(output_file)
        if verbose:
            click.echo(f"Wrote {len(asm.get_output())} lines to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        # Recoverable errors and warnings do not change the exit code
        if asm.get_diagnostics():
            click.echo(asm.get_error_report(), err=True)

        if verbose:
            end = asm.get_end_address()
            click.echo(
                f"Assembly complete: {asm.get_code_size()} bytes "
                f"at 0x{base_address:X}-0x{end:X}"
            )
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
