"""
Tinker Command-Line Interface
=============================

This package provides the command-line tool of the Tinker toolkit:

- **tkasm**: Tinker assembler

The tool is a Click-based CLI application with help and error
reporting shared through cli.errors.
"""

__all__ = ["tkasm"]
