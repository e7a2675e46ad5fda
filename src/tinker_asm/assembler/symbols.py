"""
Tinker Assembler Symbol Table
=============================

Maps label names to byte addresses. The table is filled during pass 1
and frozen before pass 2, which only reads it.

Label names are case-sensitive. Redefining a label overwrites the old
address (last definition wins); the caller is told about the earlier
definition so it can warn.
"""

from dataclasses import dataclass
from typing import Iterator, Optional
import difflib

from tinker_asm.errors import (
    AddressOverflowError,
    AssemblerError,
    SourceLocation,
    UndefinedSymbolError,
)
from tinker_asm.cpu import MAX_ADDRESS


@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name
        address: Byte address the label marks
        location: Where the label was (last) defined
    """
    name: str
    address: int
    location: Optional[SourceLocation] = None


class SymbolTable:
    """
    Label name to address mapping for one assembly run.

    Usage:
        table = SymbolTable()
        table.define("LOOP", 0x1000)
        table.freeze()
        table.address_of("LOOP")   # 4096
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}
        self._frozen = False

    def define(self, name: str, address: int,
               location: Optional[SourceLocation] = None) -> Optional[Symbol]:
        """
        Bind a label to an address.

        Args:
            name: Label name
            address: Byte address (unsigned 32-bit)
            location: Where the label is defined

        Returns:
            The previous Symbol if this definition replaced one, else None

        Raises:
            AddressOverflowError: If the address does not fit 32 bits
            AssemblerError: If the table has been frozen
        """
        if self._frozen:
            raise AssemblerError(f"cannot define label '{name}' after pass 1", location)
        if not 0 <= address <= MAX_ADDRESS:
            raise AddressOverflowError(
                f"label '{name}' address 0x{address:X} does not fit in 32 bits",
                location,
            )
        previous = self._symbols.get(name)
        self._symbols[name] = Symbol(name, address, location)
        return previous

    def lookup(self, name: str, location: Optional[SourceLocation] = None,
               source_line: Optional[str] = None) -> Symbol:
        """
        Return the symbol for a label.

        Raises:
            UndefinedSymbolError: If the label was never defined
        """
        symbol = self._symbols.get(name)
        if symbol is None:
            raise UndefinedSymbolError(
                name,
                location=location,
                source_line=source_line,
                similar_symbols=self.similar(name),
            )
        return symbol

    def address_of(self, name: str) -> int:
        return self.lookup(name).address

    def similar(self, name: str) -> list[str]:
        """Names close to `name`, best match first."""
        return difflib.get_close_matches(name, list(self._symbols), n=3, cutoff=0.6)

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def clear(self) -> None:
        self._symbols.clear()
        self._frozen = False

    def as_dict(self) -> dict[str, int]:
        return {name: symbol.address for name, symbol in self._symbols.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)
