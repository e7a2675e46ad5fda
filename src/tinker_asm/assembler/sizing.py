"""
Size model shared by both assembler passes.

`size_of` looks only at the section and the leading mnemonic of a line,
so pass 1 and pass 2 always agree on every address.
"""

from typing import Optional
import difflib

from tinker_asm.errors import SourceLocation, UnknownInstructionError
from tinker_asm.assembler.lexer import Section
from tinker_asm.assembler.parser import mnemonic_of
from tinker_asm.cpu import CATALOG, DATA_ITEM_SIZE, MNEMONICS


def size_of(section: Section, content: str,
            location: Optional[SourceLocation] = None,
            source_line: Optional[str] = None) -> int:
    """
    Return the number of bytes a content line occupies.

    Args:
        section: Section the line appears in
        content: Trimmed content text
        location: Used for the error raised on an unknown mnemonic
        source_line: Used for the error raised on an unknown mnemonic

    Returns:
        8 for any data item, the catalog size for a code line, and 0
        outside any section.

    Raises:
        UnknownInstructionError: If a code line's mnemonic is not in the catalog
    """
    if section is Section.DATA:
        return DATA_ITEM_SIZE
    if section is Section.NONE:
        return 0

    mnemonic = mnemonic_of(content)
    info = CATALOG.get(mnemonic)
    if info is None:
        raise UnknownInstructionError(
            mnemonic,
            location=location,
            source_line=source_line,
            similar=difflib.get_close_matches(mnemonic, sorted(MNEMONICS), n=3),
        )
    return info.size
