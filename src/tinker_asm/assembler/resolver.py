"""
Tinker Label Resolver
=====================

Replaces ':NAME' label references with concrete numbers during pass 2.

Two addressing modes are supported, chosen by the operand slot the
validator matched:

- **ADDR** (absolute): the reference becomes the label's decimal address.
  Used by br, call, ld and by data items.
- **REL** (relative): the reference becomes `target - pc`, the distance
  from the branch instruction itself. Used by brr. The displacement must
  fit a signed 12-bit field.

Example:
    4096  :START
    4096  addi r1, 5
    4100  push r1          ; 8 bytes
    4108  pop r2           ; 8 bytes
    4116  brr :START       ; 4096 - 4116 = -20 -> "brr -20"

References to labels that were never defined raise UndefinedSymbolError;
the pass driver decides whether that ends the run.
"""

import re

from tinker_asm.errors import BranchRangeError
from tinker_asm.assembler.lexer import SourceLine
from tinker_asm.assembler.parser import Operand, OperandKind, Statement
from tinker_asm.assembler.symbols import SymbolTable
from tinker_asm.cpu import S12_RANGE, Shape, Slot


# ':' starting a token, followed by a label name
LABEL_REF_PATTERN = re.compile(r"(?<![\w:]):([A-Za-z_][A-Za-z0-9_]*)")


class LabelResolver:
    """
    Resolves label references against a populated symbol table.

    Usage:
        resolver = LabelResolver(symbols)
        resolved = resolver.resolve(statement, shape, pc)
        text = render(resolved)
    """

    def __init__(self, symbols: SymbolTable):
        self._symbols = symbols

    def resolve(self, statement: Statement, shape: Shape, pc: int) -> Statement:
        """
        Return a copy of the statement with label operands replaced.

        Args:
            statement: Validated statement
            shape: Shape returned by the validator
            pc: Address of this instruction

        Raises:
            UndefinedSymbolError: A referenced label is not defined
            BranchRangeError: A relative displacement does not fit 12 bits
        """
        operands = []
        changed = False
        for slot, operand in zip(shape, statement.operands):
            if slot is Slot.ADDR:
                operand = self._replace(operand, self._address(statement, operand))
                changed = True
            elif slot is Slot.REL:
                offset = self._address(statement, operand) - pc
                low, high = S12_RANGE
                if not low <= offset <= high:
                    raise BranchRangeError(
                        operand.value, offset,
                        location=statement.location_of(operand),
                        source_line=statement.line.raw,
                    )
                operand = self._replace(operand, offset)
                changed = True
            operands.append(operand)

        if not changed:
            return statement
        return statement.with_operands(tuple(operands))

    def substitute_data(self, line: SourceLine) -> str:
        """
        Resolve every label reference in a data item to its address.

        Raises:
            UndefinedSymbolError: A referenced label is not defined
        """
        def replace(match: re.Match) -> str:
            symbol = self._symbols.lookup(
                match.group(1), line.location(match.start()), line.raw
            )
            return str(symbol.address)

        return LABEL_REF_PATTERN.sub(replace, line.text)

    def _address(self, statement: Statement, operand: Operand) -> int:
        symbol = self._symbols.lookup(
            operand.value, statement.location_of(operand), statement.line.raw
        )
        return symbol.address

    @staticmethod
    def _replace(operand: Operand, value: int) -> Operand:
        return Operand(
            OperandKind.IMMEDIATE, value, str(value), operand.start, operand.end,
            resolved=True,
        )


def render(statement: Statement) -> str:
    """
    Write a statement back as text.

    Resolved operands are spliced in at their original positions, so a
    line without label references comes back unchanged.
    """
    text = statement.text
    for operand in sorted(statement.operands, key=lambda o: o.start, reverse=True):
        if operand.resolved:
            text = text[:operand.start] + operand.text + text[operand.end:]
    return text


def has_label_refs(text: str) -> bool:
    return LABEL_REF_PATTERN.search(text) is not None
