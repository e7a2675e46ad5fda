"""
Tinker Assembly Language Parser
===============================

This module converts the token stream of a content line into a
Statement: a mnemonic and a list of typed operands.

Operand Types
-------------
| Syntax    | OperandKind | Example    |
|-----------|-------------|------------|
| rN        | REGISTER    | r5         |
| integer   | IMMEDIATE   | -12, 0xFF  |
| (rN)(L)   | MEMORY      | (r31)(-8)  |
| :NAME     | LABEL       | :LOOP      |

Operands are separated by commas, whitespace, or both, so
'in r1, r2' and 'in r1 r2' parse the same way.

The parser does not decide whether operands suit the mnemonic; that is
the validator's job. It only rejects text that cannot be read as
operands at all. When that happens on a macro line the error is raised
as a (recoverable) MacroError rather than a fatal syntax error.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

from tinker_asm.errors import AssemblySyntaxError, MacroError, SourceLocation
from tinker_asm.assembler.lexer import Lexer, LineKind, SourceLine, Token, TokenType
from tinker_asm.cpu import InstructionInfo, get_instruction_info, is_macro


# =============================================================================
# Operand and Statement Data Classes
# =============================================================================

class OperandKind(Enum):
    """Syntactic kind of an operand."""
    REGISTER = auto()
    IMMEDIATE = auto()
    MEMORY = auto()
    LABEL = auto()


@dataclass(frozen=True)
class Operand:
    """
    A parsed operand.

    Attributes:
        kind: The OperandKind
        value: Register index (REGISTER, MEMORY base), integer (IMMEDIATE)
               or label name (LABEL)
        text: Source text of the operand
        start: Offset of the operand within the line text
        end: Offset one past the operand
        offset: Displacement of a MEMORY operand
        offset_start: Offset of the displacement within the line text
        resolved: True when a LABEL has been replaced by its value
    """
    kind: OperandKind
    value: int | str
    text: str
    start: int
    end: int
    offset: Optional[int] = None
    offset_start: Optional[int] = None
    resolved: bool = False

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Statement:
    """
    An instruction or macro invocation.

    Attributes:
        mnemonic: Instruction name
        operands: Parsed operands in source order
        line: The SourceLine it came from
    """
    mnemonic: str
    operands: tuple[Operand, ...]
    line: SourceLine

    @property
    def text(self) -> str:
        return self.line.text

    @property
    def info(self) -> Optional[InstructionInfo]:
        return get_instruction_info(self.mnemonic)

    @property
    def is_macro(self) -> bool:
        return is_macro(self.mnemonic)

    @property
    def location(self) -> SourceLocation:
        return self.line.location()

    def location_of(self, operand: Operand) -> SourceLocation:
        return self.line.location(operand.start)

    def with_operands(self, operands: tuple[Operand, ...]) -> "Statement":
        return replace(self, operands=operands)


def mnemonic_of(text: str) -> str:
    """Return the leading whitespace-delimited token of a content line."""
    parts = text.split(None, 1)
    return parts[0] if parts else ""


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses a content line into a Statement.

    Usage:
        statement = Parser(source_line).parse()
    """

    def __init__(self, line: SourceLine):
        if line.kind is not LineKind.CONTENT:
            raise ValueError(f"cannot parse a {line.kind.name} line as a statement")
        self.line = line
        self._tokens: list[Token] = []
        self._index = 0

    def parse(self) -> Statement:
        """
        Parse the line.

        Raises:
            AssemblySyntaxError: If the operands cannot be read
            MacroError: Same condition on a macro line
        """
        mnemonic = mnemonic_of(self.line.text)
        try:
            self._tokens = list(Lexer(self.line).tokenize())
            first = self._advance()
            if first.type is not TokenType.IDENTIFIER:
                raise self._error(f"expected instruction, found '{first.text}'", first)
            operands = self._parse_operands()
        except AssemblySyntaxError as e:
            if is_macro(mnemonic):
                raise MacroError(
                    f"malformed operands for '{mnemonic}' macro: {e.message}",
                    e.location, hint=e.hint, source_line=e.source_line,
                ) from e
            raise
        return Statement(mnemonic, tuple(operands), self.line)

    # =========================================================================
    # Token Access
    # =========================================================================

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.type is not TokenType.EOF:
            self._index += 1
        return token

    def _expect(self, token_type: TokenType, what: str) -> Token:
        token = self._advance()
        if token.type is not token_type:
            found = token.text or "end of line"
            raise self._error(f"expected {what}, found '{found}'", token)
        return token

    def _error(self, message: str, token: Token) -> AssemblySyntaxError:
        return AssemblySyntaxError(
            message, self.line.location(token.start), source_line=self.line.raw
        )

    # =========================================================================
    # Operands
    # =========================================================================

    def _parse_operands(self) -> list[Operand]:
        operands: list[Operand] = []
        while self._peek().type is not TokenType.EOF:
            if operands and self._peek().type is TokenType.COMMA:
                self._advance()
                if self._peek().type is TokenType.EOF:
                    raise self._error("expected operand after ','", self._peek())
            operands.append(self._parse_operand())
        return operands

    def _parse_operand(self) -> Operand:
        token = self._advance()

        if token.type is TokenType.REGISTER:
            return Operand(OperandKind.REGISTER, token.value, token.text, token.start, token.end)

        if token.type is TokenType.NUMBER:
            return Operand(OperandKind.IMMEDIATE, token.value, token.text, token.start, token.end)

        if token.type is TokenType.LABEL_REF:
            return Operand(OperandKind.LABEL, token.value, token.text, token.start, token.end)

        if token.type is TokenType.LPAREN:
            return self._parse_memory(token)

        raise self._error(f"expected operand, found '{token.text}'", token)

    def _parse_memory(self, lparen: Token) -> Operand:
        """Parse '(rN)(L)' after its opening parenthesis."""
        base = self._expect(TokenType.REGISTER, "base register")
        self._expect(TokenType.RPAREN, "')'")
        self._expect(TokenType.LPAREN, "'(' before memory offset")
        offset = self._expect(TokenType.NUMBER, "memory offset")
        close = self._expect(TokenType.RPAREN, "')'")
        text = self.line.text[lparen.start:close.end]
        return Operand(
            OperandKind.MEMORY, base.value, text, lparen.start, close.end,
            offset=offset.value, offset_start=offset.start,
        )


def parse_statement(line: SourceLine) -> Statement:
    """Convenience wrapper around Parser(line).parse()."""
    return Parser(line).parse()
