"""
Tinker Assembly Language Lexer
==============================

This module turns raw source lines into the pieces the assembler works
with. It has two layers:

1. **Line classification** (`classify_line`): every source line is one
   of blank, comment, section directive, label definition or content
   (an instruction in a code section, an item in a data section).

2. **Operand tokenization** (`Lexer`): a content line is broken into
   tokens - identifiers, registers, numbers, label references and the
   delimiters of memory operands.

Line Grammar
------------
| Line          | Kind      | Example         |
|---------------|-----------|-----------------|
| (empty)       | BLANK     |                 |
| ; text        | COMMENT   | ; main loop     |
| .code / .data | DIRECTIVE | .code           |
| :NAME         | LABEL     | :LOOP           |
| anything else | CONTENT   | addi r1, 5      |

Inline comments (';' after content) are stripped from content lines.

Token Types
-----------
- IDENTIFIER: mnemonics and stray words
- REGISTER: r0 .. r31 (range checked later, by the validator)
- NUMBER: decimal (-12, 4095) or hexadecimal (0xFF)
- LABEL_REF: ':' immediately followed by an identifier (:LOOP)
- COMMA, LPAREN, RPAREN
- EOF

Example
-------
>>> from tinker_asm.assembler.lexer import Lexer, classify_line
>>> line = classify_line("    mov r1, (r31)(-8)", "example.tka", 1)
>>> [t.type.name for t in Lexer(line).tokenize()]
['IDENTIFIER', 'REGISTER', 'COMMA', 'LPAREN', 'REGISTER', 'RPAREN', 'LPAREN', 'NUMBER', 'RPAREN', 'EOF']
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from tinker_asm.errors import AssemblySyntaxError, DirectiveError, SourceLocation


# =============================================================================
# Line Classification
# =============================================================================

class LineKind(Enum):
    """Categories of source line."""
    BLANK = auto()
    COMMENT = auto()
    DIRECTIVE = auto()
    LABEL = auto()
    CONTENT = auto()


class Section(Enum):
    """Assembly section that decides how content lines are sized."""
    NONE = auto()
    CODE = auto()
    DATA = auto()

    def __str__(self) -> str:
        return self.name.lower()


DIRECTIVES = {
    "code": Section.CODE,
    "data": Section.DATA,
}

IDENT_START = string.ascii_letters + "_"
IDENT_CHARS = string.ascii_letters + string.digits + "_"

COMMENT_CHAR = ";"
LABEL_MARKER = ":"
DIRECTIVE_MARKER = "."


def is_identifier(text: str) -> bool:
    """Check if text is a valid label or mnemonic name."""
    return bool(text) and text[0] in IDENT_START and all(c in IDENT_CHARS for c in text)


@dataclass(frozen=True)
class SourceLine:
    """
    A classified source line.

    Attributes:
        kind: The LineKind of the line
        text: Trimmed content (inline comments removed for CONTENT)
        raw: The original line without its trailing newline
        filename: Source file name
        number: Line number (1-indexed)
        indent: Offset of `text` within `raw`, used for error columns
        name: Label name for LABEL lines
        section: Target section for DIRECTIVE lines
    """
    kind: LineKind
    text: str
    raw: str
    filename: str
    number: int
    indent: int = 0
    name: Optional[str] = None
    section: Optional[Section] = None

    def location(self, offset: int = 0) -> SourceLocation:
        """Location of a character `offset` positions into `text`."""
        return SourceLocation(self.filename, self.number, self.indent + offset + 1)


def classify_line(raw: str, filename: str = "<input>", number: int = 1) -> SourceLine:
    """
    Categorize one source line.

    Args:
        raw: The line as read, with or without its newline
        filename: Source file name for error locations
        number: Line number (1-indexed)

    Returns:
        The classified SourceLine

    Raises:
        DirectiveError: For a '.' line other than .code/.data
        AssemblySyntaxError: For a ':' line that is not a lone label name
    """
    raw = raw.rstrip("\r\n")
    text = raw.strip()
    indent = len(raw) - len(raw.lstrip())

    def make(kind: LineKind, **extra) -> SourceLine:
        return SourceLine(kind, text, raw, filename, number, indent, **extra)

    if not text:
        return make(LineKind.BLANK)

    if text.startswith(COMMENT_CHAR):
        return make(LineKind.COMMENT)

    if text.startswith(DIRECTIVE_MARKER):
        keyword = text[1:].split(COMMENT_CHAR, 1)[0].strip()
        section = DIRECTIVES.get(keyword)
        if section is None:
            raise DirectiveError(
                f"unknown directive '{text.split()[0]}'",
                SourceLocation(filename, number, indent + 1),
                hint="valid directives are .code and .data",
                source_line=raw,
            )
        return make(LineKind.DIRECTIVE, section=section)

    if text.startswith(LABEL_MARKER):
        name = text[1:].split(COMMENT_CHAR, 1)[0].strip()
        if not is_identifier(name):
            raise AssemblySyntaxError(
                f"invalid label definition '{text}'",
                SourceLocation(filename, number, indent + 2),
                hint="a label line is ':' followed by a single name, e.g. ':LOOP'",
                source_line=raw,
            )
        return make(LineKind.LABEL, name=name)

    content = text.split(COMMENT_CHAR, 1)[0].rstrip()
    return SourceLine(LineKind.CONTENT, content, raw, filename, number, indent)


# =============================================================================
# Operand Tokens
# =============================================================================

class TokenType(Enum):
    """Token types for a content line."""
    IDENTIFIER = auto()  # Mnemonics
    REGISTER = auto()    # rN
    NUMBER = auto()      # Integer literal
    LABEL_REF = auto()   # :NAME
    COMMA = auto()       # ,
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    EOF = auto()         # End of line


@dataclass(frozen=True)
class Token:
    """
    A single token from a content line.

    Attributes:
        type: The TokenType classification
        value: Register index, integer value, or name (str)
        start: Offset of the first character within the line text
        end: Offset one past the last character
        text: The exact source text of the token
    """
    type: TokenType
    value: str | int | None
    start: int
    end: int
    text: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.start})"
        return f"Token({self.type.name}, {self.start})"


class Lexer:
    """
    Tokenizes the text of a content line.

    Usage:
        lexer = Lexer(source_line)
        tokens = list(lexer.tokenize())

    The token stream always ends with an EOF token.
    """

    SINGLE_CHAR_TOKENS = {
        ",": TokenType.COMMA,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
    }

    def __init__(self, line: SourceLine):
        self.line = line
        self.source = line.text
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the line text.

        Yields:
            Token objects representing each lexical element

        Raises:
            AssemblySyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            if self._peek() in " \t":
                self._pos += 1
                continue
            yield self._scan_token()

        yield Token(TokenType.EOF, None, self._pos, self._pos, "")

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _take_while(self, chars: str) -> str:
        start = self._pos
        # '' in chars is True, so stop explicitly at the end
        while not self._at_end() and self._peek() in chars:
            self._pos += 1
        return self.source[start:self._pos]

    def _error(self, message: str, offset: Optional[int] = None,
               hint: Optional[str] = None) -> AssemblySyntaxError:
        position = self._pos if offset is None else offset
        return AssemblySyntaxError(
            message, self.line.location(position), hint=hint, source_line=self.line.raw
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start = self._pos
        char = self._peek()

        if char in self.SINGLE_CHAR_TOKENS:
            self._pos += 1
            return Token(self.SINGLE_CHAR_TOKENS[char], None, start, self._pos, char)

        if char and char in IDENT_START:
            return self._scan_word(start)

        if char.isdigit() or (char in "+-" and self._peek(1).isdigit()):
            return self._scan_number(start)

        if char == LABEL_MARKER:
            return self._scan_label_ref(start)

        raise self._error(f"unexpected character '{char}'")

    def _scan_word(self, start: int) -> Token:
        """Scan an identifier, recognizing register names (r0, r17, ...)."""
        word = self._take_while(IDENT_CHARS)
        if len(word) > 1 and word[0] == "r" and word[1:].isdigit():
            return Token(TokenType.REGISTER, int(word[1:]), start, self._pos, word)
        return Token(TokenType.IDENTIFIER, word, start, self._pos, word)

    def _scan_number(self, start: int) -> Token:
        """Scan a decimal or 0x-prefixed hexadecimal literal with optional sign."""
        sign = 1
        if self._peek() in "+-":
            sign = -1 if self._peek() == "-" else 1
            self._pos += 1

        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._pos += 2
            digits = self._take_while(string.hexdigits)
            if not digits:
                raise self._error("hexadecimal literal has no digits", start)
            value = int(digits, 16)
        else:
            value = int(self._take_while(string.digits))

        if self._peek() and self._peek() in IDENT_CHARS:
            self._take_while(IDENT_CHARS)
            raise self._error(
                f"invalid number '{self.source[start:self._pos]}'", start
            )

        return Token(TokenType.NUMBER, sign * value, start, self._pos, self.source[start:self._pos])

    def _scan_label_ref(self, start: int) -> Token:
        """Scan ':' immediately followed by a label name."""
        self._pos += 1
        if not (self._peek() and self._peek() in IDENT_START):
            raise self._error(
                "expected label name after ':'", start,
                hint="label references are written ':NAME' with no space",
            )
        name = self._take_while(IDENT_CHARS)
        return Token(TokenType.LABEL_REF, name, start, self._pos, self.source[start:self._pos])
