# =============================================================================
# test_lexer.py - Line Classifier and Lexer Unit Tests
# =============================================================================
# Tests for the Tinker line classifier and operand tokenizer.
#
# Test coverage includes:
#   - Line kinds: blank, comment, directive, label, content
#   - Inline comment stripping and column bookkeeping
#   - Token types: identifiers, registers, numbers, label references
#   - Number formats: decimal, signed, hexadecimal
#   - Error conditions
# =============================================================================

import pytest
from tinker_asm.assembler.lexer import (
    Lexer,
    LineKind,
    Section,
    TokenType,
    classify_line,
    is_identifier,
)
from tinker_asm.errors import AssemblySyntaxError, DirectiveError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(text: str) -> list:
    """Classify a content line and return its tokens without EOF."""
    line = classify_line(text, "<test>", 1)
    return [t for t in Lexer(line).tokenize() if t.type is not TokenType.EOF]


# =============================================================================
# Line Classification Tests
# =============================================================================

class TestClassifyLine:
    """Test sorting source lines into kinds."""

    def test_empty_line(self):
        assert classify_line("").kind is LineKind.BLANK

    def test_whitespace_only(self):
        assert classify_line("   \t  \n").kind is LineKind.BLANK

    def test_comment(self):
        line = classify_line("  ; main loop")
        assert line.kind is LineKind.COMMENT

    def test_code_directive(self):
        line = classify_line(".code")
        assert line.kind is LineKind.DIRECTIVE
        assert line.section is Section.CODE

    def test_data_directive_indented(self):
        line = classify_line("    .data\n")
        assert line.kind is LineKind.DIRECTIVE
        assert line.section is Section.DATA

    def test_directive_with_comment(self):
        line = classify_line(".code ; program text")
        assert line.section is Section.CODE

    def test_unknown_directive(self):
        with pytest.raises(DirectiveError, match="unknown directive '.text'"):
            classify_line(".text")

    def test_label(self):
        line = classify_line(":LOOP")
        assert line.kind is LineKind.LABEL
        assert line.name == "LOOP"

    def test_label_with_trailing_comment(self):
        line = classify_line("  :main_2  ; entry point")
        assert line.kind is LineKind.LABEL
        assert line.name == "main_2"

    def test_label_needs_a_name(self):
        with pytest.raises(AssemblySyntaxError):
            classify_line(":")

    def test_label_rejects_two_words(self):
        with pytest.raises(AssemblySyntaxError, match="invalid label definition"):
            classify_line(":LOOP extra")

    def test_label_rejects_leading_digit(self):
        with pytest.raises(AssemblySyntaxError):
            classify_line(":1ABC")

    def test_content(self):
        line = classify_line("    addi r1, 5")
        assert line.kind is LineKind.CONTENT
        assert line.text == "addi r1, 5"
        assert line.indent == 4

    def test_content_strips_inline_comment(self):
        line = classify_line("\tpush r1   ; save r1")
        assert line.text == "push r1"
        assert line.raw == "\tpush r1   ; save r1"

    def test_trailing_newline_removed(self):
        line = classify_line("halt\r\n")
        assert line.raw == "halt"
        assert line.text == "halt"

    def test_location_points_into_raw_line(self):
        line = classify_line("    addi r40, 5", "prog.tk", 7)
        loc = line.location(5)
        assert (loc.filename, loc.line, loc.column) == ("prog.tk", 7, 10)
        assert line.raw[loc.column - 1:].startswith("r40")

    def test_section_names(self):
        assert str(Section.CODE) == "code"
        assert str(Section.DATA) == "data"


class TestIdentifiers:
    """Test identifier recognition."""

    @pytest.mark.parametrize("text", ["LOOP", "_start", "a1", "END_OF_DATA"])
    def test_valid(self, text):
        assert is_identifier(text)

    @pytest.mark.parametrize("text", ["", "1abc", "two words", "dash-name", ":X"])
    def test_invalid(self, text):
        assert not is_identifier(text)


# =============================================================================
# Tokenizer Tests
# =============================================================================

class TestBasicTokens:
    """Test token recognition for content lines."""

    def test_mnemonic_only(self):
        tokens = tokenize("halt")
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.IDENTIFIER
        assert tokens[0].value == "halt"

    def test_registers(self):
        tokens = tokenize("add r1, r2, r31")
        registers = [t for t in tokens if t.type is TokenType.REGISTER]
        assert [t.value for t in registers] == [1, 2, 31]

    def test_register_out_of_range_still_tokenizes(self):
        """Range checking belongs to the validator."""
        tokens = tokenize("clr r99")
        assert tokens[1].type is TokenType.REGISTER
        assert tokens[1].value == 99

    def test_r_alone_is_identifier(self):
        tokens = tokenize("br r")
        assert tokens[1].type is TokenType.IDENTIFIER

    def test_commas(self):
        tokens = tokenize("in r1, r2")
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER, TokenType.REGISTER, TokenType.COMMA, TokenType.REGISTER,
        ]

    def test_memory_operand(self):
        tokens = tokenize("mov r1, (r31)(-8)")
        assert [t.type for t in tokens][3:] == [
            TokenType.LPAREN, TokenType.REGISTER, TokenType.RPAREN,
            TokenType.LPAREN, TokenType.NUMBER, TokenType.RPAREN,
        ]
        assert tokens[7].value == -8

    def test_label_ref(self):
        tokens = tokenize("brr :LOOP")
        assert tokens[1].type is TokenType.LABEL_REF
        assert tokens[1].value == "LOOP"
        assert tokens[1].text == ":LOOP"

    def test_token_positions(self):
        tokens = tokenize("addi r1, 5")
        assert (tokens[1].start, tokens[1].end) == (5, 7)
        assert (tokens[3].start, tokens[3].end) == (9, 10)

    def test_stream_ends_with_eof(self):
        line = classify_line("return")
        tokens = list(Lexer(line).tokenize())
        assert tokens[-1].type is TokenType.EOF


class TestNumbers:
    """Test number literal formats."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("4095", 4095),
        ("-2048", -2048),
        ("+7", 7),
        ("0xFF", 255),
        ("0X1000", 4096),
        ("-0x10", -16),
    ])
    def test_values(self, text, value):
        tokens = tokenize(f"mov r1, {text}")
        assert tokens[3].type is TokenType.NUMBER
        assert tokens[3].value == value
        assert tokens[3].text == text

    def test_hex_without_digits(self):
        with pytest.raises(AssemblySyntaxError, match="no digits"):
            tokenize("addi r1, 0x")

    def test_number_with_letters(self):
        with pytest.raises(AssemblySyntaxError, match="invalid number '12ab'"):
            tokenize("addi r1, 12ab")


class TestErrors:
    """Test tokenizer error conditions."""

    def test_unexpected_character(self):
        with pytest.raises(AssemblySyntaxError, match="unexpected character '#'"):
            tokenize("addi r1, #5")

    def test_colon_without_name(self):
        with pytest.raises(AssemblySyntaxError, match="expected label name"):
            tokenize("brr : LOOP")

    def test_error_column(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize("  addi r1, $5")
        assert exc_info.value.location.column == 12
