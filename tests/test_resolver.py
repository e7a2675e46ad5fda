# =============================================================================
# test_resolver.py - Symbol Table and Label Resolver Tests
# =============================================================================
# Tests for label bookkeeping and label reference resolution.
#
# Test coverage includes:
#   - Symbol definition, redefinition, lookup and freezing
#   - Absolute references (br, call, ld)
#   - PC-relative references (brr) and their range
#   - Rendering resolved statements back to text
#   - Data item substitution
# =============================================================================

import pytest
from tinker_asm.assembler.lexer import LineKind, SourceLine, classify_line
from tinker_asm.assembler.parser import parse_statement
from tinker_asm.assembler.resolver import LabelResolver, has_label_refs, render
from tinker_asm.assembler.symbols import SymbolTable
from tinker_asm.assembler.validator import validate
from tinker_asm.errors import (
    AddressOverflowError,
    AssemblerError,
    BranchRangeError,
    SourceLocation,
    UndefinedSymbolError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def make_table(**labels: int) -> SymbolTable:
    table = SymbolTable()
    for name, address in labels.items():
        table.define(name, address)
    return table


def resolve(text: str, pc: int, table: SymbolTable) -> str:
    """Parse, validate and resolve a line, returning the rendered text."""
    stmt = parse_statement(classify_line(text, "<test>", 1))
    shape = validate(stmt)
    return render(LabelResolver(table).resolve(stmt, shape, pc))


def data_line(text: str) -> SourceLine:
    return SourceLine(LineKind.CONTENT, text, text, "<test>", 1)


# =============================================================================
# Symbol Table Tests
# =============================================================================

class TestSymbolTable:
    """Test the label table."""

    def test_define_and_lookup(self):
        table = make_table(LOOP=4096)
        assert table.address_of("LOOP") == 4096
        assert "LOOP" in table
        assert len(table) == 1

    def test_names_are_case_sensitive(self):
        table = make_table(Loop=4096)
        assert "LOOP" not in table

    def test_redefinition_returns_previous(self):
        table = SymbolTable()
        first = SourceLocation("a.tk", 1, 1)
        assert table.define("X", 4096, first) is None
        previous = table.define("X", 4200, SourceLocation("a.tk", 9, 1))
        assert previous.address == 4096
        assert previous.location == first
        assert table.address_of("X") == 4200

    def test_undefined_lookup(self):
        table = make_table(COUNTER=4096)
        with pytest.raises(UndefinedSymbolError) as exc_info:
            table.lookup("COUNTR")
        assert exc_info.value.symbol == "COUNTR"
        assert "COUNTER" in exc_info.value.similar_symbols
        assert "did you mean 'COUNTER'?" in exc_info.value.hint

    def test_address_must_fit_32_bits(self):
        table = SymbolTable()
        table.define("TOP", 0xFFFFFFFF)
        with pytest.raises(AddressOverflowError):
            table.define("PAST", 0x100000000)

    def test_frozen_table_rejects_definitions(self):
        table = make_table(A=4096)
        table.freeze()
        assert table.frozen
        with pytest.raises(AssemblerError, match="after pass 1"):
            table.define("B", 4100)
        assert table.address_of("A") == 4096

    def test_clear_unfreezes(self):
        table = make_table(A=4096)
        table.freeze()
        table.clear()
        assert not table.frozen
        assert len(table) == 0

    def test_as_dict_and_iteration(self):
        table = make_table(A=4096, B=4104)
        assert table.as_dict() == {"A": 4096, "B": 4104}
        assert [symbol.name for symbol in table] == ["A", "B"]


# =============================================================================
# Resolution Tests
# =============================================================================

class TestAbsoluteReferences:
    """Test labels replaced by absolute addresses."""

    def test_br(self):
        assert resolve("br :LOOP", 4200, make_table(LOOP=4096)) == "br 4096"

    def test_call(self):
        assert resolve("call :FUNC", 4096, make_table(FUNC=8192)) == "call 8192"

    def test_ld_label(self):
        table = make_table(TABLE=4160)
        assert resolve("ld r5, :TABLE", 4096, table) == "ld r5, 4160"

    def test_absolute_ignores_pc(self):
        table = make_table(LOOP=4096)
        assert resolve("br :LOOP", 4096, table) == resolve("br :LOOP", 9000, table)

    def test_resolved_operand_is_immediate(self):
        stmt = parse_statement(classify_line("ld r1, :X"))
        resolved = LabelResolver(make_table(X=4096)).resolve(stmt, validate(stmt), 4096)
        assert resolved.operands[1].value == 4096
        assert resolved.operands[1].resolved


class TestRelativeReferences:
    """Test brr displacement from its own address."""

    def test_backward(self):
        assert resolve("brr :START", 4116, make_table(START=4096)) == "brr -20"

    def test_forward(self):
        assert resolve("brr :END", 4096, make_table(END=4108)) == "brr 12"

    def test_self(self):
        assert resolve("brr :HERE", 4096, make_table(HERE=4096)) == "brr 0"

    def test_range_limits(self):
        assert resolve("brr :T", 4096 + 2048, make_table(T=4096)) == "brr -2048"
        assert resolve("brr :T", 4096, make_table(T=4096 + 2047)) == "brr 2047"

    def test_too_far_forward(self):
        with pytest.raises(BranchRangeError) as exc_info:
            resolve("brr :FAR", 4096, make_table(FAR=4096 + 2048))
        assert exc_info.value.offset == 2048
        assert exc_info.value.is_fatal

    def test_too_far_backward(self):
        with pytest.raises(BranchRangeError):
            resolve("brr :FAR", 4096 + 2049, make_table(FAR=4096))


class TestRender:
    """Test writing statements back out."""

    def test_unchanged_without_labels(self):
        text = "mov (r31)(0),   r1"
        stmt = parse_statement(classify_line(text))
        assert render(stmt) == text
        assert resolve(text, 4096, SymbolTable()) == text

    def test_splices_in_place(self):
        assert resolve("ld   r5,:TABLE", 4096, make_table(TABLE=65536)) == "ld   r5,65536"

    def test_undefined_label(self):
        with pytest.raises(UndefinedSymbolError, match="undefined label 'NOWHERE'"):
            resolve("br :NOWHERE", 4096, make_table(SOMEWHERE=4096))

    def test_has_label_refs(self):
        assert has_label_refs("br :LOOP")
        assert not has_label_refs("addi r1, 5")


class TestDataSubstitution:
    """Test label references inside data items."""

    def test_single_reference(self):
        resolver = LabelResolver(make_table(END=4200))
        assert resolver.substitute_data(data_line(":END")) == "4200"

    def test_embedded_reference(self):
        resolver = LabelResolver(make_table(BUF=8192))
        assert resolver.substitute_data(data_line("0 :BUF")) == "0 8192"

    def test_plain_number_unchanged(self):
        resolver = LabelResolver(SymbolTable())
        assert resolver.substitute_data(data_line("12345")) == "12345"

    def test_undefined(self):
        resolver = LabelResolver(SymbolTable())
        with pytest.raises(UndefinedSymbolError):
            resolver.substitute_data(data_line(":MISSING"))
