# =============================================================================
# test_macros.py - Macro Expander Tests
# =============================================================================
# Tests for expanding Tinker pseudo-instructions.
#
# Test coverage includes:
#   - Expansion templates of every macro
#   - Expansion length agrees with the catalog size
#   - push/pop stack pointer balance
#   - ld windowing reproduces the literal
# =============================================================================

import pytest
from tinker_asm.assembler.lexer import Section, classify_line
from tinker_asm.assembler.macros import EXPANDERS, LD_WINDOWS, expand_macro, ld_chunks
from tinker_asm.assembler.parser import parse_statement
from tinker_asm.assembler.sizing import size_of
from tinker_asm.cpu import INSTRUCTION_SIZE, MACRO_MNEMONICS, U12_RANGE


# =============================================================================
# Helper Functions
# =============================================================================

def expand(text: str) -> list[str]:
    return expand_macro(parse_statement(classify_line(text, "<test>", 1)))


def run_register_ops(lines: list[str], register: str) -> int:
    """
    Interpret the xor/addi/subi/shftli lines that touch one register.

    Enough of Tinker to follow what ld and the stack macros do to a
    register; other instructions are ignored.
    """
    value = 0
    for line in lines:
        mnemonic, _, rest = line.partition(" ")
        operands = [op.strip() for op in rest.split(",")]
        if operands[0] != register:
            continue
        if mnemonic == "xor" and operands[1:] == [register, register]:
            value = 0
        elif mnemonic == "addi":
            value += int(operands[1])
        elif mnemonic == "subi":
            value -= int(operands[1])
        elif mnemonic == "shftli":
            value = (value << int(operands[1])) & 0xFFFFFFFFFFFFFFFF
    return value


# =============================================================================
# Template Tests
# =============================================================================

class TestTemplates:
    """Test each macro's expansion."""

    def test_in(self):
        assert expand("in r1, r2") == ["priv r1, r2, r0, 3"]

    def test_out(self):
        assert expand("out r3, r4") == ["priv r3, r4, r0, 4"]

    def test_clr(self):
        assert expand("clr r7") == ["xor r7, r7, r7"]

    def test_halt(self):
        assert expand("halt") == ["priv r0, r0, r0, 0"]

    def test_push(self):
        assert expand("push r5") == ["subi r31, 8", "mov (r31)(0), r5"]

    def test_pop(self):
        assert expand("pop r5") == ["mov r5, (r31)(0)", "addi r31, 8"]

    def test_ld_shape(self):
        lines = expand("ld r9, 1")
        assert lines[0] == "xor r9, r9, r9"
        assert len(lines) == 12
        assert sum(line.startswith("addi r9, ") for line in lines) == 6
        assert sum(line.startswith("shftli r9, ") for line in lines) == 5
        assert lines[-1] == "addi r9, 1"

    def test_expansion_appended_to_sink(self):
        out = ["existing"]
        expand_macro(parse_statement(classify_line("clr r1")), out)
        assert out == ["existing", "xor r1, r1, r1"]

    def test_every_catalog_macro_has_an_expander(self):
        assert set(EXPANDERS) == MACRO_MNEMONICS

    def test_primitive_is_not_expandable(self):
        with pytest.raises(KeyError):
            expand("addi r1, 1")


class TestExpansionSize:
    """Expansion length must agree with the size model."""

    @pytest.mark.parametrize("text", [
        "in r1, r2",
        "out r1, r2",
        "clr r1",
        "halt",
        "push r1",
        "pop r1",
        "ld r1, 0",
        "ld r1, 0xFFFFFFFFFFFFFFFF",
    ])
    def test_count_times_four_is_size(self, text):
        assert len(expand(text)) * INSTRUCTION_SIZE == size_of(Section.CODE, text)


# =============================================================================
# Behaviour Tests
# =============================================================================

class TestStackMacros:
    """Test the stack pointer effect of push and pop."""

    @pytest.mark.parametrize("reg", ["r0", "r1", "r17", "r30"])
    def test_push_pop_leaves_sp_unchanged(self, reg):
        lines = expand(f"push {reg}") + expand(f"pop {reg}")
        assert run_register_ops(lines, "r31") == 0

    def test_push_moves_sp_down(self):
        assert run_register_ops(expand("push r1"), "r31") == -8

    def test_push_stores_after_decrement(self):
        push = expand("push r1")
        assert push[0].startswith("subi r31")
        assert push[1].startswith("mov (r31)")

    def test_pop_loads_before_increment(self):
        pop = expand("pop r1")
        assert pop[0].startswith("mov r1, (r31)")
        assert pop[1].startswith("addi r31")


class TestLdWindows:
    """Test ld windowing."""

    def test_windows_cover_64_bits(self):
        assert sum(width for width, _ in LD_WINDOWS) == 64

    @pytest.mark.parametrize("value", [
        0,
        1,
        15,
        16,
        4095,
        4096,
        0x123456789ABCDEF0,
        0x8000000000000000,
        0xFFFFFFFFFFFFFFFF,
    ])
    def test_reconstructs_value(self, value):
        lines = expand(f"ld r2, {value}")
        assert run_register_ops(lines, "r2") == value

    def test_chunks(self):
        assert ld_chunks(0xFFFFFFFFFFFFFFFF) == [4095, 4095, 4095, 4095, 4095, 15]
        assert ld_chunks(0x1000) == [0, 0, 0, 0, 0x100, 0]

    def test_every_chunk_fits_u12(self):
        low, high = U12_RANGE
        for value in (0, 0xFFFFFFFFFFFFFFFF, 0xA5A5A5A5A5A5A5A5):
            assert all(low <= chunk <= high for chunk in ld_chunks(value))
