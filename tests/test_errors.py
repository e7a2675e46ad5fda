# =============================================================================
# test_errors.py - Error Hierarchy and Diagnostic Collection Tests
# =============================================================================
# Tests for error formatting, severities and the ErrorCollector.
# =============================================================================

import pytest
from tinker_asm.errors import (
    AssemblerError,
    ErrorCollector,
    MacroError,
    RegisterRangeError,
    Severity,
    SourceLocation,
    TinkerError,
    TooManyErrors,
    UndefinedSymbolError,
)


LOC = SourceLocation("prog.tk", 4, 10)


class TestFormatting:
    """Test error message layout."""

    def test_location_caret_and_hint(self):
        error = RegisterRangeError("r40", LOC, source_line="    addi r40, 5")
        lines = str(error).splitlines()
        assert lines[0] == "prog.tk:4:10: error: register 'r40' is out of range"
        assert lines[1] == "        addi r40, 5"
        assert lines[2].index("^") == 4 + 10 - 1
        assert lines[3] == "hint: registers are r0 through r31"

    def test_without_location(self):
        assert str(AssemblerError("boom")) == "error: boom"

    def test_hierarchy(self):
        assert issubclass(AssemblerError, TinkerError)
        assert issubclass(MacroError, AssemblerError)


class TestSeverity:
    """Test fatal and recoverable severities."""

    def test_default_is_fatal(self):
        assert AssemblerError("x").is_fatal
        assert RegisterRangeError("r99").severity is Severity.FATAL

    def test_macro_error_is_recoverable(self):
        assert MacroError("bad push").severity is Severity.ERROR

    def test_downgraded_undefined_symbol(self):
        error = UndefinedSymbolError("X", LOC, similar_symbols=["Y"])
        softer = error.downgraded()
        assert error.is_fatal
        assert not softer.is_fatal
        assert softer.symbol == "X"
        assert softer.location == LOC


class TestErrorCollector:
    """Test diagnostic collection and reporting."""

    def test_fatal_counts(self):
        collector = ErrorCollector()
        collector.add(RegisterRangeError("r40", LOC))
        assert collector.has_errors()
        assert collector.error_count() == 1

    def test_recoverable_does_not_count(self):
        collector = ErrorCollector()
        collector.add(MacroError("bad push", LOC))
        assert not collector.has_errors()
        assert len(collector.recoverable()) == 1

    def test_warnings(self):
        collector = ErrorCollector()
        collector.add_warning("label 'X' redefined", LOC)
        assert collector.warning_count() == 1
        assert collector.warnings()[0].message == "prog.tk:4:10: warning: label 'X' redefined"
        assert not collector.has_errors()

    def test_report_summary(self):
        collector = ErrorCollector()
        collector.add(MacroError("bad push", LOC))
        collector.add_warning("w1")
        collector.add_warning("w2")
        assert collector.report().splitlines()[-1] == "1 error, 2 warnings"

    def test_sink_receives_everything(self):
        received = []
        collector = ErrorCollector(sink=lambda severity, message: received.append(severity))
        collector.add(RegisterRangeError("r40"))
        collector.add(MacroError("bad"))
        collector.add_warning("careful")
        assert received == [Severity.FATAL, Severity.ERROR, Severity.WARNING]

    def test_too_many_errors(self):
        collector = ErrorCollector(max_errors=2)
        collector.add(AssemblerError("one"))
        with pytest.raises(TooManyErrors):
            collector.add(AssemblerError("two"))

    def test_recoverable_errors_not_limited(self):
        collector = ErrorCollector(max_errors=1)
        for _ in range(5):
            collector.add(MacroError("bad"))
        assert len(collector.recoverable()) == 5

    def test_clear(self):
        collector = ErrorCollector()
        collector.add(AssemblerError("one"))
        collector.add_warning("w")
        collector.clear()
        assert not collector.has_errors()
        assert collector.diagnostics == []
