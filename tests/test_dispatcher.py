"""Tests for language dispatch and result post-processing."""

import logging

import pytest

from editor_diagnostics import (
    CheckOptions,
    CheckResult,
    CheckStats,
    CodeError,
    DiagnosticsEngine,
    Severity,
    check,
    check_source,
    filter_errors,
)
from editor_diagnostics.checker_base import BaseChecker

MIXED_SCRIPT = "let unused = 1;\nlet b = 2;\nif (b == 2) {}\nconsole.log(missing);\n"


def error(message: str, severity: Severity) -> CodeError:
    return CodeError(message=message, severity=severity, start=0, end=0, line=1, column=0)


def assert_stats_match(result: CheckResult):
    assert result.stats == CheckStats.from_errors(result.errors)
    assert result.stats.error_count + result.stats.warning_count + result.stats.suggestion_count == len(result.errors)


class TestLanguageResolution:
    """Explicit tag first, extension as fallback."""

    @pytest.mark.parametrize("language", ["markup", "html", "HTML"])
    def test_markup_aliases(self, engine, language):
        result = engine.check_source("<div><span></div>", language)
        assert any(e.rule_id == "mismatched-closing-tag" for e in result.errors)

    @pytest.mark.parametrize("language", ["style", "css", "scss"])
    def test_style_aliases(self, engine, language):
        assert engine.check_source("}", language).stats.error_count == 1

    @pytest.mark.parametrize("language", ["script", "js", "javascript"])
    def test_script_aliases(self, engine, language):
        assert engine.check_source("let x = 1;", language).stats.suggestion_count == 1

    def test_filename_is_a_fallback(self, engine):
        result = engine.check_source("$a: 1px; b { width: $c; }", None, filename="theme.scss")
        assert [e.message for e in result.errors] == ["Undefined variable: $c"]

    def test_explicit_tag_wins_over_extension(self, engine, partial):
        result = engine.check_source("let x = 1;", "markup", partial, filename="app.js")
        assert result.errors == []

    def test_unknown_language_yields_empty_result(self, engine):
        result = engine.check_source("print('hi')", "python")
        assert result.errors == []
        assert result.stats == CheckStats()

    def test_unknown_tag_does_not_sniff_extension(self, engine):
        assert engine.check_source("}", "python", filename="a.css").errors == []

    def test_empty_document(self, engine, partial):
        for language in ("markup", "style", "script"):
            assert engine.check_source("", language, partial).errors == []


class TestFiltering:
    """ignore patterns, then severity, then truncation, then counting."""

    def test_ignore_patterns_match_substrings(self, engine):
        options = CheckOptions(ignore_patterns=["Unused"])
        result = engine.check_source(MIXED_SCRIPT, "script", options)
        assert not any("Unused" in e.message for e in result.errors)
        assert result.errors

    def test_empty_ignore_pattern_is_ignored(self, engine):
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(ignore_patterns=[""]))
        assert result.errors == engine.check_source(MIXED_SCRIPT, "script").errors

    @pytest.mark.parametrize("level, allowed", [
        ("error", {Severity.ERROR}),
        ("warning", {Severity.ERROR, Severity.WARNING}),
        ("suggestion", {Severity.ERROR, Severity.WARNING, Severity.SUGGESTION}),
        ("all", {Severity.ERROR, Severity.WARNING, Severity.SUGGESTION}),
    ])
    def test_severity_level(self, engine, level, allowed):
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(severity_level=level))
        assert {e.severity for e in result.errors} <= allowed
        assert_stats_match(result)

    def test_severity_error_drops_suggestions(self, engine):
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(severity_level="error"))
        assert result.stats.suggestion_count == 0
        assert result.stats.error_count == 1

    @pytest.mark.parametrize("level", ["Error", " ERROR "])
    def test_severity_level_is_case_and_space_insensitive(self, engine, level):
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(severity_level=level))
        assert result.stats.error_count == 1
        assert result.stats.suggestion_count == 0

    def test_unknown_severity_level_keeps_everything(self, caplog):
        errors = [error("a", Severity.ERROR), error("b", Severity.SUGGESTION)]
        with caplog.at_level(logging.WARNING, logger="editor_diagnostics.engine"):
            kept = filter_errors(errors, CheckOptions(severity_level="fatal"))
        assert kept == errors
        assert "Unknown severity level" in caplog.text

    def test_max_errors_truncates_before_counting(self, engine):
        full = engine.check_source(MIXED_SCRIPT, "script")
        assert len(full.errors) == 3
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(max_errors=2))
        assert result.errors == full.errors[:2]
        assert_stats_match(result)

    def test_max_errors_zero(self, engine):
        result = engine.check_source(MIXED_SCRIPT, "script", CheckOptions(max_errors=0))
        assert result.errors == []
        assert result.stats == CheckStats()

    def test_filtering_is_idempotent(self):
        errors = [
            error("Unused variable: a", Severity.SUGGESTION),
            error("Undefined variable: b", Severity.ERROR),
            error("Duplicate property: c", Severity.WARNING),
            error("Undefined variable: d", Severity.ERROR),
        ]
        options = CheckOptions(ignore_patterns=["Duplicate"], severity_level="warning", max_errors=1)
        once = filter_errors(errors, options)
        assert once == [errors[1]]
        assert filter_errors(once, options) == once


class TestResults:
    """Result invariants and per-call isolation."""

    @pytest.mark.parametrize("source, language", [
        ("<div><li>x</li><p><div></div></p>", "markup"),
        ("a { color: bluee; color: red !important !important; } }", "style"),
        (MIXED_SCRIPT, "script"),
    ])
    def test_stats_equal_severity_partition(self, engine, source, language):
        assert_stats_match(engine.check_source(source, language))

    def test_calls_do_not_influence_each_other(self, engine):
        first = engine.check_source("let a = 1;", "script")
        second = engine.check_source("console.log(1);", "script")
        again = engine.check_source("let a = 1;", "script")
        assert second.errors == []
        assert first.errors == again.errors

    def test_parse_failure_does_not_leak_into_next_call(self, engine):
        broken = engine.check_source("function (", "script")
        assert any(e.rule_id == "syntax-error" for e in broken.errors)
        clean = engine.check_source("let x = 1;", "script")
        assert [e.message for e in clean.errors] == ["Unused variable: x"]

    def test_to_dict_wire_form(self, engine):
        data = engine.check_source("let x = 1;", "script").to_dict()
        assert data["stats"] == {"errorCount": 0, "warningCount": 0, "suggestionCount": 1}
        (entry,) = data["errors"]
        assert entry["from"] == 4 and entry["to"] == 5
        assert entry["ruleId"] == "unused-variable"
        assert entry["severity"] == "suggestion"

    def test_map_reshapes_each_error(self, engine):
        result = engine.check_source("}}", "style")
        assert result.map(lambda e: (e.start, e.message)) == [
            (0, "Unexpected closing brace"),
            (1, "Unexpected closing brace"),
        ]

    def test_module_level_helper(self):
        assert check_source("}", "css").stats.error_count == 1


class TestBudgetAndFailures:
    """Timeouts and checker failures never raise out of the engine."""

    def test_expired_deadline_returns_partial_results(self, engine):
        result = engine.check_source("}}} a { color: bluee; }", "style", CheckOptions(timeout=0.0))
        # Brace scanning finishes before the first checkpoint.
        assert [e.message for e in result.errors] == ["Unexpected closing brace"] * 3
        assert_stats_match(result)

    def test_checker_exception_returns_what_was_collected(self, caplog):
        class Exploding(BaseChecker):
            language = "markup"

            def _run_checks(self):
                self._add_error(Severity.WARNING, 0, 1, "first", None, "first")
                raise RuntimeError("boom")

        engine = DiagnosticsEngine(checkers={"markup": Exploding})
        with caplog.at_level(logging.ERROR, logger="editor_diagnostics.engine"):
            result = engine.check_source("<p>", "markup")
        assert [e.message for e in result.errors] == ["first"]
        assert "checker failed" in caplog.text


class TestAsync:
    """The awaitable entry points."""

    @pytest.mark.asyncio
    async def test_check_runs_off_the_event_loop(self):
        result = await check("let x = 1;", "script")
        assert [e.message for e in result.errors] == ["Unused variable: x"]

    @pytest.mark.asyncio
    async def test_engine_check_with_options(self, engine):
        result = await engine.check(MIXED_SCRIPT, "js", CheckOptions(severity_level="error"))
        assert [e.message for e in result.errors] == ["Undefined variable: missing"]
