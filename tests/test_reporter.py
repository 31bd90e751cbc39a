"""Tests for the plain-text report."""

from editor_diagnostics import CheckOptions, ReportGenerator, check_source


class TestTextReport:
    """ReportGenerator.generate_text_report"""

    def test_clean_result(self):
        result = check_source("a { color: red; }", "style")
        report = ReportGenerator.generate_text_report(result, title="site.css")
        assert "No issues found in site.css" in report

    def test_sections_and_summary(self):
        source = "let unused = 1;\nconsole.log(missing);\n"
        report = ReportGenerator.generate_text_report(check_source(source, "script"))
        assert "ERRORS (1):" in report
        assert "SUGGESTIONS (1):" in report
        assert "WARNINGS" not in report
        assert "Line 2, col 12: Undefined variable: missing" in report
        assert "Summary: 1 errors, 0 warnings, 1 suggestions" in report

    def test_fix_descriptions_are_listed(self):
        result = check_source("<div><span></div>", "html", CheckOptions(allow_partial=True))
        report = ReportGenerator.generate_text_report(result)
        assert "Fix: Change to </span>" in report
        assert "Fix: Add </div>" in report


class TestSummary:
    """ReportGenerator.generate_summary"""

    def test_counts_by_rule(self):
        result = check_source("}}} {", "css")
        assert ReportGenerator.generate_summary(result) == {
            "unexpected-closing-brace": 3,
            "unclosed-block": 1,
        }
