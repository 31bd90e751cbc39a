"""
Plain-text reports for check results.
"""

from typing import Dict, List, Optional

from .issue import CheckResult, CodeError, Severity

_SECTIONS = (
    (Severity.ERROR, "ERRORS"),
    (Severity.WARNING, "WARNINGS"),
    (Severity.SUGGESTION, "SUGGESTIONS"),
)


class ReportGenerator:
    """Generate reports from check results."""

    @staticmethod
    def generate_text_report(result: CheckResult, title: Optional[str] = None) -> str:
        """Generate a text report grouped by severity."""
        name = title or "document"
        if not result.errors:
            return f"\n✓ No issues found in {name}\n"

        report = [f"\n{'='*80}"]
        report.append(f"Diagnostics Report: {name}")
        report.append(f"{'='*80}\n")

        for severity, heading in _SECTIONS:
            errors = [e for e in result.errors if e.severity == severity]
            if not errors:
                continue
            report.append(f"{heading} ({len(errors)}):")
            report.append("-" * 80)
            for error in errors:
                report.extend(ReportGenerator._error_lines(error))

        stats = result.stats
        report.append(
            f"\nSummary: {stats.error_count} errors, {stats.warning_count} warnings, "
            f"{stats.suggestion_count} suggestions"
        )
        report.append("="*80)

        return "\n".join(report)

    @staticmethod
    def _error_lines(error: CodeError) -> List[str]:
        lines = [f"  Line {error.line}, col {error.column}: {error.message}"]
        if error.context:
            lines.append(f"    Code: {error.context}")
        for fix in error.fixes:
            lines.append(f"    Fix: {fix.description}")
        category = error.category.value if error.category else "-"
        lines.append(f"    Category: {category} ({error.rule_id or '-'})\n")
        return lines

    @staticmethod
    def generate_summary(result: CheckResult) -> Dict[str, int]:
        """Generate a summary count by rule."""
        summary: Dict[str, int] = {}
        for error in result.errors:
            key = error.rule_id or "unknown"
            summary[key] = summary.get(key, 0) + 1
        return summary
