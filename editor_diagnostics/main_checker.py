"""
Dispatcher that selects a language checker and post-processes its output.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Type

from .checker_base import BaseChecker
from .checkers import MarkupChecker, ScriptChecker, StyleChecker
from .issue import CheckOptions, CheckResult, CodeError, Severity
from .utils import MARKUP, SCRIPT, STYLE, Deadline, detect_language, normalize_language

logger = logging.getLogger("editor_diagnostics.engine")


def filter_errors(errors: List[CodeError], options: CheckOptions) -> List[CodeError]:
    """Ignore patterns, then severity level, then max_errors truncation.

    Pure and idempotent: filtering an already filtered list with the same
    options returns it unchanged.
    """
    patterns = [p for p in options.ignore_patterns if p]
    kept = [e for e in errors if not any(p in e.message for p in patterns)]

    level = (options.severity_level or "").strip().lower()
    if level and level != 'all':
        try:
            threshold = Severity(level)
        except ValueError:
            logger.warning("Unknown severity level %r; not filtering by severity", level)
        else:
            kept = [e for e in kept if e.severity.rank <= threshold.rank]

    if options.max_errors is not None:
        kept = kept[:max(0, options.max_errors)]
    return kept


class DiagnosticsEngine:
    """Main entry point: one fresh checker instance per call."""

    def __init__(self, checkers: Optional[Dict[str, Type[BaseChecker]]] = None):
        self.checkers: Dict[str, Type[BaseChecker]] = {
            MARKUP: MarkupChecker,
            STYLE: StyleChecker,
            SCRIPT: ScriptChecker,
        }
        if checkers:
            self.checkers.update(checkers)

    def resolve_language(self, language: Optional[str], filename: Optional[str] = None) -> Optional[str]:
        """Explicit tag first; the file extension is only a fallback."""
        resolved = normalize_language(language)
        if resolved is None and not language and filename:
            resolved = normalize_language(detect_language(Path(filename)))
        return resolved

    def check_source(
        self,
        source: str,
        language: Optional[str],
        options: Optional[CheckOptions] = None,
        filename: Optional[str] = None,
    ) -> CheckResult:
        """Check a document snapshot. Never raises for malformed input."""
        options = options or CheckOptions()
        resolved = self.resolve_language(language, filename)
        checker_cls = self.checkers.get(resolved) if resolved else None
        if checker_cls is None:
            logger.debug("No checker for language %r", language)
            return CheckResult.empty()

        deadline = Deadline(options.timeout)
        checker = checker_cls()
        try:
            errors = checker.check(source, options, deadline)
        except Exception:
            logger.exception("%s checker failed; returning partial results", resolved)
            errors = checker.errors
        if deadline.expired:
            logger.warning(
                "%s check exceeded %.3fs timeout; returning %d partial result(s)",
                resolved, options.timeout, len(errors),
            )

        result = CheckResult.from_errors(filter_errors(errors, options))
        logger.debug(
            "%s check: %d raw, %d reported", resolved, len(errors), len(result.errors)
        )
        return result

    async def check(
        self,
        source: str,
        language: Optional[str],
        options: Optional[CheckOptions] = None,
        filename: Optional[str] = None,
    ) -> CheckResult:
        """Awaitable check; the scan runs off the event loop."""
        return await asyncio.to_thread(self.check_source, source, language, options, filename)


_default_engine = DiagnosticsEngine()


def check_source(
    source: str,
    language: Optional[str],
    options: Optional[CheckOptions] = None,
    filename: Optional[str] = None,
) -> CheckResult:
    return _default_engine.check_source(source, language, options, filename)


async def check(
    source: str,
    language: Optional[str],
    options: Optional[CheckOptions] = None,
    filename: Optional[str] = None,
) -> CheckResult:
    return await _default_engine.check(source, language, options, filename)
