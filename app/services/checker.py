"""Diagnostics service: wraps editor_diagnostics and maps to API models."""

import asyncio
import logging
from typing import Optional

from editor_diagnostics import CheckOptions, CheckResult, CodeError, DiagnosticsEngine

from ..config import get_default_max_errors, get_default_timeout
from ..schemas import (
    CheckOptionsIn,
    CheckResponse,
    CodeErrorOut,
    FixOut,
    ProjectCheckRequest,
    ProjectCheckResponse,
    StatsOut,
    TextEditOut,
)

logger = logging.getLogger("app.services.checker")

# Buffer name in a project request -> language tag.
_PROJECT_BUFFERS = (
    ("html", "markup"),
    ("css", "style"),
    ("js", "script"),
)


def _error_to_out(e: CodeError) -> CodeErrorOut:
    return CodeErrorOut(
        message=e.message,
        severity=e.severity.value,
        category=e.category.value if e.category else None,
        start=e.start,
        end=e.end,
        line=e.line,
        column=e.column,
        rule_id=e.rule_id,
        fixes=[
            FixOut(
                description=f.description,
                edit=TextEditOut(start=f.edit.start, end=f.edit.end, text=f.edit.text),
            )
            for f in e.fixes
        ],
        context=e.context,
    )


def to_response(result: CheckResult) -> CheckResponse:
    stats = result.stats
    return CheckResponse(
        errors=[_error_to_out(e) for e in result.errors],
        stats=StatsOut(
            error_count=stats.error_count,
            warning_count=stats.warning_count,
            suggestion_count=stats.suggestion_count,
        ),
    )


class DiagnosticsService:
    """Wraps DiagnosticsEngine for use by the API."""

    def __init__(self, engine: Optional[DiagnosticsEngine] = None):
        self.engine = engine or DiagnosticsEngine()

    def build_options(self, options: Optional[CheckOptionsIn]) -> CheckOptions:
        """Request options with environment defaults for maxErrors and timeout."""
        options = options or CheckOptionsIn()
        max_errors = options.max_errors
        if max_errors is None:
            max_errors = get_default_max_errors()
        timeout = options.timeout
        if timeout is None:
            timeout = get_default_timeout()
        return CheckOptions(
            ignore_patterns=list(options.ignore_patterns),
            severity_level=options.severity_level,
            max_errors=max_errors,
            timeout=timeout,
            allow_partial=options.allow_partial,
            heuristics=options.heuristics,
        )

    async def analyze(
        self,
        code: str,
        language: Optional[str],
        filename: Optional[str] = None,
        options: Optional[CheckOptionsIn] = None,
    ) -> CheckResult:
        """Check one document snapshot off the event loop."""
        return await self.engine.check(code, language, self.build_options(options), filename)

    async def analyze_project(self, req: ProjectCheckRequest) -> ProjectCheckResponse:
        """Check every buffer present in the request concurrently."""
        options = self.build_options(req.options)
        names = []
        tasks = []
        for name, language in _PROJECT_BUFFERS:
            source = getattr(req, name)
            if source is None:
                continue
            names.append(name)
            tasks.append(self.engine.check(source, language, options))
        results = await asyncio.gather(*tasks)
        logger.debug("Checked project buffers: %s", ", ".join(names) or "none")
        return ProjectCheckResponse(**{
            name: to_response(result) for name, result in zip(names, results)
        })
