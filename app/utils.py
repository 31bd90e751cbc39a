"""Utility functions for the API."""

from fastapi import HTTPException

from editor_diagnostics import CheckResult

from .schemas import CheckRequest
from .services import DiagnosticsService

diagnostics_svc = DiagnosticsService()


async def run_check(req: CheckRequest) -> CheckResult:
    """Run the engine for one request. An unrecognised tag yields an empty result."""
    if not req.language and not req.filename:
        raise HTTPException(
            400,
            "Provide a language (markup, style, script) or a filename to infer it from.",
        )
    return await diagnostics_svc.analyze(
        req.code,
        req.language,
        filename=req.filename,
        options=req.options,
    )
