"""Check routes."""

from typing import Optional, Union

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from editor_diagnostics import ReportGenerator

from ..schemas import CheckRequest, CheckResponse, ErrorDetail, ProjectCheckRequest, ProjectCheckResponse
from ..services import to_response
from ..utils import diagnostics_svc, run_check

router = APIRouter()


@router.post(
    "/check",
    response_model=CheckResponse,
    responses={400: {"model": ErrorDetail}},
)
async def check(
    req: CheckRequest,
    format: Optional[str] = Query(default=None, description="Set to 'text' for a plain-text report"),
) -> Union[CheckResponse, PlainTextResponse]:
    """Diagnostics for one document snapshot."""
    result = await run_check(req)
    if format == "text":
        return PlainTextResponse(ReportGenerator.generate_text_report(result, title=req.filename))
    return to_response(result)


@router.post("/check/project", response_model=ProjectCheckResponse)
async def check_project(req: ProjectCheckRequest) -> ProjectCheckResponse:
    """Diagnostics for the editor's html, css and js buffers."""
    return await diagnostics_svc.analyze_project(req)
