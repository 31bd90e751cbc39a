"""Pydantic request/response models."""

from typing import List, Optional

from pydantic import BaseModel, Field


# --- Request ---


class CheckOptionsIn(BaseModel):
    """Per-request filtering and budget options."""

    ignore_patterns: List[str] = Field(
        default_factory=list,
        alias="ignorePatterns",
        description="Drop errors whose message contains any of these substrings",
    )
    severity_level: Optional[str] = Field(
        default=None,
        alias="severityLevel",
        description="error, warning, suggestion or all",
    )
    max_errors: Optional[int] = Field(default=None, alias="maxErrors", ge=0)
    timeout: Optional[float] = Field(default=None, gt=0, description="Seconds allowed for the check")
    allow_partial: bool = Field(
        default=False,
        alias="allowPartial",
        description="Document is a fragment; skip whole-document structure checks",
    )
    heuristics: bool = Field(default=True, description="Run text heuristics for scripts")

    model_config = {"populate_by_name": True}


class CheckRequest(BaseModel):
    """Request body for a single document snapshot."""

    code: str = Field(..., description="Document text")
    language: Optional[str] = Field(default=None, description="markup, style, script or an alias (html, css, js)")
    filename: Optional[str] = Field(default=None, description="Used for extension sniffing when language is absent")
    options: Optional[CheckOptionsIn] = None


class ProjectCheckRequest(BaseModel):
    """The editor's three buffers."""

    html: Optional[str] = None
    css: Optional[str] = None
    js: Optional[str] = None
    options: Optional[CheckOptionsIn] = None


# --- Error (response) ---


class TextEditOut(BaseModel):
    start: int = Field(..., alias="from")
    end: int = Field(..., alias="to")
    text: str

    model_config = {"populate_by_name": True}


class FixOut(BaseModel):
    description: str
    edit: TextEditOut


class CodeErrorOut(BaseModel):
    """Single diagnostic."""

    message: str
    severity: str = Field(..., description="error, warning or suggestion")
    category: Optional[str] = None
    start: int = Field(..., alias="from")
    end: int = Field(..., alias="to")
    line: int
    column: Optional[int] = None
    rule_id: Optional[str] = Field(default=None, alias="ruleId")
    fixes: List[FixOut] = Field(default_factory=list)
    context: Optional[str] = None

    model_config = {"populate_by_name": True}


class StatsOut(BaseModel):
    error_count: int = Field(0, alias="errorCount")
    warning_count: int = Field(0, alias="warningCount")
    suggestion_count: int = Field(0, alias="suggestionCount")

    model_config = {"populate_by_name": True}


# --- Responses ---


class CheckResponse(BaseModel):
    """Response for POST /check."""

    errors: List[CodeErrorOut] = Field(default_factory=list)
    stats: StatsOut = Field(default_factory=StatsOut)


class ProjectCheckResponse(BaseModel):
    """Response for POST /check/project. Buffers not sent are null."""

    html: Optional[CheckResponse] = None
    css: Optional[CheckResponse] = None
    js: Optional[CheckResponse] = None


class ErrorDetail(BaseModel):
    """Error response detail."""

    detail: str = Field(..., description="Error message")
