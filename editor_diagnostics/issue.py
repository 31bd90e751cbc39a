"""
Diagnostic data models shared by every checker and the dispatcher.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class Severity(Enum):
    """Diagnostic severity levels, most severe first."""
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.SUGGESTION: 2,
}


class Category(Enum):
    """Advisory grouping used for statistics and UI."""
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    STYLE = "style"
    TYPE = "type"


@dataclass(frozen=True)
class TextEdit:
    """Replace source[start:end] with text."""
    start: int
    end: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.start, "to": self.end, "text": self.text}


@dataclass(frozen=True)
class Fix:
    """A data-only description of an edit that resolves a diagnostic."""
    description: str
    edit: TextEdit

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "edit": self.edit.to_dict()}


@dataclass
class CodeError:
    """One reported issue anchored to the character range [start, end)."""
    message: str
    severity: Severity
    start: int
    end: int
    line: int
    column: Optional[int] = None
    category: Optional[Category] = None
    rule_id: Optional[str] = None
    fixes: List[Fix] = field(default_factory=list)
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: camelCase keys and from/to offsets."""
        data: Dict[str, Any] = {
            "message": self.message,
            "severity": self.severity.value,
            "from": self.start,
            "to": self.end,
            "line": self.line,
        }
        if self.column is not None:
            data["column"] = self.column
        if self.category is not None:
            data["category"] = self.category.value
        if self.rule_id is not None:
            data["ruleId"] = self.rule_id
        if self.fixes:
            data["fixes"] = [f.to_dict() for f in self.fixes]
        if self.context is not None:
            data["context"] = self.context
        return data


@dataclass(frozen=True)
class CheckStats:
    """Per-severity counts over a final error list."""
    error_count: int = 0
    warning_count: int = 0
    suggestion_count: int = 0

    @classmethod
    def from_errors(cls, errors: List[CodeError]) -> "CheckStats":
        return cls(
            error_count=sum(1 for e in errors if e.severity == Severity.ERROR),
            warning_count=sum(1 for e in errors if e.severity == Severity.WARNING),
            suggestion_count=sum(1 for e in errors if e.severity == Severity.SUGGESTION),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "suggestionCount": self.suggestion_count,
        }


@dataclass(frozen=True)
class CheckResult:
    """Filtered diagnostics for one document snapshot.

    Build instances with ``CheckResult.from_errors`` so that ``stats`` always
    describes exactly the ``errors`` carried.
    """
    errors: List[CodeError] = field(default_factory=list)
    stats: CheckStats = field(default_factory=CheckStats)

    @classmethod
    def from_errors(cls, errors: List[CodeError]) -> "CheckResult":
        errors = list(errors)
        return cls(errors=errors, stats=CheckStats.from_errors(errors))

    @classmethod
    def empty(cls) -> "CheckResult":
        return cls()

    def map(self, fn: Callable[[CodeError], Any]) -> List[Any]:
        """Apply fn to each error, e.g. to build an editor adapter's own diagnostic type."""
        return [fn(e) for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "stats": self.stats.to_dict(),
        }


@dataclass
class CheckOptions:
    """Caller options for one check.

    severity_level keeps diagnostics at least as severe as the named level;
    None or "all" keeps everything. timeout is in seconds.
    """
    ignore_patterns: List[str] = field(default_factory=list)
    severity_level: Optional[str] = None
    max_errors: Optional[int] = None
    timeout: Optional[float] = None
    allow_partial: bool = False
    heuristics: bool = True
