"""
Base checker class for per-language diagnostics.
"""

from typing import List, Optional

from .issue import Category, CheckOptions, CodeError, Fix, Severity, TextEdit
from .utils import Deadline, DeadlineExceeded, LineIndex


class BaseChecker:
    """Base class for all language checkers.

    The dispatcher builds a fresh instance per call, so every stack and frame
    a subclass keeps on ``self`` is private to that call. Subclasses clear
    that state in _reset() so a reused instance starts clean too.
    """

    language: str = ""

    def __init__(self):
        self.errors: List[CodeError] = []
        self.source: str = ""
        self.options: CheckOptions = CheckOptions()
        self.deadline: Deadline = Deadline()
        self._line_index: Optional[LineIndex] = None

    def check(
        self,
        source: str,
        options: Optional[CheckOptions] = None,
        deadline: Optional[Deadline] = None,
    ) -> List[CodeError]:
        """Run checks on the given source and return errors in generation order."""
        self.source = source
        self.options = options or CheckOptions()
        self.deadline = deadline or Deadline()
        self.errors = []
        self._line_index = LineIndex(source)
        self._reset()
        try:
            self._run_checks()
        except DeadlineExceeded:
            pass
        return self.errors

    def _reset(self):
        """Clear per-document state kept by a subclass."""
        pass

    def _run_checks(self):
        """Override in subclasses to implement specific checks."""
        pass

    def _checkpoint(self):
        """Unwind the current check if the time budget is spent."""
        if self.deadline.expired:
            raise DeadlineExceeded()

    def _add_error(
        self,
        severity: Severity,
        start: int,
        end: int,
        message: str,
        category: Category,
        rule_id: str,
        fixes: Optional[List[Fix]] = None,
    ) -> CodeError:
        """Add an error, clamping its range into the document."""
        length = len(self.source)
        start = max(0, min(start, length))
        end = max(start, min(end, length))
        line, column = self._line_index.position(start)
        error = CodeError(
            message=message,
            severity=severity,
            start=start,
            end=end,
            line=line,
            column=column,
            category=category,
            rule_id=rule_id,
            fixes=list(fixes or []),
            context=self._line_index.line_text(self.source, line).strip() or None,
        )
        self.errors.append(error)
        return error

    def _fix(self, description: str, start: int, end: int, text: str = "") -> Fix:
        return Fix(description, TextEdit(start, end, text))

    def _append_fix(self, description: str, text: str) -> Fix:
        """Fix that appends text at end of document."""
        end = len(self.source)
        return Fix(description, TextEdit(end, end, text))
