"""
JavaScript checks: esprima parse, scope resolution and text heuristics.
"""

import re
from typing import Optional, Set, Tuple

import esprima
from esprima.error_handler import Error as EsprimaError
from esprima.nodes import Node

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import SCRIPT
from .script_heuristics import run_heuristics
from .script_scope import ScopeResolver

_MODULE_SYNTAX = re.compile(r"^\s*(?:import\s*[\w{*'\"]|export\s)", re.MULTILINE)


class ScriptChecker(BaseChecker):
    """Tree-based scope checks plus raw-text heuristic passes."""

    language = SCRIPT

    def __init__(self):
        super().__init__()
        self.tree: Optional[Node] = None
        self.is_module = False

    def _reset(self):
        self.tree = None
        self.is_module = False

    def _run_checks(self):
        """Run JavaScript checks."""
        self.is_module = bool(_MODULE_SYNTAX.search(self.source))
        self.tree = self._parse()
        if self.tree is not None:
            ScopeResolver(self).run(self.tree)
        if self.options.heuristics:
            self._checkpoint()
            self._check_heuristics()

    def _parse(self) -> Optional[Node]:
        """Parse the source; a failure becomes the single syntax error of this call."""
        parse = esprima.parseModule if self.is_module else esprima.parseScript
        try:
            return parse(self.source, {'range': True, 'loc': True})
        except EsprimaError as e:
            index = getattr(e, 'index', None)
            if index is None:
                index = len(self.source)
            self._add_error(
                Severity.ERROR, index, index + 1,
                f"Syntax error: {getattr(e, 'description', None) or e}",
                Category.SYNTAX, "syntax-error",
            )
            return None

    def _check_heuristics(self):
        # A text finding on exactly the range of a tree finding repeats it.
        reported: Set[Tuple[int, int]] = {(e.start, e.end) for e in self.errors}
        for finding in run_heuristics(self.source, self.is_module):
            if (finding.start, finding.end) in reported:
                continue
            reported.add((finding.start, finding.end))
            self._add_error(
                finding.severity, finding.start, finding.end, finding.message,
                finding.category, finding.rule_id, finding.fixes,
            )
