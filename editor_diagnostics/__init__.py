"""
Live diagnostics for HTML, CSS and JavaScript documents.
"""

from .issue import (
    Category,
    CheckOptions,
    CheckResult,
    CheckStats,
    CodeError,
    Fix,
    Severity,
    TextEdit,
)
from .main_checker import DiagnosticsEngine, check, check_source, filter_errors
from .reporter import ReportGenerator

__all__ = [
    'Category',
    'CheckOptions',
    'CheckResult',
    'CheckStats',
    'CodeError',
    'DiagnosticsEngine',
    'Fix',
    'ReportGenerator',
    'Severity',
    'TextEdit',
    'check',
    'check_source',
    'filter_errors',
]
