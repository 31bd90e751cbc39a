"""
Checkers package: one checker per document language.
"""

from .markup_checker import MarkupChecker
from .style_checker import StyleChecker
from .script_checker import ScriptChecker

__all__ = [
    'MarkupChecker',
    'StyleChecker',
    'ScriptChecker',
]
