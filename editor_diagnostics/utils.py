"""
Utility functions for the diagnostics engine.
"""

import bisect
import re
import time
from pathlib import Path
from typing import List, Optional, Tuple

MARKUP = "markup"
STYLE = "style"
SCRIPT = "script"

# Tags accepted from callers; anything else is an unknown language.
LANGUAGE_ALIASES = {
    "markup": MARKUP,
    "html": MARKUP,
    "htm": MARKUP,
    "style": STYLE,
    "css": STYLE,
    "scss": STYLE,
    "sass": STYLE,
    "less": STYLE,
    "script": SCRIPT,
    "js": SCRIPT,
    "javascript": SCRIPT,
    "mjs": SCRIPT,
}


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Map a caller-supplied language tag to markup/style/script, or None."""
    if not language:
        return None
    return LANGUAGE_ALIASES.get(language.strip().lower())


def detect_language(file_path: Path) -> str:
    """Detect document language from file extension."""
    ext = file_path.suffix.lower()
    lang_map = {
        '.html': MARKUP,
        '.htm': MARKUP,
        '.xhtml': MARKUP,
        '.css': STYLE,
        '.scss': STYLE,
        '.sass': STYLE,
        '.less': STYLE,
        '.js': SCRIPT,
        '.mjs': SCRIPT,
        '.cjs': SCRIPT,
    }
    return lang_map.get(ext, 'unknown')


class LineIndex:
    """Offset to (line, column) lookup. Lines are 1-based, columns 0-based."""

    def __init__(self, source: str):
        self._starts = [0]
        for match in re.finditer(r"\n", source):
            self._starts.append(match.end())

    def position(self, offset: int) -> Tuple[int, int]:
        row = bisect.bisect_right(self._starts, offset) - 1
        return row + 1, offset - self._starts[row]

    def line_text(self, source: str, line: int) -> str:
        start = self._starts[line - 1]
        end = source.find("\n", start)
        return source[start:] if end == -1 else source[start:end]


class Deadline:
    """Cooperative time budget for one check. timeout None means unbounded."""

    def __init__(self, timeout: Optional[float] = None):
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at


class DeadlineExceeded(Exception):
    """Raised inside a checker to unwind once its deadline has passed."""


def blank(text: str) -> str:
    """Replace every character except newlines with a space."""
    return re.sub(r"[^\n]", " ", text)


def mask_css_comments_and_strings(source: str) -> str:
    """Blank out /* */ comments and string contents, keeping offsets and quotes.

    Unterminated comments are blanked through end of document.
    """
    out: List[str] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            stop = n if end == -1 else end + 2
            out.append(blank(source[i:stop]))
            i = stop
        elif ch in ('"', "'"):
            j = i + 1
            while j < n and source[j] != ch and source[j] != "\n":
                j += 2 if source[j] == "\\" else 1
            j = min(j, n - 1)
            out.append(ch)
            out.append(blank(source[i + 1:j]))
            if j > i:
                out.append(source[j] if source[j] in (ch, "\n") else " ")
            i = j + 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)[:n]


def brace_depths(source: str) -> List[int]:
    """Brace depth before each character (unbalanced closers clamp at 0)."""
    depths = []
    depth = 0
    for ch in source:
        depths.append(depth)
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
    return depths
