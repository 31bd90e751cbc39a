"""
Text-level JavaScript checks that run whether or not the source parses.

These scan raw text, so matches inside string literals and comments are
reported too.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Set, Tuple

from ..issue import Category, Fix, Severity, TextEdit
from ..utils import brace_depths
from .script_scope import AMBIENT_GLOBALS

_IDENT = r"[A-Za-z_$][\w$]*"
_PARAMS = r"\((?:[^()]|\([^()]*\))*\)"

_LOOSE_EQUALITY = re.compile(r"(?<![=!<>])(==|!=)(?!=)")
_AWAIT = re.compile(r"\bawait\b")
_ASYNC_ARROW_INLINE = re.compile(r"\basync\b[^;{}]*=>")
_ARROW_HEADER = re.compile(rf"(\basync\s*)?(?:{_PARAMS}|{_IDENT})\s*=>\s*$")
_FUNCTION_HEADER = re.compile(rf"(\basync\s+)?function\b\s*\*?\s*(?:{_IDENT})?\s*{_PARAMS}\s*$")
_METHOD_HEADER = re.compile(
    rf"(?:^|[\s,;{{}}])(async\s+)?(?:static\s+)?(?:[gs]et\s+)?\*?\s*({_IDENT})\s*{_PARAMS}\s*$"
)
_CONTROL_KEYWORDS = frozenset({'if', 'for', 'while', 'switch', 'catch', 'with', 'function'})

_LEXICAL_DECLARATION = re.compile(rf"[{{}}]|\b(let|const|class)\s+({_IDENT})")
_LOOP_HEAD = re.compile(r"\bfor\s*(?:await\s*)?\(\s*$")
_DECLARED_NAME = re.compile(rf"\b(?:var|let|const|function\*?|class)\s+({_IDENT})")
_DESTRUCTURED_NAMES = re.compile(r"\b(?:var|let|const)\s*([{\[][^=;]*?[}\]])\s*=")
_DESTRUCTURING = re.compile(rf"\b(?:var|let|const)\s*[{{\[][^=;]*?[}}\]]\s*=\s*({_IDENT})")
_NOT_A_SOURCE = frozenset({
    'await', 'new', 'this', 'typeof', 'void', 'null', 'true', 'false',
    'function', 'class', 'async', 'yield', 'super',
})


@dataclass
class Finding:
    """A heuristic diagnostic before it is anchored into a CodeError."""
    severity: Severity
    start: int
    end: int
    message: str
    category: Category
    rule_id: str
    fixes: List[Fix] = field(default_factory=list)


def find_loose_equality(source: str) -> Iterator[Finding]:
    for match in _LOOSE_EQUALITY.finditer(source):
        op = match.group(1)
        strict = op + '='
        yield Finding(
            Severity.SUGGESTION, match.start(), match.end(),
            f"Use strict equality ({strict}) instead of loose equality ({op})",
            Category.STYLE, "strict-equality",
            [Fix(f"Replace {op} with {strict}", TextEdit(match.start(), match.end(), strict))],
        )


def _classify_block(header: str) -> str:
    """'async', 'function' or 'block' for the text leading up to a '{'."""
    for pattern in (_ARROW_HEADER, _FUNCTION_HEADER):
        match = pattern.search(header)
        if match:
            return 'async' if match.group(1) else 'function'
    match = _METHOD_HEADER.search(header)
    if match and match.group(2) not in _CONTROL_KEYWORDS:
        return 'async' if match.group(1) else 'function'
    return 'block'


def find_await_outside_async(source: str, is_module: bool = False) -> Iterator[Finding]:
    awaits = {m.start(): m.end() for m in _AWAIT.finditer(source)}
    if not awaits:
        return
    frames: List[str] = []
    boundary = 0
    for i, ch in enumerate(source):
        if ch == '{':
            frames.append(_classify_block(source[boundary:i]))
            boundary = i + 1
        elif ch == '}':
            if frames:
                frames.pop()
            boundary = i + 1
        elif ch == ';':
            boundary = i + 1
        elif i in awaits:
            if _ASYNC_ARROW_INLINE.search(source[boundary:i]):
                continue
            enclosing = next((kind for kind in reversed(frames) if kind != 'block'), None)
            if enclosing == 'async' or (enclosing is None and is_module):
                continue
            yield Finding(
                Severity.ERROR, i, awaits[i],
                "'await' is only valid inside async functions",
                Category.SEMANTIC, "await-outside-async",
            )


def find_duplicate_lexical(source: str) -> Iterator[Finding]:
    """let/const/class names declared twice between the same pair of braces."""
    frames = [0]
    next_frame = 1
    seen: Set[Tuple[int, str]] = set()
    for match in _LEXICAL_DECLARATION.finditer(source):
        token = match.group(0)
        if token == '{':
            frames.append(next_frame)
            next_frame += 1
            continue
        if token == '}':
            if len(frames) > 1:
                frames.pop()
            continue
        if _LOOP_HEAD.search(source[max(0, match.start() - 20):match.start()]):
            continue
        key = (frames[-1], match.group(2))
        if key in seen:
            yield Finding(
                Severity.ERROR, match.start(2), match.end(2),
                f"Duplicate declaration: {match.group(2)}",
                Category.SEMANTIC, "duplicate-declaration",
            )
        seen.add(key)


def find_undeclared_destructuring(source: str) -> Iterator[Finding]:
    """Top-level destructuring whose source name is never declared at top level."""
    depths = brace_depths(source)
    declared: Set[str] = set(AMBIENT_GLOBALS)
    for match in _DECLARED_NAME.finditer(source):
        if depths[match.start()] == 0:
            declared.add(match.group(1))
    for match in _DESTRUCTURED_NAMES.finditer(source):
        if depths[match.start()] == 0:
            declared.update(re.findall(rf"(?<![\w$.]){_IDENT}(?!\s*:)", match.group(1)))
    for match in _DESTRUCTURING.finditer(source):
        name = match.group(1)
        if depths[match.start()] != 0 or name in declared or name in _NOT_A_SOURCE:
            continue
        yield Finding(
            Severity.ERROR, match.start(1), match.end(1),
            f"Destructuring from undeclared variable: {name}",
            Category.SEMANTIC, "undeclared-destructuring-source",
        )


def run_heuristics(source: str, is_module: bool = False) -> Iterator[Finding]:
    yield from find_loose_equality(source)
    yield from find_await_outside_async(source, is_module)
    yield from find_duplicate_lexical(source)
    yield from find_undeclared_destructuring(source)
