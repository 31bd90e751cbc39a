"""
CSS / SCSS checks: braces, comments, declaration values and preprocessor symbols.
"""

import difflib
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import STYLE, mask_css_comments_and_strings

# Returns None when the value is valid, else a suggested replacement.
Validator = Callable[[str], Optional[str]]

GLOBAL_KEYWORDS = frozenset({'inherit', 'initial', 'unset', 'revert', 'revert-layer'})

NAMED_COLORS = frozenset({
    'aqua', 'aquamarine', 'azure', 'beige', 'black', 'blue', 'blueviolet', 'brown',
    'chartreuse', 'chocolate', 'coral', 'cornflowerblue', 'crimson', 'cyan',
    'darkblue', 'darkgray', 'darkgreen', 'darkgrey', 'darkorange', 'darkred',
    'deeppink', 'deepskyblue', 'dimgray', 'dodgerblue', 'firebrick', 'forestgreen',
    'fuchsia', 'gold', 'goldenrod', 'gray', 'green', 'greenyellow', 'grey',
    'hotpink', 'indianred', 'indigo', 'ivory', 'khaki', 'lavender', 'lightblue',
    'lightgray', 'lightgreen', 'lightgrey', 'lightpink', 'lightyellow', 'lime',
    'limegreen', 'magenta', 'maroon', 'midnightblue', 'navy', 'olive', 'orange',
    'orangered', 'orchid', 'pink', 'plum', 'purple', 'rebeccapurple', 'red',
    'royalblue', 'salmon', 'seagreen', 'sienna', 'silver', 'skyblue', 'slategray',
    'snow', 'steelblue', 'tan', 'teal', 'tomato', 'turquoise', 'violet', 'wheat',
    'white', 'whitesmoke', 'yellow', 'yellowgreen',
})
COLOR_KEYWORDS = NAMED_COLORS | GLOBAL_KEYWORDS | {'transparent', 'currentcolor'}

LENGTH_KEYWORDS = GLOBAL_KEYWORDS | {
    'auto', 'none', 'normal', 'fit-content', 'max-content', 'min-content',
    'xx-small', 'x-small', 'small', 'medium', 'large', 'x-large', 'xx-large',
    'xxx-large', 'smaller', 'larger', 'thin', 'thick',
}

_NUM = r"[+-]?(?:\d+\.?\d*|\.\d+)"
_COMPONENT = rf"{_NUM}(?:%|deg|rad|grad|turn)?"
_COLOR = re.compile(
    r"#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})"
    rf"|(?:rgb|hsl)a?\(\s*{_COMPONENT}(?:\s*,\s*{_COMPONENT}){{2,3}}\s*\)"
    rf"|(?:rgb|hsl)a?\(\s*{_COMPONENT}(?:\s+{_COMPONENT}){{2}}(?:\s*/\s*{_COMPONENT})?\s*\)",
    re.IGNORECASE,
)
_LENGTH = re.compile(
    rf"{_NUM}(?:px|em|rem|%|vh|vw|vmin|vmax|ch|ex|pt|pc|cm|mm|in|q|fr)",
    re.IGNORECASE,
)
_BARE_NUMBER = re.compile(rf"{_NUM}")

# Values built from these are resolved later and are not validated.
_DYNAMIC_VALUE = re.compile(r"\$|@|#\{|\b(?:var|calc|env|attr|min|max|clamp)\(", re.IGNORECASE)

_ILLEGAL_VALUE_CHAR = re.compile(r"[^A-Za-z0-9_\s#\-.%(),!@/'\"+*$:=?&~]")
_IMPORTANT = re.compile(r"!\s*important", re.IGNORECASE)
_DECLARATION = re.compile(r"\s*(\$?-{0,2}[A-Za-z_][\w-]*)\s*:(.*)$", re.DOTALL)


def validate_color(value: str) -> Optional[str]:
    if value.lower() in COLOR_KEYWORDS or _COLOR.fullmatch(value):
        return None
    close = difflib.get_close_matches(value.lower(), sorted(NAMED_COLORS), n=1, cutoff=0.6)
    return close[0] if close else 'initial'


def validate_length(value: str) -> Optional[str]:
    tokens = value.split()
    fixed = []
    for token in tokens:
        if token == '0' or token.lower() in LENGTH_KEYWORDS or _LENGTH.fullmatch(token):
            fixed.append(token)
        elif _BARE_NUMBER.fullmatch(token):
            fixed.append(token + 'px')
        else:
            fixed.append('initial')
    return None if fixed == tokens else ' '.join(fixed)


_COLOR_PROPERTIES = (
    'color', 'background-color', 'border-color', 'border-top-color',
    'border-right-color', 'border-bottom-color', 'border-left-color',
    'outline-color', 'text-decoration-color', 'caret-color', 'column-rule-color',
    'fill', 'stroke',
)
_LENGTH_PROPERTIES = (
    'width', 'height', 'min-width', 'max-width', 'min-height', 'max-height',
    'margin', 'margin-top', 'margin-right', 'margin-bottom', 'margin-left',
    'padding', 'padding-top', 'padding-right', 'padding-bottom', 'padding-left',
    'top', 'right', 'bottom', 'left', 'font-size', 'border-width', 'border-radius',
    'gap', 'row-gap', 'column-gap', 'outline-width', 'text-indent',
)

DEFAULT_VALIDATORS: Dict[str, Validator] = {}
DEFAULT_VALIDATORS.update({prop: validate_color for prop in _COLOR_PROPERTIES})
DEFAULT_VALIDATORS.update({prop: validate_length for prop in _LENGTH_PROPERTIES})


@dataclass
class BracketFrame:
    """An opening brace waiting for its partner."""
    char: str
    position: int


class StyleChecker(BaseChecker):
    """Brace/comment tracking plus declaration and preprocessor checks."""

    language = STYLE

    def __init__(self, validators: Optional[Dict[str, Validator]] = None):
        super().__init__()
        self.validators = dict(DEFAULT_VALIDATORS)
        if validators:
            self.validators.update(validators)
        self.brackets: List[BracketFrame] = []
        self.masked = ""

    def _reset(self):
        self.brackets = []
        self.masked = ""

    def _run_checks(self):
        """Run CSS checks."""
        self.masked = mask_css_comments_and_strings(self.source)
        self._check_comments()
        self._check_braces()
        self._checkpoint()
        self._check_declarations()
        self._checkpoint()
        self._check_variables()
        self._check_mixins()

    def _check_comments(self):
        """Track nested /* */ markers; report what is still open at the end."""
        openers: List[int] = []
        source = self.source
        i = 0
        while i < len(source) - 1:
            pair = source[i:i + 2]
            if pair == '/*':
                openers.append(i)
                i += 2
            elif pair == '*/' and openers:
                openers.pop()
                i += 2
            else:
                i += 1
        if not openers:
            return
        depth = len(openers)
        message = f"Unclosed nested comment ({depth} levels)" if depth > 1 else "Unclosed comment"
        self._add_error(
            Severity.WARNING, openers[0], len(source), message,
            Category.SYNTAX, "unclosed-comment",
            [self._append_fix("Close comment", "*/" * depth)],
        )

    def _check_braces(self):
        for i, ch in enumerate(self.masked):
            if ch == '{':
                self.brackets.append(BracketFrame(ch, i))
            elif ch == '}':
                if self.brackets:
                    self.brackets.pop()
                    continue
                # Depth is already back at zero; keep scanning.
                self._add_error(
                    Severity.ERROR, i, i + 1, "Unexpected closing brace",
                    Category.SYNTAX, "unexpected-closing-brace",
                    [self._fix("Remove brace", i, i + 1)],
                )
        if self.brackets:
            first = self.brackets[0]
            self._add_error(
                Severity.ERROR, first.position, first.position + 1, "Unclosed block",
                Category.SYNTAX, "unclosed-block",
                [self._append_fix("Close block", "}" * len(self.brackets))],
            )

    def _check_declarations(self):
        """One linear pass; pieces ending in '{' are selectors or at-rule preludes.

        Duplicate properties are tracked across the whole document, not per block.
        """
        masked = self.masked
        seen: Dict[str, Tuple[int, int]] = {}
        seg_start = 0
        for i, ch in enumerate(masked):
            if ch not in '{};':
                continue
            if ch != '{':
                end = i + 1 if ch == ';' else i
                self._check_declaration(seg_start, i, end, seen)
            seg_start = i + 1
        if seg_start < len(masked):
            self._check_declaration(seg_start, len(masked), len(masked), seen)

    def _check_declaration(self, start: int, stop: int, end: int, seen: Dict[str, Tuple[int, int]]):
        piece = self.masked[start:stop]
        if piece.lstrip().startswith(('@', '&')):
            return
        match = _DECLARATION.match(piece)
        if not match:
            return
        prop = match.group(1).lower()
        prop_start = start + match.start(1)
        if prop.startswith('$'):
            return

        if prop in seen:
            earlier_start, earlier_end = seen[prop]
            self._add_error(
                Severity.WARNING, prop_start, prop_start + len(prop),
                f"Duplicate property: {prop}",
                Category.STYLE, "duplicate-property",
                [self._fix("Remove earlier declaration", earlier_start, earlier_end)],
            )
        seen[prop] = (start + len(piece) - len(piece.lstrip()), end)

        raw = match.group(2)
        lead = len(raw) - len(raw.lstrip())
        value_start = start + match.start(2) + lead
        value_end = start + match.start(2) + len(raw.rstrip())
        if value_end <= value_start or prop.startswith('--'):
            return
        value = self.source[value_start:value_end]
        masked_value = self.masked[value_start:value_end]

        illegal = _ILLEGAL_VALUE_CHAR.search(masked_value)
        if illegal:
            at = value_start + illegal.start()
            self._add_error(
                Severity.ERROR, at, at + 1,
                f"Invalid character '{illegal.group(0)}' in value of property: {prop}",
                Category.SYNTAX, "invalid-value-character",
                [self._fix("Remove character", at, at + 1)],
            )

        if len(_IMPORTANT.findall(masked_value)) > 1:
            deduped = _IMPORTANT.sub('', value).rstrip() + ' !important'
            self._add_error(
                Severity.WARNING, value_start, value_end,
                f"Multiple !important in property: {prop}",
                Category.STYLE, "duplicate-important",
                [self._fix("Keep a single !important", value_start, value_end, deduped)],
            )

        validator = self.validators.get(prop)
        if validator is None or _DYNAMIC_VALUE.search(masked_value) or illegal:
            return
        important = _IMPORTANT.search(value)
        core = (value[:important.start()] if important else value).rstrip()
        if not core:
            return
        suggestion = validator(core)
        if suggestion is not None:
            self._add_error(
                Severity.ERROR, value_start, value_start + len(core),
                f"Invalid value '{core}' for property '{prop}'",
                Category.TYPE, "invalid-property-value",
                [self._fix(f"Replace with '{suggestion}'", value_start, value_start + len(core), suggestion)],
            )

    def _check_variables(self):
        """Whole-document lookup: every $name used needs a $name: somewhere."""
        masked = self.masked
        defined: Set[str] = {m.group(1) for m in re.finditer(r"\$([\w-]+)\s*:", masked)}
        for params in re.finditer(r"@(?:mixin|function)\s+[\w-]+\s*\(([^)]*)\)", masked):
            defined.update(re.findall(r"\$([\w-]+)", params.group(1)))
        for loop in re.finditer(r"@(?:each|for)\s+([^{]*?)\s+(?:in|from)\b", masked):
            defined.update(re.findall(r"\$([\w-]+)", loop.group(1)))
        for use in re.finditer(r"\$([\w-]+)", masked):
            name = use.group(1)
            if name in defined:
                continue
            self._add_error(
                Severity.ERROR, use.start(), use.end(),
                f"Undefined variable: ${name}",
                Category.SEMANTIC, "undefined-preprocessor-variable",
            )

    def _check_mixins(self):
        masked = self.masked
        mixins = set(re.findall(r"@mixin\s+([\w-]+)", masked))
        for include in re.finditer(r"@include\s+([\w-]+)", masked):
            if include.group(1) not in mixins:
                self._add_error(
                    Severity.ERROR, include.start(), include.end(),
                    f"Undefined mixin: {include.group(1)}",
                    Category.SEMANTIC, "undefined-mixin",
                )
