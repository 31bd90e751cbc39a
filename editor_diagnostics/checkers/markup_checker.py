"""
HTML structural checks: tag matching, nesting rules and attributes.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set

from ..checker_base import BaseChecker
from ..issue import Category, Severity
from ..utils import MARKUP

VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
})

# Elements whose body is raw text and must not be scanned for tags.
RAW_TEXT_ELEMENTS = frozenset({'script', 'style', 'textarea', 'title'})

REQUIRED_PARENTS = {
    'li': {'ul', 'ol', 'menu'},
    'tr': {'table', 'thead', 'tbody', 'tfoot'},
    'td': {'tr'},
    'th': {'tr'},
    'thead': {'table'},
    'tbody': {'table'},
    'tfoot': {'table'},
    'caption': {'table'},
    'colgroup': {'table'},
    'option': {'select', 'optgroup', 'datalist'},
    'optgroup': {'select'},
    'dt': {'dl'},
    'dd': {'dl'},
    'figcaption': {'figure'},
    'legend': {'fieldset'},
    'summary': {'details'},
}

# Unordered: invalid whichever element is the ancestor.
INVALID_NESTING = frozenset({
    frozenset({'a'}),
    frozenset({'button'}),
    frozenset({'form'}),
    frozenset({'label'}),
    frozenset({'a', 'button'}),
})

# A paragraph is closed implicitly by any of these.
PARAGRAPH_BLOCKERS = frozenset({
    'address', 'article', 'aside', 'blockquote', 'div', 'dl', 'fieldset',
    'footer', 'form', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'header', 'hr',
    'main', 'nav', 'ol', 'p', 'pre', 'section', 'table', 'ul',
})

EMPTY_VALUE_ALLOWED = frozenset({'alt', 'value'})

_TAG = re.compile(
    r"<!--.*?(?:-->|\Z)"
    r"|<![^>]*>"
    r"|<(/?)([a-zA-Z][a-zA-Z0-9:-]*)((?:\"[^\"]*\"|'[^']*'|[^'\">])*)>",
    re.DOTALL,
)
_ATTR = re.compile(
    r"""([^\s"'<>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)


@dataclass
class OpenTag:
    """An element waiting for its closing tag."""
    name: str
    position: int
    parent_name: Optional[str] = None


class MarkupChecker(BaseChecker):
    """Stack-based tag matcher with structural rule tables."""

    language = MARKUP

    def __init__(self):
        super().__init__()
        self.open_tags: List[OpenTag] = []
        self.seen_tags: Set[str] = set()

    def _reset(self):
        self.open_tags = []
        self.seen_tags = set()

    def _run_checks(self):
        """Run HTML checks."""
        self._scan_tags()
        self._check_unclosed_tags()
        if not self.options.allow_partial:
            self._check_document_structure()

    def _scan_tags(self):
        pos = 0
        source = self.source
        while True:
            self._checkpoint()
            match = _TAG.search(source, pos)
            if not match:
                return
            pos = match.end()
            if match.group(2) is None:
                continue
            name = match.group(2).lower()
            if match.group(1):
                self._close_tag(match, name)
                continue
            self._open_tag(match, name)
            if name in RAW_TEXT_ELEMENTS and not self._is_self_closing(match, name):
                closer = re.compile(r"</%s\s*>" % re.escape(name), re.IGNORECASE).search(source, pos)
                pos = closer.start() if closer else len(source)

    def _is_self_closing(self, match, name: str) -> bool:
        return match.group(3).rstrip().endswith('/') or name in VOID_ELEMENTS

    def _open_tag(self, match, name: str):
        parent = self.open_tags[-1].name if self.open_tags else None
        self.seen_tags.add(name)
        self._check_required_parent(match, name, parent)
        self._check_nesting(match, name, parent)
        self._check_attributes(match)
        if not self._is_self_closing(match, name):
            self.open_tags.append(OpenTag(name, match.start(), parent))

    def _close_tag(self, match, name: str):
        if name in VOID_ELEMENTS:
            return
        if not self.open_tags:
            self._add_error(
                Severity.ERROR, match.start(), match.end(),
                f"Mismatched closing tag: expected no closing tag but found </{name}>",
                Category.SYNTAX, "mismatched-closing-tag",
                [self._fix(f"Remove </{name}>", match.start(), match.end())],
            )
            return
        expected = self.open_tags.pop()
        if expected.name != name:
            self._add_error(
                Severity.ERROR, match.start(), match.end(),
                f"Mismatched closing tag: expected </{expected.name}> but found </{name}>",
                Category.SYNTAX, "mismatched-closing-tag",
                [self._fix(f"Change to </{expected.name}>", match.start(2), match.end(2), expected.name)],
            )

    def _check_required_parent(self, match, name: str, parent: Optional[str]):
        allowed = REQUIRED_PARENTS.get(name)
        if allowed and parent not in allowed:
            wanted = '> or <'.join(sorted(allowed))
            self._add_error(
                Severity.ERROR, match.start(), match.end(),
                f"Tag <{name}> must be inside <{wanted}>",
                Category.SEMANTIC, "required-parent",
            )

    def _check_nesting(self, match, name: str, parent: Optional[str]):
        for ancestor in reversed(self.open_tags):
            if frozenset({ancestor.name, name}) in INVALID_NESTING:
                self._add_error(
                    Severity.ERROR, match.start(), match.end(),
                    f"Invalid nesting: <{ancestor.name}> cannot contain <{name}>",
                    Category.SEMANTIC, "invalid-nesting",
                )
                return
        if parent == 'p' and name in PARAGRAPH_BLOCKERS:
            self._add_error(
                Severity.ERROR, match.start(), match.end(),
                f"Invalid nesting: <p> cannot contain <{name}>",
                Category.SEMANTIC, "invalid-nesting",
            )

    def _check_attributes(self, match):
        """Duplicate attributes and empty quoted values."""
        offset = match.start(3)
        attrs = match.group(3)
        seen: Set[str] = set()
        for attr in _ATTR.finditer(attrs):
            attr_name = attr.group(1).lower()
            start = offset + attr.start()
            end = offset + attr.end()
            # Removing an attribute also removes the whitespace before it.
            remove_from = start
            while remove_from > offset and self.source[remove_from - 1].isspace():
                remove_from -= 1
            if attr_name in seen:
                self._add_error(
                    Severity.ERROR, start, end,
                    f"Duplicate attribute: {attr_name}",
                    Category.SYNTAX, "duplicate-attribute",
                    [self._fix(f"Remove duplicate {attr_name}", remove_from, end)],
                )
            seen.add(attr_name)
            quoted = attr.group(2) if attr.group(2) is not None else attr.group(3)
            if quoted is not None and not quoted.strip() and attr_name not in EMPTY_VALUE_ALLOWED:
                self._add_error(
                    Severity.WARNING, start, end,
                    f"Empty value for attribute: {attr_name}",
                    Category.STYLE, "empty-attribute",
                    [self._fix(f"Remove empty {attr_name}", remove_from, end)],
                )

    def _check_unclosed_tags(self):
        for tag in self.open_tags:
            self._add_error(
                Severity.ERROR, tag.position, tag.position + len(tag.name) + 1,
                f"Unclosed tag: <{tag.name}>",
                Category.SYNTAX, "unclosed-tag",
                [self._append_fix(f"Add </{tag.name}>", f"</{tag.name}>")],
            )

    def _check_document_structure(self):
        if 'html' not in self.seen_tags:
            self._add_error(
                Severity.WARNING, 0, 0, "Missing <html> root element",
                Category.STYLE, "missing-root",
            )
            return
        for section in ('head', 'body'):
            if section not in self.seen_tags:
                self._add_error(
                    Severity.WARNING, 0, 0, f"Missing <{section}> section",
                    Category.STYLE, "missing-section",
                )
