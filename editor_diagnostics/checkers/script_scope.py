"""
Scope-stack name resolution over an esprima syntax tree.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from esprima.nodes import Node

from ..issue import Category, Severity

# Host/runtime globals that never need a declaration.
AMBIENT_GLOBALS = frozenset({
    'arguments', 'undefined', 'NaN', 'Infinity', 'globalThis', 'eval',
    'console', 'window', 'document', 'navigator', 'location', 'history',
    'screen', 'alert', 'confirm', 'prompt', 'fetch', 'localStorage',
    'sessionStorage', 'setTimeout', 'clearTimeout', 'setInterval',
    'clearInterval', 'requestAnimationFrame', 'cancelAnimationFrame',
    'queueMicrotask', 'structuredClone', 'performance', 'crypto', 'event',
    'Object', 'Function', 'Array', 'String', 'Number', 'Boolean', 'Symbol',
    'BigInt', 'Math', 'JSON', 'Date', 'RegExp', 'Promise', 'Proxy', 'Reflect',
    'Map', 'Set', 'WeakMap', 'WeakSet', 'Intl', 'Error', 'TypeError',
    'RangeError', 'SyntaxError', 'ReferenceError', 'EvalError', 'URIError',
    'ArrayBuffer', 'DataView', 'Uint8Array', 'Int8Array', 'Uint16Array',
    'Int16Array', 'Uint32Array', 'Int32Array', 'Float32Array', 'Float64Array',
    'parseInt', 'parseFloat', 'isNaN', 'isFinite', 'encodeURI', 'decodeURI',
    'encodeURIComponent', 'decodeURIComponent', 'URL', 'URLSearchParams',
    'FormData', 'Headers', 'Request', 'Response', 'Blob', 'File', 'FileReader',
    'Image', 'Audio', 'Event', 'CustomEvent', 'EventTarget', 'HTMLElement',
    'Element', 'Node', 'NodeList', 'MutationObserver', 'IntersectionObserver',
    'ResizeObserver', 'WebSocket', 'Worker', 'XMLHttpRequest', 'AbortController',
    'TextEncoder', 'TextDecoder', 'atob', 'btoa', 'getComputedStyle',
    'matchMedia', 'require', 'module', 'exports', 'process',
})

LEXICAL_KINDS = frozenset({'let', 'const', 'class'})
REPORTED_UNUSED_KINDS = frozenset({'var', 'let', 'const'})
# A var may legally restate a parameter or an earlier var.
VAR_REDECLARABLE_KINDS = frozenset({'var', 'param'})

FUNCTION_TYPES = frozenset({'FunctionDeclaration', 'FunctionExpression', 'ArrowFunctionExpression'})
CLASS_TYPES = frozenset({'ClassDeclaration', 'ClassExpression'})
_NON_CHILD_KEYS = frozenset({'type', 'range', 'loc', 'leadingComments', 'trailingComments', 'innerComments'})


@dataclass
class Binding:
    """A declared name."""
    name: str
    kind: str
    start: int
    end: int
    used: bool = False


class ScopeFrame:
    """Names declared in one lexical block."""

    def __init__(self, kind: str):
        self.kind = kind
        self.bindings: Dict[str, Binding] = {}


def children(node: Node) -> Iterator[Node]:
    for key, value in vars(node).items():
        if key in _NON_CHILD_KEYS:
            continue
        if isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item
        elif isinstance(value, Node):
            yield value


def pattern_identifiers(pattern: Optional[Node]) -> Iterator[Node]:
    """Binding identifiers introduced by a declaration target."""
    if pattern is None:
        return
    kind = pattern.type
    if kind == 'Identifier':
        yield pattern
    elif kind == 'ObjectPattern':
        for prop in pattern.properties:
            target = prop.argument if prop.type == 'RestElement' else prop.value
            yield from pattern_identifiers(target)
    elif kind == 'ArrayPattern':
        for element in pattern.elements:
            yield from pattern_identifiers(element)
    elif kind == 'AssignmentPattern':
        yield from pattern_identifiers(pattern.left)
    elif kind == 'RestElement':
        yield from pattern_identifiers(pattern.argument)


class ScopeResolver:
    """Walks one program, reporting through the owning checker.

    Frames are pushed on entering a block-like construct and popped on
    leaving it; declarations are hoisted into their frame on entry so that
    uses before the declaration still resolve.
    """

    def __init__(self, checker):
        self.checker = checker
        self.frames: List[ScopeFrame] = []
        self._visited = 0

    def run(self, program: Node):
        self._push('program')
        self._declare_body(program.body, function_level=True)
        for statement in program.body:
            self.visit(statement)
        self._pop()

    # -- frames ---------------------------------------------------------

    def _push(self, kind: str):
        self.frames.append(ScopeFrame(kind))

    def _pop(self):
        frame = self.frames.pop()
        for binding in frame.bindings.values():
            if binding.kind in REPORTED_UNUSED_KINDS and not binding.used:
                self.checker._add_error(
                    Severity.SUGGESTION, binding.start, binding.end,
                    f"Unused variable: {binding.name}",
                    Category.SEMANTIC, "unused-variable",
                )

    def _declare(self, ident: Node, kind: str, used: bool = False):
        frame = self.frames[-1]
        start, end = ident.range
        existing = frame.bindings.get(ident.name)
        if existing is None:
            frame.bindings[ident.name] = Binding(ident.name, kind, start, end, used)
            return
        existing.used = existing.used or used
        if kind == 'var' and existing.kind in VAR_REDECLARABLE_KINDS:
            return
        lexical = kind in LEXICAL_KINDS or existing.kind in LEXICAL_KINDS
        self.checker._add_error(
            Severity.ERROR if lexical else Severity.WARNING, start, end,
            f"Duplicate declaration: {ident.name}",
            Category.SEMANTIC, "duplicate-declaration",
        )

    def _declare_body(self, statements: List[Node], function_level: bool):
        """Hoist the declarations that belong to the frame just pushed."""
        found: List[Tuple[Node, str, bool]] = []
        for statement in statements:
            declaration, exported = statement, False
            if statement.type in ('ExportNamedDeclaration', 'ExportDefaultDeclaration'):
                declaration, exported = statement.declaration, True
                if declaration is None:
                    continue
            kind = declaration.type
            if kind in ('FunctionDeclaration', 'ClassDeclaration') and declaration.id is not None:
                found.append((declaration.id, 'function' if kind == 'FunctionDeclaration' else 'class', exported))
            elif kind == 'VariableDeclaration' and declaration.kind != 'var':
                for declarator in declaration.declarations:
                    for ident in pattern_identifiers(declarator.id):
                        found.append((ident, declaration.kind, exported))
            elif kind == 'ImportDeclaration':
                for specifier in declaration.specifiers:
                    found.append((specifier.local, 'import', False))
            if function_level:
                self._collect_vars(declaration, found, exported)
        found.sort(key=lambda item: item[0].range[0])
        for ident, kind, exported in found:
            self._declare(ident, kind, used=exported)

    def _collect_vars(self, node: Optional[Node], found: list, exported: bool):
        if node is None or node.type in FUNCTION_TYPES or node.type in CLASS_TYPES:
            return
        if node.type == 'VariableDeclaration' and node.kind == 'var':
            for declarator in node.declarations:
                for ident in pattern_identifiers(declarator.id):
                    found.append((ident, 'var', exported))
            return
        for child in children(node):
            self._collect_vars(child, found, False)

    # -- resolution -----------------------------------------------------

    def _reference(self, ident: Node, call: bool = False, read: bool = True):
        for frame in reversed(self.frames):
            binding = frame.bindings.get(ident.name)
            if binding is not None:
                if read:
                    binding.used = True
                return
        if ident.name in AMBIENT_GLOBALS:
            return
        start, end = ident.range
        if call:
            self.checker._add_error(
                Severity.ERROR, start, end, f"Undefined function: {ident.name}",
                Category.SEMANTIC, "undefined-function",
            )
        else:
            self.checker._add_error(
                Severity.ERROR, start, end, f"Undefined variable: {ident.name}",
                Category.SEMANTIC, "undefined-variable",
            )

    # -- traversal ------------------------------------------------------

    def visit(self, node: Optional[Node]):
        if node is None:
            return
        self._visited += 1
        if self._visited % 256 == 0:
            self.checker._checkpoint()
        method = getattr(self, 'visit_' + node.type, None)
        if method is None:
            self.generic_visit(node)
        else:
            method(node)

    def generic_visit(self, node: Node):
        for child in children(node):
            self.visit(child)

    def visit_Identifier(self, node):
        self._reference(node)

    def visit_BlockStatement(self, node):
        self._push('block')
        self._declare_body(node.body, function_level=False)
        for statement in node.body:
            self.visit(statement)
        self._pop()

    def visit_StaticBlock(self, node):
        self.visit_BlockStatement(node)

    def _visit_function(self, node, own_name: bool = False):
        self._push('function')
        if own_name and node.id is not None:
            self._declare(node.id, 'function', used=True)
        for param in node.params:
            for ident in pattern_identifiers(param):
                self._declare(ident, 'param')
        for param in node.params:
            self._visit_pattern(param)
        body = node.body
        if body is not None and body.type == 'BlockStatement':
            self._declare_body(body.body, function_level=True)
            for statement in body.body:
                self.visit(statement)
        else:
            self.visit(body)
        self._pop()

    def visit_FunctionDeclaration(self, node):
        self._visit_function(node)

    def visit_FunctionExpression(self, node):
        self._visit_function(node, own_name=True)

    def visit_ArrowFunctionExpression(self, node):
        self._visit_function(node)

    def _visit_class(self, node, own_name: bool = False):
        self.visit(node.superClass)
        self._push('block')
        if own_name and node.id is not None:
            self._declare(node.id, 'class', used=True)
        self.visit(node.body)
        self._pop()

    def visit_ClassDeclaration(self, node):
        self._visit_class(node)

    def visit_ClassExpression(self, node):
        self._visit_class(node, own_name=True)

    def visit_MethodDefinition(self, node):
        if node.computed:
            self.visit(node.key)
        self.visit(node.value)

    def visit_PropertyDefinition(self, node):
        self.visit_MethodDefinition(node)

    def visit_Property(self, node):
        if node.computed:
            self.visit(node.key)
        self.visit(node.value)

    def visit_MemberExpression(self, node):
        self.visit(node.object)
        if node.computed:
            self.visit(node.property)

    def visit_VariableDeclaration(self, node):
        for declarator in node.declarations:
            self._visit_pattern(declarator.id)
            self.visit(declarator.init)

    def _visit_pattern(self, pattern: Optional[Node]):
        """Visit the expressions inside a binding pattern (defaults, computed keys)."""
        if pattern is None:
            return
        kind = pattern.type
        if kind == 'ObjectPattern':
            for prop in pattern.properties:
                if prop.type == 'RestElement':
                    self._visit_pattern(prop.argument)
                    continue
                if prop.computed:
                    self.visit(prop.key)
                self._visit_pattern(prop.value)
        elif kind == 'ArrayPattern':
            for element in pattern.elements:
                self._visit_pattern(element)
        elif kind == 'AssignmentPattern':
            self._visit_pattern(pattern.left)
            self.visit(pattern.right)
        elif kind == 'RestElement':
            self._visit_pattern(pattern.argument)

    def _visit_assignment_target(self, target: Node):
        """Identifiers written by an assignment are resolved but not marked read."""
        kind = target.type
        if kind == 'Identifier':
            self._reference(target, read=False)
        elif kind in ('ObjectPattern', 'ArrayPattern', 'AssignmentPattern', 'RestElement'):
            for ident in pattern_identifiers(target):
                self._reference(ident, read=False)
            self._visit_pattern(target)
        else:
            self.visit(target)

    def visit_AssignmentExpression(self, node):
        if node.operator == '=':
            self._visit_assignment_target(node.left)
        else:
            self.visit(node.left)
        self.visit(node.right)

    def _visit_loop_head(self, node):
        self._push('block')
        left = node.init if node.type == 'ForStatement' else node.left
        if left is not None and left.type == 'VariableDeclaration' and left.kind != 'var':
            for declarator in left.declarations:
                for ident in pattern_identifiers(declarator.id):
                    self._declare(ident, left.kind)

    def visit_ForStatement(self, node):
        self._visit_loop_head(node)
        self.visit(node.init)
        self.visit(node.test)
        self.visit(node.update)
        self.visit(node.body)
        self._pop()

    def visit_ForInStatement(self, node):
        self._visit_loop_head(node)
        if node.left.type == 'VariableDeclaration':
            self.visit(node.left)
        else:
            self._visit_assignment_target(node.left)
        self.visit(node.right)
        self.visit(node.body)
        self._pop()

    def visit_ForOfStatement(self, node):
        self.visit_ForInStatement(node)

    def visit_CatchClause(self, node):
        self._push('block')
        for ident in pattern_identifiers(node.param):
            self._declare(ident, 'param')
        self._visit_pattern(node.param)
        self.visit(node.body)
        self._pop()

    def visit_SwitchStatement(self, node):
        self.visit(node.discriminant)
        self._push('block')
        statements = [s for case in node.cases for s in case.consequent]
        self._declare_body(statements, function_level=False)
        for case in node.cases:
            self.visit(case.test)
            for statement in case.consequent:
                self.visit(statement)
        self._pop()

    def visit_CallExpression(self, node):
        if node.callee.type == 'Identifier':
            self._reference(node.callee, call=True)
        else:
            self.visit(node.callee)
        for argument in node.arguments:
            self.visit(argument)

    def visit_UnaryExpression(self, node):
        # typeof on an undeclared name is a feature test.
        if node.operator == 'typeof' and node.argument.type == 'Identifier':
            if self._is_declared(node.argument.name):
                self._reference(node.argument)
            return
        self.visit(node.argument)

    def _is_declared(self, name: str) -> bool:
        return any(name in frame.bindings for frame in self.frames)

    def visit_LabeledStatement(self, node):
        self.visit(node.body)

    def visit_BreakStatement(self, node):
        pass

    def visit_ContinueStatement(self, node):
        pass

    def visit_MetaProperty(self, node):
        pass

    def visit_DebuggerStatement(self, node):
        start, end = node.range
        self.checker._add_error(
            Severity.ERROR, start, end, "Unexpected debugger statement",
            Category.SEMANTIC, "no-debugger",
            [self.checker._fix("Remove debugger statement", start, end)],
        )

    def visit_ImportDeclaration(self, node):
        pass

    def visit_ExportNamedDeclaration(self, node):
        if node.declaration is not None:
            self.visit(node.declaration)
        elif node.source is None:
            for specifier in node.specifiers:
                self._reference(specifier.local)

    def visit_ExportDefaultDeclaration(self, node):
        self.visit(node.declaration)

    def visit_ExportAllDeclaration(self, node):
        pass
