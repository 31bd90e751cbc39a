"""Tests for the JavaScript checker."""

from typing import List

from editor_diagnostics import Category, CheckOptions, CodeError, Severity, TextEdit
from editor_diagnostics.checkers import ScriptChecker
from editor_diagnostics.checkers.script_heuristics import (
    find_await_outside_async,
    find_duplicate_lexical,
    find_loose_equality,
    find_undeclared_destructuring,
)


def run(source: str, **options) -> List[CodeError]:
    return ScriptChecker().check(source, CheckOptions(**options))


def messages(errors: List[CodeError]) -> List[str]:
    return [e.message for e in errors]


def apply(source: str, edit: TextEdit) -> str:
    return source[:edit.start] + edit.text + source[edit.end:]


class TestScopeResolution:
    """Declarations, references and frames."""

    def test_unused_variable(self):
        errors = run("let x = 1;")
        assert messages(errors) == ["Unused variable: x"]
        assert errors[0].severity == Severity.SUGGESTION
        assert (errors[0].start, errors[0].end) == (4, 5)

    def test_undefined_variable(self):
        errors = run("console.log(y);")
        assert messages(errors) == ["Undefined variable: y"]
        assert errors[0].severity == Severity.ERROR

    def test_undefined_function(self):
        assert messages(run("render();")) == ["Undefined function: render"]

    def test_ambient_globals_need_no_declaration(self):
        source = "document.getElementById('app'); window.setTimeout(function () {}, 10);"
        assert run(source) == []

    def test_function_declarations_are_hoisted(self):
        assert run("greet(); function greet() { return 1; }") == []

    def test_parameters_and_closures(self):
        source = """
        function makeCounter(start) {
          let count = start;
          return function () { count += 1; return count; };
        }
        makeCounter(0);
        """
        assert run(source) == []

    def test_block_scoped_name_is_not_visible_outside(self):
        errors = run("{ let a = 1; } console.log(a);")
        assert "Undefined variable: a" in messages(errors)

    def test_var_is_function_scoped(self):
        assert run("if (true) { var flag = 1; } console.log(flag);") == []

    def test_assignment_alone_is_not_a_use(self):
        assert messages(run("let x; x = 5;")) == ["Unused variable: x"]

    def test_compound_assignment_reads(self):
        assert run("let total = 0; total += 1;") == []

    def test_loop_catch_and_class(self):
        source = """
        for (let i = 0; i < 3; i++) { console.log(i); }
        for (const key in window) { console.log(key); }
        try { risky(); } catch (err) { console.log(err.message); }
        function risky() {}
        class Widget { render() { return this.el; } }
        new Widget();
        """
        assert run(source) == []

    def test_object_keys_and_member_names_are_not_references(self):
        assert run("const config = { width: 1 }; console.log(config.height);") == []

    def test_typeof_on_undeclared_name(self):
        assert run("if (typeof jQuery !== 'undefined') { console.log(1); }") == []

    def test_duplicate_lexical_declaration(self):
        errors = run("let count = 1; let count = 2; console.log(count);")
        assert messages(errors).count("Duplicate declaration: count") == 1

    def test_var_may_restate_a_parameter(self):
        assert run("function f(a) { var a; return a; } f(1);") == []

    def test_var_may_restate_an_earlier_var(self):
        source = "function loop() { for (var i = 0; i < 2; i++) {} for (var i = 0; i < 2; i++) {} } loop();"
        assert run(source) == []

    def test_var_after_let_is_still_a_duplicate(self):
        errors = run("let a = 1; var a = 2; console.log(a);")
        assert "Duplicate declaration: a" in messages(errors)

    def test_debugger_statement(self):
        source = "debugger;\nconsole.log(1);"
        errors = run(source)
        assert messages(errors) == ["Unexpected debugger statement"]
        assert apply(source, errors[0].fixes[0].edit).strip() == "console.log(1);"

    def test_module_imports_and_exports(self):
        source = "import { helper } from './helper.js';\nexport const answer = helper(42);\n"
        assert run(source) == []


class TestParsing:
    """Syntax errors from the parser."""

    def test_syntax_error_is_reported_once(self):
        errors = run("function (")
        syntax = [e for e in errors if e.rule_id == "syntax-error"]
        assert len(syntax) == 1
        assert syntax[0].message.startswith("Syntax error: ")

    def test_heuristics_still_run_without_a_tree(self):
        errors = run("if (a == 1) {")
        rules = {e.rule_id for e in errors}
        assert "syntax-error" in rules
        assert "strict-equality" in rules


class TestHeuristics:
    """Text passes layered on the tree checks."""

    def test_loose_equality(self):
        source = "let a = 1; if (a == 2) { console.log(a); }"
        errors = run(source)
        assert messages(errors) == ["Use strict equality (===) instead of loose equality (==)"]
        assert "a === 2" in apply(source, errors[0].fixes[0].edit)

    def test_strict_equality_is_not_reported(self):
        assert list(find_loose_equality("a === b; c !== d;")) == []

    def test_loose_inequality(self):
        findings = list(find_loose_equality("a != b"))
        assert [f.fixes[0].edit.text for f in findings] == ["!=="]

    def test_heuristics_can_be_disabled(self):
        assert run("if (1 == 1) {}", heuristics=False) == []

    def test_await_outside_async(self):
        source = "function load() { await fetch('/x'); }"
        findings = list(find_await_outside_async(source))
        assert [f.message for f in findings] == ["'await' is only valid inside async functions"]
        assert findings[0].category == Category.SEMANTIC

    def test_await_outside_async_is_not_a_syntax_finding(self):
        errors = run("await foo();")
        awaits = [e for e in errors if e.rule_id == "await-outside-async"]
        assert len(awaits) == 1
        assert awaits[0].category == Category.SEMANTIC
        syntax = [e for e in errors if e.category == Category.SYNTAX]
        assert [e.rule_id for e in syntax] == ["syntax-error"]

    def test_await_inside_async_function_and_method(self):
        source = """
        async function load() { if (ok) { await fetch('/x'); } }
        const go = async () => { await load(); };
        class Api { async get() { await go(); } }
        """
        assert list(find_await_outside_async(source)) == []

    def test_top_level_await_in_module(self):
        assert list(find_await_outside_async("await ready;", is_module=True)) == []
        assert len(list(find_await_outside_async("await ready;", is_module=False))) == 1

    def test_duplicate_lexical_skips_separate_blocks_and_loops(self):
        source = "{ let a = 1; } { let a = 2; } for (let i = 0;;) {} for (let i = 0;;) {}"
        assert list(find_duplicate_lexical(source)) == []

    def test_duplicate_lexical_same_block(self):
        findings = list(find_duplicate_lexical("const a = 1; const a = 2;"))
        assert [f.message for f in findings] == ["Duplicate declaration: a"]

    def test_destructuring_from_undeclared_source(self):
        findings = list(find_undeclared_destructuring("const { a, b } = settings;"))
        assert [f.message for f in findings] == ["Destructuring from undeclared variable: settings"]

    def test_destructuring_from_declared_source(self):
        source = "const settings = {}; const { a } = settings; const [first] = window.items;"
        assert list(find_undeclared_destructuring(source)) == []

    def test_tree_and_text_findings_are_not_duplicated(self):
        errors = run("const { a } = settings; console.log(a);")
        at_settings = [e for e in errors if e.start == 14]
        assert len(at_settings) == 1
        assert at_settings[0].message == "Undefined variable: settings"


class TestInstanceState:
    """Separate calls do not influence each other."""

    def test_reused_checker_starts_clean(self):
        checker = ScriptChecker()
        assert len(checker.check("let unused = 1;")) == 1
        assert checker.check("console.log(1);") == []
