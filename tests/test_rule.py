# tests/test_rule.py
"""
Tests for FormatCallRule against a hand-written CallSiteResolver, so the
rule is exercised independently of any source front-end.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from formatlint.config import LintConfig
from formatlint.diagnostics import DiagnosticSeverity, SourceLocation
from formatlint.failures import FailureKind, ValidationFailure
from formatlint.model import FormatArgument
from formatlint.rule import (
    BUG_RULE_ID,
    CODE_SMELL_RULE_ID,
    DEFAULT_FORMAT_METHODS,
    Constant,
    FormatCallRule,
    FormatMethodSignature,
    rule_for,
)


@dataclass(frozen=True)
class Expr:
    text: str
    constant: Optional[Constant] = None
    array_size: Optional[int] = None
    provider: bool = False


def lit(value: Optional[str]) -> Expr:
    return Expr(text=repr(value), constant=Constant(value))


def var(name: str) -> Expr:
    return Expr(text=name)


@dataclass
class Call:
    type_name: str
    method: str
    arguments: List[Expr] = field(default_factory=list)
    line: int = 1


class FakeResolver:
    """Resolves Call/Expr objects built directly by the tests."""

    def tracked_signature(self, call, signatures):
        for sig in signatures:
            if sig.type_name == call.type_name and sig.method_name == call.method:
                return sig
        return None

    def call_arguments(self, call):
        return call.arguments

    def call_location(self, call):
        return SourceLocation(file="fake.cs", line=call.line, column=1)

    def is_format_provider(self, expression):
        return expression.provider

    def constant_value(self, expression):
        return expression.constant

    def describe_argument(self, expression):
        if expression.array_size is not None:
            return FormatArgument.array(expression.text, expression.array_size)
        return FormatArgument.scalar(expression.text)


@pytest.fixture
def rule():
    return FormatCallRule(FakeResolver())


class TestSignatures:

    def test_parse(self):
        sig = FormatMethodSignature.parse("System.Text.StringBuilder.AppendFormat")
        assert sig.type_name == "System.Text.StringBuilder"
        assert sig.method_name == "AppendFormat"
        assert str(sig) == "System.Text.StringBuilder.AppendFormat"

    def test_parse_rejects_bare_name(self):
        with pytest.raises(ValueError):
            FormatMethodSignature.parse("Format")

    def test_explicit_format(self):
        assert FormatMethodSignature("System.String", "Format").is_explicit_format
        assert not FormatMethodSignature("System.Console", "WriteLine").is_explicit_format

    def test_default_table(self):
        names = {str(s) for s in DEFAULT_FORMAT_METHODS}
        assert "System.String.Format" in names
        assert "System.Diagnostics.TraceSource.TraceInformation" in names
        assert len(DEFAULT_FORMAT_METHODS) == 11


class TestRuleSelection:

    def test_untracked_method_ignored(self, rule):
        call = Call("System.String", "Concat", [lit("{0}")])
        assert rule.evaluate(call) is None

    def test_no_arguments_ignored(self, rule):
        assert rule.evaluate(Call("System.Console", "WriteLine", [])) is None

    def test_non_constant_format_ignored(self, rule):
        call = Call("System.String", "Format", [var("fmt"), var("a")])
        assert rule.evaluate(call) is None

    def test_null_constant_reported(self, rule):
        call = Call("System.String", "Format", [lit(None), var("a")])
        assert rule.evaluate(call).kind is FailureKind.NULL_TEMPLATE

    def test_format_provider_shifts_format_index(self, rule):
        provider = Expr(text="CultureInfo.InvariantCulture", provider=True)
        call = Call("System.String", "Format", [provider, lit("{0}"), var("a")])
        assert rule.evaluate(call) is None

    def test_provider_only_considered_with_more_arguments(self, rule):
        provider = Expr(text="p", provider=True, constant=Constant("{0}"))
        call = Call("System.String", "Format", [provider])
        assert rule.evaluate(call).kind is FailureKind.ITEM_INDEX_TOO_HIGH

    def test_arguments_follow_format_string(self, rule):
        call = Call("System.String", "Format", [lit("{0}"), var("a"), var("b")])
        failure = rule.evaluate(call)
        assert failure == ValidationFailure.of(FailureKind.UNUSED_ARGUMENT, ["b"])

    def test_array_argument(self, rule):
        call = Call("System.String", "Format",
                    [lit("{0}{1}"), Expr(text="new[] { a, b }", array_size=2)])
        assert rule.evaluate(call) is None


class TestTrivialSuppression:

    def test_reported_for_format_methods(self, rule):
        call = Call("System.String", "Format", [lit("hello")])
        assert rule.evaluate(call).kind is FailureKind.TRIVIAL_TEMPLATE

    def test_suppressed_for_write_methods(self, rule):
        call = Call("System.Console", "WriteLine", [lit("hello")])
        assert rule.evaluate(call) is None

    def test_other_failures_kept_for_write_methods(self, rule):
        call = Call("System.Console", "WriteLine", [lit("{0")])
        assert rule.evaluate(call).kind is FailureKind.UNBALANCED_BRACES

    def test_suppression_can_be_disabled(self):
        rule = FormatCallRule(FakeResolver(),
                              LintConfig(report_trivial_only_for_format=False))
        call = Call("System.Console", "WriteLine", [lit("hello")])
        assert rule.evaluate(call).kind is FailureKind.TRIVIAL_TEMPLATE


class TestDiagnostics:

    def test_bug_diagnostic(self, rule):
        call = Call("System.String", "Format", [lit("{1}"), var("a")], line=12)
        diag = rule.check(call)
        assert diag.error_id == BUG_RULE_ID
        assert diag.severity is DiagnosticSeverity.ERROR
        assert diag.location == SourceLocation("fake.cs", 12, 1)
        assert diag.extra == FailureKind.ITEM_INDEX_TOO_HIGH.value
        assert diag.checker_name == FormatCallRule.name

    def test_code_smell_diagnostic(self, rule):
        call = Call("System.String", "Format", [lit("{1}"), var("a"), var("b")])
        diag = rule.check(call)
        assert diag.error_id == CODE_SMELL_RULE_ID
        assert diag.severity is DiagnosticSeverity.STYLE
        assert diag.message.endswith("missing: 0.")

    def test_valid_call_has_no_diagnostic(self, rule):
        call = Call("System.String", "Format", [lit("{0}"), var("a")])
        assert rule.check(call) is None

    def test_check_all(self, rule):
        calls = [
            Call("System.String", "Format", [lit("{0}"), var("a")]),
            Call("System.String", "Format", [lit("{")]),
            Call("System.String", "Concat", [lit("{")]),
            Call("System.Console", "Write", [lit("{0}"), var("a"), var("b")]),
        ]
        ids = [d.error_id for d in rule.check_all(calls)]
        assert ids == [BUG_RULE_ID, CODE_SMELL_RULE_ID]

    def test_rule_for(self):
        assert rule_for(ValidationFailure(FailureKind.UNKNOWN_FAILURE)) == \
            (BUG_RULE_ID, DiagnosticSeverity.ERROR)
        assert rule_for(ValidationFailure(FailureKind.TRIVIAL_TEMPLATE)) == \
            (CODE_SMELL_RULE_ID, DiagnosticSeverity.STYLE)


class TestConfiguration:

    def test_extra_format_method(self):
        config = LintConfig(extra_format_methods=["Acme.Log.InfoFormat"])
        rule = FormatCallRule(FakeResolver(), config)
        call = Call("Acme.Log", "InfoFormat", [lit("{0} {1}"), var("a")])
        assert rule.evaluate(call).kind is FailureKind.ITEM_INDEX_TOO_HIGH

    def test_extra_method_trivial_uses_name(self):
        config = LintConfig(extra_format_methods=["Acme.Log.Info"])
        rule = FormatCallRule(FakeResolver(), config)
        assert rule.evaluate(Call("Acme.Log", "Info", [lit("text")])) is None

    def test_safety_net_slots_forwarded(self):
        rule = FormatCallRule(FakeResolver(), LintConfig(safety_net_slots=2))
        call = Call("System.String", "Format",
                    [lit("{0}{1}{2}"), var("a"), var("b"), var("c")])
        assert rule.evaluate(call).kind is FailureKind.UNKNOWN_FAILURE


class TestRuleObject:

    def test_error_ids(self):
        assert FormatCallRule.error_ids == {BUG_RULE_ID, CODE_SMELL_RULE_ID}

    def test_repr(self, rule):
        assert repr(rule) == "<FormatCallRule 'string-format-validator'>"

    def test_signatures_include_defaults(self, rule):
        assert rule.signatures == DEFAULT_FORMAT_METHODS
