"""
formatlint/rule.py
══════════════════

The string-format linting rule.

The rule selects calls to known formatting operations, locates the format
string, asks the validator for an outcome and turns it into at most one
:class:`Diagnostic`.  Everything that depends on a concrete syntax
representation goes through a :class:`CallSiteResolver`, so the same rule
runs over the C# front-end in :mod:`formatlint.csharp` or over any other
source of call sites.

Rule ids
────────
  S2275  correctness bucket      (severity: error)
  S3457  maintainability bucket  (severity: style)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from formatlint.config import LintConfig
from formatlint.diagnostics import Diagnostic, DiagnosticSeverity, SourceLocation
from formatlint.failures import (
    FailureBucket,
    FailureKind,
    ValidationFailure,
    classify,
)
from formatlint.model import FormatArgument
from formatlint.validator import validate_format_call

logger = logging.getLogger(__name__)

BUG_RULE_ID = "S2275"
CODE_SMELL_RULE_ID = "S3457"


@dataclass(frozen=True)
class FormatMethodSignature:
    """A formatting operation: fully-qualified containing type and method name."""
    type_name: str
    method_name: str

    @property
    def is_explicit_format(self) -> bool:
        """True for operations whose whole purpose is formatting."""
        return self.method_name.endswith("Format")

    @classmethod
    def parse(cls, qualified: str) -> "FormatMethodSignature":
        """``"System.String.Format"`` → ("System.String", "Format")."""
        type_name, _, method_name = qualified.rpartition(".")
        if not type_name or not method_name:
            raise ValueError(f"not a qualified method name: {qualified!r}")
        return cls(type_name, method_name)

    def __str__(self) -> str:
        return f"{self.type_name}.{self.method_name}"


DEFAULT_FORMAT_METHODS: Tuple[FormatMethodSignature, ...] = tuple(
    FormatMethodSignature.parse(name) for name in (
        "System.String.Format",
        "System.Console.Write",
        "System.Console.WriteLine",
        "System.Text.StringBuilder.AppendFormat",
        "System.IO.TextWriter.Write",
        "System.IO.TextWriter.WriteLine",
        "System.Diagnostics.Debug.WriteLine",
        "System.Diagnostics.Trace.TraceError",
        "System.Diagnostics.Trace.TraceInformation",
        "System.Diagnostics.Trace.TraceWarning",
        "System.Diagnostics.TraceSource.TraceInformation",
    )
)


@dataclass(frozen=True)
class Constant:
    """A compile-time constant string value; ``value`` may be None (null)."""
    value: Optional[str]


class CallSiteResolver(Protocol):
    """
    Everything the rule needs to know about a call site.

    Implementations own the syntax representation; ``call`` and
    ``expression`` are opaque to the rule.
    """

    def tracked_signature(
        self, call: Any, signatures: Iterable[FormatMethodSignature]
    ) -> Optional[FormatMethodSignature]:
        """The signature in *signatures* that *call* invokes, if any."""
        ...

    def call_arguments(self, call: Any) -> Sequence[Any]:
        ...

    def call_location(self, call: Any) -> SourceLocation:
        ...

    def is_format_provider(self, expression: Any) -> bool:
        ...

    def constant_value(self, expression: Any) -> Optional[Constant]:
        """The expression's constant value, or None if it is not constant."""
        ...

    def describe_argument(self, expression: Any) -> FormatArgument:
        ...


_BUCKET_RULES: Dict[FailureBucket, Tuple[str, DiagnosticSeverity]] = {
    FailureBucket.CORRECTNESS: (BUG_RULE_ID, DiagnosticSeverity.ERROR),
    FailureBucket.MAINTAINABILITY: (CODE_SMELL_RULE_ID, DiagnosticSeverity.STYLE),
}


def rule_for(failure: ValidationFailure) -> Tuple[str, DiagnosticSeverity]:
    """Rule id and severity a failure is reported under."""
    return _BUCKET_RULES[classify(failure)]


class FormatCallRule:
    """
    Validates composite format strings passed to known formatting operations.

    Usage
    -----
    >>> rule = FormatCallRule(resolver)
    >>> diag = rule.check(call)
    >>> if diag is not None:
    ...     print(diag.to_gcc_format())
    """

    name: ClassVar[str] = "string-format-validator"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({BUG_RULE_ID, CODE_SMELL_RULE_ID})

    def __init__(
        self,
        resolver: CallSiteResolver,
        config: Optional[LintConfig] = None,
    ) -> None:
        self.resolver = resolver
        self.config = config or LintConfig()
        extra = [FormatMethodSignature.parse(n)
                 for n in self.config.extra_format_methods]
        self.signatures: Tuple[FormatMethodSignature, ...] = (
            DEFAULT_FORMAT_METHODS + tuple(extra))

    def evaluate(self, call: Any) -> Optional[ValidationFailure]:
        """The failure to report for *call*, after the reporting filters."""
        signature = self.resolver.tracked_signature(call, self.signatures)
        if signature is None:
            return None

        arguments = list(self.resolver.call_arguments(call))
        if not arguments:
            return None

        format_index = 0
        if len(arguments) > 1 and self.resolver.is_format_provider(arguments[0]):
            format_index = 1

        constant = self.resolver.constant_value(arguments[format_index])
        if constant is None:
            logger.debug("%s: format string is not constant, skipping",
                         signature)
            return None

        format_arguments = [self.resolver.describe_argument(expr)
                            for expr in arguments[format_index + 1:]]
        failure = validate_format_call(constant.value, format_arguments,
                                       self.config.safety_net_slots)
        if failure is None:
            return None

        # Console.Write("literal") is fine; string.Format("literal") is not.
        if (failure.kind is FailureKind.TRIVIAL_TEMPLATE
                and self.config.report_trivial_only_for_format
                and not signature.is_explicit_format):
            return None
        return failure

    def check(self, call: Any) -> Optional[Diagnostic]:
        failure = self.evaluate(call)
        if failure is None:
            return None
        error_id, severity = rule_for(failure)
        return Diagnostic(
            error_id=error_id,
            message=failure.message,
            severity=severity,
            location=self.resolver.call_location(call),
            checker_name=self.name,
            extra=failure.kind.value,
        )

    def check_all(self, calls: Iterable[Any]) -> List[Diagnostic]:
        diagnostics = []
        for call in calls:
            diag = self.check(call)
            if diag is not None:
                diagnostics.append(diag)
        return diagnostics

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


__all__ = [
    "BUG_RULE_ID",
    "CODE_SMELL_RULE_ID",
    "FormatMethodSignature",
    "DEFAULT_FORMAT_METHODS",
    "Constant",
    "CallSiteResolver",
    "FormatCallRule",
    "rule_for",
]
