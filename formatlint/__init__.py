"""
formatlint — Composite Format String Validation
===============================================

Validates ``{index[,alignment][:formatSpec]}`` format templates against
the arguments a call site passes, and reports at most one classified
failure per call.

Core modules
------------
model
    ``FormatItem`` and ``FormatArgument``.
failures
    The failure taxonomy, rendered messages and severity buckets.
extractor
    Item extraction (brace scanning) and item parsing.
composite
    A runtime composite formatter, used as the validator's safety net.
validator
    ``validate_format_call`` — the top-level entry point.
rule
    The linting rule: tracked operations, the call-site strategy
    interface and diagnostics.
csharp
    A C# source front-end implementing the call-site strategy.

Quick start
-----------
>>> from formatlint import FormatArgument, validate_format_call
>>> failure = validate_format_call("{0}", [FormatArgument("a"), FormatArgument("b")])
>>> print(failure)
The format string might be wrong, the following arguments are unused: b.
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from formatlint.composite import format_composite  # noqa: E402
from formatlint.config import LintConfig  # noqa: E402
from formatlint.errors import (  # noqa: E402
    CompositeFormatError,
    ConfigError,
    FormatLintError,
    SourceParseError,
)
from formatlint.extractor import extract_items, parse_item  # noqa: E402
from formatlint.failures import (  # noqa: E402
    FailureBucket,
    FailureKind,
    ValidationFailure,
    classify,
)
from formatlint.model import UNKNOWN_ARRAY_SIZE, FormatArgument, FormatItem  # noqa: E402
from formatlint.rule import (  # noqa: E402
    CallSiteResolver,
    Constant,
    FormatCallRule,
    FormatMethodSignature,
)
from formatlint.validator import validate_format_call  # noqa: E402

__all__: List[str] = [
    "__version__",
    "format_composite",
    "LintConfig",
    "FormatLintError",
    "CompositeFormatError",
    "ConfigError",
    "SourceParseError",
    "extract_items",
    "parse_item",
    "FailureBucket",
    "FailureKind",
    "ValidationFailure",
    "classify",
    "UNKNOWN_ARRAY_SIZE",
    "FormatArgument",
    "FormatItem",
    "CallSiteResolver",
    "Constant",
    "FormatCallRule",
    "FormatMethodSignature",
    "validate_format_call",
]
