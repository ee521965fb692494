"""
formatlint/diagnostics.py
═════════════════════════

Diagnostic model, suppressions and result aggregation.

A :class:`Diagnostic` is what the reporting layer sees: a rule id, a
rendered message, a severity and a source location.  Diagnostics
serialise to one JSON object per line or to GCC-style text.
"""

from __future__ import annotations

import json
import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Set, Tuple


class DiagnosticSeverity(Enum):
    """Severity levels, named after the cppcheck addon protocol."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    INFORMATION = "information"


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding.

    Attributes
    ----------
    error_id     : rule id (e.g. "S2275")
    message      : human-readable description
    severity     : DiagnosticSeverity
    location     : primary source location
    checker_name : name of the rule that produced this
    extra        : additional context (the failure kind)
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    checker_name: str = ""
    extra: str = ""

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "errorId": self.error_id,
            "extra": self.extra,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json_dict())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        return (f"{self.location}: {self.severity.value}: "
                f"{self.message} [{self.error_id}]")


# ═════════════════════════════════════════════════════════════════════════
#  SUPPRESSIONS
# ═════════════════════════════════════════════════════════════════════════

_INLINE_SUPPRESS_RE = re.compile(r"//\s*formatlint-suppress\s+([\w\s,]+)")


class SuppressionManager:
    """
    Manages diagnostic suppressions.

    Sources:
      1. Inline comments: ``// formatlint-suppress S3457`` on the reported
         line or on the line above it
      2. Global suppressions (command line or config)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("S3457")
    >>> sm.load_inline_suppressions("Program.cs", source_text)
    >>> diagnostics = sm.filter_diagnostics(diagnostics)
    """

    def __init__(self) -> None:
        # (file, line) → rule ids suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    def load_inline_suppressions(self, file: str, text: str) -> int:
        """Record inline suppression comments found in *text*; return the count."""
        count = 0
        for lineno, line in enumerate(text.splitlines(), start=1):
            match = _INLINE_SUPPRESS_RE.search(line)
            if match is None:
                continue
            ids = {i for i in re.split(r"[\s,]+", match.group(1)) if i}
            # applies to the comment's own line and to the next one
            self._inline[(file, lineno)].update(ids)
            self._inline[(file, lineno + 1)].update(ids)
            count += 1
        return count

    def is_suppressed(self, diag: Diagnostic) -> bool:
        if diag.error_id in self._global:
            return True
        key = (diag.location.file, diag.location.line)
        return diag.error_id in self._inline.get(key, ())

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  RESULTS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class LintResults:
    """
    Aggregate results of a lint run.

    Attributes
    ----------
    diagnostics : all reported diagnostics, in file then source order
    files       : files that were scanned
    skipped     : number of call sites that could not be parsed
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    skipped: int = 0

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_rule(self, error_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.error_id == error_id]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [d.to_gcc_format() for d in self.diagnostics]
        lines.append(
            f"--- {len(self.files)} file(s), {self.total_count} diagnostic(s), "
            f"{self.error_count} error(s), {self.skipped} call site(s) skipped ---"
        )
        return "\n".join(lines)


__all__ = [
    "DiagnosticSeverity",
    "SourceLocation",
    "Diagnostic",
    "SuppressionManager",
    "LintResults",
]
