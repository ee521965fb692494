"""
formatlint/runner.py
════════════════════

Glue between the C# front-end, the rule and the suppression manager.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from formatlint.config import LintConfig
from formatlint.csharp import CSharpSourceResolver
from formatlint.diagnostics import Diagnostic, LintResults, SuppressionManager
from formatlint.rule import FormatCallRule

logger = logging.getLogger(__name__)


def lint_text(
    text: str,
    path: str = "<string>",
    config: Optional[LintConfig] = None,
    suppressions: Optional[SuppressionManager] = None,
) -> Tuple[List[Diagnostic], int]:
    """
    Lint one C# source text.

    Returns the non-suppressed diagnostics and the number of call sites
    that had to be skipped because their arguments could not be parsed.
    """
    config = config or LintConfig()
    if suppressions is None:
        suppressions = SuppressionManager()
        for error_id in config.suppress:
            suppressions.add_global_suppression(error_id)
    suppressions.load_inline_suppressions(path, text)

    resolver = CSharpSourceResolver(text, path=path)
    rule = FormatCallRule(resolver, config)
    diagnostics = suppressions.filter_diagnostics(rule.check_all(resolver.calls()))
    return diagnostics, resolver.skipped


def lint_paths(
    paths: Iterable[Union[str, Path]],
    config: Optional[LintConfig] = None,
) -> LintResults:
    """Lint every file in *paths*; directories are searched for ``*.cs``."""
    config = config or LintConfig()
    suppressions = SuppressionManager()
    for error_id in config.suppress:
        suppressions.add_global_suppression(error_id)

    results = LintResults()
    for file in _expand(paths):
        t0 = time.monotonic()
        text = file.read_text(encoding="utf-8-sig")
        diagnostics, skipped = lint_text(text, str(file), config, suppressions)
        results.diagnostics.extend(diagnostics)
        results.files.append(str(file))
        results.skipped += skipped
        logger.info("%s: %d diagnostic(s) in %.1fms", file, len(diagnostics),
                    (time.monotonic() - t0) * 1000.0)
    return results


def _expand(paths: Iterable[Union[str, Path]]) -> List[Path]:
    files: List[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            files.extend(sorted(p.rglob("*.cs")))
        elif p.exists():
            files.append(p)
        else:
            raise FileNotFoundError(f"no such file or directory: {p}")
    return files


__all__ = ["lint_text", "lint_paths"]
