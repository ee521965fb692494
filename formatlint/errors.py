"""
formatlint/errors.py
════════════════════

Exception hierarchy for formatlint.

Validation outcomes are *values* (see :mod:`formatlint.failures`); the
exceptions below are reserved for infrastructure problems and for the
composite formatting engine, which behaves like a real runtime formatter
and therefore raises on malformed input.

::

    FormatLintError
    ├── CompositeFormatError   (also a ValueError)
    ├── SourceParseError
    └── ConfigError
"""

from __future__ import annotations

from typing import Optional


class FormatLintError(Exception):
    """Base class for every exception raised by formatlint."""


class CompositeFormatError(FormatLintError, ValueError):
    """
    Raised by :func:`formatlint.composite.format_composite` when a template
    cannot be formatted.

    Attributes
    ----------
    position : offset in the template where formatting stopped (-1 if unknown)
    """

    def __init__(self, message: str, position: int = -1) -> None:
        super().__init__(message)
        self.position = position

    def __str__(self) -> str:
        base = super().__str__()
        if self.position >= 0:
            return f"{base} (at offset {self.position})"
        return base


class SourceParseError(FormatLintError):
    """An invocation's argument list could not be parsed."""

    def __init__(self, message: str, path: str = "", line: int = 0) -> None:
        super().__init__(message)
        self.path = path
        self.line = line

    def __str__(self) -> str:
        base = super().__str__()
        if self.path:
            return f"{self.path}:{self.line}: {base}"
        return base


class ConfigError(FormatLintError):
    """Invalid configuration value or file."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        base = super().__str__()
        if self.source:
            return f"{self.source}: {base}"
        return base


__all__ = [
    "FormatLintError",
    "CompositeFormatError",
    "SourceParseError",
    "ConfigError",
]
