"""
formatlint/config.py
════════════════════

Lint configuration.

Values come from, in increasing priority: the defaults below, a JSON file
(``--config`` or ``.formatlint.json`` in the working directory), then
command-line flags.

Example ``.formatlint.json``::

    {
        "safety_net_slots": 1000000,
        "report_trivial_only_for_format": true,
        "extra_format_methods": ["MyCompany.Logging.Log.InfoFormat"],
        "suppress": ["S3457"],
        "output": "gcc"
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from formatlint.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".formatlint.json"
OUTPUT_FORMATS = ("json", "gcc", "summary")


@dataclass(frozen=True)
class LintConfig:
    """
    Attributes
    ----------
    safety_net_slots               : placeholder arguments given to the real
                                     formatter by the safety net
    report_trivial_only_for_format : report TRIVIAL_TEMPLATE only for methods
                                     whose name ends with "Format"
    extra_format_methods           : additional "Namespace.Type.Method" names
    suppress                       : rule ids never reported
    output                         : "json", "gcc" or "summary"
    """
    safety_net_slots: int = 1_000_000
    report_trivial_only_for_format: bool = True
    extra_format_methods: List[str] = field(default_factory=list)
    suppress: List[str] = field(default_factory=list)
    output: str = "gcc"

    def __post_init__(self) -> None:
        if self.safety_net_slots < 1:
            raise ConfigError(
                f"safety_net_slots must be positive, got {self.safety_net_slots}")
        if self.output not in OUTPUT_FORMATS:
            raise ConfigError(
                f"output must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {self.output!r}")
        for name in self.extra_format_methods:
            if name.count(".") < 1 or name.startswith(".") or name.endswith("."):
                raise ConfigError(
                    f"extra_format_methods entries must look like "
                    f"'Type.Method', got {name!r}")

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], source: Optional[str] = None
    ) -> "LintConfig":
        """Build a config from a mapping, rejecting unknown keys and bad types."""
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigError(f"unknown configuration key {key!r}", source)
            kwargs[key] = _coerce(key, value, source)
        try:
            return cls(**kwargs)
        except ConfigError as exc:
            raise ConfigError(str(exc), source) from exc

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LintConfig":
        """Read a JSON configuration file."""
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON: {exc}", str(p)) from exc
        if not isinstance(data, dict):
            raise ConfigError("top level must be an object", str(p))
        logger.info("loaded configuration from %s", p)
        return cls.from_mapping(data, source=str(p))

    @classmethod
    def discover(cls, directory: Union[str, Path] = ".") -> "LintConfig":
        """Load ``.formatlint.json`` from *directory* if present, else defaults."""
        candidate = Path(directory) / CONFIG_FILE_NAME
        if candidate.is_file():
            return cls.load(candidate)
        return cls()

    def merged(self, **overrides: Any) -> "LintConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def _coerce(key: str, value: Any, source: Optional[str]) -> Any:
    if key == "safety_net_slots":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{key} must be an integer", source)
        return value
    if key == "report_trivial_only_for_format":
        if not isinstance(value, bool):
            raise ConfigError(f"{key} must be a boolean", source)
        return value
    if key in ("extra_format_methods", "suppress"):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{key} must be a list of strings", source)
        return list(value)
    if key == "output":
        if not isinstance(value, str):
            raise ConfigError(f"{key} must be a string", source)
        return value
    return value


__all__ = ["LintConfig", "CONFIG_FILE_NAME", "OUTPUT_FORMATS"]
