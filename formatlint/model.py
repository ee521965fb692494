"""
formatlint/model.py
═══════════════════

Plain data shared by the extractor, the validator and the call-site layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Array length that could not be determined statically.
UNKNOWN_ARRAY_SIZE: int = -1


@dataclass(frozen=True)
class FormatItem:
    """One ``{index[,alignment][:formatSpec]}`` placeholder."""
    index: int
    alignment: Optional[int] = None
    format_spec: Optional[str] = None


@dataclass(frozen=True)
class FormatArgument:
    """
    A substitution argument at a call site.

    Attributes
    ----------
    label         : display name, usually the argument's source text
    is_array_type : True when the expression is statically array-typed
    array_size    : literal element count, or UNKNOWN_ARRAY_SIZE
    """
    label: str
    is_array_type: bool = False
    array_size: int = UNKNOWN_ARRAY_SIZE

    @property
    def has_known_size(self) -> bool:
        return self.is_array_type and self.array_size != UNKNOWN_ARRAY_SIZE

    @classmethod
    def scalar(cls, label: str) -> "FormatArgument":
        return cls(label=label)

    @classmethod
    def array(cls, label: str, size: int = UNKNOWN_ARRAY_SIZE) -> "FormatArgument":
        if size < UNKNOWN_ARRAY_SIZE:
            raise ValueError(f"invalid array size {size} for {label!r}")
        return cls(label=label, is_array_type=True, array_size=size)


__all__ = ["FormatItem", "FormatArgument", "UNKNOWN_ARRAY_SIZE"]
