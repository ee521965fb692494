"""
formatlint/failures.py
══════════════════════

The closed taxonomy of validation failures and the severity buckets they
are reported under.

A failure is a value: a :class:`FailureKind` plus, for the two kinds that
carry data, an ordered tuple of strings.  Failures are never mutated once
produced, so the same ``ValidationFailure`` can be shared, hashed and
compared freely.

Buckets
───────

  CORRECTNESS      the template is likely to throw at run time
  MAINTAINABILITY  the call works but is probably not what the author meant
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Tuple


class FailureKind(Enum):
    """Every way a template/argument pair can be rejected."""
    NULL_TEMPLATE = "nullTemplate"
    INVALID_CHAR_AFTER_OPEN_BRACE = "invalidCharAfterOpenBrace"
    UNBALANCED_BRACES = "unbalancedBraces"
    ITEM_MALFORMED = "itemMalformed"
    ITEM_INDEX_NOT_INTEGER = "itemIndexNotInteger"
    ITEM_ALIGNMENT_NOT_INTEGER = "itemAlignmentNotInteger"
    ITEM_INDEX_TOO_HIGH = "itemIndexTooHigh"
    TRIVIAL_TEMPLATE = "trivialTemplate"
    UNKNOWN_FAILURE = "unknownFailure"
    MISSING_ITEM_INDEX = "missingItemIndex"
    UNUSED_ARGUMENT = "unusedArgument"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def carries_data(self) -> bool:
        return self in _DATA_KINDS


_MESSAGES: Dict[FailureKind, str] = {
    FailureKind.NULL_TEMPLATE:
        "Invalid string format, the format string cannot be null.",
    FailureKind.INVALID_CHAR_AFTER_OPEN_BRACE:
        "Invalid string format, opening curly brace can only be followed "
        "by a digit or an opening curly brace.",
    FailureKind.UNBALANCED_BRACES:
        "Invalid string format, unbalanced curly brace count.",
    FailureKind.ITEM_MALFORMED:
        "Invalid string format, all format items should comply with the "
        "following pattern '{index[,alignment][:formatString]}'.",
    FailureKind.ITEM_INDEX_NOT_INTEGER:
        "Invalid string format, all format item indexes should be numbers.",
    FailureKind.ITEM_ALIGNMENT_NOT_INTEGER:
        "Invalid string format, all format item alignments should be numbers.",
    FailureKind.ITEM_INDEX_TOO_HIGH:
        "Invalid string format, the highest string format item index should "
        "not be greater than the arguments count.",
    FailureKind.TRIVIAL_TEMPLATE:
        "Remove this formatting call and simply use the input string.",
    FailureKind.UNKNOWN_FAILURE:
        "Invalid string format, the format string is invalid and is likely "
        "to throw at runtime.",
    FailureKind.MISSING_ITEM_INDEX:
        "The format string might be wrong, the following item indexes are "
        "missing: ",
    FailureKind.UNUSED_ARGUMENT:
        "The format string might be wrong, the following arguments are "
        "unused: ",
}

_DATA_KINDS: FrozenSet[FailureKind] = frozenset({
    FailureKind.MISSING_ITEM_INDEX,
    FailureKind.UNUSED_ARGUMENT,
})


@dataclass(frozen=True)
class ValidationFailure:
    """
    A single classified failure.

    Attributes
    ----------
    kind            : which rule of the grammar or of the semantics was broken
    additional_data : missing indexes or unused argument labels, in order;
                      empty for every other kind
    """
    kind: FailureKind
    additional_data: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.additional_data and not self.kind.carries_data:
            raise ValueError(f"{self.kind.name} does not carry additional data")

    @classmethod
    def of(cls, kind: FailureKind, data: Iterable[object] = ()) -> "ValidationFailure":
        return cls(kind, tuple(str(d) for d in data))

    @property
    def message(self) -> str:
        """The rendered, user-facing message."""
        if not self.kind.carries_data:
            return self.kind.message
        return self.kind.message + ", ".join(self.additional_data) + "."

    @property
    def bucket(self) -> "FailureBucket":
        return classify(self)

    def __str__(self) -> str:
        return self.message


class FailureBucket(Enum):
    """Non-overlapping severity buckets used by the reporting layer."""
    CORRECTNESS = "correctness"
    MAINTAINABILITY = "maintainability"


_CORRECTNESS_KINDS: FrozenSet[FailureKind] = frozenset({
    FailureKind.UNKNOWN_FAILURE,
    FailureKind.NULL_TEMPLATE,
    FailureKind.INVALID_CHAR_AFTER_OPEN_BRACE,
    FailureKind.UNBALANCED_BRACES,
    FailureKind.ITEM_MALFORMED,
    FailureKind.ITEM_INDEX_NOT_INTEGER,
    FailureKind.ITEM_ALIGNMENT_NOT_INTEGER,
    FailureKind.ITEM_INDEX_TOO_HIGH,
})

_MAINTAINABILITY_KINDS: FrozenSet[FailureKind] = frozenset({
    FailureKind.TRIVIAL_TEMPLATE,
    FailureKind.MISSING_ITEM_INDEX,
    FailureKind.UNUSED_ARGUMENT,
})


def classify(failure: ValidationFailure) -> FailureBucket:
    """Map *failure* into its severity bucket."""
    if failure.kind in _CORRECTNESS_KINDS:
        return FailureBucket.CORRECTNESS
    if failure.kind in _MAINTAINABILITY_KINDS:
        return FailureBucket.MAINTAINABILITY
    raise ValueError(f"unclassified failure kind {failure.kind!r}")


__all__ = [
    "FailureKind",
    "ValidationFailure",
    "FailureBucket",
    "classify",
]
