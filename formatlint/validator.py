"""
formatlint/validator.py
═══════════════════════

Top-level validation of a composite format template against the
statically known arguments of a call.

Check order
───────────

  0. null template                        → NULL_TEMPLATE
  1. item extraction / item parsing       → grammar failures
  2. safety net (real formatter)          → UNKNOWN_FAILURE
  3. effective argument count             (abstain on an opaque array)
  4. trivial template                     → TRIVIAL_TEMPLATE
  5. highest index vs. argument count     → ITEM_INDEX_TOO_HIGH
  6. gaps in the referenced indexes       → MISSING_ITEM_INDEX
  7. arguments after the highest index    → UNUSED_ARGUMENT

The first check that fails wins; every call is a pure function of its
inputs.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from formatlint.composite import format_composite
from formatlint.errors import CompositeFormatError
from formatlint.extractor import extract_items
from formatlint.failures import FailureKind, ValidationFailure
from formatlint.model import FormatArgument, FormatItem

logger = logging.getLogger(__name__)

# Number of placeholder arguments handed to the formatter by the safety net.
SAFETY_NET_SLOTS = 1_000_000


def run_safety_net(
    template: str, slots: int = SAFETY_NET_SLOTS
) -> Optional[ValidationFailure]:
    """Format *template* for real and report UNKNOWN_FAILURE if it throws."""
    try:
        format_composite(template, [None] * slots)
    except CompositeFormatError as exc:
        logger.debug("safety net rejected %r: %s", template, exc)
        return ValidationFailure(FailureKind.UNKNOWN_FAILURE)
    return None


def effective_argument_count(arguments: Sequence[FormatArgument]) -> Optional[int]:
    """
    Number of values available for substitution.

    A sole array argument is expanded to its literal length.  Returns None
    when that length is not statically known.
    """
    if len(arguments) == 1 and arguments[0].is_array_type:
        sole = arguments[0]
        return sole.array_size if sole.has_known_size else None
    return len(arguments)


def check_trivial_template(
    items: Sequence[FormatItem], argument_count: int
) -> Optional[ValidationFailure]:
    if not items and argument_count == 0:
        return ValidationFailure(FailureKind.TRIVIAL_TEMPLATE)
    return None


def check_index_too_high(
    max_index: Optional[int], argument_count: int
) -> Optional[ValidationFailure]:
    if max_index is not None and max_index + 1 > argument_count:
        return ValidationFailure(FailureKind.ITEM_INDEX_TOO_HIGH)
    return None


def check_missing_indexes(
    items: Sequence[FormatItem], max_index: Optional[int]
) -> Optional[ValidationFailure]:
    if max_index is None:
        return None
    used = {item.index for item in items}
    missing = [i for i in range(max_index + 1) if i not in used]
    if missing:
        return ValidationFailure.of(FailureKind.MISSING_ITEM_INDEX, missing)
    return None


def check_unused_arguments(
    arguments: Sequence[FormatArgument], max_index: Optional[int]
) -> Optional[ValidationFailure]:
    first_unused = (max_index if max_index is not None else -1) + 1
    unused: List[str] = [arg.label for arg in arguments[first_unused:]]
    if unused:
        return ValidationFailure.of(FailureKind.UNUSED_ARGUMENT, unused)
    return None


def validate_items(
    items: Sequence[FormatItem],
    arguments: Sequence[FormatArgument],
    template: str,
    safety_net_slots: int = SAFETY_NET_SLOTS,
) -> Optional[ValidationFailure]:
    """Run the semantic checks on already-extracted *items*."""
    failure = run_safety_net(template, safety_net_slots)
    if failure is not None:
        return failure

    argument_count = effective_argument_count(arguments)
    if argument_count is None:
        logger.debug("sole array argument has no static size; not checking %r",
                     template)
        return None

    max_index = max((item.index for item in items), default=None)

    return (
        check_trivial_template(items, argument_count)
        or check_index_too_high(max_index, argument_count)
        or check_missing_indexes(items, max_index)
        or check_unused_arguments(arguments, max_index)
    )


def validate_format_call(
    template: Optional[str],
    arguments: Sequence[FormatArgument] = (),
    safety_net_slots: int = SAFETY_NET_SLOTS,
) -> Optional[ValidationFailure]:
    """
    Validate *template* against the call's substitution *arguments*.

    Returns None when the pair is valid, otherwise the single failure
    found first.

    >>> validate_format_call("{0} {2}", [FormatArgument("a"),
    ...     FormatArgument("b"), FormatArgument("c")]).message
    'The format string might be wrong, the following item indexes are missing: 1.'
    """
    if template is None:
        return ValidationFailure(FailureKind.NULL_TEMPLATE)

    extracted = extract_items(template)
    if isinstance(extracted, ValidationFailure):
        outcome: Optional[ValidationFailure] = extracted
    else:
        outcome = validate_items(extracted, list(arguments), template,
                                 safety_net_slots)

    logger.debug("validated %r with %d argument(s): %s", template,
                 len(arguments), outcome.kind.name if outcome else "ok")
    return outcome


__all__ = [
    "SAFETY_NET_SLOTS",
    "validate_format_call",
    "validate_items",
    "run_safety_net",
    "effective_argument_count",
]
