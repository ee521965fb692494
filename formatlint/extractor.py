"""
formatlint/extractor.py
═══════════════════════

Item extraction and item parsing for composite format templates.

``extract_items`` is a single left-to-right scan with one character of
lookbehind.  It honours ``{{``/``}}`` escaping, collects the text between
each matched pair of braces and hands it to ``parse_item``.  Both return
either their result or a :class:`ValidationFailure`; nothing is raised.

The escape transitions for runs of three or more identical braces are
intentionally literal (see ``tests/test_extractor.py`` for the table):
a brace is only treated as the second half of an escape when the previous
brace was not itself consumed as one.
"""

from __future__ import annotations

import re
from typing import List, Optional, Union

from formatlint.failures import FailureKind, ValidationFailure
from formatlint.model import FormatItem

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1

# Leading/trailing white space and an optional sign around ASCII digits.
_INTEGER_RE = re.compile(r"[\t\n\v\f\r ]*([+-]?[0-9]+)[\t\n\v\f\r ]*\Z")

_FIELD_SEPARATORS_RE = re.compile(r"[,:]")


def parse_int(text: str) -> Optional[int]:
    """Parse a 32-bit integer the lenient way the runtime does, or None."""
    match = _INTEGER_RE.match(text)
    if match is None:
        return None
    value = int(match.group(1))
    if value < _INT32_MIN or value > _INT32_MAX:
        return None
    return value


def parse_item(text: str) -> Union[FormatItem, ValidationFailure]:
    """
    Parse the inside of one ``{...}`` region.

    Separators are counted across the whole text, so a format field that
    itself contains ``:`` or ``,`` makes the item malformed.

    >>> parse_item("0,5:C")
    FormatItem(index=0, alignment=5, format_spec='C')
    """
    comma = text.find(",")
    colon = text.find(":")
    fields = _FIELD_SEPARATORS_RE.split(text)

    # index, then at most one alignment field, then at most one format field
    expected_fields = 1 + (comma >= 0) + (colon >= 0)
    if ((comma >= 0 and colon >= 0 and colon < comma)
            or len(fields) > 3
            or len(fields) != expected_fields):
        return ValidationFailure(FailureKind.ITEM_MALFORMED)

    index = parse_int(fields[0])
    if index is None:
        return ValidationFailure(FailureKind.ITEM_INDEX_NOT_INTEGER)

    alignment: Optional[int] = None
    if comma >= 0:
        alignment = parse_int(fields[1])
        if alignment is None:
            return ValidationFailure(FailureKind.ITEM_ALIGNMENT_NOT_INTEGER)

    format_spec: Optional[str] = None
    if colon >= 0:
        format_spec = fields[2] if comma >= 0 else fields[1]

    return FormatItem(index=index, alignment=alignment, format_spec=format_spec)


def extract_items(template: str) -> Union[List[FormatItem], ValidationFailure]:
    """
    Scan *template* and return its format items in order of appearance.

    The first item-level failure is returned as soon as it is seen; brace
    balance is only judged once the whole template has been read.
    """
    items: List[FormatItem] = []
    balance = 0
    buffer: Optional[List[str]] = None
    escaping_open = False
    escaping_close = False
    previous = ""

    for current in template:
        prev, previous = previous, current

        if current == "{":
            if prev == "{" and not escaping_open:
                balance -= 1
                escaping_open = True
                buffer = None
                continue

            balance += 1
            escaping_open = False
            if buffer is None:
                buffer = []
            continue

        if prev == "{" and buffer is not None and not current.isdecimal():
            return ValidationFailure(FailureKind.INVALID_CHAR_AFTER_OPEN_BRACE)

        if current == "}":
            escaping_close = prev == "}" and not escaping_close
            balance += 1 if escaping_close else -1

            if buffer is not None:
                parsed = parse_item("".join(buffer))
                if isinstance(parsed, ValidationFailure):
                    return parsed
                items.append(parsed)
                buffer = None
            continue

        if buffer is not None:
            buffer.append(current)

    if balance != 0:
        return ValidationFailure(FailureKind.UNBALANCED_BRACES)

    return items


__all__ = ["extract_items", "parse_item", "parse_int"]
