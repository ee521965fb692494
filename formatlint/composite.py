"""
formatlint/composite.py
═══════════════════════

A runtime composite formatter.

``format_composite`` renders ``{index[,alignment][:formatSpec]}`` templates
the way the .NET ``String.Format`` family does and raises
:class:`CompositeFormatError` wherever that family throws.  The validator
uses it as its safety net: it is written independently of
:mod:`formatlint.extractor`, so a template the hand-written grammar lets
through but the formatter rejects is still reported.

Value rendering
───────────────
  None            → ""
  with a spec     → ``format(value, spec)``
  without a spec  → ``str(value)``

Errors raised by a value's own ``__format__`` (an unsupported spec for
that type) propagate unchanged; they are not template errors.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from formatlint.errors import CompositeFormatError

# Index and alignment digits stop accumulating once this bound is reached.
DIGIT_ACCUMULATION_LIMIT = 1_000_000


def _render(value: Any, spec: Optional[str]) -> str:
    if value is None:
        return ""
    if spec is not None:
        return format(value, spec)
    return str(value)


def format_composite(template: str, args: Sequence[Any]) -> str:
    """
    Substitute *args* into *template*.

    >>> format_composite("{0,-4}|{1:>3}|{{x}}", ["ab", 7])
    'ab  |  7|{x}'
    """
    if template is None:
        raise TypeError("template must not be None")

    out: List[str] = []
    length = len(template)
    pos = 0

    def fail(message: str) -> CompositeFormatError:
        return CompositeFormatError(message, min(pos, length))

    while True:
        # literal text up to the next un-escaped '{'
        ch = ""
        while pos < length:
            ch = template[pos]
            pos += 1
            if ch == "}":
                if pos < length and template[pos] == "}":
                    pos += 1
                else:
                    raise fail("unexpected '}' outside a format item")
            elif ch == "{":
                if pos < length and template[pos] == "{":
                    pos += 1
                else:
                    pos -= 1
                    break
            out.append(ch)

        if pos == length:
            break

        # index
        pos += 1
        if pos == length or not "0" <= template[pos] <= "9":
            raise fail("format item must start with a digit")
        index = 0
        while True:
            index = index * 10 + ord(template[pos]) - ord("0")
            pos += 1
            if pos == length:
                raise fail("unterminated format item")
            ch = template[pos]
            if not ("0" <= ch <= "9" and index < DIGIT_ACCUMULATION_LIMIT):
                break
        if index >= len(args):
            raise fail(f"index {index} is out of range for {len(args)} argument(s)")

        while pos < length and template[pos] == " ":
            pos += 1
        ch = template[pos] if pos < length else ""

        # alignment
        left_justify = False
        width = 0
        if ch == ",":
            pos += 1
            while pos < length and template[pos] == " ":
                pos += 1
            if pos == length:
                raise fail("unterminated alignment")
            ch = template[pos]
            if ch == "-":
                left_justify = True
                pos += 1
                if pos == length:
                    raise fail("unterminated alignment")
                ch = template[pos]
            if not "0" <= ch <= "9":
                raise fail("alignment must be a number")
            while True:
                width = width * 10 + ord(ch) - ord("0")
                pos += 1
                if pos == length:
                    raise fail("unterminated alignment")
                ch = template[pos]
                if not ("0" <= ch <= "9" and width < DIGIT_ACCUMULATION_LIMIT):
                    break

        while pos < length and template[pos] == " ":
            pos += 1
        ch = template[pos] if pos < length else ""

        # format spec
        spec: Optional[str] = None
        if ch == ":":
            pos += 1
            spec_chars: List[str] = []
            while True:
                if pos == length:
                    raise fail("unterminated format specifier")
                ch = template[pos]
                pos += 1
                if ch == "{":
                    if pos < length and template[pos] == "{":
                        pos += 1
                    else:
                        raise fail("unexpected '{' in format specifier")
                elif ch == "}":
                    if pos < length and template[pos] == "}":
                        pos += 1
                    else:
                        pos -= 1
                        break
                spec_chars.append(ch)
            spec = "".join(spec_chars)

        if ch != "}":
            raise fail("format item is not closed")
        pos += 1

        text = _render(args[index], spec)
        pad = width - len(text)
        if not left_justify and pad > 0:
            out.append(" " * pad)
        out.append(text)
        if left_justify and pad > 0:
            out.append(" " * pad)

    return "".join(out)


__all__ = ["format_composite", "DIGIT_ACCUMULATION_LIMIT"]
