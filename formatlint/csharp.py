"""
formatlint/csharp.py
════════════════════

A lightweight C# front-end for the string-format rule.

This is not a C# compiler.  It finds ``Receiver.Method(`` invocations in
source text, parses their argument lists with a Parsimonious PEG grammar
and answers the :class:`~formatlint.rule.CallSiteResolver` questions from
what a single file declares:

  receiver types    well-known static classes, ``Console.Out``/``Error``,
                    and locals declared ``T name`` or ``var name = new T(``
  constants         string literals, ``null``, ``+`` of constants and
                    ``const string`` fields
  array arguments   ``new[] {..}`` / ``new T[] {..}`` (size known), other
                    array creations and ``T[] name`` locals (size unknown)
  format providers  a whole argument that is a ``CultureInfo``/``NumberFormatInfo``/
                    ``DateTimeFormatInfo`` member, ``new CultureInfo(..)``, or a
                    local typed ``IFormatProvider``/``CultureInfo``

Declarations are collected per file without scoping.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Set,
    Tuple,
)

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from formatlint.diagnostics import SourceLocation
from formatlint.errors import SourceParseError
from formatlint.model import FormatArgument
from formatlint.rule import Constant, FormatMethodSignature

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — ARGUMENT-LIST GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

ARGUMENT_GRAMMAR = Grammar(r'''
    argument_list       = "(" _ arguments? _ ")"
    arguments           = argument (_ "," _ argument)*
    argument            = named_prefix? expression
    named_prefix        = identifier _ ":" !":" _

    expression          = array_creation / constant_argument / opaque

    # ─────────────────────────────────────────────────────────────
    # Constant-shaped expressions: literals, null, names and '+'
    # ─────────────────────────────────────────────────────────────

    constant_argument   = constant_expr &argument_end
    constant_expr       = constant_term (_ "+" _ constant_term)*
    constant_term       = null_literal / string_literal / paren_constant / name_ref
    paren_constant      = "(" _ constant_expr _ ")"
    argument_end        = _ ("," / ")")

    # ─────────────────────────────────────────────────────────────
    # Array creation with an initializer
    # ─────────────────────────────────────────────────────────────

    array_creation      = "new" _ element_type? _ "[" rank "]" _ initializer &argument_end
    element_type        = ~r"[A-Za-z_][A-Za-z0-9_.]*(?:<[^>]*>)?\??"
    rank                = ~r"[^\]]*"
    initializer         = "{" _ elements? _ "}"
    elements            = element (_ "," _ element)* (_ ",")?
    element             = initializer / element_chunk+
    element_chunk       = balanced / interpolated_string / string_literal / char_literal / "@" / type_arguments / ~r"[^,(){}\[\]\"'@<$]+" / "<" / "$"

    # ─────────────────────────────────────────────────────────────
    # Anything else: balanced text up to the next top-level ',' or ')'
    # ─────────────────────────────────────────────────────────────

    opaque              = chunk+
    chunk               = balanced / interpolated_string / string_literal / char_literal / "@" / type_arguments / ~r"[^,()\[\]{}\"'@<$]+" / "<" / "$"
    balanced            = ("(" inner ")") / ("[" inner "]") / ("{" inner "}")
    inner               = (balanced / interpolated_string / string_literal / char_literal / "@" / ~r"[^()\[\]{}\"'@$]+" / "$")*

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    string_literal      = verbatim_string / regular_string
    verbatim_string     = ~r'@"(?:[^"]|"")*"'
    regular_string      = ~r'"(?:[^"\\\n]|\\.)*"'
    char_literal        = ~r"'(?:[^'\\\n]|\\.)+'"
    interpolated_string = ~r'(?:\$@|@\$)"(?:[^"]|"")*"' / ~r'\$"(?:[^"\\\n]|\\.)*"'
    # only when followed by a call, member access, indexer or initializer
    type_arguments      = ~r"<(?:[^<>()\"';{}]|<[^<>()\"';{}]*>)*>(?=\s*[(.\[{])"
    null_literal        = ~r"null\b"
    name_ref            = ~r"(?:global::)?[A-Za-z_][A-Za-z0-9_]*(?:\s*\.\s*[A-Za-z_][A-Za-z0-9_]*)*"
    identifier          = ~r"[A-Za-z_][A-Za-z0-9_]*"
    _                   = ~r"(?:\s+|//[^\n]*|/\*.*?\*/)*"s
''')


class Term(NamedTuple):
    """One operand of a constant-shaped expression."""
    kind: str                # "string", "null" or "name"
    value: Optional[str]


@dataclass(frozen=True)
class ArgumentExpression:
    """
    A parsed call argument.

    Attributes
    ----------
    text       : source text of the expression (without a named prefix)
    offset     : offset of the expression in the file
    terms      : operands when the expression is constant-shaped, else None
    array_size : element count of an array creation with initializer
    """
    text: str
    offset: int
    terms: Optional[Tuple[Term, ...]] = None
    array_size: Optional[int] = None


_SIMPLE_ESCAPES = {
    "'": "'", '"': '"', "\\": "\\", "0": "\0", "a": "\a", "b": "\b",
    "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
}

_ESCAPE_RE = re.compile(r"\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|x[0-9A-Fa-f]{1,4}|.)")


def decode_string_literal(literal: str) -> str:
    """Decode a C# regular or verbatim string literal to its value."""
    if literal.startswith("@"):
        return literal[2:-1].replace('""', '"')

    def replace(match: "re.Match[str]") -> str:
        esc = match.group(1)
        if esc[0] in "uUx" and len(esc) > 1:
            return chr(int(esc[1:], 16))
        if esc in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[esc]
        raise ValueError(f"unrecognized escape sequence \\{esc}")

    return _ESCAPE_RE.sub(replace, literal[1:-1])


def _normalize_name(text: str) -> str:
    name = re.sub(r"\s+", "", text)
    if name.startswith("global::"):
        name = name[len("global::"):]
    if name.startswith("this."):
        name = name[len("this."):]
    return name


class ArgumentVisitor(NodeVisitor):
    """Turns an ``argument_list`` parse tree into ArgumentExpressions."""

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children or node

    @staticmethod
    def _collect(value: Any, kind: type) -> List[Any]:
        if isinstance(value, kind):
            return [value]
        if isinstance(value, list):
            found: List[Any] = []
            for child in value:
                found.extend(ArgumentVisitor._collect(child, kind))
            return found
        return []

    def visit_argument_list(self, node: Node, visited_children: List[Any]) -> List[ArgumentExpression]:
        return self._collect(visited_children, ArgumentExpression)

    def visit_argument(self, node: Node, visited_children: List[Any]) -> ArgumentExpression:
        _, expression = visited_children
        return expression

    def visit_expression(self, node: Node, visited_children: List[Any]) -> ArgumentExpression:
        return visited_children[0]

    def visit_constant_argument(self, node: Node, visited_children: List[Any]) -> ArgumentExpression:
        terms, _ = visited_children
        return ArgumentExpression(text=node.text.strip(), offset=node.start,
                                  terms=tuple(terms))

    def visit_constant_expr(self, node: Node, visited_children: List[Any]) -> List[Term]:
        return self._collect(visited_children, Term)

    def visit_paren_constant(self, node: Node, visited_children: List[Any]) -> List[Term]:
        return self._collect(visited_children, Term)

    def visit_null_literal(self, node: Node, visited_children: List[Any]) -> Term:
        return Term("null", None)

    def visit_regular_string(self, node: Node, visited_children: List[Any]) -> Term:
        return Term("string", decode_string_literal(node.text))

    def visit_verbatim_string(self, node: Node, visited_children: List[Any]) -> Term:
        return Term("string", decode_string_literal(node.text))

    def visit_name_ref(self, node: Node, visited_children: List[Any]) -> Term:
        return Term("name", _normalize_name(node.text))

    def visit_array_creation(self, node: Node, visited_children: List[Any]) -> ArgumentExpression:
        size = visited_children[8]
        return ArgumentExpression(text=node.text.strip(), offset=node.start,
                                  array_size=size)

    def visit_initializer(self, node: Node, visited_children: List[Any]) -> int:
        _, _, elements, _, _ = visited_children
        # elements? → [] or [count]
        return elements[0] if isinstance(elements, list) and elements else 0

    def visit_elements(self, node: Node, visited_children: List[Any]) -> int:
        _, rest, _ = visited_children
        return 1 + (len(rest) if isinstance(rest, list) else 0)

    def visit_opaque(self, node: Node, visited_children: List[Any]) -> ArgumentExpression:
        return ArgumentExpression(text=node.text.strip(), offset=node.start)


_VISITOR = ArgumentVisitor()


def parse_arguments(text: str, pos: int) -> Tuple[List[ArgumentExpression], int]:
    """
    Parse the argument list whose ``(`` is at *pos*.

    Returns the arguments and the offset just past the closing ``)``.
    Raises SourceParseError when the list is malformed.
    """
    try:
        node = ARGUMENT_GRAMMAR["argument_list"].match(text, pos=pos)
        arguments = _VISITOR.visit(node)
    except ParseError as exc:
        raise SourceParseError(f"cannot parse argument list: {exc}") from exc
    except VisitationError as exc:
        raise SourceParseError(f"cannot read argument list: {exc}") from exc
    return arguments, node.end


def parse_constant(text: str, pos: int) -> List[Term]:
    """Parse a constant-shaped expression starting at *pos*."""
    try:
        node = ARGUMENT_GRAMMAR["constant_expr"].match(text, pos=pos)
        return _VISITOR.visit(node)
    except (ParseError, VisitationError) as exc:
        raise SourceParseError(f"cannot parse constant: {exc}") from exc


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — SOURCE SCANNING
# ═══════════════════════════════════════════════════════════════════

_MASK_RE = re.compile(
    r'//[^\n]*'
    r'|/\*.*?\*/'
    r'|(?:\$@|@\$|@)"(?:[^"]|"")*"'
    r'|\$?"(?:[^"\\\n]|\\.)*"'
    r"|'(?:[^'\\\n]|\\.)+'",
    re.DOTALL,
)


def mask_source(text: str) -> str:
    """
    Blank out comments and the contents of string/char literals.

    Offsets and line breaks are preserved, so matches in the masked text
    point at the same places in the original.
    """
    def blank(match: "re.Match[str]") -> str:
        token = match.group(0)
        if token.startswith("/"):
            return re.sub(r"[^\n]", " ", token)
        if token[:3] in ('$@"', '@$"'):
            opener = 3
        elif token[:2] in ('@"', '$"'):
            opener = 2
        else:
            opener = 1
        inner = re.sub(r"[^\n]", " ", token[opener:-1])
        return token[:opener] + inner + token[-1]

    return _MASK_RE.sub(blank, text)


_INVOCATION_RE = re.compile(
    r"(?<![\w.])(?P<chain>(?:global::)?[A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)+)\s*\("
)

_TYPED_DECL_RE = re.compile(
    r"(?<![\w.])(?P<type>[A-Za-z_][\w.]*)(?P<array>\s*\[\s*\])?\s+"
    r"(?P<name>[A-Za-z_]\w*)\s*(?=[=;,)])"
)

_VAR_NEW_RE = re.compile(
    r"\bvar\s+(?P<name>[A-Za-z_]\w*)\s*=\s*new\s*(?P<type>[A-Za-z_][\w.]*)?\s*(?P<open>[(\[{])"
)

_CONST_STRING_RE = re.compile(
    r"\bconst\s+(?:string|String|System\.String)\s+(?P<name>[A-Za-z_]\w*)\s*=\s*"
)

_ARRAY_CREATION_RE = re.compile(r"^new\s*[\w.<>?]*\s*\[")

_PROVIDER_MEMBER_RE = re.compile(
    r"(?:System\.Globalization\.)?(?:CultureInfo|NumberFormatInfo|DateTimeFormatInfo)"
    r"\.[A-Za-z_][A-Za-z0-9_]*"
)
_PROVIDER_CREATION_RE = re.compile(
    r"^new\s+(?:System\.Globalization\.)?CultureInfo\s*\([^()]*\)$"
)

_KEYWORDS = frozenset({
    "return", "new", "throw", "await", "yield", "case", "goto", "using",
    "else", "in", "is", "as", "out", "ref", "params", "typeof", "sizeof",
})

# simple or qualified type name → fully-qualified name
_KNOWN_TYPES: Dict[str, str] = {}
for _full in (
    "System.String",
    "System.Console",
    "System.Text.StringBuilder",
    "System.IO.TextWriter",
    "System.IO.StreamWriter",
    "System.IO.StringWriter",
    "System.Diagnostics.Debug",
    "System.Diagnostics.Trace",
    "System.Diagnostics.TraceSource",
    "System.IFormatProvider",
    "System.Globalization.CultureInfo",
):
    _KNOWN_TYPES[_full] = _full
    _KNOWN_TYPES[_full.rsplit(".", 1)[1]] = _full
_KNOWN_TYPES["string"] = "System.String"

_BASE_TYPES: Dict[str, str] = {
    "System.IO.StreamWriter": "System.IO.TextWriter",
    "System.IO.StringWriter": "System.IO.TextWriter",
}

_WELL_KNOWN_MEMBERS: Dict[str, str] = {
    "Console.Out": "System.IO.TextWriter",
    "Console.Error": "System.IO.TextWriter",
    "System.Console.Out": "System.IO.TextWriter",
    "System.Console.Error": "System.IO.TextWriter",
}

_PROVIDER_TYPES = frozenset({"System.IFormatProvider", "System.Globalization.CultureInfo"})


@dataclass(frozen=True)
class CSharpCallSite:
    """An invocation found in C# source."""
    receiver: str
    method: str
    arguments: Tuple[ArgumentExpression, ...]
    location: SourceLocation
    offset: int


@dataclass
class CSharpSourceResolver:
    """
    Scans one C# file and resolves call-site questions about it.

    Usage
    -----
    >>> resolver = CSharpSourceResolver(text, path="Program.cs")
    >>> rule = FormatCallRule(resolver)
    >>> diagnostics = rule.check_all(resolver.calls())
    """
    text: str
    path: str = "<string>"
    skipped: int = 0
    _masked: str = field(init=False, repr=False)
    _variable_types: Dict[str, str] = field(init=False, default_factory=dict)
    _array_variables: Set[str] = field(init=False, default_factory=set)
    _const_sources: Dict[str, int] = field(init=False, default_factory=dict)
    _const_values: Dict[str, Optional[Constant]] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self._masked = mask_source(self.text)
        self._collect_declarations()

    # ── declarations ─────────────────────────────────────────────────

    def _collect_declarations(self) -> None:
        for m in _TYPED_DECL_RE.finditer(self._masked):
            type_name, name = m.group("type"), m.group("name")
            if type_name in _KEYWORDS or name in _KEYWORDS:
                continue
            if m.group("array"):
                self._array_variables.add(name)
            elif type_name in _KNOWN_TYPES:
                self._variable_types[name] = _KNOWN_TYPES[type_name]

        for m in _VAR_NEW_RE.finditer(self._masked):
            name = m.group("name")
            if m.group("open") in "[{":
                self._array_variables.add(name)
            elif m.group("type") in _KNOWN_TYPES:
                self._variable_types[name] = _KNOWN_TYPES[m.group("type")]

        for m in _CONST_STRING_RE.finditer(self._masked):
            self._const_sources[m.group("name")] = m.end()

        logger.debug("%s: %d typed local(s), %d array local(s), %d constant(s)",
                     self.path, len(self._variable_types),
                     len(self._array_variables), len(self._const_sources))

    def _const_value(self, name: str, resolving: Tuple[str, ...] = ()) -> Optional[Constant]:
        simple = name.rsplit(".", 1)[-1]
        if simple not in self._const_sources or simple in resolving:
            return None
        if simple not in self._const_values:
            try:
                terms = parse_constant(self.text, self._const_sources[simple])
            except SourceParseError as exc:
                logger.debug("%s: constant %s not understood: %s",
                             self.path, simple, exc)
                terms = []
            value = self._fold(terms, resolving + (simple,)) if terms else None
            self._const_values[simple] = value
        return self._const_values[simple]

    def _fold(self, terms: Iterable[Term], resolving: Tuple[str, ...] = ()) -> Optional[Constant]:
        terms = list(terms)
        if len(terms) == 1 and terms[0].kind == "null":
            return Constant(None)
        parts: List[str] = []
        for term in terms:
            if term.kind == "string":
                parts.append(term.value or "")
            elif term.kind == "null":
                continue
            else:
                resolved = self._const_value(term.value or "", resolving)
                if resolved is None:
                    return None
                parts.append(resolved.value or "")
        return Constant("".join(parts))

    # ── scanning ─────────────────────────────────────────────────────

    def location_of(self, offset: int) -> SourceLocation:
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return SourceLocation(file=self.path, line=line, column=column)

    def calls(self) -> Iterator[CSharpCallSite]:
        """Yield every ``Receiver.Method(...)`` invocation in the file."""
        for m in _INVOCATION_RE.finditer(self._masked):
            chain = _normalize_name(m.group("chain"))
            receiver, _, method = chain.rpartition(".")
            if not receiver:
                continue
            open_paren = m.end() - 1
            try:
                arguments, _ = parse_arguments(self.text, open_paren)
            except SourceParseError as exc:
                self.skipped += 1
                location = self.location_of(m.start())
                logger.warning("%s: skipping %s call: %s", location, chain, exc)
                continue
            yield CSharpCallSite(
                receiver=receiver,
                method=method,
                arguments=tuple(arguments),
                location=self.location_of(m.start()),
                offset=m.start(),
            )

    # ── CallSiteResolver ─────────────────────────────────────────────

    def receiver_type(self, receiver: str) -> Optional[str]:
        if receiver in _WELL_KNOWN_MEMBERS:
            return _WELL_KNOWN_MEMBERS[receiver]
        if receiver in self._variable_types:
            return self._variable_types[receiver]
        return _KNOWN_TYPES.get(receiver)

    @staticmethod
    def is_subtype(type_name: str, base: str) -> bool:
        current: Optional[str] = type_name
        while current is not None:
            if current == base:
                return True
            current = _BASE_TYPES.get(current)
        return False

    def tracked_signature(
        self, call: CSharpCallSite, signatures: Iterable[FormatMethodSignature]
    ) -> Optional[FormatMethodSignature]:
        receiver_type = self.receiver_type(call.receiver)
        for signature in signatures:
            if signature.method_name != call.method:
                continue
            if receiver_type is not None and self.is_subtype(receiver_type, signature.type_name):
                return signature
            # types outside the built-in table are matched by name
            if receiver_type is None and (
                    call.receiver == signature.type_name
                    or call.receiver == signature.type_name.rsplit(".", 1)[-1]):
                return signature
        return None

    def call_arguments(self, call: CSharpCallSite) -> Tuple[ArgumentExpression, ...]:
        return call.arguments

    def call_location(self, call: CSharpCallSite) -> SourceLocation:
        return call.location

    def is_format_provider(self, expression: ArgumentExpression) -> bool:
        if expression.terms is not None:
            if len(expression.terms) != 1 or expression.terms[0].kind != "name":
                return False
            name = expression.terms[0].value or ""
            return (self._variable_types.get(name) in _PROVIDER_TYPES
                    or _PROVIDER_MEMBER_RE.fullmatch(name) is not None)
        return _PROVIDER_CREATION_RE.match(expression.text) is not None

    def constant_value(self, expression: ArgumentExpression) -> Optional[Constant]:
        if expression.terms is None:
            return None
        return self._fold(expression.terms)

    def describe_argument(self, expression: ArgumentExpression) -> FormatArgument:
        if expression.array_size is not None:
            return FormatArgument.array(expression.text, expression.array_size)
        if expression.terms is not None and len(expression.terms) == 1:
            term = expression.terms[0]
            if term.kind == "name" and term.value in self._array_variables:
                return FormatArgument.array(expression.text)
        if _ARRAY_CREATION_RE.match(expression.text):
            return FormatArgument.array(expression.text)
        return FormatArgument.scalar(expression.text)


__all__ = [
    "ARGUMENT_GRAMMAR",
    "ArgumentExpression",
    "ArgumentVisitor",
    "CSharpCallSite",
    "CSharpSourceResolver",
    "Term",
    "decode_string_literal",
    "mask_source",
    "parse_arguments",
    "parse_constant",
]
