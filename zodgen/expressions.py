# File: zodgen/expressions.py
"""
zodgen - Field Expression Builder
==================================
Produces the validation expression for one scalar or enum field.

Pipeline (order matters, modifiers must trail the whole array expression)::

    override extraction → normalisation → default mapping
        → list wrapping → nullability → optionality

Override text is free-form author input, so it is parsed into a tiny
syntax tree before it is touched:

- ``Chain``  a dot-separated sequence of calls, optionally starting with
  a dot (``.min(1).max(5)``).
- ``Call``   a name with optional generic type arguments and an optional
  argument list (``custom<Foo>()``).
- ``Raw``    anything the scanner could not read; rendered verbatim.

Two rewrites normalise a tree:

1. ``z.string``        → ``z.string()``         (bare primitive after ``z``)
2. ``X.array(.min(1))`` → ``X.min(1).array()``   (array wrapper → modifier)

Both recurse into call arguments and into the elements of array and
object literals, and both are idempotent.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from zodgen.models import FieldInfo, FieldKind
from zodgen.state import GenerationState
from zodgen.utils import enum_schema_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.expressions")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

NAMESPACE: str = "z"

SCALAR_EXPRESSIONS: Mapping[str, str] = {
    "String": "z.string()",
    "Int": "z.number().int()",
    "BigInt": "z.bigint()",
    "Float": "z.number()",
    "Decimal": "z.number()",
    "Boolean": "z.boolean()",
    "DateTime": "z.date()",
    "Json": "z.any()",
    "Bytes": "z.instanceof(Buffer)",
}

FALLBACK_EXPRESSION: str = "z.any()"
ENUM_FALLBACK_EXPRESSION: str = "z.string()"

PRIMITIVE_TYPES: FrozenSet[str] = frozenset({
    "string", "number", "bigint", "boolean", "date", "symbol", "any",
    "unknown", "never", "void", "undefined", "null", "literal", "object",
    "map", "set", "record", "enum",
})

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"[A-Za-z_$][\w$]*")
_OVERRIDE_MARKER_RE: re.Pattern[str] = re.compile(r"^@(?:zod|z)(?![\w$])\s*\.?")

_OPENERS: Mapping[str, str] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: FrozenSet[str] = frozenset(_OPENERS.values())
_QUOTES: FrozenSet[str] = frozenset({"'", '"', "`"})


# ---------------------------------------------------------------------------
# Syntax tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Raw:
    """Text the scanner could not read; kept as written."""

    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Call:
    """``name<type_args>(args)``; ``args`` is None for a bare member."""

    name: str
    type_args: Optional[str] = None
    args: Optional[Tuple["Node", ...]] = None

    @property
    def is_invoked(self) -> bool:
        return self.args is not None

    def render(self) -> str:
        text: str = self.name
        if self.type_args is not None:
            text += f"<{self.type_args}>"
        if self.args is not None:
            text += "(" + ", ".join(arg.render() for arg in self.args) + ")"
        return text


@dataclass(frozen=True, slots=True)
class Chain:
    """Dot-separated calls, e.g. ``z.string().min(1)``."""

    calls: Tuple[Call, ...]
    leading_dot: bool = False

    def render(self) -> str:
        body: str = ".".join(call.render() for call in self.calls)
        return f".{body}" if self.leading_dot else body

    @property
    def has_namespace_head(self) -> bool:
        """True when the chain starts with the bare ``z`` token."""
        if self.leading_dot or not self.calls:
            return False
        head: Call = self.calls[0]
        return head.name == NAMESPACE and head.args is None and head.type_args is None

    def has_call(self, *names: str) -> bool:
        """True if any top-level call in the chain has one of *names*."""
        start: int = 1 if self.has_namespace_head else 0
        return any(call.name in names for call in self.calls[start:])

    def ends_with(self, name: str) -> bool:
        if not self.calls:
            return False
        last: Call = self.calls[-1]
        return last.name == name and last.args == ()


Node = Union[Chain, Raw]


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def _split_top_level(text: str, separator: str) -> Optional[List[str]]:
    """
    Split *text* on *separator* outside quotes, brackets and generic
    ``<...>`` arguments.  Returns None when the text is unbalanced.
    """
    parts: List[str] = []
    stack: List[str] = []
    angle: int = 0
    quote: Optional[str] = None
    start: int = 0
    i: int = 0

    while i < len(text):
        ch: str = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return None
        elif not stack and ch == "<" and i > 0 and (text[i - 1].isalnum() or text[i - 1] in "_$"):
            angle += 1
        elif not stack and ch == ">" and angle > 0 and text[i - 1] != "=":
            angle -= 1
        elif ch == separator and not stack and angle == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1

    if quote is not None or stack or angle:
        return None
    parts.append(text[start:])
    return parts


def _matching_close(text: str, start: int) -> Optional[int]:
    """Index of the bracket closing the one at *start*, or None."""
    stack: List[str] = []
    quote: Optional[str] = None
    i: int = start

    while i < len(text):
        ch: str = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return i
        i += 1
    return None


def _matching_angle(text: str) -> Optional[int]:
    """Index of the ``>`` closing the ``<`` at position 0, or None."""
    depth: int = 0
    for i, ch in enumerate(text):
        if ch == "<":
            depth += 1
        elif ch == ">" and (i == 0 or text[i - 1] != "="):
            depth -= 1
            if depth == 0:
                return i
    return None


def _parse_arguments(text: str) -> Optional[Tuple[Node, ...]]:
    if not text.strip():
        return ()
    parts: Optional[List[str]] = _split_top_level(text, ",")
    if parts is None:
        return None
    return tuple(parse_expression(part) for part in parts if part.strip())


def _parse_call(segment: str) -> Optional[Call]:
    match: Optional[re.Match[str]] = _IDENTIFIER_RE.match(segment)
    if match is None:
        return None
    name: str = match.group(0)
    rest: str = segment[match.end():].strip()

    type_args: Optional[str] = None
    if rest.startswith("<"):
        close: Optional[int] = _matching_angle(rest)
        if close is None:
            return None
        type_args = rest[1:close].strip()
        rest = rest[close + 1:].strip()

    if not rest:
        return Call(name, type_args, None)
    if not rest.startswith("("):
        return None

    close = _matching_close(rest, 0)
    if close is None or close != len(rest) - 1:
        return None
    args: Optional[Tuple[Node, ...]] = _parse_arguments(rest[1:close])
    if args is None:
        return None
    return Call(name, type_args, args)


@functools.lru_cache(maxsize=1024)
def parse_expression(text: str) -> Node:
    """Parse expression *text*; unreadable input comes back as ``Raw``."""
    stripped: str = text.strip()
    segments: Optional[List[str]] = _split_top_level(stripped, ".")
    if not stripped or segments is None:
        return Raw(stripped)

    leading_dot: bool = segments[0].strip() == ""
    if leading_dot:
        segments = segments[1:]
    if not segments:
        return Raw(stripped)

    calls: List[Call] = []
    for segment in segments:
        call: Optional[Call] = _parse_call(segment.strip())
        if call is None:
            return Raw(stripped)
        calls.append(call)
    return Chain(tuple(calls), leading_dot)


# ---------------------------------------------------------------------------
# Rewrites
# ---------------------------------------------------------------------------


def _map_args(call: Call, rewrite) -> Call:
    if not call.args:
        return call
    return Call(call.name, call.type_args, tuple(rewrite(arg) for arg in call.args))


def _rewrite_literal(text: str, rewrite: Callable[[Node], Node]) -> str:
    """
    Apply *rewrite* to every element of an array literal, or to every
    property value of an object literal.  Other text is returned as is.
    Whitespace around each element is kept.
    """
    if not text or text[0] not in "[{" or _matching_close(text, 0) != len(text) - 1:
        return text
    parts: Optional[List[str]] = _split_top_level(text[1:-1], ",")
    if parts is None:
        return text

    def rewrite_value(value: str) -> str:
        core: str = value.strip()
        if not core:
            return value
        lead: str = value[: len(value) - len(value.lstrip())]
        trail: str = value[len(value.rstrip()):]
        return f"{lead}{rewrite(parse_expression(core)).render()}{trail}"

    rewritten: List[str] = []
    for part in parts:
        if text[0] == "{":
            pair: Optional[List[str]] = _split_top_level(part, ":")
            if pair is not None and len(pair) > 1:
                rewritten.append(f"{pair[0]}:{rewrite_value(':'.join(pair[1:]))}")
                continue
            rewritten.append(part)
        else:
            rewritten.append(rewrite_value(part))
    return text[0] + ",".join(rewritten) + text[-1]


def call_bare_primitives(node: Node) -> Node:
    """``z.string`` → ``z.string()`` (recursively, including literals)."""
    if isinstance(node, Raw):
        return Raw(_rewrite_literal(node.text, call_bare_primitives))
    calls: List[Call] = [_map_args(call, call_bare_primitives) for call in node.calls]
    if node.has_namespace_head and len(calls) > 1:
        member: Call = calls[1]
        if member.name in PRIMITIVE_TYPES and member.args is None:
            calls[1] = Call(member.name, member.type_args, ())
    return Chain(tuple(calls), node.leading_dot)


def hoist_array_modifier(node: Node) -> Node:
    """``X.array(.chain)`` → ``X.chain.array()`` (recursively, including literals)."""
    if isinstance(node, Raw):
        return Raw(_rewrite_literal(node.text, hoist_array_modifier))
    return Chain(tuple(_hoisted_calls(node)), node.leading_dot)


def _hoisted_calls(chain: Chain) -> List[Call]:
    calls: List[Call] = []
    for index, call in enumerate(chain.calls):
        wrapped: Optional[Node] = call.args[0] if call.args and len(call.args) == 1 else None
        constructor: bool = index == 1 and chain.has_namespace_head
        if (
            call.name == "array"
            and isinstance(wrapped, Chain)
            and wrapped.leading_dot
            and not constructor
        ):
            calls.extend(_hoisted_calls(wrapped))
            calls.append(Call("array", call.type_args, ()))
        else:
            calls.append(_map_args(call, hoist_array_modifier))
    return calls


def normalise(node: Node) -> Node:
    return hoist_array_modifier(call_bare_primitives(node))


def normalise_text(text: str) -> str:
    """Parse, normalise and render *text*."""
    return normalise(parse_expression(text)).render()


# ---------------------------------------------------------------------------
# Override extraction
# ---------------------------------------------------------------------------


def _use_argument(body: str) -> Optional[str]:
    """Literal argument text of a trailing ``use(...)`` call, if any."""
    segments: Optional[List[str]] = _split_top_level(body, ".")
    if not segments:
        return None
    last: str = segments[-1].strip()
    call: Optional[Call] = _parse_call(last)
    if call is None or call.name != "use" or call.args is None:
        return None
    inner: str = last[last.index("(") + 1: last.rindex(")")].strip()
    return inner or None


def extract_override(documentation: Optional[str]) -> Optional[str]:
    """
    Return the normalised override expression encoded in a field's
    documentation, or None when there is none.

    Only the first documentation line is considered.  It must start with
    ``@zod`` or ``@z``; anything else is ordinary documentation.

        >>> extract_override("@zod.string().min(1)")
        'z.string().min(1)'
        >>> extract_override("@z.use(MyCustomSchema)")
        'MyCustomSchema'
    """
    if not documentation or not documentation.strip():
        return None
    first_line: str = documentation.strip().splitlines()[0].strip()
    marker: Optional[re.Match[str]] = _OVERRIDE_MARKER_RE.match(first_line)
    if marker is None:
        return None
    body: str = first_line[marker.end():].strip()
    if not body:
        return None

    passthrough: Optional[str] = _use_argument(body)
    if passthrough is not None:
        return normalise_text(passthrough)

    if body.startswith(f"{NAMESPACE}."):
        expression: str = body
    elif body.startswith("."):
        expression = f"{NAMESPACE}{body}"
    else:
        expression = f"{NAMESPACE}.{body}"
    return normalise_text(expression)


# ---------------------------------------------------------------------------
# Composition helpers
# ---------------------------------------------------------------------------


def is_array(expression: str) -> bool:
    node: Node = parse_expression(expression)
    if isinstance(node, Raw):
        return ".array(" in expression or expression.startswith("z.array(")
    return node.has_call("array")


def ensure_array(expression: str) -> str:
    return expression if is_array(expression) else f"z.array({expression})"


def ensure_nullable(expression: str) -> str:
    node: Node = parse_expression(expression)
    if isinstance(node, Raw):
        declared: bool = ".nullable(" in expression or ".nullish(" in expression
    else:
        declared = node.has_call("nullable", "nullish")
    return expression if declared else f"{expression}.nullable()"


def ensure_optional(expression: str) -> str:
    node: Node = parse_expression(expression)
    if isinstance(node, Raw):
        present: bool = expression.rstrip().endswith(".optional()")
    else:
        present = node.ends_with("optional")
    return expression if present else f"{expression}.optional()"


def default_expression(
    field: FieldInfo,
    state: GenerationState,
    enums: Mapping[str, Sequence[str]],
) -> str:
    """Type-driven expression for a field without an override."""
    if field.kind == FieldKind.ENUM:
        values: Optional[Sequence[str]] = enums.get(field.type_name)
        if values:
            state.record_enum(field.type_name, values)
            return enum_schema_name(field.type_name)
        logger.warning(
            "Field '%s' references unknown or empty enum '%s'; using %s.",
            field.name,
            field.type_name,
            ENUM_FALLBACK_EXPRESSION,
        )
        return ENUM_FALLBACK_EXPRESSION

    mapped: Optional[str] = SCALAR_EXPRESSIONS.get(field.type_name)
    if mapped is None:
        logger.debug(
            "No mapping for scalar type '%s' (field '%s'); using %s.",
            field.type_name,
            field.name,
            FALLBACK_EXPRESSION,
        )
        return FALLBACK_EXPRESSION
    return mapped


def build_field_expression(
    field: FieldInfo,
    state: GenerationState,
    enums: Mapping[str, Sequence[str]],
) -> str:
    """Final object-schema expression for a scalar or enum field."""
    override: Optional[str] = extract_override(field.documentation)
    expression: str = override if override is not None else default_expression(field, state, enums)

    if field.is_list:
        expression = ensure_array(expression)
    elif not field.is_required:
        expression = ensure_nullable(expression)
    if field.is_optional:
        expression = ensure_optional(expression)
    return expression


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SCALAR_EXPRESSIONS",
    "PRIMITIVE_TYPES",
    "Raw",
    "Call",
    "Chain",
    "Node",
    "parse_expression",
    "call_bare_primitives",
    "hoist_array_modifier",
    "normalise",
    "normalise_text",
    "extract_override",
    "is_array",
    "ensure_array",
    "ensure_nullable",
    "ensure_optional",
    "default_expression",
    "build_field_expression",
]

logger.debug("zodgen.expressions loaded.")
