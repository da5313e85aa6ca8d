"""
Message template parsing and rendering.

A message template is text with named holes, e.g.
``"User {UserId} logged in from {@Location}"``. Supported hole syntax:

- ``{Name}``: render the property value
- ``{@Name}``: render the value as structured data (compact JSON)
- ``{$Name}``: render ``str(value)``
- ``{Name:fmt}``: apply ``format(value, fmt)``
- ``{{`` and ``}}``: literal braces

Holes whose property is missing are rendered back as their original text so
a template mismatch never hides the rest of the message.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

import orjson

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


@dataclass(frozen=True)
class TextToken:
    text: str


@dataclass(frozen=True)
class PropertyToken:
    name: str
    raw: str
    format: str | None = None
    operator: str = ""  # "", "@" or "$"


Token = Union[TextToken, PropertyToken]


def _parse_hole(raw: str) -> PropertyToken | None:
    body = raw[1:-1]
    operator = ""
    if body[:1] in ("@", "$"):
        operator, body = body[0], body[1:]
    fmt: str | None = None
    if ":" in body:
        body, fmt = body.split(":", 1)
    if not _NAME_RE.match(body):
        return None
    return PropertyToken(name=body, raw=raw, format=fmt, operator=operator)


@lru_cache(maxsize=1024)
def parse_template(template: str) -> tuple[Token, ...]:
    """Split a template into text and property tokens."""
    tokens: list[Token] = []
    text: list[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "{":
            if i + 1 < n and template[i + 1] == "{":
                text.append("{")
                i += 2
                continue
            end = template.find("}", i + 1)
            if end == -1:
                text.append(template[i:])
                break
            raw = template[i : end + 1]
            token = _parse_hole(raw)
            if token is None:
                text.append(raw)
            else:
                if text:
                    tokens.append(TextToken("".join(text)))
                    text = []
                tokens.append(token)
            i = end + 1
            continue
        if ch == "}" and i + 1 < n and template[i + 1] == "}":
            text.append("}")
            i += 2
            continue
        text.append(ch)
        i += 1
    if text:
        tokens.append(TextToken("".join(text)))
    return tuple(tokens)


def _to_json(value: Any) -> str:
    return orjson.dumps(
        value,
        default=str,
        option=orjson.OPT_NON_STR_KEYS,
    ).decode("utf-8")


def render_value(value: Any, fmt: str | None = None, operator: str = "") -> str:
    """Render a single property value to display text.

    Strings render as-is, sequences as ``[a, b]``, mappings and other
    structured values as compact JSON.
    """
    if value is None:
        return "null"
    if operator == "$":
        return str(value)
    if operator == "@":
        return _to_json(value)
    if fmt:
        try:
            return format(value, fmt)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return _to_json(value)
    if isinstance(value, (Sequence, Set)) and not isinstance(
        value, (bytes, bytearray)
    ):
        return "[" + ", ".join(render_value(v) for v in value) + "]"
    return str(value)


def render(template: str, properties: Mapping[str, Any]) -> str:
    """Render ``template`` against ``properties``."""
    out: list[str] = []
    for token in parse_template(template):
        if isinstance(token, TextToken):
            out.append(token.text)
        elif token.name in properties:
            out.append(
                render_value(properties[token.name], token.format, token.operator)
            )
        else:
            out.append(token.raw)
    return "".join(out)
