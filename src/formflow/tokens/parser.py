# src/formflow/tokens/parser.py
"""Template token grammar.

A template is literal text with tokens embedded in braces:

    {name}
    {name|flag}
    {name|param:value}
    {name|param1:value1|param2:value2}

Grammar:
- A token runs from ``{`` to the shortest following ``}`` (non-greedy).
  The body must be at least one character and cannot span lines.
- The first ``|``-separated segment, trimmed, is the token name.
- Every further segment is a parameter, split once on ``:``. The name is
  trimmed; the value is taken verbatim. A segment without ``:`` is a flag
  whose value is ``True``.

Parsing never fails. Malformed segments degrade to empty names or values.

Usage:
    >>> parse("Hi {user|display_name}!")
    [Literal(text='Hi '), TokenRef(name='user', params={'display_name': True}, raw='{user|display_name}'), Literal(text='!')]
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

TOKEN_PATTERN = re.compile(r"\{(.+?)\}")

ParamValue = str | bool


@dataclass(frozen=True)
class Literal:
    """Literal template text, emitted verbatim."""

    text: str


@dataclass(frozen=True)
class TokenRef:
    """A parsed token.

    Attributes:
        name: Trimmed token name
        params: Ordered, read-only parameters (value ``True`` for flags)
        raw: The exact source text including braces
    """

    name: str
    params: Mapping[str, ParamValue] = field(default_factory=dict)
    raw: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __repr__(self) -> str:
        return f"TokenRef(name={self.name!r}, params={dict(self.params)!r}, raw={self.raw!r})"

    def param(self, name: str, default: str | None = None) -> str | None:
        """A string-valued parameter; flags and missing parameters give ``default``."""
        value = self.params.get(name)
        return value if isinstance(value, str) else default

    def flag(self, name: str) -> bool:
        """Whether a parameter was given the literal value ``true``."""
        return self.params.get(name) == "true"

    @property
    def first_param_name(self) -> str | None:
        """Name of the first parameter, used by tokens like {user|email}."""
        return next(iter(self.params), None)


Segment = Literal | TokenRef


def has_tokens(text: str) -> bool:
    return "{" in text


def parse_token(body: str, raw: str | None = None) -> TokenRef:
    """Parse the text between the braces of one token."""
    name, *segments = body.split("|")
    params: dict[str, ParamValue] = {}
    for segment in segments:
        param_name, sep, param_value = segment.partition(":")
        params[param_name.strip()] = param_value if sep else True
    return TokenRef(name=name.strip(), params=params, raw=raw if raw is not None else "{" + body + "}")


def parse(text: str) -> list[Segment]:
    """Split a template into literal spans and token references.

    Text with no ``{`` comes back as a single literal (or nothing when empty).
    """
    if not has_tokens(text):
        return [Literal(text)] if text else []

    segments: list[Segment] = []
    position = 0
    for match in TOKEN_PATTERN.finditer(text):
        if match.start() > position:
            segments.append(Literal(text[position : match.start()]))
        segments.append(parse_token(match.group(1), raw=match.group(0)))
        position = match.end()
    if position < len(text):
        segments.append(Literal(text[position:]))
    return segments


def render(segments: list[Segment]) -> str:
    """Join segments back into text, tokens as their raw source."""
    return "".join(segment.text if isinstance(segment, Literal) else segment.raw for segment in segments)
