"""Template tokens: grammar and two-pass substitution."""

from formflow.tokens.engine import NEWLINE, TokenEngine, encode_for_format
from formflow.tokens.parser import Literal, Segment, TokenRef, parse, parse_token, render

__all__ = [
    "NEWLINE",
    "Literal",
    "Segment",
    "TokenEngine",
    "TokenRef",
    "encode_for_format",
    "parse",
    "parse_token",
    "render",
]
