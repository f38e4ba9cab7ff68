# tests/tokens/test_parser.py
"""Tests for the template token grammar."""

import pytest

from formflow.tokens.parser import Literal, TokenRef, parse, parse_token, render


class TestParseToken:
    def test_bare_name(self) -> None:
        token = parse_token("site_title")
        assert token.name == "site_title"
        assert dict(token.params) == {}
        assert token.raw == "{site_title}"

    def test_name_and_parameter_names_are_trimmed_values_are_not(self) -> None:
        token = parse_token(" date | format: %Y ")
        assert token.name == "date"
        assert token.param("format") == " %Y "

    def test_flag_without_colon_is_true(self) -> None:
        token = parse_token("user|email")
        assert dict(token.params) == {"email": True}
        assert token.first_param_name == "email"
        # Flags are not string parameters
        assert token.param("email") is None

    def test_value_split_on_first_colon_only(self) -> None:
        token = parse_token("date|format:H:i:s")
        assert token.param("format") == "H:i:s"

    def test_multiple_parameters_keep_order(self) -> None:
        token = parse_token("element|id:7.city|separator:; |format:text")
        assert list(token.params) == ["id", "separator", "format"]
        assert token.param("id") == "7.city"
        assert token.param("separator") == "; "

    def test_flag_helper_only_matches_literal_true(self) -> None:
        assert parse_token("all_form_data|showEmptyFields:true").flag("showEmptyFields") is True
        assert parse_token("all_form_data|showEmptyFields:1").flag("showEmptyFields") is False
        assert parse_token("all_form_data|showEmptyFields").flag("showEmptyFields") is False

    def test_params_are_read_only(self) -> None:
        token = parse_token("uniqid|prefix:abc")
        with pytest.raises(TypeError):
            token.params["prefix"] = "x"  # type: ignore[index]

    def test_raw_is_preserved_when_given(self) -> None:
        assert parse_token("x", raw="{x}").raw == "{x}"


class TestParse:
    def test_text_without_braces_is_one_literal(self) -> None:
        assert parse("plain text") == [Literal("plain text")]

    def test_empty_text_has_no_segments(self) -> None:
        assert parse("") == []

    def test_tokens_and_literals_alternate(self) -> None:
        segments = parse("Hi {user|display_name}, see {url}.")
        assert segments[0] == Literal("Hi ")
        assert isinstance(segments[1], TokenRef)
        assert segments[1].name == "user"
        assert segments[2] == Literal(", see ")
        assert isinstance(segments[3], TokenRef)
        assert segments[3].raw == "{url}"
        assert segments[4] == Literal(".")

    def test_match_is_non_greedy(self) -> None:
        segments = parse("{a}{b}")
        assert [s.name for s in segments if isinstance(s, TokenRef)] == ["a", "b"]

    def test_empty_braces_are_literal(self) -> None:
        assert parse("{}") == [Literal("{}")]

    def test_unclosed_brace_is_literal(self) -> None:
        assert parse("a {b") == [Literal("a {b")]

    def test_token_cannot_span_lines(self) -> None:
        segments = parse("{a\nb}")
        assert all(isinstance(s, Literal) for s in segments)

    def test_render_reproduces_source(self) -> None:
        source = "x {a|b:c} y {d} z"
        assert render(parse(source)) == source

    def test_repr_shows_plain_params(self) -> None:
        assert repr(parse_token("a|b:c")) == "TokenRef(name='a', params={'b': 'c'}, raw='{a|b:c}')"
