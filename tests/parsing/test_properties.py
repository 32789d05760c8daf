"""
Property-based tests for the parser engine and the rule grammar using
Hypothesis.

Tests invariants that should hold for all inputs:
- satisfy advances by exactly one character iff the predicate holds
- many always terminates
- parse_full succeeds iff the input is fully consumed
- parse_with_remainder returns the unconsumed suffix
- Rule source roundtrip
"""

import pytest
from hypothesis import given, settings, strategies as st

from urlrewrite.diagnostics.errors import RuleSyntaxError
from urlrewrite.language import parse_rule
from urlrewrite.parsing import (
    Failure,
    Success,
    char,
    digit,
    many,
    one_of,
    optional,
    parse_full,
    parse_with_remainder,
    satisfy,
    spaces,
)


# ============================================================================
# Strategy Definitions
# ============================================================================

small_text = st.text(alphabet="ab1 \n", max_size=20)

names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8)

static_segments = st.builds(
    lambda s: f"/{s}",
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_", min_size=1, max_size=10),
)

variable_segments = st.builds(
    lambda name, modifier: f"/:{name}{modifier}",
    names,
    st.sampled_from(["", "+", "?", "*", "([0-9]+)"]),
)

paths = st.builds(
    "".join,
    st.lists(st.one_of(static_segments, variable_segments), min_size=1, max_size=4),
)

queries = st.builds(
    lambda key, value: f" ??{key}={value}",
    names,
    st.one_of(names, names.map(lambda n: f":{n}"), names.map(lambda n: f":{n}(foo|bar)")),
)

full_paths = st.builds(
    lambda path, qs: path + "".join(qs),
    paths,
    st.lists(queries, max_size=2),
)

arguments = st.one_of(
    names.map(lambda n: f":{n}"),
    names.map(lambda n: f'"{n}"'),
    st.integers(min_value=0, max_value=999).map(str),
    st.sampled_from(["true", "false"]),
)

pipeline_expressions = st.builds(
    lambda target, function, args: f":{target} <- {function}({', '.join(args)})",
    names,
    st.sampled_from(["concat", "upper", "join"]),
    st.lists(arguments, max_size=3),
)

rules = st.builds(
    lambda source, pipeline, destination: (
        f"{source} | {', '.join(pipeline)} | {destination}" if pipeline
        else f"{source} | {destination}"
    ),
    full_paths,
    st.lists(pipeline_expressions, max_size=3),
    full_paths,
)


# ============================================================================
# Property Tests
# ============================================================================

class TestSatisfyProperties:
    """Test the single-character primitive."""

    @given(st.data(), small_text)
    @settings(max_examples=200)
    def test_advances_one_iff_predicate_holds(self, data, text):
        position = data.draw(st.integers(min_value=0, max_value=len(text)))
        parser = satisfy(lambda c, _: c in "ab", "a or b")

        end, outcome = parser(text, position)

        if position < len(text) and text[position] in "ab":
            assert isinstance(outcome, Success)
            assert outcome.value == text[position]
            assert end == position + 1
        else:
            assert isinstance(outcome, Failure)
            assert end == position


class TestRepetitionProperties:
    """Test that repetition terminates and never fails."""

    @given(small_text)
    @settings(max_examples=200)
    def test_many_terminates_on_zero_width_parser(self, text):
        end, outcome = many(optional(char("a")))(text, 0)
        assert isinstance(outcome, Success)
        assert 0 <= end <= len(text)

    @given(small_text)
    @settings(max_examples=200)
    def test_many_consumes_leading_run(self, text):
        end, outcome = many(spaces())(text, 0)
        assert isinstance(outcome, Success)
        assert text[:end].strip() == ""

    @given(small_text)
    @settings(max_examples=200)
    def test_many_digits(self, text):
        end, outcome = many(digit())(text, 0)
        run = len(text) - len(text.lstrip("0123456789"))
        assert end == run
        assert "".join(outcome.value) == text[:run]


class TestDriverProperties:
    """Test the drivers against arbitrary input."""

    @given(st.text(alphabet="abc", max_size=20))
    @settings(max_examples=200)
    def test_parse_full_iff_fully_consumed(self, text):
        parser = many(one_of("ab"))
        end, _ = parser(text, 0)

        if end == len(text):
            assert "".join(parse_full(parser, text)) == text
        else:
            with pytest.raises(RuleSyntaxError) as exc_info:
                parse_full(parser, text)
            assert exc_info.value.message == f"Unexpected end of parser after {end} characters"

    @given(st.text(alphabet="abc", max_size=20))
    @settings(max_examples=200)
    def test_parse_with_remainder_roundtrip(self, text):
        value, remainder = parse_with_remainder(many(one_of("ab")), text)
        assert "".join(value) + remainder == text
        assert not remainder or remainder[0] == "c"


class TestGrammarProperties:
    """Test rule parsing properties."""

    @given(rules)
    @settings(max_examples=100)
    def test_source_roundtrip(self, text):
        rule = parse_rule(text)
        assert parse_rule(rule.to_source()) == rule

    @given(full_paths, full_paths)
    @settings(max_examples=100)
    def test_rule_without_pipeline(self, source, destination):
        rule = parse_rule(f"{source} | {destination}")
        assert rule.expressions == []
        assert rule.source.to_pattern() == source
        assert rule.destination.to_pattern() == destination
