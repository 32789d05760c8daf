"""
Parser combinators.

Every function in this module is a factory: it returns a parser, i.e. a
callable ``(text, position) -> (end_position, outcome)``. Building a parser
has no side effects and consumes no input, so parsers can be created once
and shared freely.

``satisfy`` is the only primitive that looks at characters; everything else
is composed from it.

Example::

    >>> p = sequence(char("("), number(), char(")"))
    >>> p("(42)", 0)
    (4, Success(value=['(', 42, ')']))
"""

from typing import Any, Callable, List, Optional

from .errors import (
    end_of_input,
    missing_repetition,
    no_choice,
    unexpected,
)
from .outcome import Failure, Parser, Success

__all__ = [
    "satisfy",
    "any_char",
    "space",
    "tab",
    "new_line",
    "whitespace",
    "char",
    "digit",
    "letter",
    "upper",
    "lower",
    "alpha_num",
    "one_of",
    "none_of",
    "string",
    "spaces",
    "many",
    "many1",
    "skip",
    "skip_many",
    "sequence",
    "choice",
    "optional",
    "between",
    "separated_by",
    "fmap",
    "chain",
    "lazy",
    "number",
    "word",
    "string_literal",
]

Predicate = Callable[[str, Optional[str]], bool]


# ============================================================================
# Primitive
# ============================================================================

def satisfy(predicate: Predicate, expected: Optional[str] = None) -> Parser:
    """
    Consume one character if ``predicate(char, previous_char)`` holds.

    ``previous_char`` is ``None`` at the start of the input.
    """
    def parse(text: str, position: int):
        if position >= len(text):
            return position, Failure(end_of_input(position))
        current = text[position]
        previous = text[position - 1] if position > 0 else None
        if predicate(current, previous):
            return position + 1, Success(current)
        return position, Failure(unexpected(current, position, expected))

    return parse


# ============================================================================
# Character classes
# ============================================================================

def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def any_char() -> Parser:
    return satisfy(lambda c, _: True)


def space() -> Parser:
    return satisfy(lambda c, _: c == " ", "space")


def tab() -> Parser:
    return satisfy(lambda c, _: c == "\t", "tab")


def new_line() -> Parser:
    return satisfy(lambda c, _: c == "\n", "new line")


def whitespace() -> Parser:
    return satisfy(lambda c, _: c in (" ", "\t", "\n"), "whitespace")


def char(expected: str) -> Parser:
    return satisfy(lambda c, _: c == expected, expected)


def digit() -> Parser:
    return satisfy(lambda c, _: _is_digit(c), "any digit")


def letter() -> Parser:
    return satisfy(lambda c, _: _is_lower(c) or _is_upper(c), "any letter")


def upper() -> Parser:
    return satisfy(lambda c, _: _is_upper(c), "any uppercase letter")


def lower() -> Parser:
    return satisfy(lambda c, _: _is_lower(c), "any lowercase letter")


def alpha_num() -> Parser:
    return satisfy(
        lambda c, _: _is_lower(c) or _is_upper(c) or _is_digit(c),
        "any alphanumeric character",
    )


def one_of(chars: str) -> Parser:
    return satisfy(lambda c, _: c in chars, f"one of {chars}")


def none_of(chars: str) -> Parser:
    return satisfy(lambda c, _: c not in chars, f"none of {chars}")


# ============================================================================
# Strings
# ============================================================================

def string(literal: str) -> Parser:
    """
    Match ``literal`` character by character.

    On failure the reported position is the first mismatching offset. That
    position is informational only; callers that backtrack restart from
    their own start position.
    """
    def parse(text: str, position: int):
        for offset, expected in enumerate(literal):
            current = position + offset
            if current >= len(text):
                return current, Failure(end_of_input(current))
            if text[current] != expected:
                return current, Failure(unexpected(text[current], current, literal))
        return position + len(literal), Success(literal)

    return parse


def spaces() -> Parser:
    """Zero or more whitespace characters, joined."""
    return fmap(many(whitespace()), "".join)


# ============================================================================
# Repetition
# ============================================================================

def many(parser: Parser) -> Parser:
    """
    Apply ``parser`` until it fails. Never fails itself.

    A success that consumes nothing ends the repetition, so parsers that
    can match the empty string do not loop forever.
    """
    def parse(text: str, position: int):
        results: List[Any] = []
        current = position
        while True:
            end, outcome = parser(text, current)
            if isinstance(outcome, Failure) or end == current:
                return current, Success(results)
            results.append(outcome.value)
            current = end

    return parse


def many1(parser: Parser) -> Parser:
    """Like :func:`many` but at least one match is required."""
    repeat = many(parser)

    def parse(text: str, position: int):
        end, outcome = parser(text, position)
        if isinstance(outcome, Failure):
            return position, Failure(missing_repetition(position))
        rest_end, rest = repeat(text, end)
        return rest_end, Success([outcome.value, *rest.value])

    return parse


def skip(parser: Parser) -> Parser:
    """Run ``parser`` and discard its value."""
    def parse(text: str, position: int):
        end, outcome = parser(text, position)
        if isinstance(outcome, Failure):
            return end, outcome
        return end, Success(None)

    return parse


def skip_many(parser: Parser) -> Parser:
    """Run ``parser`` zero or more times, discarding values."""
    return skip(many(parser))


# ============================================================================
# Composition
# ============================================================================

def sequence(*parsers: Parser) -> Parser:
    """
    Run ``parsers`` in order and collect their values in a list.

    The first failure is returned as is, with the position the failing
    parser reported; values of earlier steps are dropped.
    """
    def parse(text: str, position: int):
        results: List[Any] = []
        current = position
        for parser in parsers:
            end, outcome = parser(text, current)
            if isinstance(outcome, Failure):
                return end, outcome
            results.append(outcome.value)
            current = end
        return current, Success(results)

    return parse


def choice(*parsers: Parser) -> Parser:
    """
    Return the first alternative that succeeds.

    Every alternative starts at the original position. When all of them
    fail the error carries no detail from the individual branches.
    """
    def parse(text: str, position: int):
        for parser in parsers:
            end, outcome = parser(text, position)
            if not isinstance(outcome, Failure):
                return end, outcome
        return position, Failure(no_choice(position))

    return parse


def optional(parser: Parser) -> Parser:
    """Run ``parser``; on failure succeed with ``None`` without consuming."""
    def parse(text: str, position: int):
        end, outcome = parser(text, position)
        if isinstance(outcome, Failure):
            return position, Success(None)
        return end, outcome

    return parse


def between(start: Parser, parser: Parser, end: Parser) -> Parser:
    """``start parser end``, keeping only the value of ``parser``."""
    return fmap(sequence(start, parser, end), lambda values: values[1])


def separated_by(parser: Parser, separator: Parser) -> Parser:
    """
    Zero or more ``parser`` matches separated by ``separator``.

    A separator that is not followed by another match is left unconsumed.
    """
    def parse(text: str, position: int):
        results: List[Any] = []
        last = position
        current = position
        while True:
            end, outcome = parser(text, current)
            if isinstance(outcome, Failure):
                return last, Success(results)
            results.append(outcome.value)
            last = end
            next_start, separated = separator(text, end)
            if isinstance(separated, Failure) or next_start == current:
                return last, Success(results)
            current = next_start

    return parse


def fmap(parser: Parser, func: Callable[[Any], Any]) -> Parser:
    """
    Transform the value of a successful parse.

    Failures are passed through with the position reset to the start, so a
    mapped parser behaves as one unit when an enclosing combinator
    backtracks.
    """
    def parse(text: str, position: int):
        end, outcome = parser(text, position)
        if isinstance(outcome, Failure):
            return position, outcome
        return end, Success(func(outcome.value))

    return parse


def chain(parser: Parser, func: Callable[[Any], Parser]) -> Parser:
    """Monadic bind: build the next parser from the previous value."""
    def parse(text: str, position: int):
        end, outcome = parser(text, position)
        if isinstance(outcome, Failure):
            return end, outcome
        return func(outcome.value)(text, end)

    return parse


def lazy(factory: Callable[[], Parser]) -> Parser:
    """Defer building a parser until it is first applied."""
    def parse(text: str, position: int):
        return factory()(text, position)

    return parse


# ============================================================================
# Tokens
# ============================================================================

def number() -> Parser:
    """Unsigned decimal integer."""
    return fmap(many1(digit()), lambda digits: int("".join(digits)))


def word() -> Parser:
    """A letter followed by letters or digits."""
    rest = fmap(many(alpha_num()), "".join)
    return fmap(sequence(letter(), rest), "".join)


def string_literal() -> Parser:
    """
    Text between double quotes.

    A quote preceded by a backslash does not end the literal; the backslash
    is kept in the value.
    """
    body = satisfy(lambda c, previous: c != '"' or previous == "\\")
    return between(char('"'), fmap(many(body), "".join), char('"'))
