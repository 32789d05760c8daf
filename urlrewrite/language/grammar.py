"""
Grammar of the URL rewrite language.

EBNF
====

<rule>          ::= <full-path> [ ws "|" ws <pipeline> ] ws "|" ws <full-path>
<pipeline>      ::= [ <full-expr> ( ws "," ws <full-expr> )* ]
<full-path>     ::= <path> ( [ ws ] <query> )*
<path>          ::= <segment>+
<segment>       ::= "/" ( <path-var> | <path-text> )*
<path-var>      ::= ":" <variable> [ <quantifier> | "(" <pattern> ")" ]
<quantifier>    ::= "+" | "?" | "*"
<path-text>     ::= any character except space, "/" and an unescaped ":"
<query>         ::= "??" <variable> "=" ( ":" <variable> [ "(" <pattern> ")" ] | <variable> )
<full-expr>     ::= <assignment> | <expr>
<assignment>    ::= ":" <variable> ws "<-" ws <expr>
<expr>          ::= <string> | <number> | "true" | "false" | ":" <variable> | <call>
<call>          ::= <variable> "(" [ <expr> ( ws "," ws <expr> )* ] ")"
<variable>      ::= [a-zA-Z0-9_-]+

Examples
========
/users/:id | /profile/:id
/tags/:t+ | /labels/:t+
/search ??from=:f(foo|bar) | /find/:f
/x | :y <- concat("a", "b") | /z/:y
/page-:n | /pages/:n

Every rule below is a factory returning a fresh parser; the grammar is
built only from :mod:`urlrewrite.parsing.combinators`.
"""

import logging
from dataclasses import replace

from ..parsing.combinators import (
    between,
    chain,
    char,
    choice,
    fmap,
    lazy,
    many,
    many1,
    number,
    optional,
    satisfy,
    separated_by,
    sequence,
    skip,
    spaces,
    string,
    string_literal,
)
from ..parsing.drivers import parse_full
from ..parsing.outcome import Parser
from .ast_nodes import (
    Assignment,
    BooleanLiteral,
    ComplexSegment,
    FunctionCall,
    NumberLiteral,
    Path,
    Quantifier,
    Query,
    StringLiteral,
    StringSegment,
    URLRewriteRule,
    Variable,
    VariableSegment,
)

logger = logging.getLogger("urlrewrite.grammar")

VARIABLE_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-")


# ============================================================================
# Paths
# ============================================================================

def variable() -> Parser:
    """Variable name: one or more of ``[a-zA-Z0-9_-]``."""
    variable_char = satisfy(lambda c, _: c in VARIABLE_CHARS, "variable character")
    return fmap(many1(variable_char), "".join)


def _unescaped_colon() -> Parser:
    return satisfy(lambda c, previous: c == ":" and previous != "\\", ":")


def _pattern() -> Parser:
    """``(fragment)``; a ``)`` preceded by a backslash does not close it."""
    body = satisfy(lambda c, previous: c != ")" or previous == "\\")
    return between(char("("), fmap(many(body), "".join), char(")"))


def path_variable_modifier() -> Parser:
    """Optional quantifier or parenthesized pattern after a path variable."""
    quantifier = fmap(choice(char("+"), char("?"), char("*")), Quantifier)
    return optional(choice(quantifier, _pattern()))


def _path_variable() -> Parser:
    def build(values) -> VariableSegment:
        _, name, modifier = values
        if isinstance(modifier, Quantifier):
            return VariableSegment(Variable(name), quantifier=modifier)
        if modifier is not None:
            return VariableSegment(Variable(name), pattern=modifier)
        return VariableSegment(Variable(name))

    return fmap(sequence(_unescaped_colon(), variable(), path_variable_modifier()), build)


def _path_text() -> Parser:
    text_char = satisfy(
        lambda c, previous: c != " " and c != "/" and not (c == ":" and previous != "\\"),
        "path character",
    )
    return fmap(many(text_char), lambda chars: StringSegment("".join(chars)))


def path_segment() -> Parser:
    """
    ``/`` followed by alternating variable and text runs.

    No runs gives an empty text segment, one run is returned as is, and
    several runs are wrapped in a :class:`ComplexSegment` where only the
    first keeps the ``/`` prefix.
    """
    def build(values):
        _, runs = values
        if not runs:
            return StringSegment("")
        if len(runs) == 1:
            return runs[0]
        return ComplexSegment([runs[0]] + [replace(run, prefix=None) for run in runs[1:]])

    return fmap(sequence(char("/"), many(choice(_path_variable(), _path_text()))), build)


def path() -> Parser:
    return many1(path_segment())


def query_param() -> Parser:
    """``??name=value``, ``??name=:var`` or ``??name=:var(pattern)``."""
    bound = fmap(
        sequence(chain(char(":"), lambda _: variable()), optional(_pattern())),
        lambda values: (Variable(values[0]), values[1]),
    )
    literal = fmap(variable(), lambda value: (value, None))

    def build(values) -> Query:
        _, name, _, (value, pattern) = values
        if pattern is None:
            return Query(name, value)
        return Query(name, value, pattern)

    return fmap(sequence(string("??"), variable(), char("="), choice(bound, literal)), build)


def full_path() -> Parser:
    """Path followed by zero or more query constraints."""
    query = chain(spaces(), lambda _: query_param())
    return fmap(sequence(path(), many(query)), lambda values: Path(values[0], values[1]))


# ============================================================================
# Expressions
# ============================================================================

def boolean() -> Parser:
    return choice(
        fmap(string("true"), lambda _: BooleanLiteral(True)),
        fmap(string("false"), lambda _: BooleanLiteral(False)),
    )


def _separator() -> Parser:
    return fmap(sequence(spaces(), char(","), spaces()), lambda values: values[1])


def expression() -> Parser:
    """
    A single expression, assignment excluded.

    ``function_call`` refers back to ``expression`` for its arguments, so it
    is looked up lazily at parse time.
    """
    return choice(
        fmap(string_literal(), StringLiteral),
        fmap(number(), NumberLiteral),
        boolean(),
        fmap(chain(char(":"), lambda _: variable()), Variable),
        lazy(function_call),
    )


def function_call() -> Parser:
    def build(values) -> FunctionCall:
        name, _, args, _ = values
        return FunctionCall(name, args)

    args = separated_by(expression(), _separator())
    return fmap(sequence(variable(), char("("), args, char(")")), build)


def assignment() -> Parser:
    def build(values) -> Assignment:
        _, name, _, _, _, value = values
        return Assignment(Variable(name), value)

    return fmap(
        sequence(char(":"), variable(), skip(spaces()), string("<-"), skip(spaces()), expression()),
        build,
    )


def full_expression() -> Parser:
    """Assignment or bare expression."""
    return choice(assignment(), expression())


# ============================================================================
# Rules
# ============================================================================

def _bar() -> Parser:
    return sequence(spaces(), char("|"), spaces())


def url_rewrite() -> Parser:
    """
    Top-level rule: source, optional pipeline, destination.

    When no pipeline follows the first ``|`` the parser backtracks and
    reads that bar as the one before the destination.
    """
    pipeline = fmap(
        sequence(_bar(), separated_by(full_expression(), _separator()), _bar()),
        lambda values: values[1],
    )
    no_pipeline = fmap(_bar(), lambda _: [])

    def build(values) -> URLRewriteRule:
        source, expressions, destination = values
        return URLRewriteRule(source, destination, expressions)

    return fmap(sequence(full_path(), choice(pipeline, no_pipeline), full_path()), build)


def parse_rule(text: str) -> URLRewriteRule:
    """
    Parse rule text into a :class:`URLRewriteRule`.

    Raises:
        RuleSyntaxError: invalid rule text or trailing input
    """
    rule = parse_full(url_rewrite(), text)
    logger.debug(
        "Parsed rule %r: %d source segment(s), %d expression(s)",
        text, len(rule.source.segments), len(rule.expressions),
    )
    return rule
