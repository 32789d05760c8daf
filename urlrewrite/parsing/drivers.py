"""
Entry points that run a parser over a whole input.

These are the only places where a parse failure becomes an exception.
"""

from typing import Any, Tuple

from ..diagnostics.errors import RuleSyntaxError
from .errors import end_of_parser
from .outcome import Failure, Parser


def parse_full(parser: Parser, text: str) -> Any:
    """
    Apply ``parser`` to ``text`` and require it to consume everything.

    Example::

        >>> parse_full(char("c"), "c")
        'c'
        >>> parse_full(char("c"), "cab")
        Traceback (most recent call last):
          ...
        RuleSyntaxError: Unexpected end of parser after 1 characters

    Raises:
        RuleSyntaxError: the parser failed or left input unconsumed
    """
    end, outcome = parser(text, 0)
    if isinstance(outcome, Failure):
        raise RuleSyntaxError.from_parse_error(outcome.error, text)
    if end != len(text):
        raise RuleSyntaxError.from_parse_error(end_of_parser(end), text)
    return outcome.value


def parse_with_remainder(parser: Parser, text: str) -> Tuple[Any, str]:
    """
    Apply ``parser`` to ``text`` and return its value plus the unconsumed
    suffix.

    Raises:
        RuleSyntaxError: the parser failed
    """
    end, outcome = parser(text, 0)
    if isinstance(outcome, Failure):
        raise RuleSyntaxError.from_parse_error(outcome.error, text)
    return outcome.value, text[end:]
