"""
Parser-combinator engine.

Small recursive-descent toolkit: one character primitive (``satisfy``),
derived combinators for repetition, sequencing, choice, mapping and
binding, and two drivers that run a parser over a whole input.
"""

from .errors import ParseError, print_error_message
from .outcome import Success, Failure, ParseOutcome, Parser
from .combinators import *  # noqa: F401,F403
from .combinators import __all__ as combinators_all
from .drivers import parse_full, parse_with_remainder

__all__ = [
    "ParseError",
    "print_error_message",
    "Success",
    "Failure",
    "ParseOutcome",
    "Parser",
    "parse_full",
    "parse_with_remainder",
] + combinators_all
