"""
Parse error values and message factories.

``ParseError`` is an immutable value, never raised by the combinators
themselves. The drivers in :mod:`urlrewrite.parsing.drivers` wrap it in a
:class:`~urlrewrite.diagnostics.errors.RuleSyntaxError` when a parse has to
fail for the caller.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ParseError:
    """Error message anchored at an input position."""
    message: str
    position: int

    def render(self, text: str) -> str:
        """Render a caret diagnostic against the parsed text."""
        return print_error_message(text, self)

    def __str__(self) -> str:
        return self.message


def print_error_message(text: str, error: ParseError) -> str:
    """
    Format an error as two lines: the first line of the input and a caret
    under the offending position followed by the message.
    """
    line = text.split("\n")[0]
    pointer = " " * error.position + "^--- ParseError: "
    return f"{line}\n{pointer}{error.message}"


def end_of_input(position: int) -> ParseError:
    return ParseError("Unexpected end of input", position)


def end_of_parser(position: int) -> ParseError:
    return ParseError(f"Unexpected end of parser after {position} characters", position)


def unexpected(char: str, position: int, expected: Optional[str] = None) -> ParseError:
    if expected:
        return ParseError(
            f"Unexpected character '{char}', expected '{expected}' at position {position}",
            position,
        )
    return ParseError(f"Unexpected character '{char}' at position {position}", position)


def no_choice(position: int) -> ParseError:
    return ParseError("No choice matched", position)


def missing_repetition(position: int) -> ParseError:
    return ParseError(
        f"Unexpected input, expected at least one match at position {position}",
        position,
    )
