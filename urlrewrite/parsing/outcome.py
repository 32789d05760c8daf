"""
Parse outcomes for the combinator engine.

A parser is a plain callable ``(text, position) -> (end_position, outcome)``
where the outcome is either :class:`Success` or :class:`Failure`. Failures
are values, not exceptions, so combinators such as ``choice`` and
``optional`` can inspect and discard them freely.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Tuple, TypeVar, Union

from .errors import ParseError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful parse carrying the produced value."""
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed parse carrying the error."""
    error: ParseError

    @property
    def ok(self) -> bool:
        return False


ParseOutcome = Union[Success[T], Failure]

Parser = Callable[[str, int], Tuple[int, Union[Success[Any], Failure]]]
