"""
Diagnostic errors for urlrewrite.

Parse failures travel through the combinators as values; these exceptions
are what escapes to callers of the drivers, the compiler and the
evaluator.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..parsing.errors import ParseError, print_error_message


@dataclass(eq=False)
class RewriteDiagnostic(Exception):
    """Base class for all rewrite diagnostics."""
    message: str
    position: Optional[int] = None
    source: Optional[str] = None
    suggestions: List[str] = None

    def __post_init__(self):
        if self.suggestions is None:
            self.suggestions = []

    def __str__(self) -> str:
        return self.message

    def format(self) -> str:
        """Format diagnostic for display."""
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.source is not None and self.position is not None:
            parts.append(print_error_message(self.source, ParseError(self.message, self.position)))

        if self.suggestions:
            parts.append("\nSuggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                parts.append(f"  {i}) {suggestion}")

        return "\n".join(parts)


@dataclass(eq=False)
class RuleSyntaxError(RewriteDiagnostic):
    """Rule text could not be parsed."""
    error: Optional[ParseError] = None

    @classmethod
    def from_parse_error(cls, error: ParseError, source: str) -> "RuleSyntaxError":
        return cls(
            message=error.message,
            position=error.position,
            source=source,
            error=error,
        )


@dataclass(eq=False)
class EvaluationError(RewriteDiagnostic):
    """Rule pipeline could not be evaluated."""
    name: Optional[str] = None


@dataclass(eq=False)
class FunctionArgumentError(EvaluationError):
    """A pipeline function was called with unusable arguments."""
    pass


@dataclass(eq=False)
class RuleMismatchError(RewriteDiagnostic):
    """URL does not match the rule's source pattern."""
    url: Optional[str] = None


@dataclass(eq=False)
class PatternCompileError(RewriteDiagnostic):
    """Generated path regex or a query pattern is not a valid regex."""
    pass


@dataclass(eq=False)
class TemplateBuildError(RewriteDiagnostic):
    """Bindings do not fit the destination template."""
    name: Optional[str] = None
