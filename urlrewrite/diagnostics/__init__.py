"""Diagnostics package."""

from .errors import (
    RewriteDiagnostic,
    RuleSyntaxError,
    EvaluationError,
    FunctionArgumentError,
    RuleMismatchError,
    PatternCompileError,
    TemplateBuildError,
)

__all__ = [
    "RewriteDiagnostic",
    "RuleSyntaxError",
    "EvaluationError",
    "FunctionArgumentError",
    "RuleMismatchError",
    "PatternCompileError",
    "TemplateBuildError",
]
