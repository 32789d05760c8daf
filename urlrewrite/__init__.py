"""
urlrewrite - URL rewrite rule language, parser and evaluator.

A rule reads ``source | pipeline | destination``::

    /users/:id ??lang=:lang | :who <- concat("u", :id) | /profile/:who ??lang=:lang

This package provides:
- A small parser-combinator engine with positioned, value-typed errors
- The rule grammar and its AST
- A path compiler that matches URLs, extracts variables and builds paths
- An async evaluator for rule pipelines with pluggable function tables
- Rule caching, ordered rule sets, layered config and the ``urw`` CLI
"""

from .parsing import ParseError, Success, Failure, parse_full, parse_with_remainder
from .language.ast_nodes import (
    Literal,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    ArrayLiteral,
    Variable,
    Assignment,
    FunctionCall,
    StringSegment,
    VariableSegment,
    ComplexSegment,
    Query,
    Path,
    Quantifier,
    URLRewriteRule,
)
from .language.grammar import parse_rule
from .compiler import PathCompiler, CompiledPath
from .evaluator import RewriteEvaluator, EvaluationContext, to_literal
from .functions import FunctionRegistry
from .diagnostics.errors import (
    RewriteDiagnostic,
    RuleSyntaxError,
    EvaluationError,
    FunctionArgumentError,
    RuleMismatchError,
    PatternCompileError,
    TemplateBuildError,
)
from .cache import RuleCache, CacheStats, compile_rule, get_global_cache, set_global_cache
from .matcher import RuleSet, RewriteResult
from .config import RewriteConfig, ConfigLoader, ConfigError, load_config

__version__ = "0.1.0"

__all__ = [
    # Parsing
    "ParseError",
    "Success",
    "Failure",
    "parse_full",
    "parse_with_remainder",
    # AST
    "Literal",
    "NumberLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "ArrayLiteral",
    "Variable",
    "Assignment",
    "FunctionCall",
    "StringSegment",
    "VariableSegment",
    "ComplexSegment",
    "Query",
    "Path",
    "Quantifier",
    "URLRewriteRule",
    "parse_rule",
    # Compiler
    "PathCompiler",
    "CompiledPath",
    # Evaluation
    "RewriteEvaluator",
    "EvaluationContext",
    "to_literal",
    "FunctionRegistry",
    # Diagnostics
    "RewriteDiagnostic",
    "RuleSyntaxError",
    "EvaluationError",
    "FunctionArgumentError",
    "RuleMismatchError",
    "PatternCompileError",
    "TemplateBuildError",
    # Cache
    "RuleCache",
    "CacheStats",
    "compile_rule",
    "get_global_cache",
    "set_global_cache",
    # Rule sets
    "RuleSet",
    "RewriteResult",
    # Config
    "RewriteConfig",
    "ConfigLoader",
    "ConfigError",
    "load_config",
]
