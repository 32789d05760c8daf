"""Rewrite language: AST nodes and grammar."""

from .ast_nodes import *  # noqa: F401,F403
from .grammar import (
    variable,
    path_segment,
    path_variable_modifier,
    path,
    query_param,
    full_path,
    boolean,
    expression,
    function_call,
    assignment,
    full_expression,
    url_rewrite,
    parse_rule,
)

__all__ = [
    # AST
    "ExpressionKind",
    "SegmentKind",
    "Quantifier",
    "Literal",
    "NumberLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "ArrayLiteral",
    "Variable",
    "Assignment",
    "FunctionCall",
    "Expression",
    "StringSegment",
    "VariableSegment",
    "ComplexSegment",
    "PathSegment",
    "Query",
    "Path",
    "URLRewriteRule",
    # Grammar
    "variable",
    "path_segment",
    "path_variable_modifier",
    "path",
    "query_param",
    "full_path",
    "boolean",
    "expression",
    "function_call",
    "assignment",
    "full_expression",
    "url_rewrite",
    "parse_rule",
]
