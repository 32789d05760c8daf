"""
Evaluator for rewrite rules.

Evaluation of one URL:

1. match the URL against the rule's source pattern
2. extract variable bindings from the path and query
3. run the pipeline left to right; assignments rebind variables and are
   visible to every later expression
4. build the destination from the final bindings on the input's origin

Function calls may be coroutines. Arguments of one call are evaluated
concurrently, so they must not depend on each other's side effects.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Union
from urllib.parse import SplitResult, urlunsplit

from .compiler.compiler import split_url
from .diagnostics.errors import EvaluationError, RuleMismatchError
from .language.ast_nodes import (
    ArrayLiteral,
    Assignment,
    BooleanLiteral,
    FunctionCall,
    Literal,
    NumberLiteral,
    StringLiteral,
    URLRewriteRule,
    Variable,
)

logger = logging.getLogger("urlrewrite.evaluator")

FunctionTable = Mapping[str, Callable[..., Any]]


def to_literal(value: Any) -> Literal:
    """Wrap a raw bound value in the matching literal node."""
    if isinstance(value, Literal):
        return value
    if isinstance(value, (list, tuple)):
        return ArrayLiteral(list(value))
    if isinstance(value, bool):
        return BooleanLiteral(value)
    if isinstance(value, (int, float)):
        return NumberLiteral(value)
    if isinstance(value, str):
        return StringLiteral(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a literal")


class EvaluationContext:
    """Bindings and functions for one evaluation."""

    def __init__(self, variables: Dict[str, Any], functions: FunctionTable):
        self.variables = variables
        self.functions = functions


class RewriteEvaluator:
    """
    Evaluates a :class:`URLRewriteRule` against URLs.

    The function table is required; pass ``FunctionRegistry.default()`` for
    the built-in functions.

    Example::

        evaluator = RewriteEvaluator(parse_rule("/users/:id | /profile/:id"), {})
        await evaluator.evaluate("https://example.com/users/42")
        # 'https://example.com/profile/42'
    """

    def __init__(self, rule: URLRewriteRule, functions: FunctionTable):
        self.rule = rule
        self.functions = functions

    async def evaluate(self, url: Union[str, SplitResult]) -> str:
        """
        Rewrite ``url``.

        Raises:
            RuleMismatchError: the URL does not match the source pattern
            EvaluationError: the pipeline failed
            TemplateBuildError: the bindings do not fit the destination
        """
        parts = split_url(url)
        if not self.rule.matches(parts):
            raise RuleMismatchError(
                f"URL {urlunsplit(parts)!r} does not match {self.rule.source.to_pattern()!r}",
                url=urlunsplit(parts),
            )

        context = EvaluationContext(self.rule.extract(parts), self.functions)
        logger.debug("Extracted bindings %r from %s", context.variables, parts.path)

        for expression in self.rule.expressions:
            await self.evaluate_expression(expression, context)

        destination = self.rule.compiled_destination
        new_path = destination.build(context.variables)
        new_query = destination.build_query(context.variables)
        result = urlunsplit((parts.scheme, parts.netloc, new_path, new_query, ""))

        logger.debug("Rewrote %s to %s", urlunsplit(parts), result)
        return result

    async def evaluate_expression(self, expression: Any, context: EvaluationContext) -> Literal:
        """Evaluate one pipeline expression to a literal."""
        if isinstance(expression, Assignment):
            value = await self.evaluate_expression(expression.expression, context)
            if not isinstance(expression.variable, Variable):
                raise EvaluationError("Assignment must be to a variable")
            context.variables[expression.variable.name] = value
            return value

        if isinstance(expression, FunctionCall):
            if expression.name not in context.functions:
                raise EvaluationError(
                    f"Function {expression.name} not found",
                    name=expression.name,
                )
            function = context.functions[expression.name]
            args = await asyncio.gather(
                *(self.evaluate_expression(arg, context) for arg in expression.args)
            )
            result = function(*args)
            if inspect.isawaitable(result):
                result = await result
            try:
                return to_literal(result)
            except TypeError:
                raise EvaluationError(
                    f"Function {expression.name} returned {type(result).__name__}",
                    name=expression.name,
                ) from None

        if isinstance(expression, Variable):
            if expression.name not in context.variables:
                raise EvaluationError(
                    f"Variable {expression.name} not found",
                    name=expression.name,
                )
            value = context.variables[expression.name]
            if isinstance(value, Variable):
                return await self.evaluate_expression(value, context)
            try:
                return to_literal(value)
            except TypeError:
                raise EvaluationError(
                    f"Variable :{expression.name} is of unknown type",
                    name=expression.name,
                ) from None

        if isinstance(expression, Literal):
            return expression

        raise EvaluationError(f"Unknown expression type: {type(expression).__name__}")
