"""
Tests for rule evaluation.

Tests cover:
- End-to-end rewrites
- Pipelines, assignments and function calls
- Async functions
- Evaluation errors
"""

import asyncio

import pytest

from urlrewrite.diagnostics.errors import (
    EvaluationError,
    FunctionArgumentError,
    RuleMismatchError,
    TemplateBuildError,
)
from urlrewrite.evaluator import EvaluationContext, RewriteEvaluator, to_literal
from urlrewrite.functions import FunctionRegistry
from urlrewrite.language import (
    ArrayLiteral,
    Assignment,
    BooleanLiteral,
    FunctionCall,
    NumberLiteral,
    StringLiteral,
    Variable,
    parse_rule,
)


async def rewrite(rule_text, url, functions=None):
    rule = parse_rule(rule_text)
    table = functions if functions is not None else FunctionRegistry.default()
    return await RewriteEvaluator(rule, table).evaluate(url)


class TestToLiteral:
    """Test wrapping raw values."""

    @pytest.mark.parametrize("value,expected", [
        ("a", StringLiteral("a")),
        (3, NumberLiteral(3)),
        (True, BooleanLiteral(True)),
        (["a", "b"], ArrayLiteral(["a", "b"])),
        (StringLiteral("x"), StringLiteral("x")),
    ])
    def test_wraps(self, value, expected):
        assert to_literal(value) == expected

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            to_literal(object())


class TestRewrites:
    """Test end-to-end rewrites."""

    @pytest.mark.asyncio
    async def test_simple_redirect(self):
        result = await rewrite("/users/:id | /profile/:id", "https://example.com/users/42")
        assert result == "https://example.com/profile/42"

    @pytest.mark.asyncio
    async def test_path_only_url(self):
        assert await rewrite("/users/:id | /profile/:id", "/users/42") == "/profile/42"

    @pytest.mark.asyncio
    async def test_query_constraint(self):
        rule = "/search ??from=:f(foo|bar) | /find/:f"
        assert await rewrite(rule, "http://h/search?from=bar") == "http://h/find/bar"
        with pytest.raises(RuleMismatchError):
            await rewrite(rule, "http://h/search?from=baz")

    @pytest.mark.asyncio
    async def test_array_variable(self):
        result = await rewrite("/tags/:t+ | /tags/:t+", "http://h/tags/a/b/c")
        assert result == "http://h/tags/a/b/c"

    @pytest.mark.asyncio
    async def test_pipeline(self):
        result = await rewrite('/x | :y <- concat("a","b") | /z/:y', "http://h/x")
        assert result == "http://h/z/ab"

    @pytest.mark.asyncio
    async def test_assignments_are_sequential(self):
        rule = '/u/:id | :a <- upper(:id), :b <- concat(:a, "-", :id) | /r/:b'
        assert await rewrite(rule, "http://h/u/x") == "http://h/r/X-x"

    @pytest.mark.asyncio
    async def test_join_array(self):
        rule = '/tags/:t+ | :s <- join(:t, "-") | /tag/:s'
        assert await rewrite(rule, "http://h/tags/a/b") == "http://h/tag/a-b"

    @pytest.mark.asyncio
    async def test_destination_query(self):
        rule = "/s ??q=:q | /find ??term=:q"
        assert await rewrite(rule, "http://h/s?q=abc") == "http://h/find?term=abc"

    @pytest.mark.asyncio
    async def test_fragment_dropped(self):
        assert await rewrite("/a | /b", "http://h/a#frag") == "http://h/b"

    @pytest.mark.asyncio
    async def test_rule_evaluate_shortcut(self, functions):
        rule = parse_rule("/users/:id | /profile/:id")
        assert await rule.evaluate("http://h/users/1", functions) == "http://h/profile/1"


class TestFunctions:
    """Test function calls during evaluation."""

    @pytest.mark.asyncio
    async def test_async_function(self):
        registry = FunctionRegistry()

        @registry.register("shout")
        async def shout(value):
            await asyncio.sleep(0)
            return str(value).upper() + "!"

        assert await rewrite("/a/:x | :x <- shout(:x) | /b/:x", "/a/hi", registry) == "/b/HI!"

    @pytest.mark.asyncio
    async def test_raw_return_value_is_wrapped(self):
        table = {"count": lambda *args: len(args)}
        assert await rewrite("/a | :n <- count(1, 2, 3) | /b/:n", "/a", table) == "/b/3"

    @pytest.mark.asyncio
    async def test_arguments_are_evaluated(self):
        seen = []

        def record(*args):
            seen.extend(args)
            return "ok"

        await rewrite('/a/:x | :r <- record(:x, "s", 2, true) | /b/:r', "/a/v", {"record": record})
        assert seen == [StringLiteral("v"), StringLiteral("s"), NumberLiteral(2), BooleanLiteral(True)]

    @pytest.mark.asyncio
    async def test_unsupported_return_value(self):
        with pytest.raises(EvaluationError) as exc_info:
            await rewrite("/a | :n <- bad() | /b/:n", "/a", {"bad": lambda: {}})
        assert exc_info.value.message == "Function bad returned dict"


class TestEvaluationErrors:
    """Test failures during evaluation."""

    @pytest.mark.asyncio
    async def test_mismatch(self):
        with pytest.raises(RuleMismatchError) as exc_info:
            await rewrite("/users/:id | /profile/:id", "http://h/other")
        assert exc_info.value.url == "http://h/other"

    @pytest.mark.asyncio
    async def test_unknown_function(self):
        with pytest.raises(EvaluationError) as exc_info:
            await rewrite("/a | :x <- nope() | /b/:x", "/a")
        assert exc_info.value.message == "Function nope not found"
        assert exc_info.value.name == "nope"

    @pytest.mark.asyncio
    async def test_unknown_variable(self):
        with pytest.raises(EvaluationError) as exc_info:
            await rewrite("/a | :x <- upper(:missing) | /b/:x", "/a")
        assert exc_info.value.message == "Variable missing not found"

    @pytest.mark.asyncio
    async def test_function_argument_error(self):
        with pytest.raises(FunctionArgumentError):
            await rewrite('/a | :x <- concat("only") | /b/:x', "/a")

    @pytest.mark.asyncio
    async def test_unbound_destination_variable(self):
        with pytest.raises(TemplateBuildError):
            await rewrite("/a | /b/:x", "/a")

    @pytest.mark.asyncio
    async def test_scalar_into_array_destination(self):
        with pytest.raises(TemplateBuildError):
            await rewrite("/a/:x | /b/:x+", "/a/1")

    @pytest.mark.asyncio
    async def test_assignment_target_must_be_variable(self):
        rule = parse_rule("/a | /b")
        evaluator = RewriteEvaluator(rule, {})
        context = EvaluationContext({}, {})
        with pytest.raises(EvaluationError):
            await evaluator.evaluate_expression(Assignment(StringLiteral("x"), NumberLiteral(1)), context)

    @pytest.mark.asyncio
    async def test_unknown_expression(self):
        evaluator = RewriteEvaluator(parse_rule("/a | /b"), {})
        with pytest.raises(EvaluationError):
            await evaluator.evaluate_expression(object(), EvaluationContext({}, {}))


class TestEvaluateExpression:
    """Test single expressions against a context."""

    @pytest.mark.asyncio
    async def test_literal(self):
        evaluator = RewriteEvaluator(parse_rule("/a | /b"), {})
        assert await evaluator.evaluate_expression(NumberLiteral(1), EvaluationContext({}, {})) == NumberLiteral(1)

    @pytest.mark.asyncio
    async def test_assignment_binds(self, functions):
        evaluator = RewriteEvaluator(parse_rule("/a | /b"), functions)
        context = EvaluationContext({"x": "a"}, functions)
        expression = Assignment(Variable("y"), FunctionCall("upper", [Variable("x")]))
        result = await evaluator.evaluate_expression(expression, context)
        assert result == StringLiteral("A")
        assert context.variables["y"] == StringLiteral("A")
