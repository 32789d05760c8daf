"""
Tests for the built-in pipeline functions and the function registry.
"""

import pytest

from urlrewrite.diagnostics.errors import FunctionArgumentError
from urlrewrite.functions import FunctionRegistry, concat, join, lower, replace, strip, upper
from urlrewrite.language import ArrayLiteral, NumberLiteral, StringLiteral


class TestBuiltins:
    """Test built-in functions."""

    def test_concat(self):
        assert concat(StringLiteral("a"), NumberLiteral(1), StringLiteral("b")) == StringLiteral("a1b")

    @pytest.mark.parametrize("args", [(), (StringLiteral("a"),)])
    def test_concat_needs_two_arguments(self, args):
        with pytest.raises(FunctionArgumentError) as exc_info:
            concat(*args)
        assert exc_info.value.message == "concat requires at least two arguments"
        assert exc_info.value.name == "concat"

    def test_case(self):
        assert lower(StringLiteral("AbC")) == StringLiteral("abc")
        assert upper(StringLiteral("AbC")) == StringLiteral("ABC")

    def test_strip(self):
        assert strip(StringLiteral("  x ")) == StringLiteral("x")

    def test_replace(self):
        result = replace(StringLiteral("a-b-c"), StringLiteral("-"), StringLiteral("/"))
        assert result == StringLiteral("a/b/c")

    def test_join(self):
        assert join(ArrayLiteral(["a", "b"]), StringLiteral(",")) == StringLiteral("a,b")

    def test_join_needs_array(self):
        with pytest.raises(FunctionArgumentError):
            join(StringLiteral("a"), StringLiteral(","))

    def test_arity(self):
        with pytest.raises(FunctionArgumentError) as exc_info:
            upper(StringLiteral("a"), StringLiteral("b"))
        assert exc_info.value.message == "upper requires exactly 1 argument, got 2"


class TestFunctionRegistry:
    """Test the function table."""

    def test_default_functions(self):
        registry = FunctionRegistry.default()
        assert set(registry) == {"concat", "lower", "upper", "strip", "replace", "join"}
        assert len(registry) == 6
        assert registry["concat"] is concat

    def test_register(self):
        registry = FunctionRegistry()
        registry.register("twice", lambda value: str(value) * 2)
        assert "twice" in registry
        assert registry.get_function("twice")(StringLiteral("ab")) == "abab"

    def test_register_decorator(self):
        registry = FunctionRegistry()

        @registry.register("noop")
        def noop(value):
            return value

        assert registry["noop"] is noop

    def test_unknown_function(self):
        with pytest.raises(ValueError):
            FunctionRegistry().get_function("missing")
        with pytest.raises(KeyError):
            FunctionRegistry()["missing"]
