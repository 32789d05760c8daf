"""
Function registry for rule pipelines.

A function table maps names to callables that take evaluated literals and
return one literal, synchronously or as a coroutine. The evaluator accepts
any mapping; :meth:`FunctionRegistry.default` is a ready-made table with
the built-in string helpers.
"""

from collections.abc import Mapping
from typing import Callable, Dict, Iterator, Optional

from .diagnostics.errors import FunctionArgumentError
from .language.ast_nodes import ArrayLiteral, Literal, StringLiteral


def _require(name: str, args, count: int):
    if len(args) != count:
        raise FunctionArgumentError(
            f"{name} requires exactly {count} argument{'s' if count != 1 else ''}, got {len(args)}",
            name=name,
        )


def concat(*args: Literal) -> StringLiteral:
    """Concatenate the text of two or more values."""
    if len(args) < 2:
        raise FunctionArgumentError("concat requires at least two arguments", name="concat")
    return StringLiteral("".join(str(arg) for arg in args))


def lower(*args: Literal) -> StringLiteral:
    _require("lower", args, 1)
    return StringLiteral(str(args[0]).lower())


def upper(*args: Literal) -> StringLiteral:
    _require("upper", args, 1)
    return StringLiteral(str(args[0]).upper())


def strip(*args: Literal) -> StringLiteral:
    _require("strip", args, 1)
    return StringLiteral(str(args[0]).strip())


def replace(*args: Literal) -> StringLiteral:
    """``replace(text, old, new)``."""
    _require("replace", args, 3)
    text, old, new = (str(arg) for arg in args)
    return StringLiteral(text.replace(old, new))


def join(*args: Literal) -> StringLiteral:
    """``join(array, separator)``."""
    _require("join", args, 2)
    array, separator = args
    if not isinstance(array, ArrayLiteral):
        raise FunctionArgumentError("join expects an array as first argument", name="join")
    return StringLiteral(str(separator).join(str(item) for item in array.value))


class FunctionRegistry(Mapping):
    """Registry of pipeline functions."""

    def __init__(self):
        self.functions: Dict[str, Callable] = {}

    @classmethod
    def default(cls) -> "FunctionRegistry":
        """Create registry with built-in functions."""
        registry = cls()

        registry.register("concat", concat)
        registry.register("lower", lower)
        registry.register("upper", upper)
        registry.register("strip", strip)
        registry.register("replace", replace)
        registry.register("join", join)

        return registry

    def register(self, name: str, function: Optional[Callable] = None):
        """
        Register a function. Without ``function`` this returns a decorator::

            @registry.register("slugify")
            async def slugify(value):
                ...
        """
        if function is None:
            def decorator(func: Callable) -> Callable:
                self.functions[name] = func
                return func
            return decorator
        self.functions[name] = function
        return function

    def get_function(self, name: str) -> Callable:
        """Get function by name."""
        if name not in self.functions:
            raise ValueError(f"Unknown function: {name}")
        return self.functions[name]

    def __getitem__(self, name: str) -> Callable:
        return self.functions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.functions)

    def __len__(self) -> int:
        return len(self.functions)
