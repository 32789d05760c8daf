"""
AST node definitions for the rewrite language.

Two closed families of nodes:

- expressions: literals, variables, assignments and function calls that
  make up a rule's pipeline
- path segments: the pieces of a source or destination path

Nodes are frozen dataclasses. Code that dispatches on them checks every
variant and raises for anything else, so a new variant has to be handled
everywhere it can appear.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

__all__ = [
    "DEFAULT_SEGMENT_PATTERN",
    "DEFAULT_QUERY_PATTERN",
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
    "iter_variable_segments",
]

DEFAULT_SEGMENT_PATTERN = r"[^\/]+"
DEFAULT_QUERY_PATTERN = r"[^&]+"


class ExpressionKind(str, Enum):
    """Kind of pipeline expression."""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    VARIABLE = "variable"
    ASSIGNMENT = "assignment"
    CALL = "call"


class SegmentKind(str, Enum):
    """Kind of path segment."""
    STRING = "string"
    VARIABLE = "variable"
    COMPLEX = "complex"


class Quantifier(str, Enum):
    """Repetition marker on a path variable."""
    OPTIONAL = "?"
    ONE_OR_MORE = "+"
    ZERO_OR_MORE = "*"

    @property
    def repeats(self) -> bool:
        return self in (Quantifier.ONE_OR_MORE, Quantifier.ZERO_OR_MORE)

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Literal:
    """Base class for literal values."""
    kind: ClassVar[ExpressionKind]
    value: Any

    def __str__(self) -> str:
        return str(self.value)

    def to_source(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}


@dataclass(frozen=True)
class NumberLiteral(Literal):
    kind: ClassVar[ExpressionKind] = ExpressionKind.NUMBER
    value: int = 0


@dataclass(frozen=True)
class StringLiteral(Literal):
    kind: ClassVar[ExpressionKind] = ExpressionKind.STRING
    value: str = ""

    def to_source(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class BooleanLiteral(Literal):
    kind: ClassVar[ExpressionKind] = ExpressionKind.BOOLEAN
    value: bool = False

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class ArrayLiteral(Literal):
    kind: ClassVar[ExpressionKind] = ExpressionKind.ARRAY
    value: List[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return ",".join(str(item) for item in self.value)

    def to_source(self) -> str:
        return "[" + ", ".join(str(item) for item in self.value) + "]"


@dataclass(frozen=True)
class Variable:
    """Reference to a bound variable (``:name``)."""
    kind: ClassVar[ExpressionKind] = ExpressionKind.VARIABLE
    name: str

    def to_source(self) -> str:
        return f":{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name}


@dataclass(frozen=True)
class Assignment:
    """``:name <- expression``."""
    kind: ClassVar[ExpressionKind] = ExpressionKind.ASSIGNMENT
    variable: Variable
    expression: "Expression"

    def to_source(self) -> str:
        return f"{self.variable.to_source()} <- {self.expression.to_source()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "variable": self.variable.name,
            "expression": self.expression.to_dict(),
        }


@dataclass(frozen=True)
class FunctionCall:
    """``name(arg, ...)``."""
    kind: ClassVar[ExpressionKind] = ExpressionKind.CALL
    name: str
    args: List["Expression"] = field(default_factory=list)

    def to_source(self) -> str:
        return f"{self.name}(" + ", ".join(arg.to_source() for arg in self.args) + ")"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "args": [arg.to_dict() for arg in self.args],
        }


Expression = Union[NumberLiteral, StringLiteral, BooleanLiteral, ArrayLiteral, Variable, Assignment, FunctionCall]


# ============================================================================
# Path segments
# ============================================================================

@dataclass(frozen=True)
class StringSegment:
    """Literal path text."""
    kind: ClassVar[SegmentKind] = SegmentKind.STRING
    value: str = ""
    prefix: Optional[str] = "/"

    def to_path(self) -> str:
        return (self.prefix or "") + self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value, "prefix": self.prefix}


@dataclass(frozen=True)
class VariableSegment:
    """Path variable with optional quantifier or pattern."""
    kind: ClassVar[SegmentKind] = SegmentKind.VARIABLE
    variable: Variable = None
    quantifier: Optional[Quantifier] = None
    pattern: str = DEFAULT_SEGMENT_PATTERN
    prefix: Optional[str] = "/"

    @property
    def name(self) -> str:
        return self.variable.name

    @property
    def repeats(self) -> bool:
        return self.quantifier is not None and self.quantifier.repeats

    def to_path(self) -> str:
        text = (self.prefix or "") + ":" + self.variable.name
        if self.pattern != DEFAULT_SEGMENT_PATTERN:
            text += f"({self.pattern})"
        if self.quantifier is not None:
            text += str(self.quantifier)
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.variable.name,
            "quantifier": self.quantifier.value if self.quantifier else None,
            "pattern": self.pattern,
            "prefix": self.prefix,
        }


@dataclass(frozen=True)
class ComplexSegment:
    """Several runs sharing one leading slash, e.g. ``/page-:id``."""
    kind: ClassVar[SegmentKind] = SegmentKind.COMPLEX
    segments: List["PathSegment"] = field(default_factory=list)
    prefix: Optional[str] = "/"

    def to_path(self) -> str:
        return "".join(segment.to_path() for segment in self.segments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "segments": [s.to_dict() for s in self.segments],
        }


PathSegment = Union[StringSegment, VariableSegment, ComplexSegment]


@dataclass(frozen=True)
class Query:
    """Query parameter constraint (``??name=value`` or ``??name=:var``)."""
    name: str
    value: Union[str, Variable]
    pattern: str = DEFAULT_QUERY_PATTERN

    @property
    def binds(self) -> bool:
        return isinstance(self.value, Variable)

    def to_path(self) -> str:
        if isinstance(self.value, Variable):
            text = f"??{self.name}={self.value.to_source()}"
            if self.pattern != DEFAULT_QUERY_PATTERN:
                text += f"({self.pattern})"
            return text
        return f"??{self.name}={self.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value.to_dict() if isinstance(self.value, Variable) else self.value,
            "pattern": self.pattern,
        }


def iter_variable_segments(segments: List[PathSegment]):
    """Yield variable segments in order, descending into complex segments."""
    for segment in segments:
        if isinstance(segment, VariableSegment):
            yield segment
        elif isinstance(segment, ComplexSegment):
            yield from iter_variable_segments(segment.segments)


@dataclass(frozen=True)
class Path:
    """A path pattern plus its query constraints."""
    segments: List[PathSegment] = field(default_factory=list)
    queries: List[Query] = field(default_factory=list)

    @property
    def variables(self) -> List[Variable]:
        """Variables declared in path segments (queries excluded)."""
        return [segment.variable for segment in iter_variable_segments(self.segments)]

    def to_pattern(self) -> str:
        """Serialize back to rule syntax."""
        text = "".join(segment.to_path() for segment in self.segments)
        for query in self.queries:
            text += " " + query.to_path()
        return text

    def __str__(self) -> str:
        return self.to_pattern()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.to_pattern(),
            "segments": [s.to_dict() for s in self.segments],
            "queries": [q.to_dict() for q in self.queries],
        }


@dataclass(frozen=True)
class URLRewriteRule:
    """
    A parsed rewrite rule: source pattern, pipeline and destination.

    Rules are immutable. The compiled source and destination are built on
    first use and shared by every later call.
    """
    source: Path
    destination: Path
    expressions: List[Expression] = field(default_factory=list)

    @cached_property
    def compiled_source(self):
        from ..compiler.compiler import PathCompiler
        return PathCompiler().compile(self.source)

    @cached_property
    def compiled_destination(self):
        from ..compiler.compiler import PathCompiler
        return PathCompiler().compile(self.destination)

    def matches(self, url: str) -> bool:
        return self.compiled_source.matches(url)

    def extract(self, url: str) -> Dict[str, Any]:
        return self.compiled_source.extract(url)

    def build(self, bindings: Mapping[str, Any]) -> str:
        return self.compiled_destination.build(bindings)

    async def evaluate(self, url: str, functions: Mapping[str, Any]) -> str:
        """Rewrite ``url`` using ``functions`` as the pipeline's function table."""
        from ..evaluator import RewriteEvaluator
        return await RewriteEvaluator(self, functions).evaluate(url)

    def to_source(self) -> str:
        parts = [self.source.to_pattern()]
        if self.expressions:
            parts.append(", ".join(e.to_source() for e in self.expressions))
        parts.append(self.destination.to_pattern())
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "expressions": [e.to_dict() for e in self.expressions],
            "destination": self.destination.to_dict(),
        }
