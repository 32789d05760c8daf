"""
Compiler that turns a parsed :class:`Path` into matching, extraction and
building operations.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, SplitResult

from ..language.ast_nodes import (
    ArrayLiteral,
    ComplexSegment,
    Literal,
    Path,
    PathSegment,
    Query,
    StringSegment,
    Variable,
    VariableSegment,
    iter_variable_segments,
)
from ..diagnostics.errors import PatternCompileError, TemplateBuildError

logger = logging.getLogger("urlrewrite.compiler")

Bindings = Dict[str, Any]


def split_url(url: Union[str, SplitResult]) -> SplitResult:
    """Accept a URL string or an already split URL."""
    if isinstance(url, SplitResult):
        return url
    return urlsplit(url)


def query_values(parts: SplitResult) -> Dict[str, str]:
    """First value of every query parameter, like ``URLSearchParams.get``."""
    values: Dict[str, str] = {}
    for name, value in parse_qsl(parts.query, keep_blank_values=True):
        values.setdefault(name, value)
    return values


def render_scalar(value: Any) -> str:
    """Text form of a bound scalar."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, ArrayLiteral):
        return list(value.value)
    if isinstance(value, (list, tuple)):
        return list(value)
    return None


@dataclass
class CompiledPath:
    """Fully compiled path ready for matching and building."""
    path: Path
    regex_source: str
    regex: Pattern
    groups: Dict[str, VariableSegment]
    query_patterns: Dict[str, Pattern] = field(default_factory=dict)

    @property
    def variables(self) -> List[str]:
        """Names bound by this path: path variables, then query variables."""
        names = [v.name for v in self.path.variables]
        names.extend(q.value.name for q in self.path.queries if isinstance(q.value, Variable))
        return names

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "pattern": self.path.to_pattern(),
            "regex": self.regex_source,
            "variables": self.variables,
            "queries": [q.to_dict() for q in self.path.queries],
        }

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def matches(self, url: Union[str, SplitResult]) -> bool:
        """
        True when the URL path matches the regex and every query constraint
        holds.

        A literal query needs an exact value; a variable query needs the
        parameter to be present and, unanchored, to match its pattern.
        """
        parts = split_url(url)
        if not self.regex.fullmatch(parts.path):
            return False

        params = query_values(parts)
        for query in self.path.queries:
            value = params.get(query.name)
            if not value:
                return False
            if isinstance(query.value, Variable):
                if not self.query_patterns[query.name].search(value):
                    return False
            elif value != query.value:
                return False
        return True

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, url: Union[str, SplitResult]) -> Bindings:
        """
        Bind path and query variables from ``url``.

        Captures of repeating segments, and captures containing ``/``, become
        lists of their non-empty pieces.
        Variables the match did not reach default to ``[]`` for repeating
        segments and ``""`` otherwise; query variables default to ``""``.
        """
        parts = split_url(url)
        bindings: Bindings = {}

        match = self.regex.fullmatch(parts.path)
        if match:
            for group, segment in self.groups.items():
                value = match.group(group)
                if value is None:
                    continue
                if segment.repeats or "/" in value:
                    bindings[segment.name] = [piece for piece in value.split("/") if piece]
                else:
                    bindings[segment.name] = value

        for segment in iter_variable_segments(self.path.segments):
            if segment.name in bindings:
                continue
            bindings[segment.name] = [] if segment.repeats else ""

        params = query_values(parts)
        for query in self.path.queries:
            if isinstance(query.value, Variable):
                bindings[query.value.name] = params.get(query.name, "")

        return bindings

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(self, bindings: Mapping[str, Any]) -> str:
        """
        Render the path with ``bindings``.

        Raises:
            TemplateBuildError: a binding is missing, or a list is bound to a
                non-repeating segment, or a scalar to a repeating one
        """
        return "".join(self._build_segment(segment, bindings) for segment in self.path.segments)

    def build_query(self, bindings: Mapping[str, Any]) -> str:
        """Render declared query parameters as a query string."""
        pairs: List[Tuple[str, str]] = []
        for query in self.path.queries:
            if isinstance(query.value, Variable):
                value = self._lookup(query.value.name, bindings)
                items = _as_list(value)
                if items is not None:
                    pairs.extend((query.name, render_scalar(item)) for item in items)
                else:
                    pairs.append((query.name, render_scalar(value)))
            else:
                pairs.append((query.name, query.value))
        return urlencode(pairs)

    def _lookup(self, name: str, bindings: Mapping[str, Any]) -> Any:
        if name not in bindings:
            raise TemplateBuildError(f"Variable :{name} is not bound", name=name)
        value = bindings[name]
        if isinstance(value, Literal) and not isinstance(value, ArrayLiteral):
            return value.value
        return value

    def _build_segment(self, segment: PathSegment, bindings: Mapping[str, Any]) -> str:
        if isinstance(segment, StringSegment):
            return segment.to_path()
        if isinstance(segment, ComplexSegment):
            return "".join(self._build_segment(child, bindings) for child in segment.segments)
        if isinstance(segment, VariableSegment):
            return self._build_variable(segment, bindings)
        raise TemplateBuildError(f"Unknown segment type: {type(segment).__name__}")

    def _build_variable(self, segment: VariableSegment, bindings: Mapping[str, Any]) -> str:
        prefix = segment.prefix or ""
        value = self._lookup(segment.name, bindings)
        items = _as_list(value)

        if items is not None:
            if not segment.repeats:
                raise TemplateBuildError(
                    f"Variable :{segment.name} is not an array",
                    name=segment.name,
                )
            return "".join(prefix + render_scalar(item) for item in items)

        if segment.repeats:
            raise TemplateBuildError(
                f"Value '{render_scalar(value)}' of :{segment.name} is not an array",
                name=segment.name,
            )
        text = render_scalar(value)
        if text == "" and segment.quantifier is not None:
            return ""
        return prefix + text


class PathCompiler:
    """Compiles a :class:`Path` into a :class:`CompiledPath`."""

    def compile(self, path: Path) -> CompiledPath:
        """
        Compile ``path``.

        Raises:
            PatternCompileError: the generated regex or a query pattern is
                not a valid regular expression
        """
        groups: Dict[str, VariableSegment] = {}
        regex_source = "^" + "".join(self._segment_regex(s, groups) for s in path.segments) + "$"

        try:
            regex = re.compile(regex_source)
        except re.error as exc:
            raise PatternCompileError(
                f"Invalid path pattern {path.to_pattern()!r}: {exc}",
                source=regex_source,
                position=exc.pos,
            ) from exc

        query_patterns: Dict[str, Pattern] = {}
        for query in path.queries:
            if isinstance(query.value, Variable):
                query_patterns[query.name] = self._compile_query_pattern(query)

        logger.debug("Compiled %r to %s", path.to_pattern(), regex_source)
        return CompiledPath(
            path=path,
            regex_source=regex_source,
            regex=regex,
            groups=groups,
            query_patterns=query_patterns,
        )

    def _compile_query_pattern(self, query: Query) -> Pattern:
        try:
            return re.compile(query.pattern)
        except re.error as exc:
            raise PatternCompileError(
                f"Invalid pattern for query ??{query.name}: {exc}",
                source=query.pattern,
                position=exc.pos,
            ) from exc

    def _group_name(self, segment: VariableSegment, groups: Dict[str, VariableSegment]) -> str:
        """Regex group name for a variable; names like ``a-b`` get an alias."""
        name = segment.name
        if name.isidentifier() and name not in groups:
            group = name
        else:
            group = f"_v{len(groups)}"
            while group in groups:
                group = "_" + group
        groups[group] = segment
        return group

    def _segment_regex(self, segment: PathSegment, groups: Dict[str, VariableSegment]) -> str:
        if isinstance(segment, StringSegment):
            return (segment.prefix or "") + segment.value
        if isinstance(segment, ComplexSegment):
            return "".join(self._segment_regex(child, groups) for child in segment.segments)
        if isinstance(segment, VariableSegment):
            return self._variable_regex(segment, groups)
        raise PatternCompileError(f"Unknown segment type: {type(segment).__name__}")

    def _variable_regex(self, segment: VariableSegment, groups: Dict[str, VariableSegment]) -> str:
        group = self._group_name(segment, groups)
        prefix = segment.prefix or ""
        quantifier = segment.quantifier.value if segment.quantifier else ""
        if segment.repeats:
            return f"(?P<{group}>(?:{prefix}{segment.pattern}){quantifier})"
        return f"(?:{prefix}(?P<{group}>{segment.pattern})){quantifier}"
