"""
Ordered rule sets.

A :class:`RuleSet` tries its rules in insertion order and rewrites with the
first one whose source pattern matches. Rules whose patterns do not
compile, and rules that match but fail during evaluation, are logged and
skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from .cache import RuleCache, get_global_cache
from .diagnostics.errors import EvaluationError, PatternCompileError, TemplateBuildError
from .evaluator import FunctionTable, RewriteEvaluator
from .functions import FunctionRegistry
from .language.ast_nodes import URLRewriteRule

logger = logging.getLogger("urlrewrite.matcher")


@dataclass
class RewriteResult:
    """Result of rewriting one URL."""
    rule: URLRewriteRule
    url: str
    rewritten: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule.to_source(),
            "url": self.url,
            "rewritten": self.rewritten,
        }


class RuleSet:
    """Rewrites URLs with the first matching rule."""

    def __init__(
        self,
        rules: Optional[Iterable[Union[URLRewriteRule, str]]] = None,
        functions: Optional[FunctionTable] = None,
        cache: Optional[RuleCache] = None,
    ):
        self.functions = functions if functions is not None else FunctionRegistry.default()
        self.cache = cache if cache is not None else get_global_cache()
        self.rules: List[URLRewriteRule] = []
        for rule in rules or ():
            self.add_rule(rule)

    @classmethod
    def from_config(cls, config, functions: Optional[FunctionTable] = None) -> "RuleSet":
        """Build a rule set from a :class:`RewriteConfig`."""
        cache = RuleCache(max_size=config.cache_size, ttl=config.cache_ttl)
        return cls(config.rules, functions=functions, cache=cache)

    def add_rule(self, rule: Union[URLRewriteRule, str]) -> URLRewriteRule:
        """Append a rule; text is parsed through the cache."""
        if isinstance(rule, str):
            rule = self.cache.compile_with_cache(rule)
        self.rules.append(rule)
        logger.debug("Added rule %s", rule.to_source())
        return rule

    def find(self, url: str) -> Optional[URLRewriteRule]:
        """First rule whose source pattern matches ``url``."""
        for rule in self.rules:
            if self._matches(rule, url):
                return rule
        return None

    def _matches(self, rule: URLRewriteRule, url: str) -> bool:
        try:
            return rule.matches(url)
        except PatternCompileError as e:
            logger.warning("Rule %s skipped: %s", rule.to_source(), e)
            return False

    async def rewrite(self, url: str) -> Optional[RewriteResult]:
        """
        Rewrite ``url`` with the first rule that matches and evaluates.

        Returns None when no rule applies.
        """
        for rule in self.rules:
            if not self._matches(rule, url):
                continue
            try:
                rewritten = await RewriteEvaluator(rule, self.functions).evaluate(url)
            except (EvaluationError, PatternCompileError, TemplateBuildError) as e:
                logger.warning("Rule %s failed for %s: %s", rule.to_source(), url, e)
                continue
            return RewriteResult(rule=rule, url=url, rewritten=rewritten)

        logger.debug("No rule matched %s", url)
        return None

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[URLRewriteRule]:
        return iter(self.rules)
