"""
Shared test fixtures for the urlrewrite test suite.
"""

import os

import pytest

from urlrewrite.cache import RuleCache, set_global_cache
from urlrewrite.functions import FunctionRegistry


@pytest.fixture(autouse=True)
def fresh_global_cache():
    """Give every test its own global rule cache."""
    cache = RuleCache()
    set_global_cache(cache)
    yield cache
    set_global_cache(None)


@pytest.fixture
def functions():
    """Default function table."""
    return FunctionRegistry.default()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove URW_* variables so config tests only see what they set."""
    for key in list(os.environ):
        if key.startswith("URW_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
