"""Compiler package for rewrite paths."""

from .compiler import PathCompiler, CompiledPath

__all__ = [
    "PathCompiler",
    "CompiledPath",
]
