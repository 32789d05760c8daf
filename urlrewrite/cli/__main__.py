"""urw CLI - Main Entry Point.

Commands:
    check    - Parse a rule and report syntax errors
    inspect  - Show the compiled patterns of a rule
    eval     - Rewrite one URL with one rule
    apply    - Rewrite one URL with the configured rule set
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from . import __version__, __cli_name__
from .utils.colors import (
    success, error, info, dim, bold,
    section, kv, bullet, badge,
    _ARROW, _CHECK,
)
from ..config import ConfigError, load_config
from ..diagnostics.errors import RewriteDiagnostic, RuleSyntaxError
from ..functions import FunctionRegistry
from ..language.grammar import parse_rule
from ..matcher import RuleSet


def _configure_logging(verbose: bool, quiet: bool):
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("urlrewrite").setLevel(level)


def _parse_or_exit(rule_text: str):
    try:
        return parse_rule(rule_text)
    except RuleSyntaxError as e:
        error(e.format())
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Parse, inspect and evaluate URL rewrite rules.

    \b
    Quick start:
      urw check '/users/:id | /profile/:id'
      urw eval '/users/:id | /profile/:id' https://example.com/users/42
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet
    _configure_logging(verbose, quiet)


@cli.command('check')
@click.argument('rule')
@click.pass_context
def check(ctx, rule: str):
    """
    Check rule syntax.

    Examples:
      urw check '/a/:x | /b/:x'
    """
    parsed = _parse_or_exit(rule)
    if ctx.obj['quiet']:
        return
    success(f"{badge('OK')} {parsed.to_source()}")


@cli.command('inspect')
@click.argument('rule')
@click.option('--json-output', is_flag=True, help='Print as JSON')
def inspect_rule(rule: str, json_output: bool):
    """
    Show compiled source and destination patterns of a rule.

    Examples:
      urw inspect '/tags/:t+ | /t/:t'
      urw inspect '/tags/:t+ | /t/:t' --json-output
    """
    parsed = _parse_or_exit(rule)
    try:
        source = parsed.compiled_source
        destination = parsed.compiled_destination
    except RewriteDiagnostic as e:
        error(e.format())
        sys.exit(1)

    if json_output:
        click.echo(json.dumps({
            "rule": parsed.to_source(),
            "source": source.to_dict(),
            "pipeline": [expr.to_dict() for expr in parsed.expressions],
            "destination": destination.to_dict(),
        }, indent=2))
        return

    section("Source")
    kv("Pattern", source.path.to_pattern())
    kv("Regex", source.regex_source)
    kv("Variables", ", ".join(source.variables) or "-")

    section("Pipeline")
    if parsed.expressions:
        for expression in parsed.expressions:
            bullet(expression.to_source())
    else:
        dim("  (empty)")

    section("Destination")
    kv("Pattern", destination.path.to_pattern())
    kv("Variables", ", ".join(destination.variables) or "-")


@cli.command('eval')
@click.argument('rule')
@click.argument('url')
def eval_rule(rule: str, url: str):
    """
    Rewrite URL with RULE using the built-in functions.

    Examples:
      urw eval '/users/:id | /profile/:id' https://example.com/users/42
    """
    parsed = _parse_or_exit(rule)
    try:
        result = asyncio.run(parsed.evaluate(url, FunctionRegistry.default()))
    except RewriteDiagnostic as e:
        error(e.format())
        sys.exit(1)
    click.echo(result)


@cli.command('apply')
@click.argument('url')
@click.option('--config', 'config_path', type=click.Path(), help='Config file (YAML or JSON)')
@click.option('--env-file', type=click.Path(), help='.env file with URW_* settings')
@click.pass_context
def apply(ctx, url: str, config_path: Optional[str], env_file: Optional[str]):
    """
    Rewrite URL with the first matching configured rule.

    Examples:
      urw apply https://example.com/old/1 --config urlrewrite.yaml
    """
    try:
        config = load_config(paths=[config_path] if config_path else None, env_file=env_file)
    except ConfigError as e:
        error(f"Config error: {e}")
        sys.exit(1)

    if not ctx.obj['verbose'] and not ctx.obj['quiet']:
        logging.getLogger("urlrewrite").setLevel(config.log_level.upper())

    try:
        rules = RuleSet.from_config(config)
    except RewriteDiagnostic as e:
        error(e.format())
        sys.exit(1)

    result = asyncio.run(rules.rewrite(url))
    if result is None:
        error(f"No rule matched {url}")
        sys.exit(1)

    click.echo(result.rewritten)
    if ctx.obj['verbose']:
        info(f"  {_CHECK} {bold(result.url)} {_ARROW} {result.rewritten}")
        dim(f"  via {result.rule.to_source()}")


def main():
    """Entry point for `urw` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
