"""
urw CLI: styled output primitives built on Click.

    Output helpers:
        success(), error(), warning(), info(), dim(), bold()

    Structural elements:
        section()       section divider with title
        kv()            aligned key-value pair
        badge()         inline status badge  [OK]  [FAIL]
        bullet()        bulleted list item

click.style handles NO_COLOR and TERM=dumb.
"""

from __future__ import annotations

import shutil
from typing import Optional

import click

_TERM_WIDTH: Optional[int] = None


def _tw() -> int:
    """Terminal width, cached and clamped to a sane range."""
    global _TERM_WIDTH
    if _TERM_WIDTH is None:
        _TERM_WIDTH = max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))
    return _TERM_WIDTH


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(message, fg="red"))


def warning(message: str) -> None:
    click.echo(click.style(message, fg="yellow"))


def info(message: str) -> None:
    click.echo(click.style(message, fg="cyan"))


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def bold(message: str) -> str:
    """Return bold-styled text (does not echo)."""
    return click.style(message, bold=True)


_L_H = "\u2500"     # ─
_BULLET = "\u2022"  # •
_ARROW = "\u2192"   # →
_CHECK = "\u2713"   # ✓
_CROSS = "\u2717"   # ✗


def section(title: str, *, width: Optional[int] = None, fg: str = "cyan") -> None:
    """
    Print a section header with a ruled line.

        ── Source ─────────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 6)
    line = f"{_L_H}{_L_H} {title} {_L_H * dashes}"
    click.echo(click.style(line, fg=fg, bold=True))


def kv(
    key: str,
    value: str,
    *,
    key_width: int = 14,
    indent: int = 2,
    val_fg: str = "cyan",
) -> None:
    """
    Print an aligned key-value pair.

        Regex:        ^/users(?:/(?P<id>[^\\/]+))$
    """
    prefix = " " * indent
    k = click.style(f"{key}:", fg="white")
    v = click.style(str(value), fg=val_fg)
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{prefix}{k}{padding}{v}")


def badge(label: str, *, ok: bool = True) -> str:
    """Return an inline ``[✓ OK]`` / ``[✗ FAIL]`` badge (not echoed)."""
    if ok:
        return click.style(f"[ {_CHECK} {label}]", fg="green")
    return click.style(f"[ {_CROSS} {label}]", fg="red")


def bullet(text: str, *, indent: int = 2, fg: str = "white") -> None:
    """Print a bulleted list item."""
    prefix = " " * indent
    click.echo(f"{prefix}{click.style(_BULLET, fg='cyan')} {click.style(text, fg=fg)}")
