"""
Styled CLI output built on Click.

All output degrades gracefully on non-colour terminals (click.style handles
NO_COLOR / TERM=dumb).
"""

from __future__ import annotations

from typing import Optional, Sequence

import click

_L_H = "─"   # ─


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"), err=True)


def error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    click.echo(click.style(message, fg="cyan"), err=True)


def method_badge(method: str) -> str:
    colors = {
        "GET": "green",
        "POST": "blue",
        "PUT": "yellow",
        "PATCH": "yellow",
        "DELETE": "red",
    }
    return click.style(method.ljust(8), fg=colors.get(method, "white"), bold=True)


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    col_widths: Optional[Sequence[int]] = None,
    header_fg: str = "cyan",
    indent: int = 2,
) -> None:
    """
    Print a minimal aligned table.

        Method  Path            Operation
        ─────── ─────────────── ──────────
        GET     /todos/{id}     get_todo
    """
    prefix = " " * indent

    if col_widths is None:
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[:len(headers)]):
                widths[i] = max(widths[i], len(click.unstyle(str(cell))))
        widths = [w + 2 for w in widths]
    else:
        widths = list(col_widths)

    hdr = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(hdr, fg=header_fg, bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")

    for row in rows:
        line = ""
        for i, cell in enumerate(row):
            cell_str = str(cell)
            if i < len(widths):
                # pad on visible width so styled cells stay aligned
                line += cell_str + " " * (widths[i] - len(click.unstyle(cell_str)))
            else:
                line += cell_str
        click.echo(f"{prefix}{line}")
