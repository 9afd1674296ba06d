"""render command: preview the PR comment for a local report."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from compatlens_core.errors import ReportFormatError
from compatlens_core.models import load_report
from compatlens_core.renderer import compose_comment, render_report

console = Console()


@click.command("render")
@click.argument("report_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--beta/--no-beta", default=False, show_default=True, help="Render as if breaking changes were accepted.")
@click.option("--author", default="author", show_default=True, help="Login the comment is addressed to.")
def render_cmd(report_path: str, beta: bool, author: str):
    """Print the comment compatlens would post for REPORT_PATH (a jcc.json file).

    Nothing is sent to GitHub.
    """
    try:
        report = load_report(Path(report_path).read_text(encoding="utf-8"))
    except ReportFormatError as e:
        raise click.ClickException(str(e))

    verdict = render_report(report)
    if not (verdict.message and verdict.breaking):
        console.print("[green]No breaking changes.[/green]")
        return

    # Markdown, not rich markup; printed verbatim
    console.print(compose_comment(author, verdict.message, beta), markup=False, highlight=False, soft_wrap=True)
