"""CLI entry point for compatlens.

Commands:
  run     check the PR behind a completed workflow run (the GitHub Action entry point)
  render  preview the comment a local jcc.json report would produce
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from compatlens_cli.commands.render import render_cmd
from compatlens_cli.commands.run import run_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("compatlens"),
    prog_name="compatlens",
)
@click.option(
    "--config",
    "config_path",
    default=".compatlens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="COMPATLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Report breaking API changes on GitHub pull requests."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(render_cmd)
