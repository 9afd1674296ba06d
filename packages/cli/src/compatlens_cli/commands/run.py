"""run command: check the PR behind a completed workflow run."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from compatlens_core.config import ActionConfig
from compatlens_core.models import Outcome
from compatlens_core.runner import load_event, run_workflow

console = Console()
logger = logging.getLogger(__name__)

_outcome_style = {
    Outcome.SKIPPED: "yellow",
    Outcome.SUCCEEDED: "green",
    Outcome.FAILED: "red",
    Outcome.ERRORED: "red",
}


def _fail(ctx: click.Context, message: str):
    # Workflow command: surfaces the message as an error annotation on the job.
    click.echo(f"::error::{message}")
    ctx.exit(1)


@click.command("run")
@click.option(
    "--event",
    "event_path",
    default=None,
    help="Path to the workflow_run event payload. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option("--repo", default=None, help="Repository in owner/name format. Defaults to $GITHUB_REPOSITORY.")
@click.option(
    "--beta-version-pattern",
    default=None,
    help="Regular expression matching base versions that accept breaking changes. Overrides config file.",
)
@click.option("--self-name", default=None, help="Login the bot comments as. Overrides config file.")
@click.option(
    "--scan-all-pages",
    is_flag=True,
    default=None,
    help="Page through every open PR when the head repository has a different name.",
)
@click.pass_context
def run_cmd(
    ctx,
    event_path: str | None,
    repo: str | None,
    beta_version_pattern: str | None,
    self_name: str | None,
    scan_all_pages: bool | None,
):
    """Post breaking API changes of a workflow run's PR as a comment and check run.

    Meant to run in a workflow triggered by `workflow_run: completed`. The
    command exits non-zero only when the check itself could not be carried
    out; breaking changes are reported through the check run.

    \b
    Required environment variables:
      GITHUB_TOKEN         Token with checks, pull-requests and actions access (or use gh CLI)
    """
    from compatlens_core.config import load_config

    config_path = ctx.obj.get("config_path", ".compatlens.yml") if ctx.obj else ".compatlens.yml"
    config = load_config(
        config_path,
        cli_overrides={
            "repository": repo,
            "event_path": event_path,
            "beta_version_pattern": beta_version_pattern,
            "self_name": self_name,
            # click passes False for an absent flag; only an explicit flag overrides the file
            "scan_all_pages": scan_all_pages or None,
        },
    )

    if not config.get("github_token"):
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
    if not config.get("event_path"):
        raise click.UsageError("No event payload. Set GITHUB_EVENT_PATH or pass --event.")
    if not config.get("repository"):
        raise click.UsageError("No repository. Set GITHUB_REPOSITORY or pass --repo.")

    try:
        result = run_workflow(load_event(config["event_path"]), ActionConfig.from_dict(config))
    except Exception as e:
        logger.exception("Compatibility checks could not run")
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        _fail(ctx, str(e))
        return

    if result is None:
        return

    style = _outcome_style[result.outcome]
    console.print(f"PR #{result.pr_number}: [{style}]{result.outcome.value}[/{style}]: {escape(result.summary)}")
    if result.outcome is Outcome.ERRORED:
        _fail(ctx, result.summary)
