"""Compatibility check orchestration for a completed workflow run."""

from __future__ import annotations

import json
import logging

from github import GithubException
from rich.console import Console
from rich.markup import escape

from compatlens_core.config import ActionConfig
from compatlens_core.errors import EventPayloadError
from compatlens_core.gh.artifacts import fetch_report
from compatlens_core.gh.check_run import CheckRun
from compatlens_core.gh.pull_request import (
    find_linked_pr,
    find_self_comment,
    get_base_version,
    get_pull,
    get_repo,
    is_beta_version,
    is_checkable_run,
)
from compatlens_core.models import CheckState, Outcome, RunResult, WorkflowRun
from compatlens_core.renderer import compose_comment, render_report

console = Console()
logger = logging.getLogger(__name__)

NO_REPORT = "No JCC output was found"
NO_VERSION = "Could not determine the version the PR was built against"
BREAKING = "PR introduces breaking changes"
BREAKING_ACCEPTED = "PR introduces breaking changes, but the project currently accepts breaking changes"
NOT_BREAKING = "PR does not introduce breaking changes"


def load_event(path: str) -> dict:
    """Read the webhook payload the Actions runner stores at GITHUB_EVENT_PATH."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _publish_comment(pr, existing, body: str) -> str:
    """Edit the bot's previous comment in place, or create one. Returns the comment URL."""
    if existing is not None:
        existing.edit(body)
        return existing.html_url
    return pr.create_issue_comment(body).html_url


def run_pr(repo, pr, run_id: int, config: ActionConfig) -> RunResult:
    """Check one PR against the compatibility report of a workflow run.

    Creates a check run on the PR head, then completes it exactly once:
    skipped when there is no report or no base version, failed when the PR
    breaks the API outside a beta, succeeded otherwise. Any exception is
    recorded on the check run and turned into an ``errored`` result.
    """
    check = CheckRun(repo, pr.head.sha, name=config.check_name, details_url=config.run_url)

    try:
        check.start()

        report = fetch_report(repo, run_id, config)
        if report is None:
            console.print(f"[yellow]No '{config.artifact_name}' artifact on run {run_id}.[/yellow]")
            check.skipped(NO_REPORT)
            return RunResult(pr_number=pr.number, outcome=Outcome.SKIPPED, summary=NO_REPORT)

        version = get_base_version(pr, prefix=config.version_prefix)
        if version is None:
            console.print(f"[yellow]{NO_VERSION}.[/yellow]")
            check.skipped(NO_VERSION)
            return RunResult(pr_number=pr.number, outcome=Outcome.SKIPPED, summary=NO_VERSION)

        console.print(f"PR built against {escape(version)}")
        beta = is_beta_version(version, config.beta_version_pattern)

        verdict = render_report(report)
        self_comment = find_self_comment(pr, config.self_name)

        if verdict.message and verdict.breaking:
            body = compose_comment(pr.user.login, verdict.message, beta)
            comment_url = _publish_comment(pr, self_comment, body)
            if beta:
                check.succeeded(comment_url, BREAKING_ACCEPTED)
                outcome, summary = Outcome.SUCCEEDED, BREAKING_ACCEPTED
            else:
                check.failed(comment_url, BREAKING)
                outcome, summary = Outcome.FAILED, BREAKING
            console.print(f"[red]{summary}[/red]: {comment_url}")
            return RunResult(
                pr_number=pr.number,
                outcome=outcome,
                summary=summary,
                comment_url=comment_url,
                breaking=True,
                beta=beta,
                version=version,
            )

        if self_comment is not None:
            # A previous run flagged this PR; the warning is stale now.
            self_comment.delete()
        check.succeeded(None, NOT_BREAKING)
        console.print(f"[green]{NOT_BREAKING}.[/green]")
        return RunResult(
            pr_number=pr.number, outcome=Outcome.SUCCEEDED, summary=NOT_BREAKING, beta=beta, version=version
        )

    except Exception as e:
        logger.exception("Compatibility checks failed for PR #%s", pr.number)
        if check.state is not CheckState.COMPLETED:
            check.errored(e)
        return RunResult(pr_number=pr.number, outcome=Outcome.ERRORED, summary=str(e))


def run_workflow(event: dict, config: ActionConfig, repo_obj=None) -> RunResult | None:
    """Resolve the PR behind a workflow_run event and check it.

    Returns None when the run does not belong to an open PR. Errors raised
    before the check run exists (bad payload, API failures during lookup)
    propagate to the caller.
    """
    if "workflow_run" not in event:
        raise EventPayloadError("Event payload is not a workflow_run event.")
    run = WorkflowRun.from_payload(event["workflow_run"])
    if not is_checkable_run(run):
        console.print("[yellow]Workflow run is not a successful pull_request build; nothing to check.[/yellow]")
        return None

    this_repo = repo_obj if repo_obj is not None else get_repo(config.repository, token=config.token)

    console.print(
        f"Workflow run head branch: {escape(str(run.head_branch))} and repository owner: {run.head_repository.owner}"
    )
    pr_number = find_linked_pr(this_repo, run, config.repo_name, scan_all_pages=config.scan_all_pages)
    if pr_number is None:
        console.print("[yellow]No open PR associated with this workflow run.[/yellow]")
        return None
    console.print(f"Found associated PR: #{pr_number}")

    try:
        pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {config.repository}.")

    return run_pr(this_repo, pr, run.id, config)
