from __future__ import annotations

import logging
import re

from github import Github

from compatlens_core.models import WorkflowRun

logger = logging.getLogger(__name__)

PER_PAGE = 100


def get_repo(repo_name: str, token: str):
    return Github(token, per_page=PER_PAGE).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def _head_label(run: WorkflowRun) -> str:
    return f"{run.head_repository.owner}:{run.head_branch}"


def is_checkable_run(run: WorkflowRun) -> bool:
    """True for a successful ``pull_request`` run with a head branch. Makes no API calls."""
    if run.conclusion != "success":
        logger.info("Workflow run %s concluded with %r, nothing to check.", run.id, run.conclusion)
        return False
    if run.event != "pull_request":
        logger.info("Workflow run %s was triggered by %r; only pull_request runs are checked.", run.id, run.event)
        return False
    if not run.head_branch:
        logger.info("Workflow run %s has no head branch.", run.id)
        return False
    return True


def find_linked_pr(repo, run: WorkflowRun, repo_name: str, scan_all_pages: bool = False) -> int | None:
    """Return the number of the open PR a completed workflow run was built for, or None.

    Runs rejected by :func:`is_checkable_run` return None before touching the API.

    When the head repository has the same name as this one, GitHub can filter
    open PRs by ``owner:branch`` directly. Otherwise (a renamed fork) the head
    filter does not match, so open PRs are listed and their head labels compared.
    That scan stops after the first page unless ``scan_all_pages`` is set.
    """
    if not is_checkable_run(run):
        return None

    label = _head_label(run)
    logger.debug("Resolving PR for head label %s", label)

    if run.head_repository.name == repo_name:
        for pr in repo.get_pulls(state="open", head=label, sort="long-running"):
            return pr.number
        logger.info("No open PR has head %s.", label)
        return None

    pulls = repo.get_pulls(state="open")
    candidates = pulls if scan_all_pages else pulls.get_page(0)
    for pr in candidates:
        if pr.head.label == label:
            return pr.number
    logger.info("No open PR has head %s%s.", label, "" if scan_all_pages else " on the first page of open PRs")
    return None


def find_self_comment(pr, self_name: str):
    """Return the first issue comment on the PR written by ``self_name``, or None."""
    for comment in pr.get_issue_comments():
        if comment.user is not None and comment.user.login == self_name:
            return comment
    return None


def get_base_version(pr, prefix: str = "Version: ") -> str | None:
    """Return the version advertised by a status on the PR's base commit.

    The release pipeline publishes a commit status whose description reads
    ``Version: <version>``; the first such status wins.
    """
    commit = pr.base.repo.get_commit(pr.base.sha)
    for status in commit.get_statuses():
        description = status.description or ""
        if description.startswith(prefix):
            return description[len(prefix) :]
    return None


def is_beta_version(version: str, pattern: str) -> bool:
    return re.search(pattern, version) is not None
