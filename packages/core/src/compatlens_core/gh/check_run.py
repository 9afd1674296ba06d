"""The check run that carries the compatibility verdict for a PR's head commit.

Each invocation creates one check run and completes it exactly once. The
wrapper tracks its own state, so a second completion raises instead of
silently overwriting the first verdict.
"""

from __future__ import annotations

import logging

from compatlens_core.errors import CheckRunStateError
from compatlens_core.models import CheckState

logger = logging.getLogger(__name__)


class CheckRun:
    def __init__(self, repo, head_sha: str, name: str = "Compatibility checks", details_url: str | None = None):
        self._repo = repo
        self._head_sha = head_sha
        self._name = name
        self._details_url = details_url
        self._run = None
        self.state = CheckState.QUEUED

    @property
    def id(self) -> int | None:
        return self._run.id if self._run is not None else None

    def start(self) -> None:
        if self.state is not CheckState.QUEUED:
            raise CheckRunStateError("start", self.state.value)
        kwargs = {"name": self._name, "head_sha": self._head_sha, "status": "in_progress"}
        if self._details_url:
            kwargs["details_url"] = self._details_url
        self._run = self._repo.create_check_run(**kwargs)
        self.state = CheckState.IN_PROGRESS

    def _complete(self, action: str, conclusion: str, output: dict, details_url: str | None = None) -> None:
        if self.state is not CheckState.IN_PROGRESS:
            raise CheckRunStateError(action, self.state.value)
        kwargs = {"conclusion": conclusion, "output": output}
        if details_url:
            kwargs["details_url"] = details_url
        self._run.edit(**kwargs)
        # Only after the update went through; a failed update can still be reported as an error.
        self.state = CheckState.COMPLETED

    def skipped(self, reason: str) -> None:
        self._complete("skip", "skipped", {"title": "Compatibility checks skipped", "summary": reason})

    def failed(self, url: str | None, message: str) -> None:
        self._complete("fail", "failure", {"title": "PR introduces breaking changes", "summary": message}, url)

    def errored(self, error: BaseException) -> None:
        if self.state is CheckState.QUEUED:
            logger.warning("No check run was created; cannot record error: %s", error)
            return
        self._complete(
            "error",
            "failure",
            {
                "title": "Compatibility checks failed during execution",
                "summary": f"Compatibility checks failed: {error}",
            },
            self._details_url,
        )

    def succeeded(self, url: str | None, message: str) -> None:
        self._complete(
            "succeed",
            "success",
            {"title": "Compatibility checks succeeded", "summary": message, "text": message},
            url,
        )
