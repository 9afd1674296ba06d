"""Typed records for workflow runs, compatibility reports and run results.

The JSON report written by the compatibility checker is decoded once, here,
into nested dataclasses. Everything downstream walks typed fields instead of
poking at raw dicts.

Report shape::

    {
      "<project>": {
        "<class>": {
          "classIncompatibilities": [{"message": "...", "isError": true}],
          "methodIncompatibilities": {"<method>": [{...}]},
          "fieldIncompatibilities": {"<field>": [{...}]}
        }
      }
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum

from compatlens_core.errors import EventPayloadError, ReportFormatError


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @classmethod
    def from_payload(cls, data: dict) -> RepositoryRef:
        try:
            return cls(owner=data["owner"]["login"], name=data["name"])
        except (KeyError, TypeError) as e:
            raise EventPayloadError(f"Repository descriptor is missing {e}") from e


@dataclass(frozen=True)
class WorkflowRun:
    """Snapshot of a completed workflow run, as delivered by the workflow_run event."""

    id: int
    conclusion: str | None
    event: str
    head_branch: str | None
    head_repository: RepositoryRef
    head_sha: str

    @classmethod
    def from_payload(cls, data: dict) -> WorkflowRun:
        """Build a WorkflowRun from the ``workflow_run`` object of an event payload."""
        if not isinstance(data, dict):
            raise EventPayloadError("Event payload has no workflow_run object.")
        try:
            return cls(
                id=int(data["id"]),
                conclusion=data.get("conclusion"),
                event=data["event"],
                head_branch=data.get("head_branch") or None,
                head_repository=RepositoryRef.from_payload(data["head_repository"]),
                head_sha=data["head_sha"],
            )
        except EventPayloadError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise EventPayloadError(f"workflow_run payload is missing or has a bad {e}") from e


@dataclass(frozen=True)
class Incompatibility:
    message: str
    is_error: bool = False


@dataclass
class ClassIncompatibilities:
    """Everything the checker found wrong with one class."""

    class_incompatibilities: list[Incompatibility] = field(default_factory=list)
    method_incompatibilities: dict[str, list[Incompatibility]] = field(default_factory=dict)
    field_incompatibilities: dict[str, list[Incompatibility]] = field(default_factory=dict)

    def items(self):
        """Yield every incompatibility for the class, class-level first."""
        yield from self.class_incompatibilities
        for incompats in self.method_incompatibilities.values():
            yield from incompats
        for incompats in self.field_incompatibilities.values():
            yield from incompats


@dataclass
class IncompatibilityReport:
    projects: dict[str, dict[str, ClassIncompatibilities]] = field(default_factory=dict)

    @property
    def is_breaking(self) -> bool:
        return any(
            item.is_error for classes in self.projects.values() for ci in classes.values() for item in ci.items()
        )


@dataclass(frozen=True)
class RenderedVerdict:
    message: str
    breaking: bool


class CheckState(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Outcome(str, Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ERRORED = "errored"


@dataclass
class RunResult:
    """Result returned by run_pr, enough for the CLI to report and pick an exit code."""

    pr_number: int
    outcome: Outcome
    summary: str
    comment_url: str | None = None
    breaking: bool = False
    beta: bool = False
    version: str | None = None


def _parse_incompatibility(data, where: str) -> Incompatibility:
    if not isinstance(data, dict) or not isinstance(data.get("message"), str):
        raise ReportFormatError(f"Incompatibility at {where} must be an object with a string 'message'.")
    return Incompatibility(message=data["message"], is_error=bool(data.get("isError", False)))


def _parse_incompat_list(data, where: str) -> list[Incompatibility]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ReportFormatError(f"Expected a list of incompatibilities at {where}.")
    return [_parse_incompatibility(item, f"{where}[{i}]") for i, item in enumerate(data)]


def _parse_member_map(data, where: str) -> dict[str, list[Incompatibility]]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ReportFormatError(f"Expected an object keyed by member name at {where}.")
    return {name: _parse_incompat_list(items, f"{where}.{name}") for name, items in data.items()}


def parse_report(data) -> IncompatibilityReport:
    """Decode an already-parsed JSON report into an IncompatibilityReport.

    Raises ReportFormatError if the document does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise ReportFormatError("Compatibility report must be a JSON object keyed by project name.")

    projects: dict[str, dict[str, ClassIncompatibilities]] = {}
    for project, classes in data.items():
        if not isinstance(classes, dict):
            raise ReportFormatError(f"Project {project!r} must map class names to incompatibilities.")
        parsed: dict[str, ClassIncompatibilities] = {}
        for clazz, ci in classes.items():
            where = f"{project}.{clazz}"
            if not isinstance(ci, dict):
                raise ReportFormatError(f"Class entry {where} must be an object.")
            parsed[clazz] = ClassIncompatibilities(
                class_incompatibilities=_parse_incompat_list(
                    ci.get("classIncompatibilities"), f"{where}.classIncompatibilities"
                ),
                method_incompatibilities=_parse_member_map(
                    ci.get("methodIncompatibilities"), f"{where}.methodIncompatibilities"
                ),
                field_incompatibilities=_parse_member_map(
                    ci.get("fieldIncompatibilities"), f"{where}.fieldIncompatibilities"
                ),
            )
        projects[project] = parsed
    return IncompatibilityReport(projects=projects)


def load_report(text: str) -> IncompatibilityReport:
    """Parse JSON text and decode it as a report."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportFormatError(f"Compatibility report is not valid JSON: {e}") from e
    return parse_report(data)
