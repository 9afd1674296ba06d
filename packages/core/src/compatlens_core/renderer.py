"""Markdown rendering of compatibility reports."""

from __future__ import annotations

from compatlens_core.models import Incompatibility, IncompatibilityReport, RenderedVerdict

ERROR_EMOJI = "❗"
WARNING_EMOJI = "⚠"

_BETA_NOTE = (
    "Fortunately, this project is currently accepting breaking changes, "
    "but if they are not intentional, please revert them."
)
_STABLE_NOTE = (
    "Unfortunately, this project is not accepting breaking changes right now. \n"
    "Please revert them before this PR can be merged."
)


def emoji_for(item: Incompatibility) -> str:
    return ERROR_EMOJI if item.is_error else WARNING_EMOJI


def _member_line(member: str, items: list[Incompatibility]) -> str:
    joined = "; ".join(f"{emoji_for(inc)} {inc.message}" for inc in items)
    return f"    * `{member}`: {joined}\n"


def render_report(report: IncompatibilityReport) -> RenderedVerdict:
    """Render a report as the Markdown body of the PR comment.

    Projects without classes produce no output at all, so a report whose
    projects are all empty renders to an empty string. ``breaking`` comes
    from :attr:`IncompatibilityReport.is_breaking`.
    """
    parts: list[str] = []

    for project, classes in report.projects.items():
        if not classes:
            continue
        parts.append(f"\n## `{project}`\n")
        for clazz, ci in classes.items():
            parts.append(f"  - `{clazz}`\n")
            for item in ci.class_incompatibilities:
                parts.append(f"    * {emoji_for(item)} `{item.message}`\n")
            for method, items in ci.method_incompatibilities.items():
                parts.append(_member_line(method, items))
            for name, items in ci.field_incompatibilities.items():
                parts.append(_member_line(name, items))

    return RenderedVerdict(message="".join(parts), breaking=report.is_breaking)


def compose_comment(author: str, body: str, beta: bool) -> str:
    """Prefix the rendered report with a note addressed to the PR author."""
    note = _BETA_NOTE if beta else _STABLE_NOTE
    return f"@{author}, this PR introduces breaking changes.\n{note}\n" + body
