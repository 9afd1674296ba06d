"""Exceptions raised by compatlens.

Soft stops (no linked PR, no report artifact, no version status) are not
errors and never raise. Everything here is an execution error that the
orchestrator records on the check run.
"""

from __future__ import annotations


class ReportFormatError(ValueError):
    """The compatibility report artifact is missing a file or is malformed."""


class EventPayloadError(ValueError):
    """The workflow_run event payload lacks a field the bot needs."""


class CheckRunStateError(RuntimeError):
    """A check run transition was attempted from the wrong state."""

    def __init__(self, action: str, state: str):
        super().__init__(f"Cannot {action} a check run that is {state}.")
        self.action = action
        self.state = state
