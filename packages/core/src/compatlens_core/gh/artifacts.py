"""Locate, download and unpack the compatibility report artifact of a workflow run."""

from __future__ import annotations

import io
import logging
import zipfile

import requests

from compatlens_core.errors import ReportFormatError
from compatlens_core.models import IncompatibilityReport, load_report

logger = logging.getLogger(__name__)


def find_artifact(repo, run_id: int, name: str):
    """Return the first artifact of the run called ``name``, or None."""
    for artifact in repo.get_workflow_run(run_id).get_artifacts():
        if artifact.name == name:
            return artifact
    return None


def download_artifact(url: str, token: str, timeout: float = 60) -> bytes:
    response = requests.get(url, headers={"Authorization": f"Bearer {token}"}, timeout=timeout)
    response.raise_for_status()
    return response.content


def read_archive_member(payload: bytes, member: str) -> str:
    """Return one file of a zip archive as text."""
    try:
        with zipfile.ZipFile(io.BytesIO(payload)) as archive:
            return archive.read(member).decode("utf-8")
    except KeyError:
        raise ReportFormatError(f"Artifact does not contain {member}.") from None
    except zipfile.BadZipFile as e:
        raise ReportFormatError(f"Artifact is not a valid zip archive: {e}") from e


def fetch_report(repo, run_id: int, config) -> IncompatibilityReport | None:
    """Download and decode the report for a run. None when the run has no report artifact."""
    artifact = find_artifact(repo, run_id, config.artifact_name)
    if artifact is None:
        return None
    logger.info("Found artifact %s: %s", artifact.id, artifact.archive_download_url)

    payload = download_artifact(artifact.archive_download_url, config.token, timeout=config.request_timeout)
    return load_report(read_archive_member(payload, config.report_file))
