import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "beta_version_pattern": "-beta",
    "self_name": "github-actions[bot]",
    "artifact_name": "jcc",
    "report_file": "jcc.json",
    "check_name": "Compatibility checks",
    "version_prefix": "Version: ",
    "scan_all_pages": False,  # True = keep paging when resolving PRs from renamed/forked repos
    "request_timeout": 60,  # seconds, artifact download only
}

# Action inputs as the Actions runner exports them: INPUT_ + upper-cased input name.
ACTION_INPUTS: dict = {
    "beta_version_pattern": "INPUT_BETA-VERSION-PATTERN",
    "self_name": "INPUT_SELF-NAME",
}


def _gh_cli_token() -> Optional[str]:
    """Token of the local GitHub CLI session, or None."""
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Using the GitHub CLI session token.")
    return token or None


def resolve_token() -> Optional[str]:
    """Return GITHUB_TOKEN, falling back to `gh auth token` for local runs.

    On an Actions runner (GITHUB_ACTIONS=true) only the job token is used.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token or os.environ.get("GITHUB_ACTIONS") == "true":
        return token or None
    return _gh_cli_token()


def load_config(config_path: str = ".compatlens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .compatlens.yml in the current directory
      3. GitHub Action inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for key, env_name in ACTION_INPUTS.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Values the Actions runner provides for every job
    config["github_token"] = resolve_token()
    config["repository"] = config.get("repository") or os.environ.get("GITHUB_REPOSITORY")
    config["server_url"] = os.environ.get("GITHUB_SERVER_URL", "https://github.com")
    config["run_id"] = os.environ.get("GITHUB_RUN_ID")
    config["event_path"] = config.get("event_path") or os.environ.get("GITHUB_EVENT_PATH")

    return config


@dataclass(frozen=True)
class ActionConfig:
    """Settings for one invocation, handed to the orchestrator at construction."""

    token: str
    repository: str
    beta_version_pattern: str = DEFAULT_CONFIG["beta_version_pattern"]
    self_name: str = DEFAULT_CONFIG["self_name"]
    artifact_name: str = DEFAULT_CONFIG["artifact_name"]
    report_file: str = DEFAULT_CONFIG["report_file"]
    check_name: str = DEFAULT_CONFIG["check_name"]
    version_prefix: str = DEFAULT_CONFIG["version_prefix"]
    scan_all_pages: bool = DEFAULT_CONFIG["scan_all_pages"]
    request_timeout: float = DEFAULT_CONFIG["request_timeout"]
    server_url: str = "https://github.com"
    run_id: Optional[str] = None

    @classmethod
    def from_dict(cls, config: dict) -> "ActionConfig":
        if not config.get("github_token"):
            raise ValueError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
        if not config.get("repository"):
            raise ValueError("No repository configured. Set GITHUB_REPOSITORY or pass --repo.")
        return cls(
            token=config["github_token"],
            repository=config["repository"],
            beta_version_pattern=config["beta_version_pattern"],
            self_name=config["self_name"],
            artifact_name=config["artifact_name"],
            report_file=config["report_file"],
            check_name=config["check_name"],
            version_prefix=config["version_prefix"],
            scan_all_pages=bool(config["scan_all_pages"]),
            request_timeout=float(config["request_timeout"]),
            server_url=config.get("server_url") or "https://github.com",
            run_id=config.get("run_id"),
        )

    @property
    def repo_name(self) -> str:
        return self.repository.split("/", 1)[-1]

    @property
    def run_url(self) -> Optional[str]:
        """Human-viewable URL of the job running this bot, or None outside Actions."""
        if not self.run_id:
            return None
        return f"{self.server_url.rstrip('/')}/{self.repository}/actions/runs/{self.run_id}"
