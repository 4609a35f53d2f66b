"""Configuration management for jira-subtask using YAML files."""

import os
from pathlib import Path
from typing import Any

import structlog
import yaml

from jira_subtask.models import Credentials, Settings

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".jira-subtask"
CONFIG_FILE_NAME = "config.yaml"

EMAIL_ENV_VAR = "JIRA_EMAIL"
TOKEN_ENV_VAR = "JIRA_API_TOKEN"

DEFAULTS: dict[str, str] = {
    "project.key": "LMS",
    "issue.type": "Sub-task",
    "issue.priority": "Medium",
    "activity.field": "customfield_10106",
}

KNOWN_KEYS = (
    "jira.url",
    "jira.email",
    "jira.token",
    "project.key",
    "issue.type",
    "issue.priority",
    "issue.parent",
    "activity.field",
    "assignee.name",
    "assignee.email",
)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a config file, returning an empty mapping when it does not exist."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"expected a mapping at the top level, got {type(data).__name__}")
    return data


class Config:
    """Jira settings stored in YAML files.

    The writable layer is either the local file (.jira-subtask/config.yaml in
    the current directory) or the global one (~/.jira-subtask/config.yaml).
    A local config also reads the global file as a fallback layer. Empty
    values count as unset, so they never shadow a lower layer or a default.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, read and write the global file only.
            config_dir: Directory of the writable file (overrides the default location)
        """
        global_dir = Path.home() / CONFIG_DIR_NAME
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = global_dir if use_global else Path.cwd() / CONFIG_DIR_NAME
        self.is_global = use_global
        self.config_file = self.config_dir / CONFIG_FILE_NAME

        try:
            self._values = _read_yaml(self.config_file)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", config_file=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

        # read-only layers, searched after the writable one
        self._fallbacks: list[dict[str, Any]] = []
        global_file = global_dir / CONFIG_FILE_NAME
        if not use_global and global_file != self.config_file:
            try:
                self._fallbacks.append(_read_yaml(global_file))
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Ignoring unreadable global config", config_file=str(global_file), error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _layers(self) -> list[dict[str, Any]]:
        return [self._values, *self._fallbacks]

    def _save(self) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._values, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save config", config_file=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved", keys=list(self._values))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first non-empty value of key across the layers, else default."""
        for layer in self._layers():
            value = layer.get(key)
            if value not in (None, ""):
                return str(value)
        return default

    def set(self, key: str, value: str) -> None:
        """Store a value in the writable layer.

        Raises:
            ValueError: key is not a jira-subtask setting
        """
        if key not in KNOWN_KEYS:
            raise ValueError(f"Unknown config key '{key}'. Known keys: {', '.join(KNOWN_KEYS)}")
        logger.debug("Setting config value", key=key)
        self._values[key] = value
        self._save()

    def unset(self, key: str) -> None:
        logger.debug("Unsetting config value", key=key)
        if key in self._values:
            del self._values[key]
            self._save()

    def list(self) -> dict[str, str]:
        """All visible settings; the writable layer wins over fallbacks."""
        merged: dict[str, str] = {}
        for layer in reversed(self._layers()):
            merged.update({k: str(v) for k, v in layer.items() if v not in (None, "")})
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.
    """
    return Config(use_global=use_global)


def resolve_credentials(config: Config) -> Credentials:
    """Resolve the Jira credentials, preferring the environment over config files."""
    email = os.environ.get(EMAIL_ENV_VAR) or config.get("jira.email")
    token = os.environ.get(TOKEN_ENV_VAR) or config.get("jira.token")

    if not email or not token:
        raise ValueError(
            "Jira credentials not configured. Export "
            f"{EMAIL_ENV_VAR} and {TOKEN_ENV_VAR}, or set them using:\n"
            "  jira-subtask config set jira.email <email>\n"
            "  jira-subtask config set jira.token <api-token>"
        )
    logger.debug("Credentials resolved", email=email, from_env=EMAIL_ENV_VAR in os.environ)
    return Credentials(email=email, token=token)


def load_settings(config: Config, parent: str | None = None, require_parent: bool = True) -> Settings:
    """Build the run settings from configuration.

    Args:
        config: Configuration to read from
        parent: Parent issue key overriding ``issue.parent``
        require_parent: If False, a missing parent key is allowed (read-only commands)
    """

    def value(key: str) -> str | None:
        return config.get(key) or DEFAULTS.get(key)

    url = value("jira.url")
    if not url:
        raise ValueError("Jira URL not configured. Set it using:\n  jira-subtask config set jira.url <url>")

    parent_key = parent or value("issue.parent") or ""
    if require_parent and not parent_key:
        raise ValueError(
            "Parent issue not configured. Pass --parent or set it using:\n"
            "  jira-subtask config set issue.parent <issue-key>"
        )

    return Settings(
        url=url.rstrip("/"),
        project_key=value("project.key"),
        parent_key=parent_key,
        issue_type=value("issue.type"),
        priority=value("issue.priority"),
        activity_field=value("activity.field"),
        assignee_name=value("assignee.name"),
        assignee_email=value("assignee.email"),
    )
