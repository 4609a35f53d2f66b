"""Tests for configuration and credential resolution."""

from pathlib import Path

import pytest
import yaml

from jira_subtask.config import Config, load_settings, resolve_credentials


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the home directory at a temporary path and clear credentials."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("JIRA_EMAIL", raising=False)
    monkeypatch.delenv("JIRA_API_TOKEN", raising=False)
    return home


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Create a local config in a temporary directory."""
    return Config(config_dir=tmp_path / "project" / ".jira-subtask")


def test_set_and_get(config: Config) -> None:
    """Test that values are persisted to YAML."""
    config.set("jira.url", "https://jira.example.com")

    assert config.get("jira.url") == "https://jira.example.com"
    saved = yaml.safe_load(config.config_file.read_text())
    assert saved == {"jira.url": "https://jira.example.com"}


def test_unset(config: Config) -> None:
    """Test removing a value."""
    config.set("issue.parent", "LMS-1")
    config.unset("issue.parent")
    assert config.get("issue.parent") is None


def test_local_falls_back_to_global(config: Config, isolated_home: Path) -> None:
    """Test that local config reads global values it does not override."""
    global_config = Config(use_global=True)
    global_config.set("jira.url", "https://global.example.com")
    global_config.set("issue.parent", "LMS-9")

    config.set("issue.parent", "LMS-1")
    local = Config(config_dir=config.config_dir)

    assert local.get("jira.url") == "https://global.example.com"
    assert local.get("issue.parent") == "LMS-1"
    assert local.list() == {"jira.url": "https://global.example.com", "issue.parent": "LMS-1"}


def test_invalid_yaml_raises(config: Config) -> None:
    """Test that a corrupt config file is reported."""
    config.config_dir.mkdir(parents=True)
    config.config_file.write_text("key: [unclosed")

    with pytest.raises(ValueError, match="Failed to load config"):
        Config(config_dir=config.config_dir)


def test_credentials_from_config(config: Config) -> None:
    """Test resolving credentials stored in config."""
    config.set("jira.email", "user@example.com")
    config.set("jira.token", "secret")

    credentials = resolve_credentials(config)
    assert credentials.email == "user@example.com"
    assert credentials.token == "secret"


def test_credentials_env_overrides_config(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that environment variables take precedence."""
    config.set("jira.email", "user@example.com")
    config.set("jira.token", "secret")
    monkeypatch.setenv("JIRA_EMAIL", "env@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "env-token")

    credentials = resolve_credentials(config)
    assert credentials.email == "env@example.com"
    assert credentials.token == "env-token"


def test_missing_credentials_raise(config: Config) -> None:
    """Test the error when no credentials are available."""
    config.set("jira.email", "user@example.com")
    with pytest.raises(ValueError, match="Jira credentials not configured"):
        resolve_credentials(config)


def test_load_settings_defaults(config: Config) -> None:
    """Test settings built from a minimal config."""
    config.set("jira.url", "https://jira.example.com/")
    config.set("issue.parent", "LMS-170042")

    settings = load_settings(config)

    assert settings.url == "https://jira.example.com"
    assert settings.project_key == "LMS"
    assert settings.parent_key == "LMS-170042"
    assert settings.issue_type == "Sub-task"
    assert settings.priority == "Medium"
    assert settings.activity_field == "customfield_10106"
    assert settings.assignee_name is None


def test_load_settings_parent_override(config: Config) -> None:
    """Test that an explicit parent wins over config."""
    config.set("jira.url", "https://jira.example.com")
    config.set("issue.parent", "LMS-1")
    assert load_settings(config, parent="LMS-2").parent_key == "LMS-2"


def test_load_settings_requires_url(config: Config) -> None:
    """Test the error when the Jira URL is missing."""
    with pytest.raises(ValueError, match="Jira URL not configured"):
        load_settings(config)


def test_load_settings_requires_parent(config: Config) -> None:
    """Test the error when no parent issue is configured."""
    config.set("jira.url", "https://jira.example.com")
    with pytest.raises(ValueError, match="Parent issue not configured"):
        load_settings(config)
    assert load_settings(config, require_parent=False).parent_key == ""


def test_empty_value_does_not_override_default(config: Config) -> None:
    """Test that a key set to an empty string falls back to the default."""
    config.set("jira.url", "https://jira.example.com")
    config.set("issue.parent", "LMS-1")
    config.set("project.key", "")
    config.set("activity.field", "")

    settings = load_settings(config)

    assert settings.project_key == "LMS"
    assert settings.activity_field == "customfield_10106"
    assert config.get("project.key") is None
    assert "project.key" not in config.list()


def test_empty_local_value_does_not_shadow_global(config: Config) -> None:
    """Test that an empty local value falls through to the global file."""
    Config(use_global=True).set("issue.priority", "High")
    config.set("issue.priority", "")

    assert Config(config_dir=config.config_dir).get("issue.priority") == "High"


def test_set_rejects_unknown_key(config: Config) -> None:
    """Test that typos in keys are refused."""
    with pytest.raises(ValueError, match="Unknown config key 'jira.tokn'"):
        config.set("jira.tokn", "secret")
    assert not config.config_file.exists()


def test_non_mapping_yaml_raises(config: Config) -> None:
    """Test that a config file holding a list is reported."""
    config.config_dir.mkdir(parents=True)
    config.config_file.write_text("- jira.url\n")

    with pytest.raises(ValueError, match="Failed to load config"):
        Config(config_dir=config.config_dir)
