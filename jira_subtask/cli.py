"""CLI for jira-subtask."""

import sys
from typing import Annotated, Literal, NoReturn

import structlog
from cyclopts import App, Parameter

from jira_subtask.client import JiraClient
from jira_subtask.config import get_config, load_settings, resolve_credentials
from jira_subtask.config_commands import config_app
from jira_subtask.errors import JiraError
from jira_subtask.models import Settings
from jira_subtask.prompts import ConsolePrompter
from jira_subtask.workflow import create_subtask, fetch_activity_options

logger = structlog.get_logger()

app = App(
    name="jira-subtask",
    help="Jira Subtask - Create activity-tracked sub-tasks from the terminal",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    print(message, file=sys.stderr)
    sys.exit(1)


def get_client(parent: str | None = None, require_parent: bool = True) -> tuple[JiraClient, Settings]:
    """Get a Jira client and the run settings from configuration."""
    config = get_config()
    settings = load_settings(config, parent=parent, require_parent=require_parent)
    credentials = resolve_credentials(config)
    return JiraClient(settings.url, credentials), settings


@app.command
def create(parent: str | None = None) -> None:
    """Interactively create a sub-task under the parent issue.

    Args:
        parent: Parent issue key, overrides the ``issue.parent`` setting
    """
    client, settings = get_client(parent)
    with client:
        result = create_subtask(client, ConsolePrompter(), settings)
    if result is None:
        sys.exit(1)


@app.command
def activities() -> None:
    """List the valid activity options."""
    client, settings = get_client(require_parent=False)
    with client:
        try:
            options = fetch_activity_options(client, settings)
        except JiraError as e:
            fail(f"Failed to load activity options: {e}")

    print(f"Valid activity options for {settings.project_key} / {settings.issue_type}:\n")
    for option in options.valid_options:
        print(f"  {option}")


@app.command
def fields() -> None:
    """List every field accepted when creating a sub-task."""
    client, settings = get_client(require_parent=False)
    with client:
        try:
            pairs = client.list_fields(settings.project_key, settings.issue_type)
        except JiraError as e:
            fail(f"Failed to load fields: {e}")

    print("All available fields:")
    for field_id, name in pairs:
        print(f"Field: {name} | ID: {field_id}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
