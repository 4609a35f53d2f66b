"""Data models for jira-subtask."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Credentials:
    """Basic authentication credentials for the Jira REST API."""

    email: str
    token: str


@dataclass(frozen=True)
class Settings:
    """Static values used for every sub-task created in a run."""

    url: str
    project_key: str
    parent_key: str
    issue_type: str = "Sub-task"
    priority: str = "Medium"
    activity_field: str = "customfield_10106"
    assignee_name: str | None = None
    assignee_email: str | None = None


@dataclass
class ActivityOptions:
    """Allowed values of the activity custom field."""

    allowed_values: list[dict[str, Any]] = field(default_factory=list)

    @property
    def valid_options(self) -> list[str]:
        return [v["value"] for v in self.allowed_values if isinstance(v, dict) and isinstance(v.get("value"), str)]


@dataclass(frozen=True)
class SubtaskInput:
    """Answers collected from the user."""

    summary: str
    activity: str
    description: str = ""


@dataclass(frozen=True)
class SubtaskRequest:
    """A sub-task ready to be submitted."""

    project_key: str
    parent_key: str
    summary: str
    activity: str
    description: str = ""
    issue_type: str = "Sub-task"
    priority: str = "Medium"
    activity_field: str = "customfield_10106"
    assignee_name: str | None = None
    assignee_email: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Build the body of a ``POST /rest/api/2/issue`` call."""
        fields: dict[str, Any] = {
            "project": {"key": self.project_key},
            "parent": {"key": self.parent_key},
            "summary": self.summary,
            "description": self.description,
            "issuetype": {"name": self.issue_type},
            "priority": {"name": self.priority},
            self.activity_field: {"value": self.activity},
        }
        if self.assignee_name or self.assignee_email:
            assignee = {}
            if self.assignee_name:
                assignee["name"] = self.assignee_name
            if self.assignee_email:
                assignee["emailAddress"] = self.assignee_email
            fields["assignee"] = assignee
        return {"fields": fields}


@dataclass
class SubtaskResult:
    """Represents a sub-task created by the server."""

    key: str
    url: str
    id: str | None = None
    summary: str = ""
