"""Exceptions raised while talking to Jira."""


class JiraError(Exception):
    """Base class for Jira API failures."""


class AuthenticationError(JiraError):
    """The server rejected the credentials (HTTP 401)."""


class RequestError(JiraError):
    """A request failed with a non-success status or never completed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MissingFieldError(JiraError):
    """An expected element is absent from the server response."""
