"""Jira REST API client using httpx."""

from typing import Any

import httpx
import structlog

from jira_subtask.errors import AuthenticationError, JiraError, MissingFieldError, RequestError
from jira_subtask.models import Credentials

logger = structlog.get_logger()

API_PREFIX = "/rest/api/2"


def _error_message(response: httpx.Response) -> str:
    """Extract the server-supplied message from a Jira error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        messages = list(body.get("errorMessages") or [])
        errors = body.get("errors") or {}
        if isinstance(errors, dict):
            messages.extend(f"{field}: {message}" for field, message in errors.items())
        if messages:
            return "; ".join(str(m) for m in messages)

    return f"Request failed with status {response.status_code}"


class JiraClient:
    """Thin client for the Jira issue endpoints."""

    def __init__(
        self,
        url: str,
        credentials: Credentials,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Jira origin, e.g. https://jira.example.com
            credentials: Basic authentication credentials
            transport: Optional httpx transport, used by tests
        """
        self.url = url.rstrip("/")
        logger.debug("Initializing Jira client", url=self.url, email=credentials.email)
        self.http = httpx.Client(
            base_url=self.url,
            auth=httpx.BasicAuth(credentials.email, credentials.token),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(
        self,
        path: str,
        method: str = "GET",
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body.

        Raises:
            AuthenticationError: The server answered 401
            RequestError: Any other non-success status, or a transport failure
        """
        logger.debug("Sending Jira request", method=method, path=path)
        try:
            response = self.http.request(method, path, json=json, params=params)

            if response.status_code == 401:
                raise AuthenticationError("Not authenticated - please ensure you're logged into Jira")

            if not response.is_success:
                raise RequestError(_error_message(response), status_code=response.status_code)

            if not response.content:
                return {}
            return response.json()
        except JiraError as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise
        except (httpx.HTTPError, ValueError) as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise RequestError(str(e) or type(e).__name__) from e

    def fetch_create_meta(self, project_key: str, issue_type: str) -> dict[str, Any]:
        """Fetch the creatable fields for a project and issue type.

        Returns:
            Mapping of field id to field definition
        """
        logger.info("Fetching create metadata", project_key=project_key, issue_type=issue_type)
        data = self.request(
            f"{API_PREFIX}/issue/createmeta",
            params={
                "projectKeys": project_key,
                "issuetypeNames": issue_type,
                "expand": "projects.issuetypes.fields",
            },
        )

        try:
            fields = data["projects"][0]["issuetypes"][0]["fields"]
            if not isinstance(fields, dict):
                raise TypeError(f"fields is {type(fields).__name__}, not an object")
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Create metadata has no fields", project_key=project_key, issue_type=issue_type)
            raise MissingFieldError(
                f"No create metadata for issue type '{issue_type}' in project '{project_key}'"
            ) from e

        logger.debug("Create metadata fetched", field_count=len(fields))
        return fields

    def list_fields(self, project_key: str, issue_type: str) -> list[tuple[str, str]]:
        """List the ``(field_id, name)`` pairs accepted when creating an issue."""
        fields = self.fetch_create_meta(project_key, issue_type)
        pairs = []
        for field_id, definition in fields.items():
            name = definition.get("name", "") if isinstance(definition, dict) else ""
            logger.debug("Available field", name=name, field_id=field_id)
            pairs.append((field_id, name))
        return pairs

    def create_issue(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an issue and return the server response (``id``, ``key``, ``self``)."""
        logger.info("Creating Jira issue", summary=payload.get("fields", {}).get("summary"))
        result = self.request(f"{API_PREFIX}/issue", method="POST", json=payload)
        if not isinstance(result, dict):
            logger.error("Unexpected create response", response=result)
            raise RequestError(f"Unexpected response from issue creation: {result!r}")
        logger.info("Jira issue created", key=result.get("key"))
        return result

    def browse_url(self, key: str) -> str:
        return f"{self.url}/browse/{key}"
