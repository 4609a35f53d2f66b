"""Interactive sub-task creation flow.

The flow runs strictly in order: load the activity options, ask the user for
the sub-task fields, then submit. Any failure ends the run after telling the
user what went wrong; nothing is retried.
"""

import structlog

from jira_subtask.client import JiraClient
from jira_subtask.errors import JiraError, MissingFieldError
from jira_subtask.models import ActivityOptions, Settings, SubtaskInput, SubtaskRequest, SubtaskResult
from jira_subtask.prompts import Prompter

logger = structlog.get_logger()

SUBMIT_FAILURE_HINTS = (
    "Possible issues:\n"
    "1. Not logged into Jira\n"
    "2. No permission to create subtasks\n"
    "3. Parent issue doesn't exist"
)


def fetch_activity_options(client: JiraClient, settings: Settings) -> ActivityOptions:
    """Return the allowed values of the activity field.

    Raises:
        MissingFieldError: The activity field is not part of the create metadata
    """
    fields = client.fetch_create_meta(settings.project_key, settings.issue_type)
    activity_field = fields.get(settings.activity_field)
    if not isinstance(activity_field, dict) or not isinstance(activity_field.get("allowedValues"), list):
        raise MissingFieldError("Could not find activity field in API response")

    options = ActivityOptions(allowed_values=list(activity_field["allowedValues"]))
    if not options.valid_options:
        raise MissingFieldError("Activity field has no allowed values")
    logger.info("Valid activity options", options=options.valid_options)
    return options


def load_activity_options(client: JiraClient, prompter: Prompter, settings: Settings) -> ActivityOptions | None:
    """Like fetch_activity_options, but reports failures to the user and returns None."""
    try:
        return fetch_activity_options(client, settings)
    except JiraError as e:
        logger.error("Error fetching activity options", error=str(e))
        prompter.alert(f"Failed to load activity options: {e}\n\nAre you logged into Jira?")
        return None


def ask_activity(prompter: Prompter, options: ActivityOptions) -> str | None:
    """Ask until the user picks one of the valid options or cancels."""
    choices = "\n".join(options.valid_options)
    while True:
        answer = prompter.ask(f"Activity (required). Valid options:\n{choices}")
        if answer is None:
            logger.debug("Activity prompt cancelled")
            return None

        if not answer:
            prompter.alert("Activity is required")
            continue

        if answer not in options.valid_options:
            logger.debug("Invalid activity entered", activity=answer)
            prompter.alert(f"Invalid activity. Please choose from:\n{choices}")
            continue

        return answer


def collect_input(prompter: Prompter, options: ActivityOptions) -> SubtaskInput | None:
    """Ask for summary, description and activity. Returns None if the user aborts."""
    summary = prompter.ask("Subtask summary (required):")
    if not summary or not summary.strip():
        prompter.alert("Subtask summary is required")
        return None

    description = prompter.ask("Subtask description (optional):") or ""

    activity = ask_activity(prompter, options)
    if activity is None:
        return None

    return SubtaskInput(summary=summary.strip(), description=description.strip(), activity=activity)


def build_request(settings: Settings, answers: SubtaskInput) -> SubtaskRequest:
    return SubtaskRequest(
        project_key=settings.project_key,
        parent_key=settings.parent_key,
        summary=answers.summary,
        description=answers.description,
        activity=answers.activity,
        issue_type=settings.issue_type,
        priority=settings.priority,
        activity_field=settings.activity_field,
        assignee_name=settings.assignee_name,
        assignee_email=settings.assignee_email,
    )


def submit_subtask(client: JiraClient, prompter: Prompter, request: SubtaskRequest) -> SubtaskResult | None:
    """Create the sub-task and report the outcome to the user."""
    try:
        response = client.create_issue(request.to_payload())
    except JiraError as e:
        logger.error("Error creating subtask", error=str(e), parent=request.parent_key)
        prompter.alert(f"Failed to create subtask:\n{e}\n\n{SUBMIT_FAILURE_HINTS}")
        return None

    key = response.get("key")
    if not key:
        logger.error("Create response has no issue key", response=response)
        prompter.alert(f"Failed to create subtask:\nServer response has no issue key\n\n{SUBMIT_FAILURE_HINTS}")
        return None

    result = SubtaskResult(key=key, url=client.browse_url(key), id=response.get("id"), summary=request.summary)
    logger.info("Subtask created", key=result.key, url=result.url)
    prompter.alert(f"Subtask created successfully!\n\n{result.key}: {result.summary}\n\nOpen: {result.url}")
    prompter.open_url(result.url)
    return result


def create_subtask(client: JiraClient, prompter: Prompter, settings: Settings) -> SubtaskResult | None:
    """Run the whole flow. Returns the created sub-task, or None if the flow halted."""
    options = load_activity_options(client, prompter, settings)
    if options is None or not options.valid_options:
        logger.info("No activity options available, stopping")
        return None

    answers = collect_input(prompter, options)
    if answers is None:
        logger.info("Input incomplete, stopping")
        return None

    return submit_subtask(client, prompter, build_request(settings, answers))
