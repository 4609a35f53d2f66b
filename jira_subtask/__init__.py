"""Create activity-tracked Jira sub-tasks from the terminal."""
