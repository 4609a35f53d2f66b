"""Entry point: python -m jira_subtask"""

from jira_subtask.cli import app

if __name__ == "__main__":
    app.meta()
