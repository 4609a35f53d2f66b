"""User interaction for the sub-task dialog."""

import webbrowser
from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger()


class Prompter(ABC):
    """Synchronous question/answer channel with the user."""

    @abstractmethod
    def ask(self, message: str) -> str | None:
        """Ask a question and return the answer, or None if the user cancelled."""
        pass

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show a message to the user."""
        pass

    @abstractmethod
    def open_url(self, url: str) -> None:
        """Open a URL for the user to view."""
        pass


class ConsolePrompter(Prompter):
    """Prompter backed by the terminal and the system web browser."""

    def ask(self, message: str) -> str | None:
        print(message)
        try:
            return input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            logger.debug("Prompt cancelled", message=message)
            return None

    def alert(self, message: str) -> None:
        print(f"\n{message}\n")

    def open_url(self, url: str) -> None:
        if not webbrowser.open_new_tab(url):
            logger.warning("Could not open browser", url=url)
