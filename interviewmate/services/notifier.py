"""User notification channels."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class AbstractNotifier(ABC):
    """Surfaces failures to the user."""

    @abstractmethod
    async def alert(self, message: str) -> None:
        """Show a blocking notification and wait until it is acknowledged."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Show a non-blocking notification."""


class LoggingNotifier(AbstractNotifier):
    """Headless notifier: everything goes to the log, nothing blocks."""

    async def alert(self, message: str) -> None:
        logger.error(f"ALERT: {message}")

    def warn(self, message: str) -> None:
        logger.warning(message)
