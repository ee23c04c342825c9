"""Rich console notifier."""

import asyncio
import logging
from typing import Optional

from rich.console import Console

from ..services.notifier import AbstractNotifier

logger = logging.getLogger(__name__)


class ConsoleNotifier(AbstractNotifier):
    """Prints notifications; alerts hold until ``acknowledge()`` is called.

    The keyboard handler routes the next keypress to ``acknowledge()`` while
    an alert is pending, so no other action runs until the user has seen it.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.pending: Optional[str] = None
        self._acknowledged: Optional[asyncio.Event] = None
        self._lock = asyncio.Lock()

    async def alert(self, message: str) -> None:
        async with self._lock:
            self.pending = message
            self._acknowledged = asyncio.Event()
            logger.info(f"Alert shown: {message}")
            self.console.print(f"❌ {message}", style="bold red")
            self.console.print("Press any key to continue", style="bright_black")
            try:
                await self._acknowledged.wait()
            finally:
                self.pending = None
                self._acknowledged = None

    def acknowledge(self) -> bool:
        """Release a pending alert. Returns False if none was pending."""
        if self._acknowledged is None:
            return False
        self._acknowledged.set()
        return True

    def warn(self, message: str) -> None:
        logger.info(f"Warning shown: {message}")
        self.console.print(f"⚠️  {message}", style="yellow")
