"""Main application entry point for InterviewMate."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional, Set

from rich.console import Console
from rich.live import Live

from . import __version__
from .audio.capture import PyAudioCapture
from .config import InterviewMateConfig
from .errors import SpeakerToggleRejected
from .host.event_stream import HostEventStream
from .host.http_client import HttpHostClient
from .services.coordinator import InterviewCoordinator
from .ui.conversation_view import ConversationView
from .ui.keyboard_input import KeyboardInputHandler, ShortcutAction
from .ui.notifier import ConsoleNotifier

logger = logging.getLogger(__name__)


class App:
    """Wires config, host, capture and the terminal UI around one coordinator."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = InterviewMateConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.shortcuts = self.config.get('shortcuts', {})
        self.coordinator: Optional[InterviewCoordinator] = None
        self._tasks: Set[asyncio.Task] = set()

    def _build(self) -> None:
        base_url = self.config.get_host_url()
        self.console = Console()
        self.notifier = ConsoleNotifier(self.console)
        self.host = HttpHostClient(
            base_url,
            timeout_seconds=float(self.config.get('host.timeout_seconds', 30.0)),
        )
        self.event_stream = HostEventStream(base_url)
        self.capture = PyAudioCapture(
            sample_rate=self.config.get('audio.sample_rate', 16000),
            chunk_size=self.config.get('audio.chunk_size', 1024),
            channels=self.config.get('audio.channels', 1),
        )
        self.coordinator = InterviewCoordinator.from_config(
            self.config, self.host, self.capture, self.notifier)
        self.view = ConversationView(self.shortcuts)
        self.exit_event = asyncio.Event()

        logger.info(f"Host: {base_url}")
        logger.info(f"Audio settings: {self.capture.sample_rate}Hz, "
                    f"{self.capture.chunk_size} samples/chunk, {self.capture.channels} channels")

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self._build()
        keyboard = KeyboardInputHandler(self.shortcuts, loop, self._handle_key)
        stream_task = loop.create_task(self.event_stream.run())
        try:
            await self.coordinator.activate()
            keyboard.start()
            with Live(self._frame(), console=self.console, refresh_per_second=4) as live:
                while not self.exit_event.is_set():
                    live.update(self._frame())
                    try:
                        await asyncio.wait_for(self.exit_event.wait(), timeout=0.25)
                    except asyncio.TimeoutError:
                        pass
        finally:
            await loop.run_in_executor(None, keyboard.stop)
            await self.cleanup(stream_task)

    def _frame(self):
        return self.view.render(self.coordinator.status(self.notifier.pending))

    def _handle_key(self, key: str, action: Optional[ShortcutAction]) -> None:
        # Any key dismisses a pending alert and does nothing else
        if self.notifier.acknowledge():
            return

        if action is ShortcutAction.TOGGLE_RECORDING:
            self.coordinator.request_toggle_recording()
        elif action is ShortcutAction.TOGGLE_SPEAKER:
            self._spawn(self._toggle_speaker())
        elif action is ShortcutAction.QUIT:
            logger.info("Quit requested")
            self.exit_event.set()

    async def _toggle_speaker(self) -> None:
        try:
            await self.coordinator.toggle_speaker()
        except SpeakerToggleRejected as e:
            self.notifier.warn(str(e))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def cleanup(self, stream_task: asyncio.Task) -> None:
        await self.coordinator.teardown()

        self.event_stream.stop()
        stream_task.cancel()
        await asyncio.gather(stream_task, return_exceptions=True)

        await self.host.close()
        self.capture.terminate()
        logger.info("InterviewMate shut down")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/interviewmate.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Keep the live view readable
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("InterviewMate starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for InterviewMate."""
    parser = argparse.ArgumentParser(
        description="InterviewMate - live interview capture with AI answer suggestions",
        epilog="Keys: space=start/stop recording, s=switch speaker, q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"InterviewMate v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = App(args.config, args.log_level)
        asyncio.run(app.run())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
