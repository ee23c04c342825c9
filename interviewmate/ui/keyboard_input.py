"""Single-key shortcuts read from the terminal and delivered to the event loop."""

import asyncio
import logging
import sys
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class ShortcutAction(str, Enum):
    """Actions a configured key can trigger. Values match the config keys."""
    TOGGLE_RECORDING = "toggle_recording"
    TOGGLE_SPEAKER = "toggle_speaker"
    QUIT = "quit"


KeyListener = Callable[[str, Optional[ShortcutAction]], None]


class KeyboardInputHandler:
    """Reads keypresses on a daemon thread and hands them to the event loop.

    Every key is delivered, bound or not, because a pending alert is
    acknowledged by whatever key comes next.
    """

    def __init__(self, shortcuts: Dict[str, str], loop: asyncio.AbstractEventLoop,
                 on_key: KeyListener, poll_seconds: float = 0.1):
        """Initialize keyboard handler.

        Args:
            shortcuts: Mapping of action name (see ShortcutAction) to key
            loop: Event loop that receives the keys
            on_key: Called on the loop with the key and its bound action, if any
            poll_seconds: How long one read waits for input
        """
        self.loop = loop
        self.on_key = on_key
        self.poll_seconds = poll_seconds
        self.bindings = _bind(shortcuts)
        self._stop = threading.Event()
        self.thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self.thread is not None and not self._stop.is_set()

    def resolve(self, key: str) -> Optional[ShortcutAction]:
        return self.bindings.get(key.lower())

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self.thread = threading.Thread(target=self._input_loop, name="KeyboardInputThread", daemon=True)
        self.thread.start()
        logger.info(f"Keyboard shortcuts active: {', '.join(f'{a.value}={k!r}' for k, a in self.bindings.items())}")

    def stop(self) -> None:
        """Stop reading. Blocks up to one poll interval; call it off the loop."""
        self._stop.set()
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=self.poll_seconds * 10)
        self.thread = None
        logger.info("Keyboard input handler stopped")

    def deliver(self, key: str) -> None:
        """Hand one key to the loop. Safe to call from any thread."""
        action = self.resolve(key)
        logger.debug(f"Key {key!r} -> {action.value if action else 'unbound'}")
        try:
            self.loop.call_soon_threadsafe(self.on_key, key, action)
        except RuntimeError:
            # Loop already closed during shutdown
            self._stop.set()

    def _input_loop(self) -> None:
        while not self._stop.is_set():
            key = self._read_key()
            if key:
                self.deliver(key)
        logger.debug("Keyboard input loop ended")

    def _read_key(self) -> Optional[str]:
        if sys.platform == "win32":
            return self._read_key_windows()
        return self._read_key_posix()

    def _read_key_windows(self) -> Optional[str]:
        import msvcrt

        if msvcrt.kbhit():
            return msvcrt.getwch()
        self._stop.wait(self.poll_seconds)
        return None

    def _read_key_posix(self) -> Optional[str]:
        import select

        if not sys.stdin.isatty():
            self._stop.wait(self.poll_seconds)
            return None

        with _cbreak(sys.stdin.fileno()):
            ready, _, _ = select.select([sys.stdin], [], [], self.poll_seconds)
            if ready:
                return sys.stdin.read(1)
        return None


def _bind(shortcuts: Dict[str, str]) -> Dict[str, ShortcutAction]:
    bindings = {}
    for name, key in shortcuts.items():
        try:
            action = ShortcutAction(name)
        except ValueError:
            logger.warning(f"Ignoring unknown shortcut '{name}'")
            continue
        if key:
            bindings[key.lower()] = action
    return bindings


@contextmanager
def _cbreak(fd: int):
    """Single-character reads without echo; output processing stays on for rich."""
    import termios
    import tty

    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
