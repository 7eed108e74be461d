import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TurnTimer:
    """Countdown of whole seconds that fires ``on_expire`` exactly once.

    ``start_task`` and ``sleep`` are the background-task primitives of the
    running server (``socketio.start_background_task`` / ``socketio.sleep``).
    Without ``start_task`` the timer never ticks by itself and ``tick()``
    has to be driven by the caller.
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        label: str = '',
    ):
        self.remaining = int(seconds)
        self.label = label
        self.cancelled = False
        self.fired = False
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._start_task = start_task
        self._sleep = sleep or time.sleep
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def start(self) -> 'TurnTimer':
        logger.info(f"[timer-set] {self.label} duration={self.remaining}s")
        if self._start_task is not None:
            self._start_task(self._run)
        return self

    def _run(self) -> None:
        while self.active:
            self._sleep(1)
            self.tick()

    def tick(self) -> bool:
        """Advance one second. Returns True on the tick that expired the timer."""
        with self._lock:
            if not self.active:
                return False
            self.remaining = max(0, self.remaining - 1)
            expired = self.remaining == 0
            if expired:
                self.fired = True
            remaining = self.remaining
        if expired:
            logger.info(f"[timer-fire] {self.label}")
            self._on_expire()
        elif self._on_tick is not None:
            self._on_tick(remaining)
        return expired

    def cancel(self) -> bool:
        """Stop the countdown. Safe to repeat and safe after the timer fired."""
        with self._lock:
            if not self.active:
                return False
            self.cancelled = True
        logger.info(f"[timer-cancel] {self.label} remaining={self.remaining}s")
        return True
