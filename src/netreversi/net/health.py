from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SOFT_TIMEOUT = 6.5
ZOMBIE_TIMEOUT = 20.0
POLL_INTERVAL = 0.1


class ConnectionHealthMonitor:
    """Watch the time since the last server heartbeat.

    Crossing the soft threshold raises one warning per heartbeat interval;
    past the zombie threshold the zombie callback fires on every tick until a
    heartbeat arrives or the monitor is stopped.
    """

    def __init__(
        self,
        on_warning: Callable[[float], None],
        on_zombie: Callable[[float], None],
        soft_timeout: float = SOFT_TIMEOUT,
        zombie_timeout: float = ZOMBIE_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.on_warning = on_warning
        self.on_zombie = on_zombie
        self.soft_timeout = soft_timeout
        self.zombie_timeout = zombie_timeout
        self.poll_interval = poll_interval
        self.clock = clock

        self._lock = threading.Lock()
        self.last_heartbeat = clock()
        self.warning_raised = False

        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self):
        if self._thread is not None:
            return
        self.heartbeat()
        self._thread = threading.Thread(target=self._run, name="health-monitor", daemon=True)
        self._thread.start()

    def stop(self):
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def _run(self):
        while not self._stopped.wait(self.poll_interval):
            self.tick()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def heartbeat(self, now: Optional[float] = None):
        with self._lock:
            self.last_heartbeat = self.clock() if now is None else now
            self.warning_raised = False

    def elapsed(self, now: Optional[float] = None) -> float:
        with self._lock:
            return (self.clock() if now is None else now) - self.last_heartbeat

    def tick(self, now: Optional[float] = None):
        raise_warning = False
        with self._lock:
            elapsed = (self.clock() if now is None else now) - self.last_heartbeat
            if elapsed > self.soft_timeout and not self.warning_raised:
                self.warning_raised = True
                raise_warning = True

        # Callbacks run outside the lock so they may call back into the monitor.
        if raise_warning:
            logger.warning("No heartbeat for %.1fs", elapsed)
            self.on_warning(elapsed)
        if elapsed > self.zombie_timeout:
            logger.error("No heartbeat for %.1fs, connection presumed dead", elapsed)
            self.on_zombie(elapsed)
