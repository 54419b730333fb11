import logging
import random
import threading
from typing import Optional

from errors import SpaceEyeError

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 60


class SchedulerService:
    def __init__(self, controller, interval_seconds: int, jitter_seconds: int = 0,
                 initial_delay_seconds: int = 0):
        self.controller = controller
        self.interval_seconds = max(int(interval_seconds), MIN_INTERVAL_SECONDS)
        self.jitter_seconds = max(int(jitter_seconds), 0)
        self.initial_delay_seconds = max(int(initial_delay_seconds), 0)
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="SpaceEyeScheduler", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)
        self._thread = None

    def wait(self) -> None:
        """Block until stop() is called or the scheduler thread exits."""
        while self.running and not self._stop_event.wait(timeout=1):
            pass

    def next_interval(self) -> int:
        interval = self.interval_seconds
        if self.jitter_seconds:
            interval += random.randint(-self.jitter_seconds, self.jitter_seconds)
        return max(interval, MIN_INTERVAL_SECONDS)

    def _run(self) -> None:
        if self.initial_delay_seconds and self._stop_event.wait(timeout=self.initial_delay_seconds):
            return

        while not self._stop_event.is_set():
            try:
                self.controller.refresh_wallpaper("scheduler")
            except SpaceEyeError as exc:
                logger.error("[Scheduler] Wallpaper update failed: %s", exc)
            except Exception:
                logger.exception("[Scheduler] Unexpected error during wallpaper update")

            if self._stop_event.wait(timeout=self.next_interval()):
                break
