"""
Status scheduler with background advancement thread.

Every ``interval_seconds`` the scheduler asks the history store to move each
undelivered order one status step forward:

    confirmed -> preparing -> delivered

The scheduler does not own any history state. All mutation goes through
OrderHistoryStore.advance_all(), which serializes with submissions.

Lifecycle:
    scheduler = StatusScheduler(history_store, interval_seconds=30.0)
    scheduler.start()     # at app startup
    ...
    scheduler.stop()      # at app shutdown; no writes happen after it returns

The first tick happens one full interval after start(), matching a plain
recurring timer. The thread keeps running for the whole life of the
process, whether or not anyone is looking at the history.
"""

from __future__ import annotations

import threading
from typing import Optional

from services.history_store import OrderHistoryStore
from logging_config import get_logger, set_thread_name


# Module logger
logger = get_logger(__name__)


class StatusScheduler:
    """
    Background service for periodic status advancement.

    Attributes:
        interval_seconds: Time between ticks (default 30)
        is_running: Whether the background thread is active
        tick_count: Number of completed ticks since construction
    """

    def __init__(
        self,
        history_store: OrderHistoryStore,
        interval_seconds: float = 30.0
    ):
        """
        Initialize the scheduler. Does not start the thread.

        Args:
            history_store: Store whose entries are advanced
            interval_seconds: Seconds between ticks

        Raises:
            ValueError: If interval_seconds is not positive
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._history_store = history_store
        self._interval = interval_seconds

        # Thread control
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._is_running = False
        self._control_lock = threading.Lock()

        self._tick_count = 0
        self._consecutive_failures = 0

        logger.info(f"StatusScheduler initialized (interval: {interval_seconds}s)")

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def start(self) -> None:
        """
        Start the background thread.

        Safe to call multiple times - only starts if not already running.
        """
        with self._control_lock:
            if self._is_running:
                logger.warning("StatusScheduler already running")
                return

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                name="StatusScheduler",
                daemon=True
            )
            self._is_running = True
            self._thread.start()

        logger.info("Status scheduler thread started")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the background thread and wait for it to exit.

        A tick already in progress is allowed to finish; no tick starts
        after this returns. Safe to call multiple times.

        Args:
            timeout: Max seconds to wait for the thread
        """
        with self._control_lock:
            if not self._is_running:
                return

            logger.info("Stopping status scheduler thread...")
            self._stop_event.set()

            thread = self._thread
            if thread and thread.is_alive() and thread is not threading.current_thread():
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning("Status scheduler thread did not stop cleanly")

            self._is_running = False
            self._thread = None

        logger.info("Status scheduler thread stopped")

    def tick(self) -> int:
        """
        Run one advancement in the calling thread.

        Failures are logged and swallowed so the loop survives a bad write;
        the next tick retries with the same (unchanged) history.

        Returns:
            Number of entries advanced (0 on failure)
        """
        try:
            advanced = self._history_store.advance_all()
        except Exception as e:
            self._consecutive_failures += 1
            if self._consecutive_failures == 1:
                logger.warning(f"Status tick failed: {e}")
            elif self._consecutive_failures <= 3:
                logger.error(f"Status tick failed ({self._consecutive_failures} consecutive): {e}")
            elif self._consecutive_failures % 5 == 0:
                logger.error(
                    f"Status tick still failing ({self._consecutive_failures} consecutive): {e}"
                )
            return 0

        if self._consecutive_failures > 0:
            logger.info(f"Status tick recovered after {self._consecutive_failures} failures")
        self._consecutive_failures = 0
        self._tick_count += 1

        if advanced:
            logger.info(f"Advanced {advanced} orders")
        else:
            logger.debug("Status tick: nothing to advance")
        return advanced

    def _run_loop(self) -> None:
        set_thread_name("StatusScheduler")
        logger.info("Status scheduler loop starting")

        # wait() returns True once stop() sets the event
        while not self._stop_event.wait(timeout=self._interval):
            self.tick()

        logger.info("Status scheduler loop exiting")
