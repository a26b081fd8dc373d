"""Delivery of task results back to the thread that started them."""
import logging
import queue
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CallerContext:
    """
    Context owned by the code that starts authentication tasks.

    Worker threads post callbacks here; the owner runs them on its own
    thread with process_pending(). Once invalidated, the context accepts
    nothing and discards whatever was still queued.
    """

    def __init__(self, name: str = 'caller'):
        self.name = name
        self._pending = queue.Queue()
        self._valid = threading.Event()
        self._valid.set()

    @property
    def is_valid(self) -> bool:
        return self._valid.is_set()

    def invalidate(self) -> None:
        """Mark the context as gone. Pending and future callbacks are dropped."""
        if self._valid.is_set():
            self._valid.clear()
            logger.info(f"Caller context '{self.name}' invalidated")

    def post(self, callback: Callable[..., Any], *args: Any) -> bool:
        """
        Queue a callback to run on the owner's thread.

        Args:
            callback: Function to call
            *args: Positional arguments for the callback

        Returns:
            True if the callback was queued, False if the context is no longer valid
        """
        if not self.is_valid:
            logger.debug(f"Dropping callback posted to invalid context '{self.name}'")
            return False
        self._pending.put((callback, args))
        return True

    def process_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run queued callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first callback. None drains
                only what is already queued.

        Returns:
            Number of callbacks that were run
        """
        processed = 0
        block = timeout is not None

        while True:
            try:
                callback, args = self._pending.get(block=block, timeout=timeout)
            except queue.Empty:
                break
            block = False

            if not self.is_valid:
                logger.debug(f"Discarding callback queued on invalid context '{self.name}'")
                continue

            callback(*args)
            processed += 1

        return processed
