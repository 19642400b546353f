"""
Live collection feeds.

The document store has no push channel, so a feed polls its source on a
background thread and hands the snapshot to the listener whenever the
snapshot hash changes. Stopping the feed is the whole cancellation story.
"""

import logging
import threading
from typing import Any, Callable, Optional

from ..core.cache import compute_data_hash

logger = logging.getLogger(__name__)


class LiveFeed:
    """Polls `fetch` and calls `callback(snapshot)` on every change."""

    def __init__(
        self,
        fetch: Callable[[], Any],
        callback: Callable[[Any], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        interval: float = 5.0,
        name: str = "live-feed",
    ):
        self.fetch = fetch
        self.callback = callback
        self.on_error = on_error
        self.interval = interval
        self.name = name
        self.last_hash: Optional[str] = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> bool:
        """
        Fetch one snapshot and notify the listener if it changed.

        Returns:
            True if the listener was called
        """
        with self._lock:
            try:
                snapshot = self.fetch()
            except Exception as e:
                logger.error(f"{self.name}: fetch failed: {e}")
                if self.on_error:
                    self.on_error(e)
                return False

            snapshot_hash = compute_data_hash(snapshot)
            if snapshot_hash == self.last_hash:
                return False
            self.last_hash = snapshot_hash

        if self._stop.is_set():
            return False
        self.callback(snapshot)
        return True

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                # Listener errors must not kill the feed
                logger.error(f"{self.name}: listener raised: {e}")
                if self.on_error:
                    self.on_error(e)
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"{self.name}: started (every {self.interval}s)")

    def stop(self, timeout: float = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info(f"{self.name}: stopped")
