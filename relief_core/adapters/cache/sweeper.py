"""Background sweeper that purges expired cache entries on a fixed interval.

Keys that are never read again would otherwise stay in the store forever,
since lazy expiry only happens on `get`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from ...ports.cache import CachePort


@dataclass
class CacheSweeper:
    """Run `cache.sweep()` every `interval_seconds` on a daemon thread.

    Attributes:
        cache: The cache to sweep
        interval_seconds: Delay between sweeps
    """

    cache: CachePort[Any]
    interval_seconds: float = 3600.0

    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _thread: Optional[threading.Thread] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sweep loop. Calling start twice is a no-op."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="cache-sweeper", daemon=True
        )
        self._thread.start()
        self._logger.info(
            "Cache sweeper started", extra={"interval": self.interval_seconds}
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the loop to exit and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._logger.info("Cache sweeper stopped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.cache.sweep()
            except Exception as e:
                self._logger.error("Cache sweep failed", extra={"error": str(e)})

    def __enter__(self) -> CacheSweeper:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()
