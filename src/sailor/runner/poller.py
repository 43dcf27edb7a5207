"""
Poll loops for remote-pull resources that refresh on an interval.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.logging import resource_context
from ..core.models import ResourceDeclaration


logger = logging.getLogger(__name__)


@dataclass
class PollStats:
    """Counters for one poll loop."""
    attempts: int = 0
    successes: int = 0
    failures: int = 0
    last_success_at: Optional[datetime] = None
    last_error: Optional[str] = None


class PollLoop:
    """
    Re-fetches one resource every `poll_interval` seconds in a daemon thread.

    The initial acquisition has already succeeded when a loop starts, so it
    waits one interval before the first refresh. Every failure waits the
    same fixed interval and retries the same fetch; there is no backoff, no
    retry limit and no fallback.
    """

    def __init__(
        self,
        declaration: ResourceDeclaration,
        refresh: Callable[[ResourceDeclaration], None],
        interval: Optional[float] = None,
    ):
        """
        Args:
            declaration: Resource to refresh
            refresh: Fetches, decodes and commits the resource; raises on failure
            interval: Seconds between attempts (defaults to the declaration's)
        """
        self.declaration = declaration
        self.refresh = refresh
        self.interval = interval if interval is not None else declaration.effective_poll_interval
        self.stats = PollStats()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def name(self) -> str:
        return f"sailor-poll-{self.declaration.describe()}"

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(
            f"Polling {self.declaration.describe()} every {self.interval}s",
            extra=resource_context(self.declaration.kind, self.declaration.name,
                                   self.declaration.strategy),
        )

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.poll_once()

    def poll_once(self) -> bool:
        """
        Run one refresh attempt. Never raises.

        Returns:
            True if the resource was refreshed
        """
        self.stats.attempts += 1
        try:
            self.refresh(self.declaration)
        except Exception as e:
            self.stats.failures += 1
            self.stats.last_error = str(e)
            logger.warning(
                f"Refreshing {self.declaration.describe()} failed, retrying in {self.interval}s: {e}",
                extra=resource_context(self.declaration.kind, self.declaration.name,
                                       self.declaration.strategy),
            )
            return False

        self.stats.successes += 1
        self.stats.last_success_at = datetime.now(timezone.utc)
        return True
