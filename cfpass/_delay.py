"""Pre-submission wait.

The CDN refuses answers posted before the delay its page advertises.
Time already spent extracting and evaluating counts toward that delay.
"""

import logging
import threading
import time

from cfpass._errors import SolveCancelled

logger = logging.getLogger("cfpass")


class DelayGate:
    """Tracks when the challenge arrived and holds the submission back.

    Args:
        started_at: ``time.monotonic()`` stamp of when the challenge
            response was read. Defaults to now.
        cancel: Optional event; setting it aborts a pending wait.
    """

    def __init__(
        self,
        started_at: float | None = None,
        cancel: threading.Event | None = None,
    ):
        self.started_at = (
            started_at if started_at is not None else time.monotonic()
        )
        self._cancel = cancel

    def remaining(self, wait_millis: float) -> float:
        """Seconds still to wait: max(0, wait - elapsed)."""
        elapsed = time.monotonic() - self.started_at
        return max(0.0, wait_millis / 1000.0 - elapsed)

    def wait(self, wait_millis: float) -> float:
        """Block until the advertised delay has passed. Returns delay applied."""
        delay = self.remaining(wait_millis)
        if delay <= 0:
            return 0.0
        logger.debug(
            "Sleeping for %.0f milliseconds before sending answer",
            delay * 1000,
        )
        if self._cancel is None:
            time.sleep(delay)
        elif self._cancel.wait(delay):
            raise SolveCancelled(self.remaining(wait_millis))
        return delay
