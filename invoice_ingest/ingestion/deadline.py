import time
from collections.abc import Callable

from invoice_ingest.ingestion.exceptions import RunTimeoutError


class Deadline:
    """Wall-clock time limit for a run, checked at every checkpoint."""

    def __init__(
        self, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    def check(self, stage: str) -> None:
        """Raise RunTimeoutError if the time limit has passed."""
        if self._clock() >= self._expires_at:
            raise RunTimeoutError(
                f"Run exceeded {self._seconds:g}s deadline while {stage}"
            )
