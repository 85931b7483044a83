import time
import logging
from typing import Callable


class ThrottledLogger:
    """
    Collapses a high-rate warning into one log line per interval.

    The emitted line is prefixed with the number of occurrences since the
    previous emission, so nothing is lost from the count.
    """

    def __init__(
        self,
        logger: logging.Logger,
        interval_sec: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._clock = clock
        self._last_log_time: float | None = None
        self._counter = 0

    @property
    def pending(self) -> int:
        """Occurrences not yet reported."""
        return self._counter

    def warning(self, message: str, *args, **kwargs) -> bool:
        """Returns True when the message was actually emitted."""
        self._counter += 1
        now = self._clock()

        if self._last_log_time is None or now - self._last_log_time >= self._interval:
            self._logger.warning("[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0
            return True
        return False
