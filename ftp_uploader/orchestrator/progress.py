"""Polling-based throughput estimator."""
import time
from collections import deque
from typing import Callable, Deque, Optional


class SpeedMeter:
    """
    Smoothed transfer speed from periodic position samples.

    Each sample after the first yields an instantaneous speed; the published
    average is the rounded mean of the last `window` speeds. When the sampled
    path changes between two samples the raw position counts as the delta,
    which overstates the first speed of a new file.
    """

    def __init__(self, window: int = 5, clock: Callable[[], float] = time.monotonic):
        self._window = window
        self._clock = clock
        self.reset()

    def reset(self):
        self.last_transferred = 0
        self.last_sample_time: Optional[float] = None
        self.last_sample_path = ""
        self.history: Deque[float] = deque(maxlen=self._window)
        self.speed_average = 0

    def sample(self, transferred: int, path: str) -> bool:
        """
        Record a position sample.

        Returns:
            False for the baseline sample of a session, True afterwards
        """
        now = self._clock()
        if not self.last_sample_path:
            self.last_sample_path = path

        published = self.last_sample_time is not None
        if published:
            if self.last_sample_path == path:
                delta = transferred - self.last_transferred
            else:
                delta = transferred
                self.last_sample_path = path

            elapsed = now - self.last_sample_time
            if elapsed > 0:
                self.history.append(delta / elapsed)
                self.speed_average = round(sum(self.history) / len(self.history))

        self.last_sample_time = now
        self.last_transferred = transferred
        return published
