import logging
import time
from collections import deque
from typing import Callable, Deque


class FPSLogger:
    def __init__(
        self,
        window: int = 60,
        log_interval: float = 2.0,
        clock: Callable[[], float] = time.time,
    ):
        self.clock = clock
        self.times: Deque[float] = deque(maxlen=window)
        self.last_log = self.clock()
        self.log_interval = log_interval

    @property
    def fps(self) -> float:
        if len(self.times) < 2:
            return 0.0
        span = self.times[-1] - self.times[0]
        return (len(self.times) - 1) / span if span > 0 else 0.0

    def tick(self):
        now = self.clock()
        self.times.append(now)
        if len(self.times) > 1 and now - self.last_log >= self.log_interval:
            logging.info("[FPS] %.2f", self.fps)
            self.last_log = now
