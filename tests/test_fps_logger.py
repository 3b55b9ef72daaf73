import logging

from breakfast_finder.utils.fps_logger import FPSLogger


class FakeClock:
    def __init__(self, *times):
        self.times = list(times)

    def __call__(self):
        return self.times.pop(0)


class TestFPSLogger:
    def test_logs_once_per_interval(self, caplog):
        caplog.set_level(logging.INFO)
        fps = FPSLogger(log_interval=2.0, clock=FakeClock(0.0, 1.0, 2.0, 3.0))
        fps.tick()
        fps.tick()
        fps.tick()

        messages = [r.getMessage() for r in caplog.records if "[FPS]" in r.getMessage()]
        assert messages == ["[FPS] 1.00"]

    def test_fps_needs_two_ticks(self):
        fps = FPSLogger(clock=FakeClock(0.0, 5.0))
        assert fps.fps == 0.0
        fps.tick()
        assert fps.fps == 0.0

    def test_window_bounds_history(self):
        fps = FPSLogger(window=3, log_interval=100.0, clock=FakeClock(0.0, 1.0, 1.5, 2.0, 2.5))
        for _ in range(4):
            fps.tick()
        assert list(fps.times) == [1.5, 2.0, 2.5]
        assert fps.fps == 2.0
