import time


class Timer:
    def __init__(self):
        self.start_time = None
        self.end_time = None

    def start(self):
        self.start_time = time.perf_counter()
        self.end_time = None
        return self

    def stop(self):
        self.end_time = time.perf_counter()
        return self

    def seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def elapsed(self, elapsed_message):
        if self.start_time is None:
            return "Timer has not been started."
        if self.end_time is None:
            return "Timer has not been stopped."
        return f"{elapsed_message} {self.seconds():.3f}s"
