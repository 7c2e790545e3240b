from typing import NamedTuple, Tuple


class Frame(NamedTuple):
    function: str
    filename: str
    line: int

    def __str__(self):
        return f"{self.filename}:{self.function}:{self.line}"


class Sample(NamedTuple):
    """One snapshot of the sampled thread's call stack.

    The stack goes from the root to the leaf. ``timestamp`` is relative to the
    start of the capture, ``wall`` and ``cpu`` are the time elapsed and the CPU
    time consumed by the sampled thread since the previous sample. All values
    are in nanoseconds.
    """

    timestamp: int
    stack: Tuple[Frame, ...]
    wall: int
    cpu: int


class Profile:
    """The aggregation of all the samples recorded during a capture."""

    def __init__(
        self, samples, interval, start_time=0, duration=None, pid=0, thread=0
    ):
        self.samples = list(samples)
        self.interval = interval  # ns
        self.start_time = start_time  # epoch ns
        self.duration = duration if duration is not None else self.span
        self.pid = pid
        self.thread = thread

    @property
    def span(self):
        """The wall time covered by the samples."""
        return sum(s.wall for s in self.samples)

    @property
    def cpu_time(self):
        return sum(s.cpu for s in self.samples)

    @property
    def max_depth(self):
        return max((len(s.stack) for s in self.samples), default=0)

    def __len__(self):
        return len(self.samples)

    def __repr__(self):
        return (
            f"Profile(samples={len(self.samples)}, interval={self.interval}, "
            f"pid={self.pid}, thread={self.thread})"
        )
