import sys
import time
from threading import Event, Thread
from time import perf_counter_ns

import psutil

from sampletrace import CaptureStartError
from sampletrace.profile import Frame, Sample


class Sampler(Thread):
    """
    Timer thread that samples the call stack of another thread.

    Sampling only starts once ``release`` is called and stops with ``finish``,
    which also records a last sample at the stop time so that the samples
    cover the whole capture window. Every sample carries the wall time and the
    CPU time of the sampled thread elapsed since the previous one, so that
    idle time (e.g. sleeping) can be told apart from on-CPU time.

    Stacks are recorded below the anchor frame and its callers. These stay
    referenced for the lifetime of the sampler, so they remain a valid cut
    point even after the anchor frame has returned.
    """

    def __init__(self, thread_id, target_native_id, interval, anchor=None, ignore=()):
        super().__init__(name="sampletrace-sampler", daemon=True)

        self.thread_id = thread_id
        self.target_native_id = target_native_id
        self.interval = interval  # ns
        self.ignore = frozenset(ignore)

        self.base = set()
        frame = anchor
        while frame is not None:
            self.base.add(frame)
            frame = frame.f_back

        self.samples = []
        self.error = None
        self.origin = None
        self.start_event = Event()
        self.quit_event = Event()

        self._last_wall = self._last_cpu = None

        try:
            self._process = psutil.Process()
        except psutil.Error as e:
            raise CaptureStartError("Cannot inspect the current process.") from e

        # Nanosecond thread CPU clock where available. psutil thread times
        # are only as fine as the clock tick.
        getcpuclockid = getattr(time, "pthread_getcpuclockid", None)
        try:
            self._clock = getcpuclockid(thread_id) if getcpuclockid else None
        except OSError:
            self._clock = None

    def cpu_time(self):
        """CPU time of the sampled thread, in ns."""
        if self._clock is not None:
            return time.clock_gettime_ns(self._clock)

        for thread in self._process.threads():
            if thread.id == self.target_native_id:
                return int((thread.user_time + thread.system_time) * 1e9)

        # Thread times are not reported on every platform
        times = self._process.cpu_times()
        return int((times.user + times.system) * 1e9)

    def stack(self):
        frame = sys._current_frames().get(self.thread_id)

        stack = []
        while frame is not None and frame not in self.base:
            code = frame.f_code
            if code.co_filename not in self.ignore:
                stack.append(
                    Frame(code.co_name, code.co_filename, frame.f_lineno or 0)
                )
            frame = frame.f_back

        stack.reverse()

        return tuple(stack)

    def _record(self, cpu, now):
        # The CPU clock is read before the wall clock, so the CPU time of a
        # sample never covers more than its wall time.
        wall = now - self._last_wall
        self.samples.append(
            Sample(
                now - self.origin,
                self.stack(),
                wall,
                min(wall, max(0, cpu - self._last_cpu)),
            )
        )
        self._last_wall, self._last_cpu = now, max(cpu, self._last_cpu)

    def release(self):
        """Mark the start of the capture window and let sampling begin."""
        self.origin = perf_counter_ns()
        try:
            self._last_cpu = self.cpu_time()
        except (psutil.Error, OSError) as e:
            raise CaptureStartError("Cannot read the thread CPU times.") from e
        self._last_wall = self.origin

        self.start_event.set()

        return self.origin

    def run(self):
        self.start_event.wait()
        if self.quit_event.is_set():
            return

        while not self.quit_event.wait(self.interval / 1e9):
            try:
                cpu = self.cpu_time()
            except (psutil.Error, OSError) as e:
                self.error = e
                break

            self._record(cpu, perf_counter_ns())

    def stop(self):
        self.quit_event.set()
        self.start_event.set()
        if self.is_alive():
            self.join()

    def finish(self):
        """Stop sampling and close the window with a last sample.

        Returns the stop time of the capture window.
        """
        self.stop()

        try:
            cpu = self.cpu_time()
        except (psutil.Error, OSError) as e:
            if self.error is None:
                self.error = e
            return perf_counter_ns()

        now = perf_counter_ns()
        self._record(cpu, now)

        return now
