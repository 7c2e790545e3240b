import contextlib
import os
import sys
from enum import Enum
from threading import get_ident, get_native_id
from time import time_ns

from sampletrace import (
    DEFAULT_INTERVAL,
    CaptureStartError,
    SampleTraceError,
    SinkError,
)
from sampletrace import sampler as _sampler
from sampletrace.format import dump, format_for
from sampletrace.profile import Profile
from sampletrace.sampler import Sampler

# Frames of the capture machinery never make it into a sample
_INTERNAL = frozenset({__file__, _sampler.__file__, contextlib.__file__})


class CaptureState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    FLUSHED = "flushed"


class CaptureSession:
    """
    A single profile capture.

    The session owns the sink for its whole lifetime and goes through the
    states IDLE -> CAPTURING -> FLUSHED exactly once. A failed ``begin`` leaves
    it IDLE with no artifact on disk.
    """

    def __init__(self, destination, interval=DEFAULT_INTERVAL, fmt=None):
        if interval <= 0:
            raise ValueError("The sampling interval must be positive.")

        self.destination = destination
        self.interval = interval  # us
        self.format = fmt or format_for(destination)
        self.state = CaptureState.IDLE
        self.profile = None

        self._sink = None
        self._sampler = None
        self._start_time = None

    def begin(self, anchor=None):
        if self.state is not CaptureState.IDLE:
            raise SampleTraceError(
                f"Cannot begin a capture that is {self.state.value}."
            )

        try:
            self._sink = open(self.destination, "wb")
        except OSError as e:
            raise SinkError(
                e.errno, f"Cannot open profile sink: {e.strerror}", self.destination
            ) from e

        try:
            self._sampler = Sampler(
                get_ident(),
                get_native_id(),
                self.interval * 1000,
                anchor=anchor,
                ignore=_INTERNAL,
            )
            try:
                self._sampler.start()
            except RuntimeError as e:
                raise CaptureStartError("Cannot start the sampler thread.") from e
            self._start_time = time_ns()
            self._sampler.release()
        except BaseException as e:
            if self._sampler is not None:
                self._sampler.stop()
            self._sink.close()
            self._sink = None
            os.remove(self.destination)
            if isinstance(e, Exception) and not isinstance(e, CaptureStartError):
                raise CaptureStartError(f"Cannot start sampling: {e}") from e
            raise

        self.state = CaptureState.CAPTURING

        return self

    def end_capture(self):
        """Stop sampling and flush the profile to the sink.

        The sink is released even when writing the profile fails. Returns the
        flushed ``Profile``.
        """
        if self.state is not CaptureState.CAPTURING:
            raise SampleTraceError(
                f"Cannot end a capture that is {self.state.value}."
            )

        sampler = self._sampler
        duration = sampler.finish() - sampler.origin
        self.profile = Profile(
            sampler.samples,
            self.interval * 1000,
            start_time=self._start_time,
            duration=duration,
            pid=os.getpid(),
            thread=sampler.target_native_id,
        )

        try:
            dump(self.profile, self._sink, self.format)
        finally:
            self._sink.close()
            self._sink = None
            self.state = CaptureState.FLUSHED

        if sampler.error is not None:
            raise SampleTraceError("Sampling stopped early.") from sampler.error

        return self.profile


def begin_capture(destination, interval=DEFAULT_INTERVAL, fmt=None, anchor=None):
    """Open the sink and start sampling the calling thread.

    Stacks are recorded below ``anchor``, which defaults to the caller's frame.
    """
    session = CaptureSession(destination, interval, fmt)

    return session.begin(anchor if anchor is not None else sys._getframe(1))


def end_capture(session):
    return session.end_capture()


@contextlib.contextmanager
def capture(destination, interval=DEFAULT_INTERVAL, fmt=None):
    # Frame 1 is the context manager's __enter__, frame 2 the with statement
    session = begin_capture(destination, interval, fmt, anchor=sys._getframe(2))
    try:
        yield session
    finally:
        session.end_capture()
