"""Collapsed stack format, one sample per line.

    P<pid>;T<thread>;<file>:<function>:<line>;... <wall>,<cpu>

Metrics are in nanoseconds. Samples with no frames have no frame part.
"""

from sampletrace import FormatError
from sampletrace.profile import Frame, Profile, Sample


def format_sample(sample, pid, thread):
    frames = "".join(f";{_}" for _ in sample.stack)
    return f"P{pid};T{thread}{frames} {sample.wall},{sample.cpu}"


def parse_line(line):
    """
    Split a collapsed frame stack sample into its components.

    These are: the process ID, the thread ID, the list of frames and the
    metrics of the sample.
    """
    try:
        head, metrics = line.strip().rsplit(maxsplit=1)
        wall, cpu = (int(_) for _ in metrics.split(","))
        process, thread, *frames = head.split(";")
        if process[0] != "P" or thread[0] != "T":
            raise ValueError(head)
        stack = []
        for frame in frames:
            filename, function, lineno = frame.rsplit(":", maxsplit=2)
            stack.append(Frame(function, filename, int(lineno)))
    except (IndexError, ValueError) as e:
        raise FormatError(f"Invalid collapsed sample: {line!r}") from e

    return int(process[1:]), int(thread[1:]), tuple(stack), (wall, cpu)


def dump(profile, stream):
    for sample in profile.samples:
        stream.write(
            (format_sample(sample, profile.pid, profile.thread) + "\n").encode("utf-8")
        )


def load(stream, interval=0):
    samples = []
    pid = thread = 0
    elapsed = 0

    for line in stream:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        if not line.strip():
            continue

        pid, thread, stack, (wall, cpu) = parse_line(line)
        elapsed += wall
        samples.append(Sample(elapsed, stack, wall, cpu))

    return Profile(samples, interval, pid=pid, thread=thread)
