"""Writer and reader for the pprof profile format.

Artifacts are gzip-compressed ``perftools.profiles.Profile`` protocol buffer
messages, as understood by ``go tool pprof``, speedscope and most profile
viewers. The message classes are generated from ``profile.proto``. Only the
parts of the schema that describe sampled stacks are produced.
"""

import gzip
import zlib

from google.protobuf.message import DecodeError

from sampletrace import FormatError
from sampletrace.format import profile_pb2
from sampletrace.profile import Frame, Profile, Sample

SAMPLE_TYPES = (("samples", "count"), ("cpu", "nanoseconds"), ("wall", "nanoseconds"))


class StringTable:
    def __init__(self):
        self.strings = [""]
        self.index = {"": 0}

    def __call__(self, string):
        try:
            return self.index[string]
        except KeyError:
            self.index[string] = len(self.strings)
            self.strings.append(string)
            return self.index[string]


def to_pprof(profile):
    """Map a profile onto a ``perftools.profiles.Profile`` message."""
    message = profile_pb2.Profile()
    strings = StringTable()
    functions = {}
    locations = {}

    for type_, unit in SAMPLE_TYPES:
        message.sample_type.add(type=strings(type_), unit=strings(unit))

    timestamp, nanoseconds = strings("timestamp"), strings("nanoseconds")

    for sample in profile.samples:
        location_ids = []
        for frame in reversed(sample.stack):  # leaf first
            location_id = locations.get(frame)
            if location_id is None:
                key = (frame.function, frame.filename)
                function_id = functions.get(key)
                if function_id is None:
                    function_id = functions[key] = len(functions) + 1
                    message.function.add(
                        id=function_id,
                        name=strings(frame.function),
                        system_name=strings(frame.function),
                        filename=strings(frame.filename),
                    )

                location_id = locations[frame] = len(locations) + 1
                message.location.add(
                    id=location_id,
                    line=[profile_pb2.Line(function_id=function_id, line=frame.line)],
                )

            location_ids.append(location_id)

        entry = message.sample.add(
            location_id=location_ids, value=[1, sample.cpu, sample.wall]
        )
        entry.label.add(key=timestamp, num=sample.timestamp, num_unit=nanoseconds)

    message.time_nanos = profile.start_time
    message.duration_nanos = profile.duration
    message.period_type.type = strings("wall")
    message.period_type.unit = nanoseconds
    message.period = profile.interval
    message.comment.extend(
        [strings(f"pid={profile.pid}"), strings(f"thread={profile.thread}")]
    )
    message.default_sample_type = strings("cpu")

    message.string_table.extend(strings.strings)

    return message


def from_pprof(message):
    """Rebuild a profile from a ``perftools.profiles.Profile`` message."""
    strings = message.string_table

    try:
        types = [strings[_.type] for _ in message.sample_type]
        cpu_index = types.index("cpu") if "cpu" in types else None
        wall_index = types.index("wall") if "wall" in types else None

        functions = {
            _.id: (strings[_.name], strings[_.filename]) for _ in message.function
        }

        frames = {}
        for location in message.location:
            if not location.line:
                continue
            # The last line is the caller into which the others were inlined
            line = location.line[-1]
            frames[location.id] = Frame(*functions[line.function_id], line.line)

        samples = []
        elapsed = 0
        for sample in message.sample:
            stack = tuple(frames[_] for _ in reversed(sample.location_id))
            values = sample.value
            wall = values[wall_index] if wall_index is not None else message.period
            cpu = values[cpu_index] if cpu_index is not None else 0

            elapsed += wall
            timestamp = elapsed
            for label in sample.label:
                if strings[label.key] == "timestamp":
                    timestamp = label.num

            samples.append(Sample(timestamp, stack, wall, cpu))

        info = dict(
            strings[_].partition("=")[::2]
            for _ in message.comment
            if "=" in strings[_]
        )
        pid, thread = int(info.get("pid", 0)), int(info.get("thread", 0))
    except (IndexError, KeyError, ValueError) as e:
        raise FormatError("Malformed pprof profile") from e

    return Profile(
        samples,
        message.period,
        message.time_nanos,
        message.duration_nanos,
        pid,
        thread,
    )


def dump(profile, stream):
    stream.write(gzip.compress(to_pprof(profile).SerializeToString()))


def load(stream):
    data = stream.read()
    if data[:2] == b"\x1f\x8b":
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise FormatError("Corrupted gzip stream") from e

    try:
        message = profile_pb2.Profile.FromString(data)
    except DecodeError as e:
        raise FormatError("Malformed pprof message") from e

    return from_pprof(message)
