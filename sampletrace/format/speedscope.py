import json


def _generate_profiles(profile):
    shared_frames = []
    frame_index = {}

    profiles = {}

    def get_profile(name, unit):
        if name not in profiles:
            profiles[name] = {
                "type": "sampled",
                "name": name,
                "unit": unit,
                "startValue": 0,
                "endValue": 0,
                "samples": [],
                "weights": [],
            }

        return profiles[name]

    def add_frames_to_thread_profile(thread_profile, frames, metric):
        stack = []
        for frame in frames:
            if frame not in frame_index:
                frame_index[frame] = len(shared_frames)
                shared_frames.append(
                    {"name": frame.function, "file": frame.filename, "line": frame.line}
                )

            stack.append(frame_index[frame])

        thread_profile["samples"].append(stack)
        thread_profile["weights"].append(metric)
        thread_profile["endValue"] += metric

    thread = f"Thread {profile.pid}:{profile.thread}"

    for sample in profile.samples:
        add_frames_to_thread_profile(
            get_profile(f"Wall time profile of {thread}", "nanoseconds"),
            sample.stack,
            sample.wall,
        )
        add_frames_to_thread_profile(
            get_profile(f"CPU time profile of {thread}", "nanoseconds"),
            sample.stack,
            sample.cpu,
        )

    return shared_frames, profiles


def _generate_json(frames, profiles, name):
    return {
        "$schema": "https://www.speedscope.app/file-format-schema.json",
        "shared": {"frames": frames},
        "profiles": sorted(profiles.values(), key=lambda profile: profile["name"]),
        "name": name,
        "exporter": "sampletrace speedscope exporter",
    }


def to_speedscope(profile, name="sampletrace"):
    """Convert a profile to the speedscope JSON format.

    The result is a Python ``dict`` that complies with the Speedscope JSON
    schema and that can be exported to a JSON file with a straight call to
    ``json.dump``. There is one sampled profile for the wall time and one for
    the CPU time of the sampled thread.

    Args:
        profile (Profile): the recorded profile.

        name (str): the name of the speedscope file.

    Returns:
        (dict): a dictionary that complies with the speedscope JSON schema.
    """
    return _generate_json(*_generate_profiles(profile), name)


def dump(profile, stream):
    stream.write(json.dumps(to_speedscope(profile)).encode("utf-8"))
