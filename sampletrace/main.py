import sys

from sampletrace import (
    CaptureStartError,
    SampleTraceArgumentParser,
    SampleTraceError,
    SinkError,
)
from sampletrace.recorder import begin_capture
from sampletrace.stats import summary, top_functions
from sampletrace.workload import run_outer


def main(argv=None):
    args = SampleTraceArgumentParser(
        description="Run a fixed CPU-bound workload and record its CPU profile."
    ).parse_args(sys.argv[1:] if argv is None else argv)

    try:
        session = begin_capture(args.output, args.interval, args.format)
    except SinkError as e:
        print(
            f"could not create CPU profile at {args.output}: {e.strerror}",
            file=sys.stderr,
        )
        sys.exit(1)
    except CaptureStartError as e:
        print(f"could not start CPU profile: {e}", file=sys.stderr)
        sys.exit(1)

    print("Starting the complex function...")
    try:
        try:
            run_outer(args.scale)
        finally:
            profile = session.end_capture()
    except SampleTraceError as e:
        print(f"could not write CPU profile to {args.output}: {e}", file=sys.stderr)
        sys.exit(1)

    stats = summary(profile)
    print(
        f"Recorded {stats['samples']} samples over {stats['duration'] / 1e6:.1f} ms "
        f"({stats['cpu'] / 1e6:.1f} ms on CPU)"
    )
    for name, cpu in top_functions(profile, n=3):
        print(f"  {cpu / 1e6:8.1f} ms  {name}")
    print(f"Profiling finished. Profile saved to {args.output}")


if __name__ == "__main__":
    main()
