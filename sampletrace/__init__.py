from argparse import ArgumentParser

DEFAULT_INTERVAL = 10000  # us
DEFAULT_OUTPUT = "trace-examples/python/complex_python_trace.pprof"


class SampleTraceError(Exception):
    pass


class SinkError(SampleTraceError, OSError):
    """The profile sink cannot be created or opened for writing."""


class CaptureStartError(SampleTraceError):
    """The sampling machinery could not be activated."""


class FormatError(SampleTraceError):
    """An artifact could not be encoded or decoded."""


class SampleTraceArgumentParser(ArgumentParser):
    def __init__(
        self,
        name="sampletrace",
        interval=True,
        output=True,
        format=True,
        scale=True,
        artifact=False,
        **kwargs,
    ):
        super().__init__(prog=name, **kwargs)

        if bool(output) == bool(artifact):
            raise RuntimeError(
                "Sampletrace command line parser must have either output or artifact."
            )

        if interval:
            self.add_argument(
                "-i",
                "--interval",
                help=f"Sampling interval in microseconds (default is {DEFAULT_INTERVAL}).",
                type=int,
                default=DEFAULT_INTERVAL,
            )

        if format:
            from sampletrace.format import FORMATS

            self.add_argument(
                "-f",
                "--format",
                help="Artifact format (default is inferred from the output extension).",
                choices=sorted(FORMATS),
            )

        if scale:
            self.add_argument(
                "-x",
                "--scale",
                help="Multiplier applied to the workload iteration counts.",
                type=float,
                default=1.0,
            )

        if output:
            self.add_argument(
                "-o",
                "--output",
                help=f"Where to write the profile (default is {DEFAULT_OUTPUT}).",
                default=DEFAULT_OUTPUT,
            )

        if artifact:
            self.add_argument(
                "artifact", help="The profile artifact to load (pprof or collapsed)."
            )

    def parse_args(self, args=None, namespace=None):
        parsed_args = super().parse_args(args, namespace)

        if getattr(parsed_args, "interval", 1) <= 0:
            self.error("the sampling interval must be positive")

        if getattr(parsed_args, "scale", 1.0) <= 0:
            self.error("the workload scale must be positive")

        return parsed_args
