import os
import sys
from os import environ as env

from aiohttp import web
from aiohttp.test_utils import unused_port
from pyfiglet import Figlet

from sampletrace import SampleTraceArgumentParser, SampleTraceError
from sampletrace.format import load
from sampletrace.format.speedscope import to_speedscope
from sampletrace.stats import FlameFrame, summary, top_functions


class WebViewer:
    """Serve a recorded profile as a merged flame graph over HTTP."""

    def __init__(self, profile, name):
        self.profile = profile
        self.name = name
        self.data = FlameFrame.from_profile(profile)

    async def handle_home(self, request):
        return web.json_response(
            {
                "type": "profile",
                "name": self.name,
                "summary": summary(self.profile),
                "top": top_functions(self.profile),
                "height": self.data.height,
                "data": self.data.to_dict(),
            }
        )

    async def handle_speedscope(self, request):
        return web.json_response(to_speedscope(self.profile, self.name))

    def make_app(self):
        app = web.Application()
        app.add_routes(
            [
                web.get("/", self.handle_home),
                web.get("/speedscope", self.handle_speedscope),
            ]
        )
        return app

    def start_server(self):
        port = int(env.get("SAMPLETRACE_WEB_PORT", 0)) or unused_port()
        host = env.get("SAMPLETRACE_WEB_HOST") or "localhost"

        print(Figlet(font="speed", width=240).renderText("* sampletrace *"))
        print(f"* Serving {self.name} ({len(self.profile)} samples)")
        print(f"* sampletrace is running on http://{host}:{port}. Press Ctrl+C to stop.")

        web.run_app(self.make_app(), host=host, port=port, print=None)


def main(argv=None):
    args = SampleTraceArgumentParser(
        name="sampletrace-web",
        interval=False,
        output=False,
        scale=False,
        artifact=True,
        description="Serve a recorded profile artifact over HTTP.",
    ).parse_args(sys.argv[1:] if argv is None else argv)

    try:
        profile = load(args.artifact, args.format)
    except FileNotFoundError:
        print(f"No such profile artifact: {args.artifact}", file=sys.stderr)
        sys.exit(1)
    except (OSError, SampleTraceError) as e:
        print(f"Cannot load {args.artifact}: {e}", file=sys.stderr)
        sys.exit(1)

    WebViewer(profile, os.path.basename(args.artifact)).start_server()


if __name__ == "__main__":
    main()
