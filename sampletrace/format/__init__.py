"""Profile artifact formats."""

import os

from sampletrace import FormatError
from sampletrace.format import collapsed, pprof, speedscope

FORMATS = {
    "pprof": pprof,
    "speedscope": speedscope,
    "collapsed": collapsed,
}

EXTENSIONS = {
    ".pprof": "pprof",
    ".pb": "pprof",
    ".gz": "pprof",
    ".json": "speedscope",
    ".txt": "collapsed",
    ".austin": "collapsed",
    ".collapsed": "collapsed",
}


def format_for(path, default="pprof"):
    """Infer the artifact format from the file extension."""
    _, ext = os.path.splitext(str(path))
    return EXTENSIONS.get(ext.lower(), default)


def _codec(fmt):
    try:
        return FORMATS[fmt]
    except KeyError:
        raise FormatError(f"Unknown profile format: {fmt}") from None


def dump(profile, stream, fmt="pprof"):
    """Serialize the profile to a binary stream."""
    _codec(fmt).dump(profile, stream)


def load(path, fmt=None):
    codec = _codec(fmt or format_for(path))
    if not hasattr(codec, "load"):
        raise FormatError(f"Cannot read {codec.__name__.rsplit('.')[-1]} artifacts")

    with open(path, "rb") as stream:
        return codec.load(stream)
