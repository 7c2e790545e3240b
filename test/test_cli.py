# This file is part of "sampletrace" which is released under GPL.
#
# See file LICENCE or go to http://www.gnu.org/licenses/ for full license
# details.
#
# sampletrace records a sampled CPU profile of a fixed synthetic workload.
#
# Copyright (c) 2026 The sampletrace authors.
# All rights reserved.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import json
from itertools import count

from test import INTERVAL, SCALE
from test.utils import sampletrace

import psutil
import pytest

from sampletrace.format import load
from sampletrace.main import main
from sampletrace.sampler import Sampler


def test_cli_full_run(tmp_path):
    output = tmp_path / "complex_python_trace.pprof"

    result = sampletrace("-i", str(INTERVAL), "-x", str(SCALE), "-o", str(output))
    assert result.returncode == 0, result.stderr

    lines = result.stdout.splitlines()
    assert lines[:2] == ["Starting the complex function...", "Outer function started"]
    assert "Outer function finished." in lines
    assert lines[-1] == f"Profiling finished. Profile saved to {output}"
    assert not result.stderr

    assert list(tmp_path.iterdir()) == [output]
    assert output.stat().st_size > 0

    profile = load(output)
    assert len(profile) > 0
    assert profile.max_depth <= 3


def test_cli_speedscope(tmp_path):
    output = tmp_path / "trace.json"

    result = sampletrace("-i", str(INTERVAL), "-x", str(SCALE), "-o", str(output))
    assert result.returncode == 0, result.stderr

    with output.open() as f:
        data = json.load(f)
    assert data["$schema"] == "https://www.speedscope.app/file-format-schema.json"


def test_cli_explicit_format(tmp_path):
    output = tmp_path / "trace.out"

    result = sampletrace(
        "-i", str(INTERVAL), "-x", str(SCALE), "-f", "collapsed", "-o", str(output)
    )
    assert result.returncode == 0, result.stderr

    assert output.read_text().startswith("P")


def test_cli_sink_error(tmp_path):
    output = tmp_path / "missing" / "trace.pprof"

    result = sampletrace("-x", str(SCALE), "-o", str(output))

    assert result.returncode == 1
    assert f"could not create CPU profile at {output}" in result.stderr
    assert "Starting the complex function" not in result.stdout
    assert not output.exists()


@pytest.mark.parametrize(
    "args", [("-i", "0"), ("-x", "-1"), ("-f", "perf"), ("-i", "fast")]
)
def test_cli_invalid_arguments(tmp_path, args):
    result = sampletrace(*args, "-o", str(tmp_path / "trace.pprof"))

    assert result.returncode == 2
    assert "usage: sampletrace" in result.stderr
    assert not list(tmp_path.iterdir())


def test_cli_capture_start_error(tmp_path, monkeypatch, capsys):
    def fail(self):
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(Sampler, "start", fail)

    output = tmp_path / "trace.pprof"
    with pytest.raises(SystemExit) as e:
        main(["-x", str(SCALE), "-o", str(output)])

    assert e.value.code == 1
    assert "could not start CPU profile" in capsys.readouterr().err
    assert not output.exists()


def test_cli_sampling_error(tmp_path, monkeypatch, capsys):
    cpu_time, calls = Sampler.cpu_time, count(1)

    def fail_after_three_reads(self):
        if next(calls) > 3:
            raise psutil.AccessDenied()
        return cpu_time(self)

    monkeypatch.setattr(Sampler, "cpu_time", fail_after_three_reads)

    output = tmp_path / "trace.pprof"
    with pytest.raises(SystemExit) as e:
        main(["-i", str(INTERVAL), "-x", str(SCALE), "-o", str(output)])

    assert e.value.code == 1

    out, err = capsys.readouterr()
    assert f"could not write CPU profile to {output}" in err
    assert "Profiling finished" not in out

    # The samples taken before the failure are still flushed
    assert len(load(output)) > 0

def test_cli_in_process(tmp_path, capsys):
    output = tmp_path / "trace.pprof"

    main(["-i", str(INTERVAL), "-x", str(SCALE), "-o", str(output)])

    out = capsys.readouterr().out
    assert "Recorded" in out
    assert out.rstrip().endswith(f"Profile saved to {output}")
    assert output.stat().st_size > 0
