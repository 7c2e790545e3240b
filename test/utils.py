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

import os
import sys
from pathlib import Path
from subprocess import CompletedProcess, run

from sampletrace.profile import Frame, Profile, Sample

HERE = Path(__file__).parent
ROOT = HERE.parent

WORKLOAD_FUNCTIONS = {"run_outer", "branch_a", "branch_b", "small", "medium", "large"}


def sampletrace(*args: str, timeout: int = 60) -> CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        [str(ROOT)] + ([env["PYTHONPATH"]] if env.get("PYTHONPATH") else [])
    )

    return run(
        [sys.executable, "-m", "sampletrace.main", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
    )


def functions(sample: Sample) -> list[str]:
    return [_.function for _ in sample.stack]


def make_profile() -> Profile:
    outer = Frame("run_outer", "workload.py", 100)
    a = Frame("branch_a", "workload.py", 80)
    b = Frame("branch_b", "workload.py", 90)
    small = Frame("small", "workload.py", 50)
    large = Frame("large", "workload.py", 70)

    return Profile(
        [
            Sample(1_000_000, (outer, a, small), 1_000_000, 900_000),
            Sample(2_000_000, (outer, a, small), 1_000_000, 1_000_000),
            Sample(3_000_000, (outer,), 1_000_000, 0),
            Sample(4_000_000, (outer, b, large), 1_000_000, 1_000_000),
            Sample(5_000_000, (), 1_000_000, 0),
        ],
        1_000_000,
        start_time=1_700_000_000_000_000_000,
        duration=5_500_000,
        pid=42,
        thread=4242,
    )
