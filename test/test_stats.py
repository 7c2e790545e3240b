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

from test.utils import make_profile

from sampletrace.stats import FlameFrame, frame_name, summary, top_functions


def test_flame_graph():
    root = FlameFrame.from_profile(make_profile())

    assert root.name == "root"
    assert root.value == 5_000_000
    assert root.cpu == 2_900_000
    assert root.height == 4

    (outer,) = root.children
    assert outer.name == "run_outer (workload.py)"
    assert outer.value == 4_000_000
    assert [_.name for _ in outer.children] == [
        "branch_a (workload.py)",
        "branch_b (workload.py)",
    ]

    branch_a = outer.index["branch_a (workload.py)"]
    assert branch_a.parent is outer
    assert branch_a.value == 2_000_000
    assert branch_a.cpu == 1_900_000


def test_flame_graph_to_dict():
    data = FlameFrame.from_profile(make_profile()).to_dict()

    assert data["name"] == "root"
    small = data["children"][0]["children"][0]["children"][0]
    assert small == {
        "name": "small (workload.py)",
        "value": 2_000_000,
        "cpu": 1_900_000,
        "children": [],
    }


def test_top_functions():
    profile = make_profile()

    assert top_functions(profile) == [
        ("small (workload.py)", 1_900_000),
        ("large (workload.py)", 1_000_000),
        ("run_outer (workload.py)", 0),
    ]
    assert top_functions(profile, "wall", 1) == [("small (workload.py)", 2_000_000)]


def test_summary():
    assert summary(make_profile()) == {
        "samples": 5,
        "interval": 1_000_000,
        "duration": 5_500_000,
        "span": 5_000_000,
        "cpu": 2_900_000,
        "max_depth": 3,
    }


def test_frame_name():
    frame = make_profile().samples[0].stack[0]

    assert frame_name(frame) == "run_outer (workload.py)"
