"""Fixed synthetic workload used as the sampling target.

The call tree is three levels deep: ``run_outer`` calls the two branches,
each branch calls one or two leaves and every leaf burns CPU in a plain loop.
The relative costs of the leaves are 1x, 5x and 10x.
"""

from enum import Enum
from time import sleep

PAUSE = 0.05  # s

# Every leaf folds its result in here so that the loops are never dead code.
sink = 0


class CostClass(Enum):
    SMALL = 100_000
    MEDIUM = 500_000
    LARGE = 1_000_000

    @property
    def iterations(self):
        return self.value

    def scaled(self, scale=1.0):
        return max(1, int(self.value * scale))


class CallNode:
    """A named unit of work in the static call tree."""

    __slots__ = ["name", "cost", "children"]

    def __init__(self, name, cost=None, children=()):
        self.name = name
        self.cost = cost
        self.children = tuple(children)

    @property
    def depth(self):
        return 1 + max((c.depth for c in self.children), default=0)

    def leaves(self):
        if not self.children:
            yield self
        for child in self.children:
            yield from child.leaves()

    def __repr__(self):
        return f"CallNode({self.name!r}, {self.cost}, {len(self.children)} children)"


def small(scale=1.0):
    global sink

    acc = 0
    for i in range(CostClass.SMALL.scaled(scale)):
        acc += i * i
    sink ^= acc


def medium(scale=1.0):
    global sink

    acc = 0
    for i in range(CostClass.MEDIUM.scaled(scale)):
        acc += i * i
    sink ^= acc


def large(scale=1.0):
    global sink

    acc = 0
    for i in range(CostClass.LARGE.scaled(scale)):
        acc += i * i
    sink ^= acc


def branch_a(scale=1.0):
    small(scale)
    medium(scale)


def branch_b(scale=1.0):
    large(scale)


def run_outer(scale=1.0, pause=PAUSE):
    print("Outer function started")
    for _ in range(3):
        branch_a(scale)
        # Off-CPU time, so that wall time and CPU time differ in the profile
        sleep(pause)
        branch_b(scale)
    for _ in range(2):
        branch_a(scale)
    print("Outer function finished.")


CALL_TREE = CallNode(
    "run_outer",
    children=(
        CallNode(
            "branch_a",
            children=(
                CallNode("small", CostClass.SMALL),
                CallNode("medium", CostClass.MEDIUM),
            ),
        ),
        CallNode("branch_b", children=(CallNode("large", CostClass.LARGE),)),
    ),
)


def expected_calls():
    """The ordered sequence of leaf calls and pauses made by ``run_outer``."""
    # Mirrors the two loops of run_outer: 3 x (branch_a, sleep, branch_b), then
    # 2 x branch_a. Keep both in sync.
    return ["small", "medium", "sleep", "large"] * 3 + ["small", "medium"] * 2
