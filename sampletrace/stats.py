from collections import Counter


def frame_name(frame):
    return f"{frame.function} ({frame.filename})"


class FlameFrame:
    """
    Node of the merged call tree of a profile.

    Stacks that share a prefix share the corresponding nodes. Each node keeps
    the total wall and CPU time of the samples that went through it.
    """

    __slots__ = ["name", "value", "cpu", "children", "index", "parent", "height"]

    def __init__(self, name, value=0, cpu=0):
        self.name = name
        self.value = value
        self.cpu = cpu
        self.children = []
        self.index = {}
        self.parent = None
        self.height = 1

    def add_child(self, frame):
        self.index[frame.name] = frame
        frame.parent = self
        self.children.append(frame)

    def add_stack(self, names, value, cpu):
        self.value += value
        self.cpu += cpu

        if not names:
            return

        name, *tail = names
        try:
            child = self.index[name]
        except KeyError:
            child = FlameFrame(name)
            self.add_child(child)
        child.add_stack(tail, value, cpu)

        self.height = max(self.height, child.height + 1)

    @staticmethod
    def new_root():
        return FlameFrame("root")

    @staticmethod
    def from_profile(profile):
        root = FlameFrame.new_root()
        for sample in profile.samples:
            root.add_stack([frame_name(_) for _ in sample.stack], sample.wall, sample.cpu)
        return root

    def to_dict(self):
        return {
            "name": self.name,
            "value": self.value,
            "cpu": self.cpu,
            "children": [c.to_dict() for c in self.children],
        }


def top_functions(profile, metric="cpu", n=5):
    """The ``n`` functions with the highest own (leaf) time for the metric."""
    own = Counter()
    for sample in profile.samples:
        if sample.stack:
            own[frame_name(sample.stack[-1])] += getattr(sample, metric)

    return own.most_common(n)


def summary(profile):
    return {
        "samples": len(profile),
        "interval": profile.interval,
        "duration": profile.duration,
        "span": profile.span,
        "cpu": profile.cpu_time,
        "max_depth": profile.max_depth,
    }
