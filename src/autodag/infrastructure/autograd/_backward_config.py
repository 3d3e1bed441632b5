from dataclasses import dataclass, replace


@dataclass(frozen=True)
class BackwardConfig:
    """
    Options for one backward pass.

    Attributes
    ----------
    keep_graph : bool
        If True, graph segments traversed by the pass stay usable and the
        produced gradients are recorded Values that can be differentiated
        again. If False, each consumed operation node is released.
    """

    keep_graph: bool = False

    def with_keep_graph(self, keep_graph: bool = True) -> "BackwardConfig":
        """Return a copy with `keep_graph` updated."""
        return replace(self, keep_graph=bool(keep_graph))
