"""Computation network container.

Owns the nodes of a graph, computes their evaluation order and hands them to
the validation driver.
"""

__docformat__ = "restructuredtext"
__all__ = ["ComputationNetwork"]

from graphshape.nodes import ComputationNode
from graphshape.presets import DEFAULT_MAX_PASSES
from graphshape.shape import MBLayout
from graphshape.validate import ValidationReport, validate_network


class ComputationNetwork:
    """Set of named nodes forming a directed acyclic graph.

    :param num_parallel_sequences: Initial size of the network's shared layout
    :param num_time_steps: Initial size of the network's shared layout
    """

    def __init__(self, num_parallel_sequences: int = 1, num_time_steps: int = 1):
        self.layout = MBLayout(num_parallel_sequences, num_time_steps)
        self._nodes: dict[str, ComputationNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    @property
    def nodes(self) -> list[ComputationNode]:
        return list(self._nodes.values())

    def add(self, node: ComputationNode) -> ComputationNode:
        """Add a node; names must be unique.

        :param node: Node to add
        :return: The same node
        """
        if node.name in self._nodes:
            raise ValueError(f"Duplicate node name: {node.name}")
        self._nodes[node.name] = node
        return node

    def get(self, name: str) -> ComputationNode:
        if name not in self._nodes:
            raise ValueError(f"No node named {name}")
        return self._nodes[name]

    def new_layout(self, num_parallel_sequences: int, num_time_steps: int) -> MBLayout:
        """Create an additional layout, e.g. for a second input stream."""
        return MBLayout(num_parallel_sequences, num_time_steps)

    def roots(self) -> list[ComputationNode]:
        """Get nodes that are not an input of any other node."""
        consumed = {
            id(child)
            for node in self._nodes.values()
            for child in node.inputs
            if child is not None
        }
        return [node for node in self._nodes.values() if id(node) not in consumed]

    def evaluation_order(self, root: ComputationNode | None = None) -> list[ComputationNode]:
        """Order nodes so that every node comes after its inputs.

        Unwired inputs are skipped.

        :param root: Only order the sub-graph below this node (None = whole network)
        :return: Nodes in dependency order
        """
        order: list[ComputationNode] = []
        done: set[int] = set()
        active: set[int] = set()

        def _wired(node: ComputationNode):
            return iter([child for child in node.inputs if child is not None])

        for start in [root] if root is not None else self.roots():
            if id(start) in done:
                continue
            stack = [(start, _wired(start))]
            active.add(id(start))
            while stack:
                node, children = stack[-1]
                child = next(children, None)
                if child is None:
                    stack.pop()
                    active.discard(id(node))
                    done.add(id(node))
                    order.append(node)
                elif id(child) in done:
                    continue
                elif id(child) in active:
                    raise ValueError(f"Cycle detected at node {child.name}")
                else:
                    active.add(id(child))
                    stack.append((child, _wired(child)))

        if root is None and any(id(node) not in done for node in self._nodes.values()):
            raise ValueError("Network contains a cycle that is not reachable from any root")
        return order

    def validate(
        self, max_passes: int = DEFAULT_MAX_PASSES, verbose: bool = False
    ) -> ValidationReport:
        """Validate all nodes to a fixed point followed by a final pass."""
        return validate_network(self.evaluation_order(), max_passes=max_passes, verbose=verbose)

    def dump(self) -> str:
        """Dump every node's name, operation and inputs."""
        return "".join(node.dump_node_info() for node in self.evaluation_order())
