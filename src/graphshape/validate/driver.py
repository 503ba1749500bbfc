"""Multi-pass validation driver.

Runs the node rules in evaluation order until a pass changes nothing, then
runs one final pass in which every remaining mismatch is fatal.
"""

__docformat__ = "restructuredtext"
__all__ = ["ValidationReport", "validate_network"]

from collections.abc import Sequence
from dataclasses import dataclass, field

from graphshape.errors import NonConvergenceError
from graphshape.nodes import ComputationNode
from graphshape.presets import DEFAULT_MAX_PASSES


@dataclass
class ValidationReport:
    """Outcome of a successful validation run.

    :param num_passes: Non-final passes run before the fixed point
    :param changed_per_pass: Names of the nodes that changed, per non-final pass
    """

    num_passes: int = 0
    changed_per_pass: list[list[str]] = field(default_factory=list)


def _run_pass(nodes: Sequence[ComputationNode], is_final_pass: bool) -> list[str]:
    changed = []
    for node in nodes:
        if node.validate(is_final_pass):
            changed.append(node.name)
    return changed


def validate_network(
    nodes: Sequence[ComputationNode],
    max_passes: int = DEFAULT_MAX_PASSES,
    verbose: bool = False,
) -> ValidationReport:
    """Validate nodes to a fixed point, then run the final pass.

    :param nodes: Nodes in evaluation (topological) order
    :param max_passes: Non-final passes allowed before giving up
    :param verbose: Print progress per pass
    :return: Report of the passes that were run
    :raises NonConvergenceError: If shapes still change after ``max_passes``
    """
    if max_passes < 1:
        raise ValueError(f"max_passes must be >= 1, got {max_passes}")

    report = ValidationReport()
    changed: list[str] = []
    while report.num_passes < max_passes:
        changed = _run_pass(nodes, is_final_pass=False)
        report.num_passes += 1
        report.changed_per_pass.append(changed)
        if verbose:
            print(f"Validation pass {report.num_passes}: {len(changed)} node(s) changed")
        if not changed:
            break
    else:
        raise NonConvergenceError(
            f"Validation did not converge after {max_passes} passes; "
            f"still changing: {', '.join(changed)}",
            unstable=changed,
        )

    _run_pass(nodes, is_final_pass=True)
    if verbose:
        print(f"Final validation pass: {len(nodes)} node(s) validated")
    return report
