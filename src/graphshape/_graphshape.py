__docformat__ = "restructuredtext"
__all__ = ["GraphShape"]

from graphshape.network import ComputationNetwork
from graphshape.presets import DEFAULT_MAX_PASSES
from graphshape.validate import ValidationReport, validate_network


class GraphShape:
    def __init__(self, verbose: bool = False, max_passes: int = DEFAULT_MAX_PASSES):
        self.verbose = verbose
        self.max_passes = max_passes

    def validate(self, network: ComputationNetwork) -> ValidationReport:
        """Infer and validate shapes and layouts of every node in a network.

        Stages:
        1. Order nodes so that inputs come first
        2. Run non-final passes until no node changes
        3. Run the final pass, in which any remaining mismatch is fatal

        :param network: Network to validate
        :return: Report of the passes that were run
        """
        nodes = network.evaluation_order()
        if self.verbose:
            print(f"Validating {len(nodes)} node(s)")

        report = validate_network(nodes, max_passes=self.max_passes, verbose=self.verbose)

        if self.verbose:
            print(f"Validated after {report.num_passes} pass(es)")
        return report

    def dump(self, network: ComputationNetwork) -> str:
        """Format every node of a network for tracing.

        :param network: Network to describe
        :return: One line per node: ``name=Operation(input,...)``
        """
        return network.dump()
