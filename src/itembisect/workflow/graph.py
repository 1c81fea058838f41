"""Graph workflow definition."""

from pydantic_graph import Graph

from itembisect.core.config import State
from itembisect.core.log import logger


def create_workflow():
    """Create the bisection workflow graph.

    LoadItems → Bisect → Finalize

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    from itembisect.workflow.nodes.finalize import Finalize
    from itembisect.workflow.nodes.load import LoadItems
    from itembisect.workflow.nodes.search import Bisect

    return Graph(
        nodes=(
            LoadItems,
            Bisect,
            Finalize,
        ),
        state_type=State
    )
