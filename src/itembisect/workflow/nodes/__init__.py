"""Workflow nodes for graph state machine."""

from itembisect.workflow.nodes.finalize import Finalize
from itembisect.workflow.nodes.load import LoadItems
from itembisect.workflow.nodes.search import Bisect

__all__ = [
    "LoadItems",
    "Bisect",
    "Finalize",
]
