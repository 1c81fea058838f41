"""Bisect node - run the search loop over the loaded items."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from itembisect.bisect.engine import BisectEngine
from itembisect.core.config import State
from itembisect.core.log import logger
from itembisect.workflow.nodes.finalize import Finalize


@dataclass
class Bisect(BaseNode[State]):
    """Test items one at a time until the range is exhausted."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Finalize:
        """Run the engine with the tester prepared by LoadItems.

        Blocks on each command and verdict; nothing else runs meanwhile.

        Returns:
            Finalize: Always, once the range is exhausted
        """
        runtime = ctx.state.runtime.bisect
        if runtime.items is None or runtime.tester is None:
            raise ValueError("Items must be loaded before bisecting")

        runtime.status = "running"
        with logger.span("Bisecting {count} items", count=len(runtime.items)):
            runtime.report = BisectEngine(runtime.tester).run(runtime.items)

        return Finalize()
