"""Finalize node - present the report and end the workflow."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from itembisect.bisect.report import Report, render_report
from itembisect.core.config import State
from itembisect.core.log import logger


@dataclass
class Finalize(BaseNode[State, None, Report]):
    """Print the rendered report and hand it back as the graph result."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> End[Report]:
        report = ctx.state.runtime.bisect.report
        if report is None:
            raise ValueError("No report to finalize")

        print(render_report(report))

        if report.boundary.untested:
            logger.warn(
                f"{len(report.boundary.untested)} item(s) inside the "
                f"boundary range were never tested"
            )

        ctx.state.runtime.bisect.status = "complete"
        return End(report)
