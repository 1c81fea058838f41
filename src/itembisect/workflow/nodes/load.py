"""LoadItems node - read the item list and assemble the per-item test."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from itembisect.bisect.action import CommandAction, ItemTester
from itembisect.bisect.errors import ConfigurationError
from itembisect.bisect.items import load_items
from itembisect.bisect.oracle import ConsoleOracle
from itembisect.core.config import State
from itembisect.core.log import logger
from itembisect.workflow.nodes.search import Bisect


@dataclass
class LoadItems(BaseNode[State]):
    """Validate inputs, load items, and build the tester."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Bisect:
        """
        Raises:
            ConfigurationError: test command or items file missing
            SourceUnavailable: items file cannot be read
            EmptySequence: items file has no items

        Returns:
            Bisect: Next node to run the search
        """
        cfg = ctx.state.config.bisect
        runtime = ctx.state.runtime.bisect

        missing = [
            flag for flag, value in (
                ("--test-with", cfg.test_with),
                ("--items-from-file", cfg.items_from_file),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required input(s): {', '.join(missing)}"
            )

        items = load_items(cfg.items_from_file)
        logger.info(f"📋 Items: {', '.join(items)}")

        def action(name: str, template: str) -> CommandAction:
            return CommandAction(
                name=name,
                template=template,
                placeholder=cfg.placeholder,
                cwd=cfg.workdir,
                timeout=cfg.command_timeout,
                show_output=cfg.show_output,
            )

        oracle = runtime.oracle or ConsoleOracle(allow_ignore=not cfg.binary)
        runtime.items = items
        runtime.tester = ItemTester(
            test_action=action("test", cfg.test_with),
            oracle=oracle,
            next_state_action=(
                action("next-state", cfg.next_state_with)
                if cfg.next_state_with else None
            ),
        )
        runtime.status = "loaded"

        return Bisect()
