"""Run command - bisect a list of items interactively."""

from __future__ import annotations

import signal
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from itembisect.bisect.errors import BisectError, ConfigurationError
from itembisect.core.log import logger

if TYPE_CHECKING:
    from itembisect.core.config import State

USAGE = (
    "Usage: itembisect run --test-with <command> --items-from-file <file> "
    "[--next-state-with <command>]"
)
EXAMPLE = (
    "Example: itembisect run --test-with 'pytest tests/test_login.py' "
    "--items-from-file commits.txt --next-state-with 'git checkout @i'"
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class RunCommand(BaseModel):
    """Bisect an ordered list of items (commits, versions, settings).

    For each candidate the optional next-state command switches to the
    item, the test command runs, and you answer pass, fail or ignore.
    Both commands have every '@i' replaced with the item. Items must be
    ordered good first, bad last.

    Options left unset here fall back to the config.bisect section of
    itembisect.yaml or ITEMBISECT_CONFIG__BISECT__* variables.
    """

    model_config = ConfigDict(populate_by_name=True)

    test_with: str | None = Field(
        default=None,
        validation_alias=AliasChoices("test-with", "t"),
        description="Command that exercises the current item",
    )
    items_from_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("items-from-file", "f"),
        description="File listing items one per line, good first",
    )
    next_state_with: str | None = Field(
        default=None,
        validation_alias=AliasChoices("next-state-with", "n"),
        description="Command that switches to the current item",
    )
    placeholder: str | None = Field(
        default=None,
        description="Token replaced by the item (default '@i')",
    )
    binary: bool | None = Field(
        default=None,
        description="Only accept pass/fail answers",
    )

    def apply_to(self, state: State) -> None:
        """Copy the options given on the command line over config."""
        overrides = self.model_dump(exclude_none=True)
        for name, value in overrides.items():
            setattr(state.config.bisect, name, value)

    async def run_workflow(self, state: State) -> int:
        """Run the bisection workflow.

        Args:
            state: State instance with config loaded

        Returns:
            Exit code (0=completed, 1=bad input or closed input)
        """
        self.apply_to(state)

        # asyncio.run() turns SIGINT into task cancellation, which only
        # lands at the next await. The engine blocks in commands and
        # input(), so Ctrl-C must raise KeyboardInterrupt right there.
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGINT, signal.default_int_handler)

        from pydantic_graph import End

        from itembisect.workflow.graph import create_workflow
        from itembisect.workflow.nodes.load import LoadItems

        workflow = create_workflow()

        try:
            async with workflow.iter(LoadItems(), state=state) as run:
                async for node in run:
                    if isinstance(node, End):
                        logger.debug(
                            "Workflow complete",
                            boundary=node.data.boundary.kind.value,
                        )
                        return EXIT_OK
        except ConfigurationError as e:
            logger.error(str(e))
            logger.error(USAGE)
            logger.error(EXAMPLE)
            return EXIT_ERROR
        except BisectError as e:
            logger.error(str(e))
            return EXIT_ERROR

        logger.error("Bisect failed - workflow ended unexpectedly")
        return EXIT_ERROR
