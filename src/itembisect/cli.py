#!/usr/bin/env python3
"""itembisect CLI - find where an ordered list of items goes bad."""

import asyncio
import contextlib
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from itembisect.command.run import EXIT_ERROR, EXIT_INTERRUPTED, RunCommand
from itembisect.core.config import State
from itembisect.core.log import logger


class CliState(State):
    """Interactive bisection over an ordered list of items.

    itembisect tests items from a list (commits, versions,
    configuration values) by running your commands for each candidate
    and asking you whether it passed, failed, or should be ignored,
    until the first bad item is found.

    Configuration sources (in priority order):
    1. Command-line arguments
    2. --include files, ./itembisect.yaml, user config file
    3. .env file
    4. Environment variables
       (ITEMBISECT_CONFIG__BISECT__TEST_WITH=value)
    """

    run: CliSubCommand[RunCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            # argparse exits 0 after printing help
            with contextlib.suppress(SystemExit):
                CliApp.run(CliState, cli_args=['--help'])
            sys.exit(EXIT_ERROR)

        self.config.setup_logging()

        # Closing the logger flushes file sinks even on errors
        with logger:
            try:
                exit_code = asyncio.run(subcommand.run_workflow(self))
            except KeyboardInterrupt:
                logger.warn("Interrupted - no report produced")
                exit_code = EXIT_INTERRUPTED
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
