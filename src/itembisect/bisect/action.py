"""External commands run for each tested item."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from itembisect.bisect.oracle import Oracle
from itembisect.bisect.verdict import Verdict
from itembisect.core.log import logger
from itembisect.core.result import CommandResult
from itembisect.core.runner import Runner

PLACEHOLDER = "@i"


def substitute(template: str, value: str, placeholder: str = PLACEHOLDER) -> str:
    """Replace every occurrence of ``placeholder`` in ``template``.

    >>> substitute("git checkout @i && echo @i", "abc123")
    'git checkout abc123 && echo abc123'
    """
    if not placeholder:
        return template
    return template.replace(placeholder, value)


class CommandAction:
    """A command template executed once per item.

    The exit code is observed and logged but never decides a verdict:
    a crashing test is information for the oracle, not an error.
    """

    def __init__(
        self,
        name: str,
        template: str,
        placeholder: str = PLACEHOLDER,
        cwd: Path | None = None,
        timeout: int | None = None,
        show_output: bool = True,
        runner: Runner | None = None,
    ):
        self.name = name
        self.template = template
        self.placeholder = placeholder
        self.cwd = cwd
        self.timeout = timeout
        self.show_output = show_output
        self.runner = runner or Runner()

    def render(self, item: str) -> str:
        return substitute(self.template, item, self.placeholder)

    def run(self, item: str) -> CommandResult:
        command = self.render(item)
        logger.info(f"🔧 Running: {command}", action=self.name)

        timestamp = datetime.now()
        result = self.runner.execute(
            command,
            cwd=self.cwd,
            timeout=self.timeout,
            hide=not self.show_output,
            check=False,
        )

        outcome = CommandResult(
            name=self.name,
            command=command,
            item=item,
            returncode=result.exited,
            timestamp=timestamp,
        )
        if outcome.timed_out:
            logger.warn(
                f"⚠️  Command timed out after {self.timeout}s",
                action=self.name,
            )
        elif not outcome.success:
            logger.warn(
                f"⚠️  Command exited with non-zero status "
                f"(code: {outcome.returncode})",
                action=self.name,
            )
        return outcome


class ItemTester:
    """The per-item test step: prepare state, run the test, ask the oracle.

    Instances are callables suitable as the engine's test function.
    """

    def __init__(
        self,
        test_action: CommandAction,
        oracle: Oracle,
        next_state_action: CommandAction | None = None,
    ):
        self.test_action = test_action
        self.oracle = oracle
        self.next_state_action = next_state_action
        self.results: list[CommandResult] = []

    def __call__(self, item: str) -> Verdict:
        if self.next_state_action is not None:
            self.results.append(self.next_state_action.run(item))
        self.results.append(self.test_action.run(item))
        return self.oracle(item)
