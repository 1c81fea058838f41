"""Tests for the run subcommand's options."""

from pathlib import Path

from pydantic_settings import CliApp

from itembisect.command.run import RunCommand
from itembisect.core.config import BisectConfig, Config


def test_long_option_names():
    command = RunCommand.model_validate({
        "test-with": "make test",
        "items-from-file": "commits.txt",
        "next-state-with": "git checkout @i",
    })

    assert command.test_with == "make test"
    assert command.items_from_file == Path("commits.txt")
    assert command.next_state_with == "git checkout @i"


def test_short_option_names():
    command = RunCommand.model_validate(
        {"t": "make test", "f": "commits.txt", "n": "git checkout @i"}
    )

    assert command.test_with == "make test"
    assert command.items_from_file == Path("commits.txt")
    assert command.next_state_with == "git checkout @i"


def test_parse_command_line():
    command = CliApp.run(
        RunCommand,
        cli_args=["-t", "pytest -x", "--items-from-file", "versions.txt"],
    )

    assert command.test_with == "pytest -x"
    assert command.items_from_file == Path("versions.txt")
    assert command.next_state_with is None


class _Holder:
    """Stand-in for State: apply_to only touches config.bisect."""

    def __init__(self, bisect):
        self.config = Config(bisect=bisect)


def test_apply_only_overrides_given_options():
    holder = _Holder(BisectConfig(
        test_with="from-config",
        next_state_with="git checkout @i",
        placeholder="%I",
    ))

    RunCommand(test_with="from-cli", binary=True).apply_to(holder)

    bisect = holder.config.bisect
    assert bisect.test_with == "from-cli"
    assert bisect.binary is True
    assert bisect.next_state_with == "git checkout @i"
    assert bisect.placeholder == "%I"
