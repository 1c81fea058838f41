"""Tests for placeholder substitution and per-item commands."""

import platform
from unittest.mock import Mock

import pytest

from itembisect.bisect.action import CommandAction, ItemTester, substitute
from itembisect.bisect.verdict import Verdict
from itembisect.core.result import CommandResult

posix_only = pytest.mark.skipif(
    platform.system() == "Windows", reason="POSIX shell commands"
)


def test_substitute_replaces_every_occurrence():
    assert substitute("checkout @i && echo @i", "v1.2") == (
        "checkout v1.2 && echo v1.2"
    )


def test_substitute_without_placeholder_is_unchanged():
    assert substitute("make test", "abc") == "make test"


def test_substitute_custom_placeholder():
    assert substitute("deploy {{rev}} @i", "r7", "{{rev}}") == "deploy r7 @i"


def test_substitute_empty_placeholder_is_unchanged():
    assert substitute("run @i", "x", "") == "run @i"


@posix_only
def test_command_result_reports_exit_code():
    action = CommandAction("test", "test @i = good", show_output=False)

    assert action.run("good").success is True
    bad = action.run("bad")
    assert bad.success is False
    assert bad.returncode == 1
    assert bad.command == "test bad = good"
    assert bad.item == "bad"


@posix_only
def test_nonzero_exit_is_not_an_error():
    action = CommandAction("test", "exit 3", show_output=False)

    result = action.run("x")

    assert result.returncode == 3


@posix_only
def test_command_runs_in_workdir(tmp_path):
    action = CommandAction(
        "next-state", "echo @i > marker.txt", cwd=tmp_path,
        show_output=False,
    )

    action.run("v9")

    assert (tmp_path / "marker.txt").read_text().strip() == "v9"


@posix_only
def test_timeout_reported_as_minus_one():
    action = CommandAction("test", "sleep 10", timeout=1, show_output=False)

    result = action.run("slow")

    assert result.timed_out is True
    assert result.success is False


def _fake_action(name, calls):
    action = Mock(spec=CommandAction)
    action.run.side_effect = lambda item: calls.append((name, item)) or Mock(
        spec=CommandResult
    )
    return action


def test_tester_runs_state_then_test_then_oracle():
    calls = []
    oracle = Mock(side_effect=lambda item: calls.append(("oracle", item))
                  or Verdict.FAIL)
    tester = ItemTester(
        test_action=_fake_action("test", calls),
        oracle=oracle,
        next_state_action=_fake_action("next-state", calls),
    )

    assert tester("abc") is Verdict.FAIL
    assert calls == [("next-state", "abc"), ("test", "abc"), ("oracle", "abc")]
    assert len(tester.results) == 2


def test_tester_without_state_action():
    calls = []
    tester = ItemTester(
        test_action=_fake_action("test", calls),
        oracle=lambda item: Verdict.PASS,
    )

    assert tester("abc") is Verdict.PASS
    assert calls == [("test", "abc")]
