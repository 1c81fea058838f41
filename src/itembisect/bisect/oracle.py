"""Oracles: whatever turns a tested item into a verdict."""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from typing import Protocol, TextIO, runtime_checkable

from itembisect.bisect.errors import OracleAborted
from itembisect.bisect.verdict import Verdict
from itembisect.core.log import logger


@runtime_checkable
class Oracle(Protocol):
    """Classify one item. May block indefinitely."""

    def __call__(self, item: str) -> Verdict:
        ...


class ConsoleOracle:
    """Ask a human on the terminal, re-prompting until the answer parses."""

    def __init__(
        self,
        allow_ignore: bool = True,
        input_func: Callable[[str], str] | None = None,
        out: TextIO | None = None,
    ):
        """
        Args:
            allow_ignore: Offer ignore/skip; False gives a plain
                pass/fail prompt
            input_func: Reads one answer, given the prompt (default
                input())
            out: Where to write the "invalid answer" hint
        """
        self.allow_ignore = allow_ignore
        self.input_func = input_func
        self.out = out

    @property
    def choices(self) -> str:
        if self.allow_ignore:
            return "[p]ass / [f]ail / [i]gnore"
        return "[p]ass / [f]ail"

    def __call__(self, item: str) -> Verdict:
        prompt = f"Did the test PASS for item \"{item}\"? {self.choices}: "
        while True:
            try:
                answer = (self.input_func or input)(prompt)
            except EOFError as e:
                raise OracleAborted(
                    f"Input closed while waiting for a verdict on {item!r}"
                ) from e

            verdict = Verdict.parse(answer, allow_ignore=self.allow_ignore)
            if verdict is not None:
                return verdict

            logger.debug("Unrecognised verdict", answer=answer)
            print(
                f"Please answer {self.choices}.",
                file=self.out or sys.stderr,
            )


class ScriptedOracle:
    """Answer from a mapping (or function) instead of asking anyone.

    Records the items it was asked about, in order, in ``asked``.
    """

    def __init__(
        self, verdicts: Mapping[str, Verdict | str] | Callable[[str], Verdict]
    ):
        self.verdicts = verdicts
        self.asked: list[str] = []

    def __call__(self, item: str) -> Verdict:
        self.asked.append(item)
        if callable(self.verdicts):
            return Verdict(self.verdicts(item))
        try:
            verdict = self.verdicts[item]
        except KeyError as e:
            raise OracleAborted(f"No scripted verdict for {item!r}") from e
        return Verdict(verdict)
