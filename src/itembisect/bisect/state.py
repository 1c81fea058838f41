"""Search state owned by a single engine run."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from itembisect.bisect.verdict import Verdict


class BisectStep(BaseModel):
    """One tested candidate and the outer range it was tested in."""

    model_config = ConfigDict(frozen=True)

    index: int
    item: str
    verdict: Verdict
    left: int
    right: int


@dataclass
class SearchState:
    """Mutable bounds of the unresolved range, plus what is known so far.

    ``left`` and ``right`` are inclusive. Every tested index lies in
    ``[left, right]``, so ``last_good_index < left`` and
    ``first_bad_index > right`` hold throughout a run.
    """

    left: int
    right: int
    last_good_index: int | None = None
    first_bad_index: int | None = None
    ignored_indices: set[int] = field(default_factory=set)
    steps: list[BisectStep] = field(default_factory=list)

    @classmethod
    def start(cls, size: int) -> SearchState:
        return cls(left=0, right=size - 1)

    @property
    def open(self) -> bool:
        return self.left <= self.right
