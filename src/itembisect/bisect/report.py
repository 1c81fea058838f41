"""Final bisection report: where the good -> bad transition must lie."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

from itembisect.bisect.state import BisectStep, SearchState


class BoundaryKind(str, Enum):
    PINPOINTED = "pinpointed"
    RANGE = "range"
    GOOD_ONLY = "good_only"
    BAD_ONLY = "bad_only"
    INCONCLUSIVE = "inconclusive"


class EntryStatus(str, Enum):
    IGNORED = "ignored"
    UNTESTED = "untested"


class BoundaryEntry(BaseModel):
    """An unresolved index inside the boundary range."""

    model_config = ConfigDict(frozen=True)

    index: int
    item: str
    status: EntryStatus


class Boundary(BaseModel):
    """Smallest span of indices that must contain the transition.

    ``entries`` lists the indices whose state is unknown, each marked
    as ignored by the oracle or never tested. A pinpointed boundary has
    none.
    """

    model_config = ConfigDict(frozen=True)

    kind: BoundaryKind
    entries: tuple[BoundaryEntry, ...] = ()

    @property
    def untested(self) -> tuple[BoundaryEntry, ...]:
        return tuple(
            e for e in self.entries if e.status is EntryStatus.UNTESTED
        )

    @property
    def summary(self) -> str:
        return {
            BoundaryKind.PINPOINTED: "transition pinpointed",
            BoundaryKind.RANGE: "transition lies among unresolved items",
            BoundaryKind.GOOD_ONLY:
                "no bad item found; all items after the last good one "
                "were ignored or untested",
            BoundaryKind.BAD_ONLY:
                "no good item found; all items before the first bad one "
                "were ignored or untested",
            BoundaryKind.INCONCLUSIVE:
                "no conclusive result; every tested item was ignored",
        }[self.kind]


class Report(BaseModel):
    """Immutable outcome of one bisection run."""

    model_config = ConfigDict(frozen=True)

    items: tuple[str, ...]
    last_good_index: int | None
    first_bad_index: int | None
    ignored_indices: tuple[int, ...]
    boundary: Boundary
    steps: tuple[BisectStep, ...] = ()

    @property
    def last_good_item(self) -> str | None:
        if self.last_good_index is None:
            return None
        return self.items[self.last_good_index]

    @property
    def first_bad_item(self) -> str | None:
        if self.first_bad_index is None:
            return None
        return self.items[self.first_bad_index]

    @property
    def gap(self) -> int | None:
        if self.last_good_index is None or self.first_bad_index is None:
            return None
        return self.first_bad_index - self.last_good_index

    @property
    def tests_run(self) -> int:
        return len(self.steps)


def _annotate(
    items: Sequence[str], indices: range, ignored: set[int]
) -> tuple[BoundaryEntry, ...]:
    return tuple(
        BoundaryEntry(
            index=i,
            item=items[i],
            status=(
                EntryStatus.IGNORED if i in ignored
                else EntryStatus.UNTESTED
            ),
        )
        for i in indices
    )


def synthesize_boundary(
    items: Sequence[str],
    last_good_index: int | None,
    first_bad_index: int | None,
    ignored_indices: set[int],
) -> Boundary:
    """Derive the boundary range from the final search bounds.

    Raises:
        ValueError: If the first bad index does not follow the last
            good index
    """
    size = len(items)

    if last_good_index is not None and first_bad_index is not None:
        gap = first_bad_index - last_good_index
        if gap < 1:
            raise ValueError(
                f"first bad index {first_bad_index} does not follow "
                f"last good index {last_good_index}"
            )
        if gap == 1:
            return Boundary(kind=BoundaryKind.PINPOINTED)
        return Boundary(
            kind=BoundaryKind.RANGE,
            entries=_annotate(
                items,
                range(last_good_index + 1, first_bad_index),
                ignored_indices,
            ),
        )

    if last_good_index is not None:
        return Boundary(
            kind=BoundaryKind.GOOD_ONLY,
            entries=_annotate(
                items, range(last_good_index + 1, size), ignored_indices
            ),
        )

    if first_bad_index is not None:
        return Boundary(
            kind=BoundaryKind.BAD_ONLY,
            entries=_annotate(
                items, range(0, first_bad_index), ignored_indices
            ),
        )

    return Boundary(
        kind=BoundaryKind.INCONCLUSIVE,
        entries=_annotate(items, range(size), ignored_indices),
    )


def build_report(items: Sequence[str], state: SearchState) -> Report:
    """Freeze a finished search state into a Report."""
    return Report(
        items=tuple(items),
        last_good_index=state.last_good_index,
        first_bad_index=state.first_bad_index,
        ignored_indices=tuple(sorted(state.ignored_indices)),
        boundary=synthesize_boundary(
            items,
            state.last_good_index,
            state.first_bad_index,
            state.ignored_indices,
        ),
        steps=tuple(state.steps),
    )


def render_report(report: Report) -> str:
    """Human readable summary with 1-based positions."""
    size = len(report.items)
    lines = ["=" * 50, "🎉 Bisect complete!"]

    if report.last_good_index is not None:
        lines.append(
            f"✅ Last good item: \"{report.last_good_item}\" "
            f"(position {report.last_good_index + 1}/{size})"
        )
    if report.first_bad_index is not None:
        lines.append(
            f"❌ First bad item: \"{report.first_bad_item}\" "
            f"(position {report.first_bad_index + 1}/{size})"
        )

    boundary = report.boundary
    if boundary.kind is BoundaryKind.PINPOINTED:
        lines.append("🔍 The issue was introduced between:")
        lines.append(
            f"   \"{report.last_good_item}\" (good) and "
            f"\"{report.first_bad_item}\" (bad)"
        )
    else:
        lines.append(f"⚠️  {boundary.summary.capitalize()}")
        for entry in boundary.entries:
            lines.append(
                f"   {entry.index + 1}. \"{entry.item}\" ({entry.status.value})"
            )

    lines.append(
        f"📊 {report.tests_run} test(s) run, "
        f"{len(report.ignored_indices)} item(s) ignored"
    )
    return "\n".join(lines)
