"""Tests for the bisection search loop."""

import math
import random

import pytest

from itembisect.bisect.engine import BisectEngine, bisect
from itembisect.bisect.errors import EmptySequence
from itembisect.bisect.items import ItemSequence
from itembisect.bisect.oracle import ScriptedOracle
from itembisect.bisect.report import BoundaryKind
from itembisect.bisect.verdict import Verdict


def names(prefix, count):
    return [f"{prefix}{i}" for i in range(1, count + 1)]


def test_pinpoints_adjacent_pair(monotone_oracle):
    """Four items, two good: tests the middle, then the next middle."""
    items = names("c", 4)
    oracle = monotone_oracle(items, good=2)

    report = BisectEngine(oracle).run(items)

    assert oracle.asked == ["c2", "c3"]
    assert report.last_good_index == 1
    assert report.first_bad_index == 2
    assert report.last_good_item == "c2"
    assert report.first_bad_item == "c3"
    assert report.gap == 1
    assert report.boundary.kind is BoundaryKind.PINPOINTED
    assert report.boundary.entries == ()


def test_fail_then_pass_on_three_items(monotone_oracle):
    """Middle fails, then the first passes and the range closes."""
    items = ["v1", "v2", "v3"]
    oracle = monotone_oracle(items, good=1)

    report = bisect(items, oracle)

    assert oracle.asked == ["v2", "v1"]
    assert report.last_good_index == 0
    assert report.first_bad_index == 1
    assert report.gap == 1


def test_ignored_midpoint_slides_right_before_narrowing(monotone_oracle):
    """An ignored midpoint is followed by its right neighbour within
    the same outer step, before the range changes."""
    items = names("x", 8)
    oracle = monotone_oracle(items, good=5, ignored={3})

    report = BisectEngine(oracle).run(items)

    first, second = report.steps[0], report.steps[1]
    assert (first.index, first.verdict) == (3, Verdict.IGNORE)
    assert (second.index, second.verdict) == (4, Verdict.PASS)
    assert (first.left, first.right) == (second.left, second.right) == (0, 7)

    assert oracle.asked == ["x4", "x5", "x7", "x6"]
    assert report.last_good_index == 4
    assert report.first_bad_index == 5
    assert report.ignored_indices == (3,)


def test_all_ignored_tests_every_item_once():
    """Eight ignored items: terminates with nothing known."""
    items = names("i", 8)
    oracle = ScriptedOracle(lambda item: Verdict.IGNORE)

    report = BisectEngine(oracle).run(items)

    assert sorted(oracle.asked) == sorted(items)
    assert len(oracle.asked) == len(set(oracle.asked)) == 8
    assert report.last_good_index is None
    assert report.first_bad_index is None
    assert report.ignored_indices == tuple(range(8))
    assert report.boundary.kind is BoundaryKind.INCONCLUSIVE
    assert len(report.boundary.entries) == 8


def test_all_ignored_order_shrinks_range_from_the_top():
    """Exhausting mid..right drops that block and restarts lower."""
    items = names("i", 8)
    oracle = ScriptedOracle(lambda item: Verdict.IGNORE)

    report = BisectEngine(oracle).run(items)

    assert [s.index for s in report.steps] == [3, 4, 5, 6, 7, 1, 2, 0]


@pytest.mark.parametrize("verdict,good,bad", [
    (Verdict.PASS, 0, None),
    (Verdict.FAIL, None, 0),
    (Verdict.IGNORE, None, None),
])
def test_single_item(verdict, good, bad):
    """One test decides a single-item sequence."""
    oracle = ScriptedOracle({"only": verdict})

    report = BisectEngine(oracle).run(["only"])

    assert oracle.asked == ["only"]
    assert report.last_good_index == good
    assert report.first_bad_index == bad


def test_empty_sequence_rejected():
    with pytest.raises(EmptySequence):
        BisectEngine(ScriptedOracle({})).run(ItemSequence([], source="x"))


@pytest.mark.parametrize("size", range(1, 34))
def test_clean_sequences_take_logarithmic_tests(size, monotone_oracle):
    """Every boundary position is found within ceil(log2 N) + 1 tests."""
    items = names("r", size)
    limit = math.ceil(math.log2(size)) + 1

    for good in range(size + 1):
        oracle = monotone_oracle(items, good=good)
        report = BisectEngine(oracle).run(items)

        assert report.tests_run <= limit
        assert report.last_good_index == (good - 1 if good else None)
        assert report.first_bad_index == (good if good < size else None)
        if 0 < good < size:
            assert report.last_good_index + 1 == report.first_bad_index


@pytest.mark.parametrize("seed", range(25))
def test_range_never_widens(seed, monotone_oracle):
    """Outer range sizes are non-increasing, and every tested index
    lies inside the range it was tested in."""
    rng = random.Random(seed)
    size = rng.randint(1, 40)
    items = names("s", size)
    ignored = {i for i in range(size) if rng.random() < 0.35}
    oracle = monotone_oracle(items, good=rng.randint(0, size),
                             ignored=ignored)

    report = BisectEngine(oracle).run(items)

    widths = [step.right - step.left for step in report.steps]
    assert widths == sorted(widths, reverse=True)
    for step in report.steps:
        assert step.left <= step.index <= step.right
    if report.gap is not None:
        assert report.gap >= 1


def test_identical_answers_give_identical_reports(monotone_oracle):
    items = names("d", 13)

    first = BisectEngine(monotone_oracle(items, 6, {5, 6})).run(items)
    second = BisectEngine(monotone_oracle(items, 6, {5, 6})).run(items)

    assert first == second


def test_accepts_verdict_strings():
    """Test functions may return the plain verdict values."""
    report = BisectEngine(
        lambda item: "pass" if item < "c" else "fail"
    ).run(["a", "b", "c", "d"])

    assert report.last_good_item == "b"
    assert report.first_bad_item == "c"
