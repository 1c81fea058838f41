"""Bisection engine tolerating inconclusive (ignored) results.

Plain binary search stalls when the midpoint tells it nothing. Here an
ignored midpoint makes the engine slide right, testing ``mid + 1``,
``mid + 2``, ... up to ``right`` within the same outer step. Only when
every one of those is ignored does the range shrink from the top
(``right = mid - 1``). The range therefore narrows on every outer step,
so an all-ignore sequence still terminates after testing each item once.

The engine knows nothing about commands or prompts. It calls a
``test(item) -> Verdict`` function and blocks until it returns.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from itembisect.bisect.errors import EmptySequence
from itembisect.bisect.report import Report, build_report
from itembisect.bisect.state import BisectStep, SearchState
from itembisect.bisect.verdict import Verdict
from itembisect.core.log import logger

TestFunction = Callable[[str], Verdict]


class BisectEngine:
    """Runs the search loop for one sequence at a time."""

    def __init__(self, test: TestFunction):
        """
        Args:
            test: Classifies one item; may block on subprocesses and
                on human input
        """
        self.test = test

    def run(self, items: Sequence[str]) -> Report:
        """Bisect ``items`` and report the good -> bad boundary.

        Raises:
            EmptySequence: If ``items`` is empty
        """
        if not items:
            raise EmptySequence(getattr(items, "source", None) or "<items>")

        state = SearchState.start(len(items))
        logger.info(f"🎯 Starting bisect with {len(items)} items")

        while state.open:
            mid = (state.left + state.right) // 2
            cursor = mid
            while cursor <= state.right:
                verdict = self._test(items, state, cursor, mid)
                if verdict is Verdict.PASS:
                    state.last_good_index = cursor
                    state.left = cursor + 1
                    break
                if verdict is Verdict.FAIL:
                    state.first_bad_index = cursor
                    state.right = cursor - 1
                    break
                state.ignored_indices.add(cursor)
                cursor += 1
            else:
                logger.info(
                    f"Items {mid + 1}..{state.right + 1} all ignored; "
                    f"dropping them from the range"
                )
                state.right = mid - 1

        report = build_report(items, state)
        logger.info(
            "Bisect finished",
            last_good_index=report.last_good_index,
            first_bad_index=report.first_bad_index,
            boundary=report.boundary.kind.value,
            tests_run=report.tests_run,
        )
        return report

    def _test(
        self,
        items: Sequence[str],
        state: SearchState,
        cursor: int,
        mid: int,
    ) -> Verdict:
        item = items[cursor]
        size = len(items)

        logger.info(f"🔍 Testing item {cursor + 1}/{size}: \"{item}\"")
        where = "middle" if cursor == mid else "next after ignored"
        logger.info(
            f"📍 Range: [{state.left + 1}, {state.right + 1}], "
            f"testing {where} at {cursor + 1}"
        )

        verdict = Verdict(self.test(item))
        state.steps.append(
            BisectStep(
                index=cursor,
                item=item,
                verdict=verdict,
                left=state.left,
                right=state.right,
            )
        )

        if verdict is Verdict.PASS:
            logger.info(f"✅ Item \"{item}\" passed")
        elif verdict is Verdict.FAIL:
            logger.info(f"❌ Item \"{item}\" failed")
        else:
            logger.info(f"⏭️  Item \"{item}\" ignored")
        return verdict


def bisect(items: Sequence[str], test: TestFunction) -> Report:
    """Shortcut for ``BisectEngine(test).run(items)``."""
    return BisectEngine(test).run(items)
