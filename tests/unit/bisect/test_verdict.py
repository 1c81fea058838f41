"""Tests for verdict parsing."""

import pytest

from itembisect.bisect.verdict import Verdict


@pytest.mark.parametrize("answer,expected", [
    ("p", Verdict.PASS),
    ("PASS", Verdict.PASS),
    ("  good ", Verdict.PASS),
    ("y", Verdict.PASS),
    ("f", Verdict.FAIL),
    ("Bad", Verdict.FAIL),
    ("no", Verdict.FAIL),
    ("i", Verdict.IGNORE),
    ("skip", Verdict.IGNORE),
    ("S", Verdict.IGNORE),
])
def test_synonyms(answer, expected):
    assert Verdict.parse(answer) is expected


@pytest.mark.parametrize("answer", ["", "maybe", "pf", "passed?"])
def test_unrecognised_answers(answer):
    assert Verdict.parse(answer) is None


def test_ignore_rejected_in_binary_mode():
    assert Verdict.parse("skip", allow_ignore=False) is None
    assert Verdict.parse("pass", allow_ignore=False) is Verdict.PASS


def test_values_round_trip_through_constructor():
    assert Verdict("fail") is Verdict.FAIL
