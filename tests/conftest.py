"""Pytest configuration and fixtures for itembisect tests."""

import tempfile
from pathlib import Path

import pytest

from itembisect.bisect.oracle import ScriptedOracle
from itembisect.bisect.verdict import Verdict
from itembisect.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only debug logging; nothing is sent to logfire.dev."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "itembisect-tests",
        session_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def monotone_oracle():
    """Build a scripted oracle for a clean sequence: the first ``good``
    items pass, the rest fail, and indices in ``ignored`` are ignored."""
    def build(items, good, ignored=()):
        verdicts = {}
        for i, item in enumerate(items):
            if i in ignored:
                verdicts[item] = Verdict.IGNORE
            elif i < good:
                verdicts[item] = Verdict.PASS
            else:
                verdicts[item] = Verdict.FAIL
        return ScriptedOracle(verdicts)
    return build


@pytest.fixture
def items_file(tmp_path):
    """Write items to a file and return its path."""
    def write(*items, name="items.txt"):
        path = tmp_path / name
        path.write_text("\n".join(items) + "\n")
        return path
    return write
