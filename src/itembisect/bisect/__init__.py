"""Search engine, report synthesis and per-item collaborators."""

from itembisect.bisect.action import CommandAction, ItemTester, substitute
from itembisect.bisect.engine import BisectEngine, bisect
from itembisect.bisect.errors import (
    BisectError,
    ConfigurationError,
    EmptySequence,
    OracleAborted,
    SourceUnavailable,
)
from itembisect.bisect.items import ItemSequence, load_items
from itembisect.bisect.oracle import ConsoleOracle, Oracle, ScriptedOracle
from itembisect.bisect.report import (
    Boundary,
    BoundaryEntry,
    BoundaryKind,
    EntryStatus,
    Report,
    render_report,
)
from itembisect.bisect.state import BisectStep, SearchState
from itembisect.bisect.verdict import Verdict

__all__ = [
    "BisectEngine",
    "BisectError",
    "BisectStep",
    "Boundary",
    "BoundaryEntry",
    "BoundaryKind",
    "CommandAction",
    "ConfigurationError",
    "ConsoleOracle",
    "EmptySequence",
    "EntryStatus",
    "ItemSequence",
    "ItemTester",
    "Oracle",
    "OracleAborted",
    "Report",
    "ScriptedOracle",
    "SearchState",
    "SourceUnavailable",
    "Verdict",
    "bisect",
    "load_items",
    "render_report",
    "substitute",
]
