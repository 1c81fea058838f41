"""Ordered item sequences and the loader that reads them from a file."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from itembisect.bisect.errors import EmptySequence, SourceUnavailable
from itembisect.core.log import logger


class ItemSequence(Sequence):
    """Immutable, 0-indexed list of opaque item identifiers.

    Items carry no meaning beyond their position: the caller arranges
    them so that good items precede bad ones.
    """

    def __init__(self, items: Iterable[str], source: str | None = None):
        self._items = tuple(items)
        self.source = source

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, ItemSequence):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"ItemSequence({list(self._items)!r})"

    @classmethod
    def from_text(cls, text: str, source: str | None = None) -> ItemSequence:
        """Split text into items, one per line, dropping blank lines."""
        return cls(
            (line.rstrip("\r") for line in text.split("\n")
             if line.strip()),
            source=source,
        )


def load_items(path: Path | str) -> ItemSequence:
    """Read an item sequence from a text file.

    Raises:
        SourceUnavailable: The file cannot be read or decoded
        EmptySequence: The file holds only blank lines
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e

    items = ItemSequence.from_text(text, source=str(path))
    if not items:
        raise EmptySequence(path)

    logger.debug("Loaded items", source=str(path), count=len(items))
    return items
