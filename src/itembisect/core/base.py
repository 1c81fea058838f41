"""Base classes for configuration and state models.

Everything that owns a resource (a log file, a span processor) hangs
off a pydantic model tree rooted at State. Closing the root walks the
tree and closes each child that knows how.

Kept apart from config.py so that log.py can import it without a
circular dependency.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything with a close() method."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable fields on close().

    Also a context manager, so a whole configuration tree can be
    released with a single ``with`` block:

        State -> Config -> Logger -> Sink
    """

    def close(self):
        """Close every Closeable field, reporting failures to stderr.

        One failing child does not stop the others from closing.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: Error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections (YAML/env/CLI)."""
    pass


class BaseState(BaseCloseable):
    """Marker base for runtime sections mutated while a run is active."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
