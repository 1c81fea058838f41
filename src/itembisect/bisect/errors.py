"""Exceptions raised while setting up or driving a bisection."""


class BisectError(Exception):
    """Base class for itembisect errors."""


class ConfigurationError(BisectError):
    """A required input is missing or unusable."""


class SourceUnavailable(BisectError):
    """The item source could not be read."""

    def __init__(self, source, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to read items from {source}: {reason}")


class EmptySequence(BisectError):
    """The item source held no usable items."""

    def __init__(self, source):
        self.source = source
        super().__init__(f"No items found in {source}")


class OracleAborted(BisectError):
    """The oracle could not produce a verdict (input closed, unknown item)."""
