"""CLI command modules for itembisect."""

from itembisect.command.run import RunCommand

__all__ = ["RunCommand"]
