"""Result types for external command execution."""

from datetime import datetime

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Outcome of running one rendered command for one item."""

    name: str
    command: str
    item: str
    returncode: int
    timestamp: datetime

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def timed_out(self) -> bool:
        return self.returncode == -1
