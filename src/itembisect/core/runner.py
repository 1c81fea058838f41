"""Command execution on top of invoke."""

import contextlib
import os
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from itembisect.core.log import logger


class Runner(Context):
    """invoke.Context with an execute() entry point that never raises
    on a non-zero exit unless asked to.
    """

    def kill(self) -> None:
        """Kill the running subprocess.

        invoke's kill() sends signal.SIGKILL, which the signal module
        does not define on Windows. os.kill() there accepts a plain
        integer and hands it to TerminateProcess(), so send 9 directly.
        POSIX platforms use invoke's implementation unchanged.
        """
        import platform

        if platform.system() == "Windows":
            pid = self.pid if self.using_pty else self.process.pid
            with contextlib.suppress(ProcessLookupError):
                os.kill(pid, 9)
            return

        super().kill()

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        hide: bool = True,
        check: bool = True,
    ) -> Result:
        """Execute a shell command.

        Args:
            command: Command string to execute
            cwd: Working directory for command execution
            timeout: Maximum execution time in seconds
            hide: Capture output instead of echoing it to the terminal
            check: If True, raise on non-zero exit code

        Returns:
            invoke.Result; ``exited`` is -1 when the command timed out

        Raises:
            invoke.UnexpectedExit: If check=True and command
                returns non-zero
        """
        kwargs = {
            "hide": hide,
            "warn": not check,
            # stdin belongs to the verdict prompt, not the command
            "in_stream": False,
        }

        if timeout:
            kwargs["timeout"] = timeout

        logger.spew("Spawning command", command=command, cwd=str(cwd or ""))

        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(command, **kwargs)
            else:
                result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1

        return result
