"""
Shell command adapter — run external commands and capture output.

Commands never raise from here: every outcome (success, non-zero
exit, timeout, missing binary) comes back as a CommandResult. Callers
decide which outcomes are errors in their domain.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# How often a cancellable command checks its cancel callback.
_POLL_INTERVAL = 0.1


class CommandResult(BaseModel):
    """Outcome of a single command execution."""

    command: str
    ok: bool
    return_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    duration_ms: int = 0

    @property
    def failure_reason(self) -> str:
        return self.error or self.stderr or f"exited with code {self.return_code}"


class ShellCommand:
    """Execute commands with a timeout, returning CommandResult.

    Commands given as a string are split with ``shlex`` and run without
    a shell; pass ``shell=True`` for pipelines like ``tsc && tsc-alias``.

    With a ``cancelled`` callback the child is polled and killed as soon
    as the callback returns True.
    """

    def __init__(self, timeout: int = 120):
        self.timeout = timeout

    @staticmethod
    def is_available(binary: str) -> bool:
        return shutil.which(binary) is not None

    def run(
        self,
        command: str | list[str],
        cwd: Path | str | None = None,
        timeout: int | None = None,
        shell: bool = False,
        cancelled: Callable[[], bool] | None = None,
    ) -> CommandResult:
        if isinstance(command, str):
            display = command
            args: str | list[str] = command if shell else shlex.split(command)
        else:
            display = shlex.join(command)
            args = command
        timeout = timeout or self.timeout

        logger.debug("Executing: %s (cwd=%s)", display, cwd or ".")
        start = time.monotonic()

        if cancelled is not None:
            return self._run_cancellable(args, display, cwd, timeout, shell, cancelled, start)

        try:
            result = subprocess.run(
                args,
                shell=shell,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=display,
                ok=False,
                error=f"Command timed out after {timeout}s",
            )
        except OSError as e:
            return CommandResult(
                command=display,
                ok=False,
                error=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return CommandResult(
            command=display,
            ok=result.returncode == 0,
            return_code=result.returncode,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
            duration_ms=elapsed_ms,
        )

    def _run_cancellable(
        self,
        args: str | list[str],
        display: str,
        cwd: Path | str | None,
        timeout: int,
        shell: bool,
        cancelled: Callable[[], bool],
        start: float,
    ) -> CommandResult:
        try:
            proc = subprocess.Popen(
                args,
                shell=shell,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            return CommandResult(
                command=display,
                ok=False,
                error=f"Command execution error: {e}",
            )

        while True:
            try:
                stdout, stderr = proc.communicate(timeout=_POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if cancelled():
                    error = "Command cancelled"
                elif time.monotonic() - start >= timeout:
                    error = f"Command timed out after {timeout}s"
                else:
                    continue
                proc.kill()
                proc.communicate()
                logger.debug("%s: %s", error, display)
                return CommandResult(command=display, ok=False, error=error)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return CommandResult(
            command=display,
            ok=proc.returncode == 0,
            return_code=proc.returncode,
            stdout=stdout.strip(),
            stderr=stderr.strip(),
            duration_ms=elapsed_ms,
        )
