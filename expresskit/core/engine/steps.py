"""
Custom steps — caller-supplied work queued after the baseline stages.

A step is any callable taking a StepContext. Steps that mutate the
project should go through ``ctx.filesystem`` (or register their own
inverse on ``ctx.ledger``) so a later failure can undo them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from expresskit.adapters.shell.command import ShellCommand
from expresskit.adapters.shell.filesystem import ProjectFilesystem
from expresskit.core.engine.ledger import RollbackLedger
from expresskit.core.errors import CommandError
from expresskit.core.models.config import Configuration
from expresskit.core.services.package_manager import PackageManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepContext:
    """What a custom step can see and use."""

    project_name: str
    project_path: Path
    config: Configuration
    ledger: RollbackLedger
    filesystem: ProjectFilesystem


@dataclass(frozen=True)
class PendingStep:
    """A queued custom step.

    Attributes:
        run:          The procedure; receives the StepContext.
        description:  Human-readable label for logs and the report.
        installs:     True if the step installs the project's dependencies
                      (the "install" next-step hint is then dropped).
    """

    run: Callable[[StepContext], object]
    description: str = ""
    installs: bool = False

    @property
    def label(self) -> str:
        return self.description or getattr(self.run, "__name__", "custom step")


def install_step(
    package_manager: PackageManager,
    shell: ShellCommand | None = None,
    timeout: int = 600,
) -> PendingStep:
    """Build a step that runs the package manager's install command."""
    runner = shell or ShellCommand()
    command = package_manager.install_command

    def _install(ctx: StepContext) -> None:
        logger.info("Installing dependencies with '%s'…", command)
        result = runner.run(command, cwd=ctx.project_path, timeout=timeout)
        if not result.ok:
            raise CommandError(command, result.failure_reason)

    return PendingStep(run=_install, description=f"install dependencies ({command})", installs=True)
