"""
Filesystem adapter — ledger-aware directory and file operations.

Every successful mutation registers its inverse with the rollback
ledger before returning:

    mkdir  → remove the directory (only if this call created it)
    write  → delete the file, or restore the previous bytes when the
             file already existed

Nothing is registered for paths the adapter did not touch, so a
rollback never removes content that was there before the run.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from expresskit.core.engine.ledger import RollbackLedger

logger = logging.getLogger(__name__)


def remove_path(path: Path) -> None:
    """Remove a file or directory tree; a missing path is not an error."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
    else:
        logger.debug("Already gone: %s", path)


class ProjectFilesystem:
    """File and directory operations rooted at the project directory."""

    def __init__(self, root: Path, ledger: RollbackLedger):
        self.root = root
        self._ledger = ledger
        self.created: list[str] = []

    def _resolve(self, rel_path: str | Path) -> Path:
        target = Path(rel_path)
        if not target.is_absolute():
            target = self.root / target
        return target

    def _display(self, target: Path) -> str:
        try:
            return target.relative_to(self.root).as_posix()
        except ValueError:
            return str(target)

    def mkdir(self, rel_path: str | Path) -> Path:
        """Create a directory (parents must exist) and register its removal."""
        target = self._resolve(rel_path)
        if target.is_dir():
            logger.debug("Directory exists, leaving it alone: %s", target)
            return target

        target.mkdir()
        self._ledger.register(lambda: remove_path(target), f"remove directory {target}")
        self.created.append(self._display(target) + "/")
        logger.info("Created %s/", self._display(target))
        return target

    def write(self, rel_path: str | Path, content: str) -> Path:
        """Write a text file and register its removal (or restoration)."""
        target = self._resolve(rel_path)
        previous: bytes | None = target.read_bytes() if target.is_file() else None

        target.write_text(content, encoding="utf-8")

        if previous is None:
            self._ledger.register(lambda: remove_path(target), f"remove file {target}")
            self.created.append(self._display(target))
        else:
            self._ledger.register(
                lambda: target.write_bytes(previous),
                f"restore previous {target}",
            )
        logger.info("Wrote %s (%d bytes)", self._display(target), len(content))
        return target


class WorkingDirectory:
    """Process-wide working-directory change with ledger-backed restore."""

    def __init__(self, ledger: RollbackLedger):
        self._ledger = ledger

    def change(self, target: Path) -> Path:
        """``chdir`` into ``target``; rollback returns to the previous cwd."""
        previous = Path.cwd()
        os.chdir(target)
        self._ledger.register(lambda: os.chdir(previous), f"restore working directory {previous}")
        logger.debug("Working directory: %s → %s", previous, target)
        return previous
