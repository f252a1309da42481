"""
Rollback ledger — ordered compensating actions for a scaffold run.

Every mutation the engine performs (directory creation, file write,
working-directory change, manifest rewrite) registers its inverse here
immediately after it succeeds. On failure the ledger replays those
inverses newest-first, best-effort: a compensating action that raises
is logged and the rest still run.

The ledger is single-use. Once rolled back it is exhausted; further
``rollback()`` calls do nothing, so an already-removed path is never
removed twice.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollbackAction:
    """A zero-argument compensating procedure."""

    undo: Callable[[], object]
    description: str = ""

    def __call__(self) -> None:
        self.undo()


class RollbackLedger:
    """Registration-ordered list of compensating actions.

    Thread-safe: the interrupt handler and the main flow may both
    trigger ``rollback()``; only the first one does any work.
    """

    def __init__(self) -> None:
        self._actions: list[RollbackAction] = []
        self._exhausted = False
        self._rolling_back = False
        self._lock = threading.RLock()

    @property
    def pending(self) -> int:
        """Number of registered, not yet executed actions."""
        return len(self._actions)

    @property
    def exhausted(self) -> bool:
        """Whether ``rollback()`` has already run."""
        return self._exhausted

    @property
    def rolling_back(self) -> bool:
        """Whether ``rollback()`` is executing actions right now."""
        return self._rolling_back

    @property
    def descriptions(self) -> list[str]:
        """Descriptions of pending actions, in registration order."""
        return [a.description for a in self._actions]

    def register(self, undo: Callable[[], object], description: str = "") -> None:
        """Append a compensating action. Does not run anything."""
        with self._lock:
            if self._exhausted:
                logger.warning(
                    "Ledger already rolled back, ignoring late action: %s",
                    description or undo,
                )
                return
            self._actions.append(RollbackAction(undo=undo, description=description))
            logger.debug("Registered rollback #%d: %s", len(self._actions), description)

    def rollback(self) -> None:
        """Run all actions newest-first, once. Never raises."""
        with self._lock:
            if self._exhausted:
                logger.debug("Rollback already performed, skipping")
                return
            self._exhausted = True
            self._rolling_back = True
            actions, self._actions = self._actions, []

        try:
            self._run(actions)
        finally:
            self._rolling_back = False

    def _run(self, actions: list[RollbackAction]) -> None:
        if not actions:
            return

        logger.warning("Rolling back %d action(s)…", len(actions))
        failures = 0
        for action in reversed(actions):
            desc = action.description or repr(action.undo)
            try:
                action()
                logger.info("Rolled back: %s", desc)
            except Exception as e:
                failures += 1
                logger.error("Rollback step failed: %s: %s", desc, e)

        if failures:
            logger.warning("Rollback finished with %d failed step(s)", failures)
        else:
            logger.info("Rollback complete")

    def clear(self) -> None:
        """Forget all actions after a successful run; the ledger stays usable."""
        with self._lock:
            self._actions = []
