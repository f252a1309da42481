"""
Safe executor — run a mutating operation, roll back on failure.

    executor.safe(create_dirs, config)

On success the operation's result is returned. On failure the ledger
is rolled back and the original exception is re-raised unchanged, so
the caller sees exactly what went wrong while the filesystem is
already cleaned up. If a termination signal arrived during that
rollback, ExternalInterrupt is raised instead, chained to the original.

Operations may also be asynchronous in the thread-pool sense: if an
operation returns a ``concurrent.futures.Future`` the executor waits
for it inside the guarded region.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

from expresskit.core.engine.interrupt import InterruptGuard
from expresskit.core.engine.ledger import RollbackLedger
from expresskit.core.errors import ExternalInterrupt

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SafeExecutor:
    """Wraps operations so any failure triggers a full ledger rollback."""

    def __init__(
        self,
        ledger: RollbackLedger,
        guard: InterruptGuard | None = None,
        install_guard: bool = True,
    ):
        self.ledger = ledger
        self.guard = guard or InterruptGuard(ledger)
        self._install_guard = install_guard
        self._guard_attempted = False

    def _ensure_guard(self) -> None:
        # Once per executor lifetime, however many operations run.
        if self._guard_attempted or not self._install_guard:
            return
        self._guard_attempted = True
        self.guard.install()

    def safe(self, operation: Callable[..., T | Future], *args: Any, **kwargs: Any) -> T:
        """Execute ``operation``; on failure roll back and re-raise."""
        self._ensure_guard()
        name = getattr(operation, "__name__", repr(operation))
        try:
            result = operation(*args, **kwargs)
            if isinstance(result, Future):
                result = result.result()
            return result
        except (Exception, KeyboardInterrupt) as e:
            logger.error("Operation '%s' failed: %s", name, e)
            self.ledger.rollback()
            token = self.guard.token
            if token.cancelled and not isinstance(e, ExternalInterrupt):
                # A signal arrived while rolling back; it decides the exit status.
                raise ExternalInterrupt(token.reason, signum=token.signum) from e
            raise
