"""
Interrupt handling — cancellation token and the OS signal adapter.

The pipeline never looks at signals directly. It checks a
CancellationToken at every stage boundary. InterruptGuard is the only
place that knows about SIGINT/SIGTERM: on a real signal it cancels the
token, rolls the ledger back, and raises ExternalInterrupt so the CLI
can exit with ``128 + signum``.

A signal that lands while a rollback is already running only cancels
the token. The rollback runs to completion and whoever started it
raises ExternalInterrupt afterwards.
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import Any

from expresskit.core.engine.ledger import RollbackLedger
from expresskit.core.errors import ExternalInterrupt

logger = logging.getLogger(__name__)

_GUARDED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """One-shot, thread-safe cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""
        self._signum: int | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def signum(self) -> int | None:
        return self._signum

    def cancel(self, reason: str = "cancelled", signum: int | None = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._signum = signum
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise ExternalInterrupt if the token has been cancelled."""
        if self._event.is_set():
            raise ExternalInterrupt(self._reason, signum=self._signum)


class InterruptGuard:
    """Install-once signal handlers that roll back before the process exits."""

    def __init__(
        self,
        ledger: RollbackLedger,
        token: CancellationToken | None = None,
        signals: tuple[int, ...] = _GUARDED_SIGNALS,
    ):
        self._ledger = ledger
        self.token = token or CancellationToken()
        self._signals = signals
        self._previous: dict[int, Any] = {}
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> bool:
        """Register handlers. Repeated calls are no-ops.

        Returns:
            True if handlers are (now) in place, False when running off
            the main thread where Python forbids installing them.
        """
        if self._installed:
            return True
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return False

        for signum in self._signals:
            self._previous[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle)
        self._installed = True
        names = [signal.Signals(s).name for s in self._signals]
        logger.debug("Interrupt guard installed for %s", names)
        return True

    def uninstall(self) -> None:
        """Restore whatever handlers were active before ``install()``."""
        if not self._installed:
            return
        for signum, previous in self._previous.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
        self._installed = False
        logger.debug("Interrupt guard removed")

    def _handle(self, signum: int, frame: Any) -> None:
        name = signal.Signals(signum).name
        self.token.cancel(f"received {name}", signum=signum)
        if self._ledger.rolling_back:
            # Let the running rollback finish; whoever started it raises.
            logger.warning("Received %s during rollback, finishing rollback first", name)
            return
        logger.warning("Received %s, rolling back…", name)
        self._ledger.rollback()
        raise ExternalInterrupt(f"received {name}", signum=signum)
