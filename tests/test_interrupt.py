"""
Tests for cancellation tokens and the signal-backed interrupt guard.
"""

from __future__ import annotations

import signal
import threading

import pytest

from expresskit.core.engine.executor import SafeExecutor
from expresskit.core.engine.interrupt import CancellationToken, InterruptGuard
from expresskit.core.engine.ledger import RollbackLedger
from expresskit.core.errors import ExternalInterrupt


class TestCancellationToken:
    def test_initially_not_cancelled(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()  # no error

    def test_cancel_then_raise(self):
        token = CancellationToken()
        token.cancel("user pressed stop")
        assert token.cancelled
        with pytest.raises(ExternalInterrupt, match="user pressed stop") as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.exit_code == 130

    def test_first_reason_wins(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_signal_exit_code(self):
        token = CancellationToken()
        token.cancel("term", signum=signal.SIGTERM)
        with pytest.raises(ExternalInterrupt) as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.exit_code == 128 + signal.SIGTERM


class TestInterruptGuard:
    def test_install_is_idempotent(self):
        ledger = RollbackLedger()
        guard = InterruptGuard(ledger)
        before = signal.getsignal(signal.SIGTERM)
        try:
            assert guard.install()
            handler = signal.getsignal(signal.SIGTERM)
            assert guard.install()
            assert signal.getsignal(signal.SIGTERM) == handler
        finally:
            guard.uninstall()
        assert signal.getsignal(signal.SIGTERM) == before

    def test_signal_rolls_back_and_raises(self):
        ledger = RollbackLedger()
        calls: list[str] = []
        ledger.register(lambda: calls.append("first"))
        ledger.register(lambda: calls.append("second"))
        guard = InterruptGuard(ledger)
        guard.install()
        try:
            with pytest.raises(ExternalInterrupt) as exc_info:
                signal.raise_signal(signal.SIGTERM)
        finally:
            guard.uninstall()

        assert calls == ["second", "first"]
        assert ledger.exhausted
        assert guard.token.cancelled
        assert exc_info.value.exit_code == 128 + signal.SIGTERM

    def test_not_installed_off_main_thread(self):
        guard = InterruptGuard(RollbackLedger())
        results: list[bool] = []
        worker = threading.Thread(target=lambda: results.append(guard.install()))
        worker.start()
        worker.join()
        assert results == [False]
        assert not guard.installed

    def test_uninstall_without_install(self):
        guard = InterruptGuard(RollbackLedger())
        guard.uninstall()
        assert not guard.installed


class TestSignalDuringRollback:
    """A signal landing mid-rollback must not cut a compensating action short."""

    def test_failed_operation_then_signal_in_cleanup(self):
        ledger = RollbackLedger()
        calls: list[str] = []

        def slow_cleanup():
            signal.raise_signal(signal.SIGINT)
            calls.append("cleanup")

        ledger.register(lambda: calls.append("remove project"), "remove project")
        ledger.register(slow_cleanup, "slow cleanup")
        guard = InterruptGuard(ledger)
        executor = SafeExecutor(ledger, guard=guard)

        def fail():
            raise RuntimeError("write failed")

        try:
            with pytest.raises(ExternalInterrupt) as exc_info:
                executor.safe(fail)
        finally:
            guard.uninstall()

        assert calls == ["cleanup", "remove project"]
        assert exc_info.value.exit_code == 128 + signal.SIGINT
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_second_signal_while_handler_rolls_back(self):
        ledger = RollbackLedger()
        calls: list[str] = []

        def cleanup_hit_by_ctrl_c():
            signal.raise_signal(signal.SIGINT)
            calls.append("cleanup")

        ledger.register(lambda: calls.append("remove project"))
        ledger.register(cleanup_hit_by_ctrl_c)
        guard = InterruptGuard(ledger)
        guard.install()
        try:
            with pytest.raises(ExternalInterrupt) as exc_info:
                signal.raise_signal(signal.SIGTERM)
        finally:
            guard.uninstall()

        assert calls == ["cleanup", "remove project"]
        assert exc_info.value.exit_code == 128 + signal.SIGTERM
        assert not ledger.rolling_back

    def test_rollback_without_signal_keeps_original_error(self):
        ledger = RollbackLedger()
        guard = InterruptGuard(ledger)
        executor = SafeExecutor(ledger, guard=guard)
        error = ValueError("bad")

        def fail():
            raise error

        try:
            with pytest.raises(ValueError) as exc_info:
                executor.safe(fail)
        finally:
            guard.uninstall()
        assert exc_info.value is error
