"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from expresskit.core.config.questions import Question
from expresskit.core.engine.pipeline import StepPipeline
from expresskit.core.errors import VersionLookupError
from expresskit.core.models.config import StaticConfig
from expresskit.core.services.package_manager import PackageManager


class FakeLookup:
    """Version lookup double: fixed versions, optional failures, call log."""

    def __init__(self, versions: dict[str, str] | None = None, fail: Sequence[str] = ()):
        self.versions = versions or {}
        self.fail = set(fail)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, package: str) -> str:
        with self._lock:
            self.calls.append(package)
        if package in self.fail:
            raise VersionLookupError(package, "registry unavailable")
        return self.versions.get(package, "1.0.0")


class ScriptedProvider:
    """Question provider double that replays canned answer mappings."""

    def __init__(self, *responses: Mapping[str, Any] | None):
        self.responses = list(responses)
        self.asked: list[list[str]] = []

    def ask(self, questions: Sequence[Question]) -> Mapping[str, Any] | None:
        self.asked.append([q.name for q in questions])
        if not self.responses:
            return None
        return self.responses.pop(0)


@pytest.fixture
def fake_lookup() -> FakeLookup:
    return FakeLookup()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from inside tmp_path; the original cwd is restored afterwards."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_pipeline(workdir: Path, fake_lookup: FakeLookup):
    """Factory for pipelines rooted at tmp_path with no signal handlers."""

    def _make(name: str | None = "demo", **kwargs: Any) -> StepPipeline:
        kwargs.setdefault("source", StaticConfig({}))
        kwargs.setdefault("lookup", fake_lookup)
        kwargs.setdefault("base_dir", workdir)
        kwargs.setdefault("package_manager", PackageManager.NPM)
        kwargs.setdefault("handle_signals", False)
        return StepPipeline(name, **kwargs)

    return _make
