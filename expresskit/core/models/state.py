"""
Pipeline state — the baseline stage order and the final run report.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from expresskit.core.models.config import Configuration


class PipelineState(str, Enum):
    """Lifecycle of a StepPipeline. Finalized and Aborted are terminal."""

    CREATED = "created"
    INITIALIZED = "initialized"
    CONFIG_RESOLVED = "config_resolved"
    DEPENDENCIES_MAPPED = "dependencies_mapped"
    SOURCES_WRITTEN = "sources_written"
    CUSTOM_STEPS_RUN = "custom_steps_run"
    FINALIZED = "finalized"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (PipelineState.FINALIZED, PipelineState.ABORTED)


# Baseline path, in order. Aborted is reachable from anywhere.
BASELINE_ORDER: tuple[PipelineState, ...] = (
    PipelineState.CREATED,
    PipelineState.INITIALIZED,
    PipelineState.CONFIG_RESOLVED,
    PipelineState.DEPENDENCIES_MAPPED,
    PipelineState.SOURCES_WRITTEN,
    PipelineState.CUSTOM_STEPS_RUN,
    PipelineState.FINALIZED,
)


class ScaffoldReport(BaseModel):
    """Outcome of a finalized run."""

    project_name: str
    project_path: str
    package_manager: str
    configuration: Configuration
    manifest: dict[str, Any] = Field(default_factory=dict)
    files_written: list[str] = Field(default_factory=list)
    steps_run: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "project_path": self.project_path,
            "package_manager": self.package_manager,
            "configuration": self.configuration.to_dict(),
            "manifest": self.manifest,
            "files_written": list(self.files_written),
            "steps_run": list(self.steps_run),
            "next_steps": list(self.next_steps),
        }
