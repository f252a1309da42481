"""
Domain models — Pydantic types for the scaffold engine.

All models are re-exported here for convenient access:

    from expresskit.core.models import Configuration, Feature, PipelineState
"""

from expresskit.core.models.config import (
    FEATURE_LABELS,
    ConfigSource,
    Configuration,
    Feature,
    Language,
    OverrideQuestions,
    StaticConfig,
    UseDefaultQuestions,
)
from expresskit.core.models.manifest import DependencyManifest, ResolvedDependencies
from expresskit.core.models.state import BASELINE_ORDER, PipelineState, ScaffoldReport
from expresskit.core.models.template import GeneratedFile

__all__ = [
    # config.py
    "FEATURE_LABELS",
    "ConfigSource",
    "Configuration",
    "Feature",
    "Language",
    "OverrideQuestions",
    "StaticConfig",
    "UseDefaultQuestions",
    # manifest.py
    "DependencyManifest",
    "ResolvedDependencies",
    # state.py
    "BASELINE_ORDER",
    "PipelineState",
    "ScaffoldReport",
    # template.py
    "GeneratedFile",
]
