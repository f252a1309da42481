"""
Scaffold configuration — the immutable answer to "what are we building?".

The Configuration is resolved exactly once per run by the ConfigResolver
and read (never mutated) by every later stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Language(str, Enum):
    """Target language variant of the generated project."""

    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"

    @property
    def extension(self) -> str:
        return ".ts" if self is Language.TYPESCRIPT else ".js"

    @property
    def is_typed(self) -> bool:
        return self is Language.TYPESCRIPT


class Feature(str, Enum):
    """Optional capability bundle selected by the caller."""

    ESLINT = "eslint"   # lint tooling (ESLint + Prettier)
    ZOD = "zod"         # schema validation
    JEST = "jest"       # test framework


FEATURE_LABELS: dict[Feature, str] = {
    Feature.ESLINT: "ESLint + Prettier",
    Feature.ZOD: "Zod",
    Feature.JEST: "Jest",
}


class Configuration(BaseModel):
    """Fully resolved scaffold configuration."""

    model_config = ConfigDict(frozen=True)

    language: Language
    features: frozenset[Feature] = frozenset()

    @field_validator("features", mode="before")
    @classmethod
    def _coerce_features(cls, value: Any) -> Any:
        # Prompts and YAML hand us lists; a single string means one feature.
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value])
        return value

    def has(self, feature: Feature) -> bool:
        return feature in self.features

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language.value,
            "features": sorted(f.value for f in self.features),
        }


# ── Config sources (tagged variant) ─────────────────────────────────


@dataclass(frozen=True)
class UseDefaultQuestions:
    """Collect the configuration interactively with the built-in questions."""


@dataclass(frozen=True)
class OverrideQuestions:
    """Collect the configuration interactively with caller-supplied questions."""

    questions: tuple = ()


@dataclass(frozen=True)
class StaticConfig:
    """Skip prompting; merge these explicit values over the declared defaults."""

    values: dict[str, Any] = field(default_factory=dict)


ConfigSource = UseDefaultQuestions | OverrideQuestions | StaticConfig
