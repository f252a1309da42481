"""
Dependency manifest models.

A DependencyManifest is the *request*: two ordered, duplicate-free
lists of package references. ResolvedDependencies is the *answer*:
the same references pinned to caret version constraints. There is no
in-between state: resolution is all-or-nothing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DependencyManifest(BaseModel):
    """Package references accumulated from the baseline and selected features."""

    runtime: list[str] = Field(default_factory=list)
    development: list[str] = Field(default_factory=list)

    def add_runtime(self, *packages: str) -> None:
        _extend_unique(self.runtime, packages)

    def add_development(self, *packages: str) -> None:
        _extend_unique(self.development, packages)

    @property
    def all_references(self) -> list[str]:
        """Every reference once, runtime first (a package in both is looked up once)."""
        seen: list[str] = []
        _extend_unique(seen, self.runtime)
        _extend_unique(seen, self.development)
        return seen


class ResolvedDependencies(BaseModel):
    """Resolved version constraints, split back into runtime/development."""

    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_versions(
        cls,
        manifest: DependencyManifest,
        versions: dict[str, str],
    ) -> ResolvedDependencies:
        """Split a flat ``reference → version`` mapping using the manifest's sets."""
        return cls(
            dependencies={ref: f"^{versions[ref]}" for ref in manifest.runtime},
            dev_dependencies={ref: f"^{versions[ref]}" for ref in manifest.development},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }


def _extend_unique(target: list[str], packages) -> None:
    for pkg in packages:
        if pkg not in target:
            target.append(pkg)
