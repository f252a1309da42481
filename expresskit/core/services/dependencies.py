"""
Dependency mapping and resolution.

Two steps:

    map_features(config)      → DependencyManifest (which packages)
    DependencyResolver.resolve → ResolvedDependencies (which versions)

Resolution fans out one lookup per package on a thread pool and joins
the results. It is all-or-nothing: if any lookup fails the whole call
raises DependencyResolutionError and no versions are returned, not
even the ones that succeeded. Given a CancellationToken, resolution
stops early and raises ExternalInterrupt once the token is cancelled.
"""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from expresskit.core.errors import DependencyResolutionError
from expresskit.core.models.config import Configuration, Feature, Language
from expresskit.core.models.manifest import DependencyManifest, ResolvedDependencies

if TYPE_CHECKING:
    from expresskit.core.engine.interrupt import CancellationToken

logger = logging.getLogger(__name__)

VersionLookup = Callable[[str], str]

# How often a token-aware join checks for cancellation.
_POLL_INTERVAL = 0.1

# ── Package sets ────────────────────────────────────────────────

BASELINE_RUNTIME = ("express", "cors", "body-parser", "dotenv")
BASELINE_DEVELOPMENT: tuple[str, ...] = ()

_FEATURE_RUNTIME: dict[Feature, tuple[str, ...]] = {
    Feature.ZOD: ("zod",),
}

_FEATURE_DEVELOPMENT: dict[Feature, tuple[str, ...]] = {
    Feature.ESLINT: (
        "eslint",
        "prettier",
        "@typescript-eslint/parser",
        "@typescript-eslint/eslint-plugin",
    ),
    Feature.JEST: ("jest", "@types/jest", "ts-jest"),
}

_TYPED_DEVELOPMENT = (
    "typescript",
    "@types/express",
    "@types/cors",
    "@types/body-parser",
    "tsc-alias",
)


def map_features(config: Configuration) -> DependencyManifest:
    """Build the package reference lists for a configuration.

    Order is stable: baseline first, then features in declaration
    order, then type tooling. Duplicates are dropped.
    """
    manifest = DependencyManifest()
    manifest.add_runtime(*BASELINE_RUNTIME)
    manifest.add_development(*BASELINE_DEVELOPMENT)

    for feature in Feature:
        if not config.has(feature):
            continue
        manifest.add_runtime(*_FEATURE_RUNTIME.get(feature, ()))
        manifest.add_development(*_FEATURE_DEVELOPMENT.get(feature, ()))

    if config.language is Language.TYPESCRIPT:
        manifest.add_development(*_TYPED_DEVELOPMENT)

    logger.debug(
        "Mapped %d runtime / %d dev references",
        len(manifest.runtime),
        len(manifest.development),
    )
    return manifest


class DependencyResolver:
    """Resolve the latest version of every referenced package, concurrently."""

    def __init__(self, lookup: VersionLookup):
        self._lookup = lookup

    def resolve(
        self,
        manifest: DependencyManifest,
        token: CancellationToken | None = None,
    ) -> ResolvedDependencies:
        """Look up every reference; all succeed or the call raises.

        With a ``token`` the join polls it; once cancelled, queued lookups
        are dropped and the call returns without waiting for running ones.

        Raises:
            DependencyResolutionError: At least one lookup failed. The
                first failure is chained as ``__cause__``.
            ExternalInterrupt: ``token`` was cancelled before all
                lookups finished.
        """
        refs = manifest.all_references
        if not refs:
            return ResolvedDependencies()

        logger.info("Resolving %d package version(s)…", len(refs))
        versions: dict[str, str] = {}
        failures: dict[str, str] = {}
        first_error: BaseException | None = None
        poll = _POLL_INTERVAL if token is not None else None
        cancelled = False

        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=len(refs),
            thread_name_prefix="version-lookup",
        )
        futures = {pool.submit(self._lookup, ref): ref for ref in refs}
        pending = set(futures)
        try:
            while pending and not failures:
                if token is not None and token.cancelled:
                    cancelled = True
                    break
                done, pending = concurrent.futures.wait(
                    pending, timeout=poll, return_when=concurrent.futures.FIRST_COMPLETED
                )
                for future in done:
                    ref = futures[future]
                    try:
                        versions[ref] = future.result()
                    except Exception as e:
                        failures[ref] = str(e)
                        first_error = e
                        break
        finally:
            # Queued lookups never start; running ones are joined unless cancelled.
            pool.shutdown(wait=not cancelled, cancel_futures=True)

        if token is not None:
            token.raise_if_cancelled()

        if failures:
            logger.error("Version lookup failed: %s", failures)
            raise DependencyResolutionError(failures) from first_error

        logger.info("Resolved %d package version(s)", len(versions))
        return ResolvedDependencies.from_versions(manifest, versions)

    def resolve_async(
        self,
        manifest: DependencyManifest,
        token: CancellationToken | None = None,
    ) -> concurrent.futures.Future[ResolvedDependencies]:
        """Start ``resolve`` in the background and return its future."""
        runner = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="dependency-resolver",
        )
        try:
            return runner.submit(self.resolve, manifest, token)
        finally:
            runner.shutdown(wait=False)
