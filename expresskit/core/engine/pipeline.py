"""
Step pipeline — the staged, rollback-safe scaffold run.

Baseline stages, each allowed only from its predecessor state:

    Created ──initialize──▶ Initialized
            ──resolve_config──▶ ConfigResolved
            ──map_dependencies──▶ DependenciesMapped
            ──write_sources──▶ SourcesWritten
            ──run_custom_steps──▶ CustomStepsRun
            ──finalize──▶ Finalized

Every stage body runs inside ``SafeExecutor.safe``, and every mutation
registers its inverse on the ledger as it happens. A failure anywhere
rolls back the whole run and leaves the pipeline in Aborted. Calling a
stage out of order raises SequenceError before anything is touched.

The ledger and executor are collaborators, not base classes; pass your
own to observe or share them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from expresskit.adapters.shell.filesystem import ProjectFilesystem, WorkingDirectory, remove_path
from expresskit.core.config.questions import (
    DEFAULT_PROJECT_NAME,
    PROJECT_NAME_QUESTION,
    overwrite_question,
)
from expresskit.core.config.resolver import ConfigResolver, QuestionProvider
from expresskit.core.engine.executor import SafeExecutor
from expresskit.core.engine.interrupt import CancellationToken, InterruptGuard
from expresskit.core.engine.ledger import RollbackLedger
from expresskit.core.engine.steps import PendingStep, StepContext
from expresskit.core.errors import (
    ConfigError,
    ConfigIncomplete,
    ExternalInterrupt,
    SequenceError,
    UserAbort,
)
from expresskit.core.models.config import ConfigSource, Configuration
from expresskit.core.models.manifest import DependencyManifest, ResolvedDependencies
from expresskit.core.models.state import PipelineState, ScaffoldReport
from expresskit.core.services import manifest as pkg_manifest
from expresskit.core.services.dependencies import DependencyResolver, VersionLookup, map_features
from expresskit.core.services.generators import express
from expresskit.core.services.package_manager import PackageManager, detect_package_manager

logger = logging.getLogger(__name__)

T = TypeVar("T")

S = PipelineState


class StepPipeline:
    """Scaffold an Express project, undoing everything on failure."""

    def __init__(
        self,
        project_name: str | None = None,
        *,
        source: ConfigSource | None = None,
        provider: QuestionProvider | None = None,
        lookup: VersionLookup | None = None,
        base_dir: Path | None = None,
        package_manager: PackageManager | None = None,
        overwrite: bool | None = None,
        ledger: RollbackLedger | None = None,
        executor: SafeExecutor | None = None,
        token: CancellationToken | None = None,
        handle_signals: bool = True,
    ):
        if lookup is None:
            from expresskit.adapters.languages.node import NpmVersionLookup

            lookup = NpmVersionLookup(cancelled=lambda: self.token.cancelled)

        self.project_name = project_name
        self.base_dir = base_dir
        self.package_manager = package_manager or detect_package_manager()
        self.overwrite = overwrite
        self.provider = provider

        self.ledger = ledger or (executor.ledger if executor else RollbackLedger())
        self.token = token or CancellationToken()
        self.executor = executor or SafeExecutor(
            self.ledger,
            guard=InterruptGuard(self.ledger, self.token),
            install_guard=handle_signals,
        )
        if token is not None:
            self.executor.guard.token = token
        self.resolver = ConfigResolver(source, provider)
        self.dependencies = DependencyResolver(lookup)

        self.state = PipelineState.CREATED
        self.history: list[PipelineState] = [self.state]
        self.project_path: Path | None = None
        self.filesystem: ProjectFilesystem | None = None
        self.config: Configuration | None = None
        self.dependency_manifest: DependencyManifest | None = None
        self.resolved: ResolvedDependencies | None = None
        self.document: dict[str, Any] = {}
        self._steps: list[PendingStep] = []
        self._steps_run: list[PendingStep] = []

    # ── Custom steps ────────────────────────────────────────────

    def add_step(
        self,
        step: PendingStep | Callable[[StepContext], object],
        description: str = "",
    ) -> StepPipeline:
        """Queue a custom step to run after the baseline stages."""
        if self.state in (S.CUSTOM_STEPS_RUN, S.FINALIZED, S.ABORTED):
            raise SequenceError(f"Cannot queue steps once the pipeline is {self.state.value}")
        if not isinstance(step, PendingStep):
            step = PendingStep(run=step, description=description)
        self._steps.append(step)
        logger.debug("Queued custom step #%d: %s", len(self._steps), step.label)
        return self

    @property
    def pending_steps(self) -> list[PendingStep]:
        return list(self._steps)

    # ── Stage plumbing ──────────────────────────────────────────

    def _require(self, expected: PipelineState, stage: str) -> None:
        if self.state is not expected:
            raise SequenceError(
                f"Cannot run '{stage}': pipeline is {self.state.value}, "
                f"expected {expected.value}"
            )

    def _guarded(self, operation: Callable[..., T], *args: Any) -> T:
        """Run ``operation`` under the safe executor, aborting on failure."""

        def checked() -> T:
            self.token.raise_if_cancelled()
            return operation(*args)

        checked.__name__ = getattr(operation, "__name__", "operation")
        try:
            return self.executor.safe(checked)
        except BaseException:
            self._abort()
            raise

    def _advance(self, target: PipelineState) -> None:
        logger.info("Pipeline: %s → %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def _abort(self) -> None:
        logger.error("Pipeline aborted in state %s", self.state.value)
        self.state = S.ABORTED
        self.history.append(S.ABORTED)
        self.ledger.rollback()
        self.executor.guard.uninstall()

    # ── 1. Created → Initialized ────────────────────────────────

    def initialize(self) -> Path:
        """Pick the project name and create (and enter) its directory."""
        self._require(S.CREATED, "initialize")
        path = self._guarded(self._initialize)
        self._advance(S.INITIALIZED)
        return path

    def _initialize(self) -> Path:
        name = self.project_name or self._ask_project_name()
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ConfigError(f"Invalid project name: {name!r}")
        self.project_name = name

        base = (self.base_dir or Path.cwd()).resolve()
        path = base / name

        if path.exists():
            if not self._confirm_overwrite(name):
                raise UserAbort(f'Aborting, directory "{name}" already exists')
            # Only what this run creates is undone; the old contents are gone.
            logger.warning("Removing existing directory %s", path)
            remove_path(path)

        path.mkdir()
        self.ledger.register(lambda: remove_path(path), f"remove project directory {path}")
        WorkingDirectory(self.ledger).change(path)

        self.project_path = path
        self.filesystem = ProjectFilesystem(path, self.ledger)
        logger.info("Project '%s' at %s", name, path)
        return path

    def _ask_project_name(self) -> str:
        if self.provider is None:
            return DEFAULT_PROJECT_NAME
        answers = self.provider.ask([PROJECT_NAME_QUESTION])
        if not answers or not answers.get(PROJECT_NAME_QUESTION.name):
            raise ConfigIncomplete("No project name given")
        return str(answers[PROJECT_NAME_QUESTION.name]).strip()

    def _confirm_overwrite(self, name: str) -> bool:
        if self.overwrite is not None:
            return self.overwrite
        if self.provider is None:
            return False
        question = overwrite_question(name)
        answers = self.provider.ask([question])
        return bool(answers and answers.get(question.name))

    # ── 2. Initialized → ConfigResolved ─────────────────────────

    def resolve_config(self) -> Configuration:
        """Resolve the (cached, immutable) configuration."""
        self._require(S.INITIALIZED, "resolve_config")
        self.config = self._guarded(self.resolver.collect)
        self._advance(S.CONFIG_RESOLVED)
        return self.config

    # ── 3. ConfigResolved → DependenciesMapped ──────────────────

    def map_dependencies(self) -> ResolvedDependencies:
        """Map features to packages and resolve their latest versions."""
        self._require(S.CONFIG_RESOLVED, "map_dependencies")
        self.resolved = self._guarded(self._map_dependencies)
        self._advance(S.DEPENDENCIES_MAPPED)
        return self.resolved

    def _map_dependencies(self):
        self.dependency_manifest = map_features(self.config)
        return self.dependencies.resolve_async(self.dependency_manifest, self.token)

    # ── 4. DependenciesMapped → SourcesWritten ──────────────────

    def write_sources(self) -> list[str]:
        """Create the directory skeleton and write every generated file."""
        self._require(S.DEPENDENCIES_MAPPED, "write_sources")
        written = self._guarded(self._write_sources)
        self._advance(S.SOURCES_WRITTEN)
        return written

    def _write_sources(self) -> list[str]:
        fs = self.filesystem
        config = self.config

        fs.mkdir(express.SOURCE_DIR)
        for subdir in express.source_dirs(config.language):
            fs.mkdir(f"{express.SOURCE_DIR}/{subdir}")

        self.document = pkg_manifest.base_document(self.project_name, config)
        fs.write(pkg_manifest.MANIFEST_FILE, pkg_manifest.dumps(self.document))

        for generated in express.plan_files(config):
            self.token.raise_if_cancelled()
            fs.write(generated.path, generated.content)
        return list(fs.created)

    # ── 5. SourcesWritten → CustomStepsRun ──────────────────────

    def run_custom_steps(self) -> int:
        """Run queued steps in order, each under its own safe wrapper."""
        self._require(S.SOURCES_WRITTEN, "run_custom_steps")
        ctx = StepContext(
            project_name=self.project_name,
            project_path=self.project_path,
            config=self.config,
            ledger=self.ledger,
            filesystem=self.filesystem,
        )
        while self._steps:
            step = self._steps.pop(0)
            logger.info("Custom step: %s", step.label)
            self._guarded(step.run, ctx)
            self._steps_run.append(step)
        self._advance(S.CUSTOM_STEPS_RUN)
        return len(self._steps_run)

    # ── 6. CustomStepsRun → Finalized ───────────────────────────

    def finalize(self) -> ScaffoldReport:
        """Merge versions and scripts into package.json and report next steps."""
        self._require(S.CUSTOM_STEPS_RUN, "finalize")
        document = self._guarded(self._finalize)
        self.document = document

        # The project is complete; nothing may undo it from here on.
        self.ledger.clear()
        self.executor.guard.uninstall()
        self._advance(S.FINALIZED)

        return ScaffoldReport(
            project_name=self.project_name,
            project_path=str(self.project_path),
            package_manager=self.package_manager.value,
            configuration=self.config,
            manifest=document,
            files_written=list(self.filesystem.created),
            steps_run=[s.label for s in self._steps_run],
            next_steps=self.next_steps(),
        )

    def _finalize(self) -> dict[str, Any]:
        manifest_path = self.project_path / pkg_manifest.MANIFEST_FILE
        # Custom steps may have edited package.json; merge into what is on disk.
        current = json.loads(manifest_path.read_text(encoding="utf-8"))
        document = pkg_manifest.assemble(current, self.config, self.resolved)
        self.filesystem.write(pkg_manifest.MANIFEST_FILE, pkg_manifest.dumps(document))
        return document

    def next_steps(self) -> list[str]:
        pm = self.package_manager
        steps = [f"cd {self.project_name}"]
        if not any(s.installs for s in self._steps_run):
            steps.append(pm.install_command)
        if self.config is not None and self.config.language.is_typed:
            steps.append(pm.run_command("build"))
        steps.append(pm.run_command("start"))
        return steps

    # ── Whole run ───────────────────────────────────────────────

    def run(self, token: CancellationToken | None = None) -> ScaffoldReport:
        """Drive every stage in order.

        Args:
            token: Optional cancellation token; cancelling it stops the
                run at the next stage (or file, or step) boundary and
                rolls everything back.
        """
        if token is not None:
            self.token = token
            self.executor.guard.token = token

        try:
            self.initialize()
            self.resolve_config()
            self.map_dependencies()
            self.write_sources()
            self.run_custom_steps()
            return self.finalize()
        except ExternalInterrupt:
            # A signal can land between two guarded stages.
            if not self.state.terminal:
                self._abort()
            raise
