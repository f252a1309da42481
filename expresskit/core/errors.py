"""
Error taxonomy for the scaffold engine.

Every error the engine raises on purpose derives from ScaffoldError.
Anything else escaping a ``safe`` wrapper is a mutation failure: the
ledger is rolled back and the original exception is re-raised as-is.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for all expected scaffold failures."""

    exit_code: int = 1


class UserAbort(ScaffoldError):
    """The user declined to continue (e.g. refused to overwrite a directory)."""


class ConfigIncomplete(ScaffoldError):
    """Interactive configuration was abandoned before every field was set."""


class ConfigError(ScaffoldError):
    """Raised when a static configuration file is invalid or missing."""


class SequenceError(ScaffoldError):
    """A pipeline stage was called before its predecessor state was reached."""


class ExternalInterrupt(ScaffoldError):
    """A termination signal (or a cancelled token) stopped the run."""

    def __init__(self, reason: str = "interrupted", signum: int | None = None):
        super().__init__(reason)
        self.signum = signum
        self.exit_code = 128 + signum if signum else 130


class VersionLookupError(ScaffoldError):
    """The latest version of a single package could not be determined."""

    def __init__(self, package: str, reason: str):
        super().__init__(f"Cannot resolve version for '{package}': {reason}")
        self.package = package
        self.reason = reason


class DependencyResolutionError(ScaffoldError):
    """At least one lookup failed, so no dependency versions were resolved."""

    def __init__(self, failures: dict[str, str]):
        names = ", ".join(sorted(failures))
        super().__init__(f"Dependency resolution failed for: {names}")
        self.failures = failures


class CommandError(ScaffoldError):
    """An external command (package manager, install script) failed."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"Command failed: {command}: {reason}")
        self.command = command
        self.reason = reason
