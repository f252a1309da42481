"""
Node.js adapter — npm registry version lookups.

``npm view <package> version`` prints the ``latest`` dist-tag of a
package. Any package manager works for scaffolding, but lookups always
go through the npm CLI because it is the one shipped with Node.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from expresskit.adapters.shell.command import ShellCommand
from expresskit.core.errors import VersionLookupError

logger = logging.getLogger(__name__)

# "4.21.2", "5.0.0-beta.3"
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.\-+]+)?$")


class NpmVersionLookup:
    """Callable ``package → latest version`` backed by ``npm view``.

    Pass ``cancelled`` to kill an in-flight ``npm view`` once the run
    is interrupted instead of waiting out its timeout.
    """

    def __init__(
        self,
        shell: ShellCommand | None = None,
        npm_binary: str = "npm",
        timeout: int = 60,
        cancelled: Callable[[], bool] | None = None,
    ):
        self._shell = shell or ShellCommand()
        self._npm = npm_binary
        self._timeout = timeout
        self._cancelled = cancelled

    def __call__(self, package: str) -> str:
        result = self._shell.run(
            [self._npm, "view", package, "version"],
            timeout=self._timeout,
            cancelled=self._cancelled,
        )
        if not result.ok:
            raise VersionLookupError(package, result.failure_reason)

        # Some registries print one line per matching version; latest is last.
        lines = [line.strip().strip("'\"") for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise VersionLookupError(package, "empty response from registry")

        version = lines[-1]
        if not _VERSION_RE.match(version):
            raise VersionLookupError(package, f"unexpected version string {version!r}")

        logger.debug("Latest %s = %s", package, version)
        return version
