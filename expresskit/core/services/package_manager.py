"""
Package manager selection — which CLI the generated project is set up for.

Detected from the ``npm_config_user_agent`` hint that npm, yarn, pnpm
and bun export to scripts they launch (``npx``, ``yarn create``,
``pnpm create``, ``bunx``). Falls back to npm.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum

logger = logging.getLogger(__name__)

USER_AGENT_ENV = "npm_config_user_agent"


class PackageManager(str, Enum):
    YARN = "yarn"
    NPM = "npm"
    PNPM = "pnpm"
    BUN = "bun"

    @property
    def install_command(self) -> str:
        return _INSTALL_COMMANDS[self]

    def run_command(self, script: str) -> str:
        return f"{self.value} run {script}"


_INSTALL_COMMANDS: dict[PackageManager, str] = {
    PackageManager.YARN: "yarn install",
    PackageManager.NPM: "npm install",
    PackageManager.PNPM: "pnpm install",
    PackageManager.BUN: "bun install",
}


def detect_package_manager(environ: Mapping[str, str] | None = None) -> PackageManager:
    """Pick the package manager from the user-agent hint.

    The hint looks like ``pnpm/8.15.1 npm/? node/v20.11.0 linux x64``;
    the leading token names the manager that launched us.
    """
    env = os.environ if environ is None else environ
    ua = env.get(USER_AGENT_ENV, "")
    for pm in PackageManager:
        if ua.startswith(pm.value):
            logger.debug("Package manager from user agent: %s", pm.value)
            return pm
    return PackageManager.NPM
