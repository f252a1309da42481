"""
package.json assembly.

The base document is what ``npm init -y`` would write. Finalization
merges the resolved versions, the feature-dependent scripts and the
module-type flag into it.
"""

from __future__ import annotations

import json
from typing import Any

from expresskit.core.models.config import Configuration, Feature
from expresskit.core.models.manifest import ResolvedDependencies

MANIFEST_FILE = "package.json"


def base_document(project_name: str, config: Configuration) -> dict[str, Any]:
    """Initial package.json for a freshly created project."""
    entry = "dist/index.js" if config.language.is_typed else "src/index.js"
    return {
        "name": project_name,
        "version": "1.0.0",
        "description": "",
        "main": entry,
        "scripts": {"test": 'echo "Error: no test specified" && exit 1'},
        "keywords": [],
        "author": "",
        "license": "ISC",
    }


def build_scripts(config: Configuration) -> dict[str, str]:
    """Named npm scripts; ``build`` comes first for the typed variant."""
    typed = config.language.is_typed
    scripts: dict[str, str] = {}
    if typed:
        scripts["build"] = "tsc && tsc-alias"
    scripts["start"] = "node dist/index.js" if typed else "node src/index.js"
    scripts["lint"] = "eslint . --ext .ts,.js" if config.has(Feature.ESLINT) else "echo 'no lint'"
    scripts["test"] = "jest" if config.has(Feature.JEST) else "echo 'no tests'"
    return scripts


def assemble(
    document: dict[str, Any],
    config: Configuration,
    resolved: ResolvedDependencies,
) -> dict[str, Any]:
    """Return a new document with dependencies, scripts and module type merged in."""
    pkg = dict(document)
    pkg["type"] = "commonjs" if config.language.is_typed else "module"
    pkg["scripts"] = build_scripts(config)
    pkg["dependencies"] = {**pkg.get("dependencies", {}), **resolved.dependencies}
    pkg["devDependencies"] = {**pkg.get("devDependencies", {}), **resolved.dev_dependencies}
    return pkg


def dumps(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2) + "\n"
