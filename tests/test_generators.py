"""
Tests for the Express generator, package.json assembly and package manager detection.
"""

from __future__ import annotations

import json

import pytest

from expresskit.core.models.config import Configuration, Feature, Language
from expresskit.core.models.manifest import ResolvedDependencies
from expresskit.core.services import manifest as pkg_manifest
from expresskit.core.services.generators import express
from expresskit.core.services.package_manager import PackageManager, detect_package_manager

JS = Configuration(language=Language.JAVASCRIPT)
TS = Configuration(language=Language.TYPESCRIPT)


class TestExpressGenerator:
    def test_source_dirs(self):
        assert express.source_dirs(Language.JAVASCRIPT) == [
            "routes",
            "middlewares",
            "controllers",
            "schemas",
        ]
        assert express.source_dirs(Language.TYPESCRIPT)[-1] == "types"

    def test_javascript_plan(self):
        paths = [f.path for f in express.plan_files(JS)]
        assert ".gitignore" in paths
        assert "src/index.js" in paths
        assert "src/app.js" in paths
        assert "src/routes/ping.js" in paths
        assert "tsconfig.json" not in paths
        assert "src/schemas/index.js" not in paths

    def test_typescript_plan_with_features(self):
        config = Configuration(language=Language.TYPESCRIPT, features={Feature.ESLINT, Feature.ZOD})
        paths = [f.path for f in express.plan_files(config)]
        assert "tsconfig.json" in paths
        assert ".eslintrc.js" in paths
        assert ".prettierrc" in paths
        assert "src/schemas/index.ts" in paths
        assert all(not p.endswith(".js") or p == ".eslintrc.js" for p in paths)

    def test_javascript_imports_use_suffix(self):
        assert './app.js"' in express.render(JS, "index")
        assert './app"' in express.render(TS, "index")

    def test_route_and_controller(self):
        route = express.render(TS, "route:ping")
        assert "export const pingRoute" in route
        assert "Request" in route
        controller = express.render(JS, "controller:sample")
        assert "export async function SampleController" in controller

    def test_tsconfig_is_json(self):
        data = json.loads(express.render(TS, "tsconfig"))
        assert data["compilerOptions"]["outDir"] == "dist"

    def test_eslint_parser_per_language(self):
        assert "@typescript-eslint/parser" in express.render(TS, "eslintrc")
        assert "espree" in express.render(JS, "eslintrc")

    def test_unknown_artifact(self):
        with pytest.raises(KeyError):
            express.render(JS, "dockerfile")


class TestManifestAssembly:
    def test_base_document(self):
        doc = pkg_manifest.base_document("demo", JS)
        assert doc["name"] == "demo"
        assert doc["main"] == "src/index.js"

    def test_scripts_javascript(self):
        scripts = pkg_manifest.build_scripts(JS)
        assert list(scripts) == ["start", "lint", "test"]
        assert scripts["start"] == "node src/index.js"
        assert scripts["test"] == "echo 'no tests'"

    def test_scripts_typescript_with_features(self):
        config = Configuration(language=Language.TYPESCRIPT, features={Feature.JEST, Feature.ESLINT})
        scripts = pkg_manifest.build_scripts(config)
        assert list(scripts)[0] == "build"
        assert scripts["build"] == "tsc && tsc-alias"
        assert scripts["start"] == "node dist/index.js"
        assert scripts["lint"] == "eslint . --ext .ts,.js"
        assert scripts["test"] == "jest"

    def test_assemble_merges_versions(self):
        base = pkg_manifest.base_document("demo", JS)
        base["dependencies"] = {"left-pad": "^1.3.0"}
        resolved = ResolvedDependencies(
            dependencies={"express": "^4.21.2"},
            dev_dependencies={"jest": "^29.7.0"},
        )
        doc = pkg_manifest.assemble(base, JS, resolved)
        assert doc["type"] == "module"
        assert doc["dependencies"] == {"left-pad": "^1.3.0", "express": "^4.21.2"}
        assert doc["devDependencies"] == {"jest": "^29.7.0"}
        assert "dependencies" not in pkg_manifest.base_document("demo", JS)

    def test_typescript_module_type(self):
        doc = pkg_manifest.assemble({}, TS, ResolvedDependencies())
        assert doc["type"] == "commonjs"


class TestPackageManagerDetection:
    @pytest.mark.parametrize(
        "agent, expected",
        [
            ("pnpm/8.15.1 npm/? node/v20.11.0 linux x64", PackageManager.PNPM),
            ("yarn/1.22.19 npm/? node/v20.11.0 darwin arm64", PackageManager.YARN),
            ("bun/1.0.25 npm/? node/v21.6.0 linux x64", PackageManager.BUN),
            ("npm/10.2.4 node/v20.11.0 linux x64", PackageManager.NPM),
            ("", PackageManager.NPM),
        ],
    )
    def test_detect(self, agent, expected):
        assert detect_package_manager({"npm_config_user_agent": agent}) is expected

    def test_commands(self):
        assert PackageManager.PNPM.install_command == "pnpm install"
        assert PackageManager.YARN.install_command == "yarn install"
        assert PackageManager.BUN.run_command("start") == "bun run start"
