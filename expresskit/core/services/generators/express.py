"""
Express project generator — source files for the scaffolded server.

    render(config, "app")  → text of src/app.<ext>
    plan_files(config)     → every GeneratedFile the project needs

Import specifiers differ per language: the JavaScript variant is an
ES module and needs explicit ``.js`` suffixes, the TypeScript variant
is compiled to CommonJS and resolves ``@/`` through tsconfig paths.
"""

from __future__ import annotations

import json

from expresskit.core.models.config import Configuration, Feature, Language
from expresskit.core.models.template import GeneratedFile

SOURCE_DIR = "src"
BASE_SOURCE_DIRS = ("routes", "middlewares", "controllers", "schemas")
TYPED_SOURCE_DIRS = ("types",)

SAMPLE_ROUTES = ("ping", "sample")


def source_dirs(language: Language) -> list[str]:
    """Subdirectories of ``src/`` for a language variant."""
    dirs = list(BASE_SOURCE_DIRS)
    if language.is_typed:
        dirs.extend(TYPED_SOURCE_DIRS)
    return dirs


def _js_suffix(config: Configuration) -> str:
    return "" if config.language.is_typed else ".js"


# ── Root files ──────────────────────────────────────────────────

_GITIGNORE = """\
node_modules
dist
bin

*.local
.env
"""


def _gitignore(config: Configuration) -> str:
    return _GITIGNORE


def _tsconfig(config: Configuration) -> str:
    data = {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "outDir": "dist",
            "baseUrl": ".",
            "paths": {"@/*": ["./src/*"]},
        },
        "include": ["src"],
    }
    return json.dumps(data, indent=2) + "\n"


def _eslintrc(config: Configuration) -> str:
    typed = config.language.is_typed
    parser = "@typescript-eslint/parser" if typed else "espree"
    extends = '"eslint:recommended"'
    if typed:
        extends += ', "plugin:@typescript-eslint/recommended"'
    return (
        "module.exports = {\n"
        f'  parser: "{parser}",\n'
        "  extends: [\n"
        f"    {extends}\n"
        "  ],\n"
        "  rules: {}\n"
        "};\n"
    )


def _prettierrc(config: Configuration) -> str:
    return json.dumps({"semi": True, "trailingComma": "all"}, indent=2) + "\n"


# ── src/ ────────────────────────────────────────────────────────


def _index(config: Configuration) -> str:
    return f"""\
import app from "./app{_js_suffix(config)}";
import dotenv from "dotenv";

dotenv.config();

const PORT = process.env.PORT || 3000;
app.listen(PORT, () => {{
    console.log(`Server running on http://localhost:${{PORT}}`);
}});
"""


def _app(config: Configuration) -> str:
    return f"""\
import express from "express";
import cors from "cors";
import bodyParser from "body-parser";

import router from "./routes/index{_js_suffix(config)}";

const app = express();

app.use(cors({{ origin: "*", credentials: true }}));

app.use(express.urlencoded({{ extended: true }}));
app.use(bodyParser.json());

app.use("/api", router);

export default app;
"""


def _route(config: Configuration, name: str) -> str:
    if config.language.is_typed:
        return f"""\
import {{ type Request, type Response, Router }} from "express";
import Controllers from "@/controllers/index";

export const {name}Route = Router();

{name}Route.get("/{name}", (req: Request, res: Response) => void Controllers.{name}Controller(req, res));
"""
    return f"""\
import {{ Router }} from "express";
import Controllers from "../controllers/index.js";

export const {name}Route = Router();

{name}Route.get("/{name}", (req, res) => void Controllers.{name}Controller(req, res));
"""


def _routes_index(config: Configuration) -> str:
    suffix = _js_suffix(config)
    imports = "\n".join(
        f'import {{ {name}Route }} from "./{name}{suffix}";' for name in SAMPLE_ROUTES
    )
    uses = "\n".join(f"router.use({name}Route);" for name in SAMPLE_ROUTES)
    return f"""\
import {{ Router }} from "express";
{imports}

const router = Router();

{uses}

export default router;
"""


def _controller(config: Configuration, name: str) -> str:
    func = name[:1].upper() + name[1:] + "Controller"
    if config.language.is_typed:
        return f"""\
import type {{ Request, Response }} from "express";
import type {{ ControllerClass }} from "@/controllers/index";

export async function {func}(this: ControllerClass, request: Request, response: Response) {{
    return response.status(200).json({{ message: "This is a sample route" }});
}}
"""
    return f"""\
export async function {func}(request, response) {{
    return response.status(200).json({{ message: "This is a sample route" }});
}}
"""


def _controllers_index(config: Configuration) -> str:
    typed = config.language.is_typed
    header = (
        'import { Request, Response } from "express";\nimport { SampleController } from "./sample";\n'
        if typed
        else 'import { SampleController } from "./sample.js";\n'
    )
    params = "req: Request, res: Response" if typed else "req, res"
    return f"""\
{header}
export class ControllerClass {{
    async pingController({params}) {{
        return res.status(201).json({{ message: "Server running" }});
    }}

    sampleController = SampleController;
}}

const Controllers = new ControllerClass();
export default Controllers;
"""


def _schema(config: Configuration) -> str:
    typed_export = (
        "\nexport type Sample = z.infer<typeof SampleSchema>;\n" if config.language.is_typed else ""
    )
    return f"""\
import {{ z }} from "zod";

export const SampleSchema = z.object({{
    name: z.string().min(1),
    email: z.string().email(),
}});
{typed_export}"""


_RENDERERS = {
    "gitignore": _gitignore,
    "tsconfig": _tsconfig,
    "eslintrc": _eslintrc,
    "prettierrc": _prettierrc,
    "index": _index,
    "app": _app,
    "routes_index": _routes_index,
    "controllers_index": _controllers_index,
    "schema": _schema,
}


def render(config: Configuration, artifact: str) -> str:
    """Return the text of one artifact.

    Artifacts are plain names (``"app"``) or parameterised as
    ``"route:<name>"`` / ``"controller:<name>"``.

    Raises:
        KeyError: Unknown artifact.
    """
    kind, _, arg = artifact.partition(":")
    if kind == "route" and arg:
        return _route(config, arg)
    if kind == "controller" and arg:
        return _controller(config, arg)
    if artifact not in _RENDERERS:
        raise KeyError(f"Unknown artifact: {artifact}")
    return _RENDERERS[artifact](config)


def _artifact_paths(config: Configuration) -> list[tuple[str, str]]:
    ext = config.language.extension
    src = SOURCE_DIR
    paths = [(".gitignore", "gitignore")]
    if config.language.is_typed:
        paths.append(("tsconfig.json", "tsconfig"))
    if config.has(Feature.ESLINT):
        paths.append((".eslintrc.js", "eslintrc"))
        paths.append((".prettierrc", "prettierrc"))
    paths.append((f"{src}/app{ext}", "app"))
    paths.append((f"{src}/index{ext}", "index"))
    for name in SAMPLE_ROUTES:
        paths.append((f"{src}/routes/{name}{ext}", f"route:{name}"))
    paths.append((f"{src}/routes/index{ext}", "routes_index"))
    paths.append((f"{src}/controllers/sample{ext}", "controller:sample"))
    paths.append((f"{src}/controllers/index{ext}", "controllers_index"))
    if config.has(Feature.ZOD):
        paths.append((f"{src}/schemas/index{ext}", "schema"))
    return paths


def plan_files(config: Configuration) -> list[GeneratedFile]:
    """Every source file the configuration calls for, in write order."""
    return [
        GeneratedFile(path=path, content=render(config, artifact), artifact=artifact)
        for path, artifact in _artifact_paths(config)
    ]
