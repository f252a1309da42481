"""
expresskit — CLI entrypoint.

Usage:
    expresskit my-api
    expresskit my-api --language TypeScript --feature jest --feature eslint
    expresskit my-api --yes --install
    python -m expresskit.main --help
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from expresskit import __version__
from expresskit.core.models.config import Feature, Language
from expresskit.core.observability.logging_config import (
    log_file_settings,
    resolve_level,
    setup_logging,
)


@click.command()
@click.version_option(version=__version__, prog_name="expresskit")
@click.argument("project_name", required=False)
@click.option(
    "--language",
    "-l",
    type=click.Choice([lang.value for lang in Language], case_sensitive=False),
    default=None,
    help="Language variant. Any static value skips all configuration questions.",
)
@click.option(
    "--feature",
    "-f",
    "features",
    multiple=True,
    type=click.Choice([feat.value for feat in Feature], case_sensitive=False),
    help="Feature to include; repeatable. Any static value skips all configuration questions.",
)
@click.option("--yes", "-y", is_flag=True, help="Accept defaults for everything not given.")
@click.option(
    "--config-file",
    "config_file",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Static configuration instead of prompts (default: ./expresskit.yml if present).",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Replace an existing target directory without asking.",
)
@click.option("--install", is_flag=True, help="Install dependencies after scaffolding.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    project_name: str | None,
    language: str | None,
    features: tuple[str, ...],
    yes: bool,
    config_file: str | None,
    overwrite: bool | None,
    install: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """expresskit — scaffold an Express server project, safely."""
    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        **log_file_settings(),
    )

    from expresskit.adapters.prompt import ClickQuestionProvider
    from expresskit.core.config.loader import find_config_file, load_static_config
    from expresskit.core.engine.pipeline import StepPipeline
    from expresskit.core.engine.steps import install_step
    from expresskit.core.errors import ScaffoldError
    from expresskit.core.models.config import StaticConfig, UseDefaultQuestions

    if not quiet and not as_json:
        click.secho("\n🚀 Create Express App\n", fg="green", bold=True)

    try:
        values: dict = {}
        config_path = Path(config_file) if config_file else find_config_file()
        if config_path:
            values.update(load_static_config(config_path))
        if language:
            values["language"] = language
        if features:
            values["features"] = list(features)

        static = bool(values) or yes
        source = StaticConfig(values) if static else UseDefaultQuestions()
        provider = None if yes else ClickQuestionProvider()

        pipeline = StepPipeline(
            project_name,
            source=source,
            provider=provider,
            overwrite=overwrite,
        )
        if install:
            pipeline.add_step(install_step(pipeline.package_manager))

        report = pipeline.run()
    except ScaffoldError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(e.exit_code)
    except Exception as e:
        click.secho(f"❌ Scaffolding failed, changes rolled back: {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if not quiet:
        click.echo(f"   📁 {report.project_path}")
        click.echo(f"   📄 {len(report.files_written)} files and directories created")
        for step in report.steps_run:
            click.echo(f"   ✓ {step}")

    click.secho("\n✅ Happy Hacking!", fg="green", bold=True)
    click.secho("\nNext steps:", fg="cyan")
    for line in report.next_steps:
        click.echo(f"  {line}")
    click.echo()


if __name__ == "__main__":
    cli()
