# src/plumbline/cli.py
"""plumbline Command Line Interface.

Entry point for the plumbline CLI tool.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from plumbline import __version__
from plumbline.contracts import ExecutionResult, PlumblineError
from plumbline.core.config import JobSettings, load_settings

if TYPE_CHECKING:
    from plumbline.plugins.manager import PluginManager

__all__ = [
    "app",
    "load_settings",
]

_plugin_manager_cache: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Get initialized plugin manager (singleton)."""
    global _plugin_manager_cache

    from plumbline.plugins.manager import PluginManager

    if _plugin_manager_cache is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _plugin_manager_cache = manager
    return _plugin_manager_cache


app = typer.Typer(
    name="plumbline",
    help="plumbline: run data-quality validation jobs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"plumbline version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)
    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """plumbline: run data-quality validation jobs."""
    from plumbline.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


def _fail(title: str, message: str) -> typer.Exit:
    typer.secho(f"{title}: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _load_job_settings(settings: str) -> JobSettings:
    """Load settings, turning every loading failure into a clean exit."""
    settings_path = Path(settings).expanduser()
    try:
        return load_settings(settings_path)
    except FileNotFoundError:
        raise _fail("File Not Found", f"Settings file does not exist: {settings}") from None
    except (YamlParserError, YamlScannerError) as e:
        raise _fail("YAML Syntax Error", f"Failed to parse {settings_path.name}: {e}") from None
    except ValidationError as e:
        raise _fail("Configuration Error", str(e)) from None


def _format_result(result: ExecutionResult, output_format: Literal["console", "json"]) -> str:
    if output_format == "json":
        return json.dumps(
            {
                "status": str(result.status),
                "actual_values": [{"name": r.name, "rows": r.to_dicts()} for r in result.actual_values],
                "task_results": [{"name": r.name, "rows": r.to_dicts()} for r in result.task_results],
                "invalidate_items_tables": list(result.invalidate_items_tables),
                "sinks_run": result.sinks_run,
            },
            default=str,
        )
    return (
        f"Run {result.status}: {len(result.actual_values)} actual value result(s), "
        f"{len(result.task_results)} task result(s), {result.sinks_run} sink(s) written"
    )


@app.command()
def run(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to job settings YAML file.",
    ),
    output_format: str = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Execute a validation job."""
    from plumbline.engine import Execution, RuntimeEnvironment

    if output_format not in ("console", "json"):
        raise _fail("Error", f"Invalid format '{output_format}'. Use 'console' or 'json'.")

    config = _load_job_settings(settings)
    try:
        plugins = _get_plugin_manager().instantiate_job(config)
        execution = Execution(RuntimeEnvironment(), config.execution, name=config.name)
        execution.prepare()
        result = execution.execute(plugins.sources, plugins.transforms, plugins.sinks)
    except (PlumblineError, SQLAlchemyError) as e:
        raise _fail("Run failed", str(e)) from None

    typer.echo(_format_result(result, "json" if output_format == "json" else "console"))


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to job settings YAML file.",
    ),
) -> None:
    """Validate job configuration and plugin options without running."""
    config = _load_job_settings(settings)
    try:
        plugins = _get_plugin_manager().instantiate_job(config)
    except PlumblineError as e:
        raise _fail("Configuration Error", str(e)) from None

    typer.secho("Configuration valid!", fg=typer.colors.GREEN)
    typer.echo(
        f"  Job: {config.name} - {len(plugins.sources)} source(s), "
        f"{len(plugins.transforms)} transform(s), {len(plugins.sinks)} sink(s)"
    )


plugins_app = typer.Typer(help="Plugin management commands.")
app.add_typer(plugins_app, name="plugins")


@dataclass(frozen=True)
class PluginInfo:
    """Name and one-line description of a registered plugin."""

    name: str
    description: str


def _build_plugin_registry() -> dict[str, list[PluginInfo]]:
    from plumbline.plugins.discovery import get_plugin_description

    manager = _get_plugin_manager()
    return {
        "source": [PluginInfo(cls.name, get_plugin_description(cls)) for cls in manager.get_sources()],
        "transform": [PluginInfo(cls.name, get_plugin_description(cls)) for cls in manager.get_transforms()],
        "sink": [PluginInfo(cls.name, get_plugin_description(cls)) for cls in manager.get_sinks()],
    }


@plugins_app.command("list")
def plugins_list(
    plugin_type: str | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Filter by plugin type (source, transform, sink).",
    ),
) -> None:
    """List available plugins."""
    registry = _build_plugin_registry()

    if plugin_type and plugin_type not in registry:
        typer.echo(f"Error: Invalid type '{plugin_type}'.", err=True)
        typer.echo(f"Valid types: {', '.join(sorted(registry))}", err=True)
        raise typer.Exit(1)

    for ptype in [plugin_type] if plugin_type else list(registry):
        typer.echo(f"\n{ptype.upper()}S:")
        plugins = registry[ptype]
        if not plugins:
            typer.echo("  (none available)")
        for plugin in plugins:
            typer.echo(f"  {plugin.name:20} - {plugin.description}")


if __name__ == "__main__":
    app()
