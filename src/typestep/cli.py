# src/typestep/cli.py
"""typestep Command Line Interface.

Entry point for the typestep CLI tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from typestep import __version__
from typestep.contracts import OutputFormat, StateKind, TypeStepError
from typestep.core.config import OutputSettings, TypeStepSettings, load_settings
from typestep.core.logging import get_logger

if TYPE_CHECKING:
    from typestep.core.morphism import Morphism
    from typestep.core.statemachine import CompiledPipeline

__all__ = [
    "app",
]

logger = get_logger(__name__)

app = typer.Typer(
    name="typestep",
    help="typestep: compile typed pipelines into AWS Step Functions state machines.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"typestep version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
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
        exists=False,
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
    """typestep: compile typed pipelines into AWS Step Functions state machines."""
    from typestep.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]{title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _load_settings_or_exit(settings: Path | None) -> TypeStepSettings:
    """Load settings (defaults when no file is given), exiting with a formatted error on failure."""
    if settings is None:
        return TypeStepSettings()

    settings_path = settings.expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if e.problem else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        # Must be before ValueError - ValidationError inherits from it
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None
    except ValueError as e:
        _format_validation_error(title="Configuration Error", message=str(e))
        raise typer.Exit(1) from None


def _load_pipeline_or_exit(reference: str, app_dir: Path) -> Morphism[Any, Any]:
    from typestep.cli_helpers import PipelineReferenceError, load_pipeline

    try:
        return load_pipeline(reference, app_dir=app_dir)
    except PipelineReferenceError as e:
        _format_validation_error(
            title="Pipeline Not Found",
            message=str(e),
            hint="Use 'package.module:attribute' naming a Morphism or a function returning one.",
        )
        raise typer.Exit(1) from None
    except TypeStepError as e:
        _format_validation_error(
            title="Pipeline Type Error",
            message=str(e),
            hint="Check that each function's input type matches what the previous step produces.",
        )
        raise typer.Exit(1) from None


def _compile_or_exit(pipeline: Morphism[Any, Any], settings: TypeStepSettings) -> CompiledPipeline:
    from typestep.core.statemachine import StateMachineBuilder

    try:
        return StateMachineBuilder.from_settings(settings).compile(pipeline)
    except TypeStepError as e:
        _format_validation_error(
            title="Pipeline Compilation Failed",
            message=str(e),
            hint="A pipeline starts with from_(), ends with to_queue()/to_event_bus(), and each fan-out starts with a function.",
        )
        raise typer.Exit(1) from None


_PIPELINE_ARGUMENT = typer.Argument(..., help="Pipeline reference 'package.module:attribute'.")
_APP_DIR_OPTION = typer.Option(
    Path("."),
    "--app-dir",
    help="Directory prepended to the import path when loading the pipeline.",
)


@app.command("compile")
def compile_command(
    pipeline: str = _PIPELINE_ARGUMENT,
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the compiled artifact to this file instead of stdout.",
    ),
    output_format: OutputFormat | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: 'json' or 'yaml' (overrides settings).",
    ),
    app_dir: Path = _APP_DIR_OPTION,
) -> None:
    """Compile a pipeline into a state machine definition and trigger rule."""
    from typestep.cli_helpers import render_compiled

    config = _load_settings_or_exit(settings)
    morphism = _load_pipeline_or_exit(pipeline, app_dir)
    compiled = _compile_or_exit(morphism, config)

    output_settings = config.output
    if output_format is not None:
        output_settings = OutputSettings(format=output_format, indent=output_settings.indent)
    rendered = render_compiled(compiled, output_settings)

    if output is None:
        typer.echo(rendered, nl=False)
        return

    output.expanduser().parent.mkdir(parents=True, exist_ok=True)
    output.expanduser().write_text(rendered, encoding="utf-8")
    logger.info("artifact_written", path=str(output), state_machine=compiled.state_machine.name)
    typer.echo(f"Wrote {compiled.state_machine.name} to {output}", err=True)


@app.command()
def validate(
    pipeline: str = _PIPELINE_ARGUMENT,
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    app_dir: Path = _APP_DIR_OPTION,
) -> None:
    """Compile a pipeline without writing it and summarize the result."""
    config = _load_settings_or_exit(settings)
    morphism = _load_pipeline_or_exit(pipeline, app_dir)
    compiled = _compile_or_exit(morphism, config)

    machine = compiled.state_machine
    typer.echo("Pipeline valid")
    typer.echo(f"  State machine: {machine.name} (start at {machine.start_at})")
    typer.echo(f"  States: {machine.state_count}")
    typer.echo(f"  Invocations: {len(machine.states_of_kind(StateKind.INVOKE))}")
    typer.echo(f"  Fan-outs: {len(machine.states_of_kind(StateKind.FOR_EACH))}")
    typer.echo(f"  Trigger: {compiled.rule.event_bus.name} [{', '.join(compiled.rule.categories)}]")
    typer.echo(f"  Definition hash: {compiled.definition_hash}")


@app.command()
def explain(
    pipeline: str = _PIPELINE_ARGUMENT,
    app_dir: Path = _APP_DIR_OPTION,
) -> None:
    """Print the structure of a pipeline as a tree."""
    from rich.console import Console
    from rich.markup import escape
    from rich.tree import Tree

    from typestep.core.morphism.outline import outline

    morphism = _load_pipeline_or_exit(pipeline, app_dir)

    try:
        entries = outline(morphism)
    except TypeStepError as e:
        _format_validation_error(title="Pipeline Traversal Failed", message=str(e))
        raise typer.Exit(1) from None

    tree = Tree(f"[bold]{escape(pipeline)}[/]")
    parents: list[Tree] = [tree]
    for entry in entries:
        del parents[entry.depth + 1 :]
        branch = parents[-1].add(escape(entry.label))
        if entry.label == "for each":
            parents.append(branch)
    Console().print(tree)


if __name__ == "__main__":
    app()
