"""
mockkit CLI - Main entry point.

Provides commands for inspecting the signature keys of mockable types and
managing settings files.
"""

import importlib
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mockkit.config.loader import (
    SettingsError,
    generate_default_settings,
    load_settings,
    load_settings_from_yaml,
)
from mockkit.errors import MockFailure
from mockkit.reflection.descriptors import ClassDescriptor
from mockkit.reflection.reflector import Reflector

app = typer.Typer(
    name="mockkit",
    help="Inspect mockable types and manage mockkit settings",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Helper Functions
# =============================================================================


def import_target(spec: str) -> type:
    """Import a class given as 'package.module:ClassName'."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"Expected 'module:ClassName', got: {spec}")

    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {e}")

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise typer.BadParameter(f"'{module_name}' has no attribute '{attr_path}'")
    return obj


def descriptor_to_dict(descriptor: ClassDescriptor) -> dict:
    """JSON-ready view of a class descriptor."""
    return {
        "class": f"{descriptor.target.__module__}.{descriptor.target.__qualname__}",
        "constructors": [c.text for c in descriptor.constructors],
        "methods": [
            {
                "key": m.key,
                "name": m.name,
                "visibility": m.visibility,
                "qualifiers": sorted(m.qualifiers),
                "owner": m.owner.__qualname__ if m.owner is not None else None,
            }
            for m in descriptor.methods
        ],
    }


def print_descriptor(descriptor: ClassDescriptor) -> None:
    """Render a class descriptor as rich tables."""
    console.print(Panel(f"[bold]{descriptor.target.__module__}.{descriptor.target.__qualname__}[/bold]"))

    ctor_table = Table(title="Constructors")
    ctor_table.add_column("#", style="dim")
    ctor_table.add_column("Signature", style="cyan")
    for i, constructor in enumerate(descriptor.constructors, 1):
        ctor_table.add_row(str(i), constructor.text)
    console.print(ctor_table)

    method_table = Table(title="Mockable methods")
    method_table.add_column("Signature key", style="cyan")
    method_table.add_column("Visibility")
    method_table.add_column("Qualifiers", style="magenta")
    method_table.add_column("Defined in", style="dim")
    for method in descriptor.methods:
        method_table.add_row(
            method.key,
            method.visibility,
            ", ".join(sorted(method.qualifiers)) or "-",
            method.owner.__qualname__ if method.owner is not None else "-",
        )
    console.print(method_table)


# =============================================================================
# Commands
# =============================================================================


@app.command("inspect")
def inspect_type(
    target: str = typer.Argument(..., help="Type to inspect, as 'package.module:ClassName'"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings file"),
):
    """List the constructors and signature keys of a mockable type."""
    try:
        settings = load_settings(config)
    except SettingsError as e:
        console.print(f"[red]Settings error:[/red] {e}")
        raise typer.Exit(1)

    cls = import_target(target)

    try:
        descriptor = Reflector(include_protected=settings.include_protected).describe(cls)
    except MockFailure as e:
        console.print(f"[red]{e.message}[/red]")
        for line in e.log:
            console.print(f"  {line}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(orjson.dumps(descriptor_to_dict(descriptor), option=orjson.OPT_INDENT_2).decode())
    else:
        print_descriptor(descriptor)


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(Path("mockkit.yaml"), help="Where to write the settings file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write a settings file holding the defaults."""
    if output.exists() and not force:
        console.print(f"[yellow]{output} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    generate_default_settings(output)
    console.print(f"[green]✓[/green] Settings written to {output}")


@app.command("validate-config")
def validate_config(
    path: Path = typer.Argument(..., help="Settings file to validate"),
):
    """Load a settings file and show the resolved values."""
    try:
        settings = load_settings_from_yaml(path)
    except SettingsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=str(path))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        table.add_row(name, "unbounded" if value is None else str(value))
    console.print(table)
    console.print("[green]✓[/green] Settings are valid")


def main():
    app()


if __name__ == "__main__":
    main()
