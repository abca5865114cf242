"""
Directive registry commands: list, add.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from caddyext.config import load_config
from caddyext.directives import DirectiveRegistry, load_registry
from caddyext.exceptions import (
    CaddyextError,
    ConfigError,
    ConsistencyError,
    DuplicateDirectiveError,
    InvalidDirectiveError,
    ParseError,
    ReadError,
    RenderError,
    WriteError,
)
from caddyext.logging_config import logger
from caddyext.schemas import RegistrySnapshot

from .config import CLIConfig
from .output import echo, get_console, print_error, print_json

console = get_console()

ERROR_CODES = [
    (ReadError, "READ_ERROR"),
    (ParseError, "PARSE_ERROR"),
    (ConsistencyError, "CONSISTENCY_ERROR"),
    (DuplicateDirectiveError, "DUPLICATE_DIRECTIVE"),
    (InvalidDirectiveError, "INVALID_DIRECTIVE"),
    (RenderError, "RENDER_ERROR"),
    (WriteError, "WRITE_ERROR"),
    (ConfigError, "CONFIG_ERROR"),
]


def _fail(error: CaddyextError) -> None:
    code = next((c for cls, c in ERROR_CODES if isinstance(error, cls)), "ERROR")
    logger.error(str(error))
    print_error(str(error), code=code)
    raise typer.Exit(code=1)


def _load_or_exit(file: Optional[Path]) -> DirectiveRegistry:
    """
    Load the registry from --file or the configured directives file.

    Raises:
        typer.Exit: If configuration or the file cannot be loaded.
    """
    try:
        config = load_config()
        path = file if file is not None else Path(config.directives_file)
        return load_registry(path, config)
    except CaddyextError as e:
        _fail(e)


def _snapshot(registry: DirectiveRegistry) -> dict:
    return RegistrySnapshot(
        file_path=str(registry.path),
        directives=list(registry.list()),
        pending=list(registry.pending()),
    ).model_dump()


def list_cmd(
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Directives file. Defaults to the configured directives_file.",
        dir_okay=False,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
):
    """
    List registered directives in the order they take effect.
    """
    registry = _load_or_exit(file)

    if json_output:
        print_json(_snapshot(registry))
        return

    if CLIConfig.is_machine_mode():
        for directive in registry.list():
            echo(f"{directive.name}\t{directive.import_path}")
        return

    table = Table(title=f"Directives in {escape(str(registry.path))}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Import path", style="green")
    for index, directive in enumerate(registry.list(), start=1):
        table.add_row(str(index), escape(directive.name), escape(directive.import_path))
    console.print(table)


def add_cmd(
    name: str = typer.Argument(..., help="Directive name (also the Go import alias)."),
    import_path: str = typer.Argument(..., help="Go import path of the directive package."),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Directives file. Defaults to the configured directives_file.",
        dir_okay=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show the diff that would be written without saving."
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
):
    """
    Register a directive after all existing ones and save the file.
    """
    registry = _load_or_exit(file)

    try:
        directive = registry.add_directive(name, import_path)
        if dry_run:
            diff = registry.preview()
        else:
            registry.save()
    except CaddyextError as e:
        _fail(e)

    if dry_run:
        if json_output:
            print_json({"status": "dry_run", "directive": directive.model_dump(), "diff": diff})
        else:
            echo(diff, nl=False)
        return

    if json_output:
        print_json({"status": "ok", **_snapshot(registry)})
    else:
        console.print(
            f"[green]Added directive[/green] [cyan]{escape(directive.name)}[/cyan] "
            f"({escape(directive.import_path)}) to {escape(str(registry.path))}"
        )
