"""
CLI Output Utilities

Machine-aware output functions that adapt based on machine mode.
"""

import json
import re
from typing import Any

import typer
from rich.console import Console as RichConsole
from rich.table import Table

from caddyext.cli.config import CLIConfig


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        """Print that respects machine mode."""
        if CLIConfig.is_machine_mode():
            for arg in args:
                if isinstance(arg, str):
                    plain = re.sub(r'\[/?[a-z ]+\]', '', arg).strip()
                    if plain:
                        typer.echo(plain)
                elif isinstance(arg, Table):
                    # Tables are human-mode only; use --json instead
                    pass
        else:
            self._rich_console.print(*args, **kwargs)

    def __getattr__(self, name):
        """Delegate all other attributes to the rich console."""
        return getattr(self._rich_console, name)


_console = MachineAwareConsole()


def echo(message: str = "", **kwargs) -> None:
    typer.echo(message, **kwargs)


def print_json(data: Any, minified: bool = None) -> None:
    """
    Print JSON data respecting machine mode.
    In machine mode, always minifies. In human mode, pretty prints.
    """
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        echo(json.dumps(data, separators=(',', ':')))
    else:
        echo(json.dumps(data, indent=2))


def print_error(message: str, code: str = None) -> None:
    """
    Print an error message respecting machine mode.
    In machine mode, outputs a structured JSON error on stdout.
    """
    if CLIConfig.is_machine_mode():
        error_obj = {"status": "error", "message": message}
        if code:
            error_obj["code"] = code
        print_json(error_obj)
    else:
        typer.echo(f"Error: {message}", err=True)


def get_console() -> MachineAwareConsole:
    """
    Get the console instance for advanced usage.
    """
    return _console
