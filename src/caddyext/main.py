import typer

from caddyext import __version__
from caddyext.cli import directives
from caddyext.cli.config import CLIConfig
from caddyext.logging_config import setup_logging

app = typer.Typer()


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: tables and colors (also via CADDYEXT_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
):
    """
    caddyext: manage the directives compiled into Caddy.

    Machine mode is the default (plain data, no formatting).
    Use --human/-H for pretty output.
    """
    if human:
        CLIConfig.set_machine_mode(False)

    if verbose:
        setup_logging(level="DEBUG", suppress_console=False)
    elif CLIConfig.is_machine_mode():
        setup_logging(suppress_console=True)


app.command(name="list")(directives.list_cmd)
app.command(name="add")(directives.add_cmd)


@app.command()
def version():
    """
    Prints the current version of caddyext.
    """
    typer.echo(f"caddyext v{__version__}")


if __name__ == "__main__":
    app()
