"""Main CLI entry point for rovo-relay."""

import typer
from rich.console import Console

# Import command modules
from src.cli.commands import config, start

app = typer.Typer(
    name="rovo-relay",
    help="Rovo Relay CLI - Run and inspect the chat completions relay",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(start.app, name="start", help="Start the relay server")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    from src import __version__

    console = Console()
    console.print(f"[bold cyan]rovo-relay[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Rovo Relay CLI."""
    if verbose:
        import logging

        logging.getLogger().setLevel(logging.DEBUG)


if __name__ == "__main__":
    app()
