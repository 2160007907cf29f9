"""Configuration commands for the rovo-relay CLI."""

import typer
from rich.console import Console
from rich.table import Table

from src.conversion.pipeline.transformers.prepend_messages import parse_pre_messages
from src.core.config import Config, validate_all
from src.core.exceptions import ConfigurationError
from src.core.model_registry import ModelRegistry

app = typer.Typer(help="Configuration management")


@app.command()
def show() -> None:
    """Show the current configuration (secrets masked)."""
    console = Console()
    cfg = Config()

    table = Table(title="Rovo Relay Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")

    for name, value in cfg.display_values().items():
        table.add_row(name, str(value))

    console.print(table)


def collect_config_problems() -> list[str]:
    """Return every configuration problem found, empty when the config is usable."""
    errors = validate_all()
    if errors:
        return [str(error) for error in errors]

    problems: list[str] = []
    cfg = Config()
    if not cfg.custom_header_key_enabled and not any(
        c.strip() for c in cfg.credentials_raw.split(",")
    ):
        problems.append(
            "RELAY_CREDENTIALS is empty; set it or enable CUSTOM_HEADER_KEY_ENABLED"
        )
    if cfg.pre_messages_json.strip():
        try:
            parse_pre_messages(cfg.pre_messages_json)
        except ConfigurationError as e:
            problems.append(e.message)
    try:
        ModelRegistry.from_json(cfg.model_registry_json)
    except ConfigurationError as e:
        problems.append(e.message)
    return problems


@app.command()
def check() -> None:
    """Validate the configuration; exits with status 1 on any problem."""
    console = Console()
    problems = collect_config_problems()

    if problems:
        for problem in problems:
            console.print(f"[red]✗[/red] {problem}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Configuration is valid")
