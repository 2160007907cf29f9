"""Start command for the rovo-relay CLI."""

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from src.core.config import config

app = typer.Typer(help="Start the relay server", invoke_without_command=True)


@app.callback()
def start(
    host: str = typer.Option(None, "--host", help="Override host"),
    port: int = typer.Option(None, "--port", help="Override port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
) -> None:
    """Start the relay server."""
    console = Console()

    # Override config if provided
    server_host = host or config.host
    server_port = port or config.port

    # Show configuration
    table = Table(title="Rovo Relay Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Server URL", f"http://{server_host}:{server_port}{config.route_prefix}")
    table.add_row("Upstream", config.upstream_base_url)
    table.add_row(
        "Credentials",
        "per-request (override mode)"
        if config.custom_header_key_enabled
        else str(sum(1 for c in config.credentials_raw.split(",") if c.strip())),
    )
    table.add_row("Rate Limit Lock", f"{config.rate_limit_lock_seconds}s")
    table.add_row("Request Timeout", f"{config.request_timeout}s")

    console.print(table)

    _start_server(server_host, server_port, reload)


def _start_server(host: str, port: int, reload: bool) -> None:
    """Start the uvicorn server."""
    uvicorn.run(
        "src.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=config.log_level.split()[0].lower() if config.log_level.split() else "info",
    )
