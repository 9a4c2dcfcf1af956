"""CLI entry point for cors-relay."""

import asyncio
import json
import sys
from datetime import datetime
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

from app import create_app
from core.config import Config, effective_env, load_config
from core.exceptions import BackendApplicationError, ConfigurationError
from services.api_client import ApiClient
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, mask, shutdown_log_executor, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            sys.exit(0 if check_backend(config) else 1)

        if arg == "--lookup":
            if len(sys.argv) < 3:
                console.print("[red][ERROR][/red] Usage: cors-relay --lookup <document_id>")
                sys.exit(2)
            sys.exit(0 if print_lookup(config, sys.argv[2]) else 1)

        if arg == "--config":
            print_config(config)
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        console.print(f"[red][ERROR][/red] Unknown option: {arg}")
        _print_help()
        sys.exit(2)

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Relay started",
        port=config.proxy.port,
        target=f"{config.backend.origin}{config.backend.prefix}",
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        shutdown_log_executor()
        dashboard.stop()


def print_config(config: Config) -> None:
    """Print every environment variable with the value in effect."""
    table = Table(title="Effective configuration", show_header=True, header_style="bold")
    table.add_column("Variable")
    table.add_column("Value")
    for name, value in effective_env(config).items():
        if name == "API_TOKEN":
            value = mask(value) if value else "[dim](not set)[/dim]"
        table.add_row(name, value)
    console.print(table)


def check_backend(config: Config) -> bool:
    """Print the configuration and check the backend once."""
    print_config(config)
    target = f"{config.backend.origin}{config.backend.prefix}"
    try:
        response = httpx.head(target, timeout=config.backend.timeout)
    except httpx.RequestError as e:
        console.print(f"[red]Backend unreachable:[/red] {target} ({e})")
        return False
    console.print(f"[green]Backend reachable:[/green] {target} -> {response.status_code}")
    return True


async def lookup_document(
    config: Config,
    document_id: str,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """Fetch a report straight from the backend the way the frontend does."""
    base_url = f"{config.backend.origin}{config.backend.prefix}"
    async with ApiClient(
        base_url,
        token=config.backend.token,
        client=client,
        timeout=config.backend.timeout,
    ) as api:
        return await api.get_user_by_document(document_id)


def print_lookup(config: Config, document_id: str) -> bool:
    """Print the backend report for a document number."""
    try:
        data = asyncio.run(lookup_document(config, document_id))
    except BackendApplicationError as e:
        console.print(f"[red]Backend answered {e.status_code}:[/red] {e}")
        return False
    except httpx.RequestError as e:
        console.print(f"[red]Backend unreachable:[/red] {e}")
        return False
    console.print_json(json.dumps(data, default=str))
    return True


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]CORS Relay[/bold cyan]

Relays /api requests to the backend with CORS headers; serves static files otherwise.

[bold]Usage:[/bold]
    cors-relay              Start with live dashboard
    cors-relay --check      Show config and check the backend
    cors-relay --config     Show effective configuration
    cors-relay --lookup ID  Fetch the report for a document number (uses API_TOKEN)
    cors-relay --help       Show this help

[bold]Configuration:[/bold]
    API_BASE_URL, API_TARGET, API_PREFIX, API_TOKEN, API_TIMEOUT,
    PROXY_HOST, PROXY_PORT, PROXY_DEBUG, STATIC_DIR
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
