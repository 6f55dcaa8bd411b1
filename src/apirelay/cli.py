"""
CLI entry point for apirelay.

Commands:
    serve       Run the MCP server
    call        Invoke one tool and print its envelope
    tools       List the available tools
    doctor      Check the configuration

Architecture Note:
    The CLI is thin - it loads configuration and delegates to the server
    and tool registry.
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from apirelay import __version__
from apirelay.client import create_api_client
from apirelay.config import init_runtime
from apirelay.errors import ConfigError, ToolNotFoundError
from apirelay.schema import RelayConfig, TransportKind
from apirelay.tools import ToolContext, ToolOutput, build_registry

app = typer.Typer(
    name="apirelay",
    help="Relay MCP tool calls to an external HTTP API.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration file. Defaults to environment variables.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]apirelay[/bold] version {__version__}")
        raise typer.Exit()


def _load(config_path: Path | None) -> RelayConfig:
    try:
        return init_runtime(config_path)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(code=2) from e


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    apirelay - bridge agent tool calls to a REST API.
    """


@app.command()
def serve(
    config_path: ConfigOption = None,
    transport: Annotated[
        Optional[TransportKind],
        typer.Option("--transport", "-t", help="MCP transport (overrides MCP_TRANSPORT)."),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Listen address for HTTP transports."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Listen port for HTTP transports."),
    ] = None,
) -> None:
    """
    Run the MCP server.

    Example:
        $ apirelay serve --transport stdio
    """
    from apirelay.server import run

    config = _load(config_path)
    overrides: dict[str, Any] = {}
    if transport is not None:
        overrides["transport"] = transport
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        config = config.model_copy(update=overrides)

    run(config)


@app.command()
def call(
    tool_name: Annotated[str, typer.Argument(help="Tool to invoke (see `apirelay tools`).")],
    args_json: Annotated[
        str,
        typer.Option("--args", "-a", help="Tool arguments as a JSON object."),
    ] = "{}",
    config_path: ConfigOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the envelope as JSON."),
    ] = False,
) -> None:
    """
    Invoke one tool and print its result envelope.

    Exits with code 1 when the envelope reports failure.

    Example:
        $ apirelay call api_get --args '{"endpoint": "/users/1"}'
    """
    try:
        args = json.loads(args_json)
    except json.JSONDecodeError as e:
        console.print(f"[red]--args is not valid JSON:[/red] {e}")
        raise typer.Exit(code=2) from e
    if not isinstance(args, dict):
        console.print("[red]--args must be a JSON object[/red]")
        raise typer.Exit(code=2)

    config = _load(config_path)
    registry = build_registry()
    context = ToolContext(client=create_api_client(config), config=config)

    try:
        output = asyncio.run(registry.dispatch(tool_name, args, context))
    except ToolNotFoundError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=2) from e

    if json_output:
        print(json.dumps(output.structured, indent=2, default=str))
    else:
        _display_output(output)

    raise typer.Exit(code=0 if output.success else 1)


def _display_output(output: ToolOutput) -> None:
    """Pretty-print an envelope."""
    icon = "[green]✓[/green]" if output.success else "[red]✗[/red]"
    console.print(f"{icon} {output.summary}")
    console.print_json(json.dumps(output.structured, default=str))


@app.command("tools")
def list_tools() -> None:
    """List the available tools."""
    registry = build_registry()

    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Title")
    table.add_column("Description", style="dim")

    for name in registry.list_tools():
        tool = registry.get(name)
        table.add_row(tool.name, tool.title, tool.description)

    console.print(table)


@app.command()
def doctor(
    config_path: ConfigOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results in JSON format."),
    ] = False,
) -> None:
    """
    Check the configuration.

    Fails when the base URL is still the placeholder. Secrets are reported
    as present or absent, never printed.

    Example:
        $ apirelay doctor
    """
    config = _load(config_path)

    checks = [
        {
            "name": "Base URL",
            "ok": config.base_url_configured,
            "value": config.base_url,
            "message": "OK" if config.base_url_configured else "Placeholder in use. Set API_BASE_URL.",
        },
        {
            "name": "Timeout",
            "ok": True,
            "value": f"{config.timeout_ms}ms",
            "message": "OK",
        },
        {
            "name": "Static API key",
            "ok": True,
            "value": config.api_key_header,
            "message": "Configured" if config.api_key else "Not configured",
        },
        {
            "name": "Initial auth token",
            "ok": True,
            "value": "AUTH_TOKEN",
            "message": "Configured" if config.auth_token else "Not configured (use api_auth)",
        },
        {
            "name": "Transport",
            "ok": True,
            "value": config.transport.value,
            "message": "OK" if config.transport == TransportKind.STDIO else f"{config.host}:{config.port}",
        },
    ]
    all_ok = all(c["ok"] for c in checks)

    if json_output:
        print(json.dumps({"ok": all_ok, "version": __version__, "checks": checks}, indent=2))
    else:
        console.print(f"[bold]apirelay doctor[/bold] v{__version__}")
        console.print()
        for check in checks:
            icon = "[green]✓[/green]" if check["ok"] else "[red]✗[/red]"
            if check["ok"]:
                console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim] - {check['message']}")
            else:
                console.print(f"{icon} {check['name']}: [dim]{check['value']}[/dim]")
                console.print(f"    [red]{check['message']}[/red]")
        console.print()
        if all_ok:
            console.print("[green]All checks passed![/green]")
        else:
            console.print("[yellow]Some checks failed. See above for details.[/yellow]")

    raise typer.Exit(code=0 if all_ok else 1)


if __name__ == "__main__":
    app()
