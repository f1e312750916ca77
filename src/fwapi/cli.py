"""Main CLI entry point using Typer.

This module defines the root CLI application, the ``serve`` command
that runs the HTTP API, and helper commands for configuration and
interface inspection.
"""

from pathlib import Path
from typing import Optional, Annotated

import typer
import uvicorn
from rich.console import Console

from fwapi import __version__
from fwapi.core.context import ExecutionContext, create_context
from fwapi.core.output import console as app_console
from fwapi.core.config import DEFAULT_CONFIG_PATH, init_config
from fwapi.core.exceptions import FwapiError
from fwapi.core.validation import validate_port
from fwapi.services import network


app = typer.Typer(
    name="fwapi",
    help="REST API over iptables tables, chains, rules and host interfaces.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

config_app = typer.Typer(
    name="config",
    help="Configuration management.",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")


# Type aliases for common options
VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase output verbosity. Can be repeated (-v, -vv). -vv logs every iptables call.",
    ),
]

QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Suppress non-essential output. Only show errors.",
        is_flag=True,
    ),
]

NoColorOption = Annotated[
    bool,
    typer.Option(
        "--no-color",
        help="Disable colored output.",
        is_flag=True,
    ),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help=f"Path to configuration file. Default: {DEFAULT_CONFIG_PATH}",
        exists=False,
        file_okay=True,
        dir_okay=False,
    ),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Overwrite an existing file.",
        is_flag=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console = Console()
        console.print(f"fwapi version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """fwapi - REST API over iptables.

    [bold]Examples:[/bold]
        fwapi config init
        fwapi serve --port 8080
        fwapi interfaces --default
    """
    pass


def handle_error(error: FwapiError) -> None:
    """Handle an FwapiError by printing formatted error and exiting."""
    app_console.report(error)
    raise typer.Exit(error.exit_code)


def uvicorn_log_level(ctx: ExecutionContext) -> str:
    """Map console verbosity to a uvicorn log level."""
    if ctx.is_quiet:
        return "warning"
    if ctx.is_debug:
        return "debug"
    return "info"


# ============================================================================
# Server
# ============================================================================

@app.command("serve")
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-H", help="Address to bind. Overrides the config file."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind. Overrides the config file."),
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
) -> None:
    """Run the HTTP API.

    iptables needs root (or CAP_NET_ADMIN). The API has no
    authentication of its own; keep it on localhost or behind a proxy.
    """
    from fwapi.api import create_app

    ctx = create_context(verbose=verbose, quiet=quiet, no_color=no_color, config=config)

    try:
        server = ctx.config.server
        bind_host = host or server.host
        bind_port = validate_port(port) if port is not None else server.port
        application = create_app(ctx)
    except FwapiError as e:
        handle_error(e)

    firewall = ctx.config.firewall
    ctx.console.info(f"Serving fwapi on http://{bind_host}:{bind_port}")
    ctx.console.verbose(
        f"Using {firewall.binary} (wait for lock: {firewall.wait_for_lock}, "
        f"timeout: {firewall.command_timeout}s)"
    )

    uvicorn.run(
        application,
        host=bind_host,
        port=bind_port,
        log_level=uvicorn_log_level(ctx),
    )


# ============================================================================
# Interfaces
# ============================================================================

@app.command("interfaces")
def interfaces(
    default: Annotated[
        bool,
        typer.Option("--default", "-d", help="Show only the default interface.", is_flag=True),
    ] = False,
    no_color: NoColorOption = False,
) -> None:
    """Show the host's network interfaces."""
    ctx = create_context(no_color=no_color)

    try:
        if default:
            items = [network.get_default_interface()]
        else:
            items = network.get_interfaces()
    except FwapiError as e:
        handle_error(e)

    rows = [
        [
            intf.name,
            intf.mac,
            ", ".join(intf.ips) or "-",
            "yes" if intf.up else "no",
            "yes" if intf.loopback else "no",
            "yes" if intf.running else "no",
        ]
        for intf in items
    ]
    ctx.console.table(
        "Default interface" if default else "Network interfaces",
        ["Name", "MAC", "IPs", "Up", "Loopback", "Running"],
        rows,
    )


# ============================================================================
# Config commands
# ============================================================================

@config_app.command("show")
def config_show(
    config: ConfigOption = None,
    no_color: NoColorOption = False,
) -> None:
    """Show the effective configuration.

    Displays the config file merged with FWAPI_* environment overrides.
    """
    ctx = create_context(no_color=no_color, config=config)

    try:
        app_config = ctx.config

        ctx.console.print()
        ctx.console.print(f"[bold]Configuration file:[/bold] {ctx.config_path}")
        ctx.console.print(f"[bold]File exists:[/bold] {ctx.config_path.exists()}")
        ctx.console.print()

        ctx.console.yaml(app_config.config.to_yaml(), title="Configuration")
    except FwapiError as e:
        handle_error(e)


@config_app.command("init")
def config_init(
    config: ConfigOption = None,
    force: ForceOption = False,
    no_color: NoColorOption = False,
) -> None:
    """Initialize a new configuration file with commented defaults."""
    ctx = create_context(no_color=no_color, config=config)
    config_path = ctx.config_path

    try:
        init_config(config_path, force=force)
    except FwapiError as e:
        handle_error(e)
    except PermissionError:
        ctx.console.error(f"Permission denied writing {config_path}")
        ctx.console.hint("Run with sudo or pass --config")
        raise typer.Exit(2)

    ctx.console.success(f"Configuration written to {config_path}")


if __name__ == "__main__":
    app()
