#!/usr/bin/env python3
"""lxcpilot CLI - drive a single LXC container from the command line."""
from contextlib import contextmanager
from typing import List, Optional

import typer
from rich.console import Console

from lxcpilot import cli_support
from lxcpilot.cli_support import print_error, print_success
from lxcpilot.core.errors import LxcPilotError
from lxcpilot.core.config import get_config
from lxcpilot.core.logger import configure_logging, get_logger

app = typer.Typer(
    name="lxcpilot",
    help="""lxcpilot - lifecycle driver for LXC system containers

Quick start:
  lxcpilot create web --template ./lxc-debian   # Build a container
  lxcpilot start web --share /srv/www:/var/www  # Boot it with a shared folder
  lxcpilot ip web                               # Wait for its address
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@contextmanager
def _report_errors():
    """Turn lxcpilot errors into a red message and exit code 1."""
    try:
        yield
    except LxcPilotError as exc:
        print_error(console, str(exc))
        raise typer.Exit(1) from exc


def _existing_driver(name: str):
    driver = cli_support.build_driver(name)
    driver.validate()
    return driver


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    log_file: Optional[str] = typer.Option(
        None, "--log-file", help="Also write logs to this file (default: log_file setting)."
    ),
) -> None:
    with _report_errors():
        log_file = log_file or get_config().log_file
    try:
        configure_logging(verbose=verbose, log_file=log_file)
    except OSError as exc:
        raise typer.BadParameter(f"Cannot write log file: {exc}", param_hint="'--log-file'") from exc


@app.command("ls")
def list_command() -> None:
    """List all containers known to lxc."""
    with _report_errors():
        names = cli_support.build_driver().cli.list()

    if not names:
        console.print("[dim]No containers found[/dim]")
        return
    for name in sorted(names):
        console.print(name)


@app.command("version")
def version_command() -> None:
    """Show the installed lxc version."""
    with _report_errors():
        console.print(cli_support.build_driver().cli.version())


@app.command("create")
def create_command(
    name: Optional[str] = typer.Argument(None, help="Container name (generated when omitted)."),
    template: str = typer.Option(..., "--template", "-t", help="Path to the lxc template script."),
    option: Optional[List[str]] = typer.Option(
        None, "--option", "-o", help="Template option (KEY=VALUE, passed as --KEY VALUE).", metavar="KEY=VALUE"
    ),
) -> None:
    """Create a container from a template script."""
    options = {
        (key if key.startswith("-") else f"--{key}"): value
        for key, value in cli_support.parse_key_values(option, param_hint="'--option'").items()
    }
    name = name or cli_support.generate_name()

    console.print(f"[dim]Creating container {name}...[/dim]")
    with _report_errors():
        cli_support.build_driver().create(name, template, options)
    print_success(console, f"Created {name}")


@app.command("start")
def start_command(
    name: str = typer.Argument(..., help="Container name."),
    share: Optional[List[str]] = typer.Option(
        None, "--share", help="Shared folder (HOST:GUEST).", metavar="HOST:GUEST"
    ),
    set_: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Runtime config override (KEY=VALUE).", metavar="KEY=VALUE"
    ),
) -> None:
    """Start a container, bind-mounting any shared folders."""
    folders = cli_support.parse_shares(share)
    customizations = cli_support.parse_customizations(set_)

    console.print(f"[dim]Starting container {name}...[/dim]")
    with _report_errors():
        driver = _existing_driver(name)
        if folders:
            driver.share_folders(folders)
        driver.start(customizations)
    print_success(console, f"Started {name}")


@app.command("halt")
def halt_command(name: str = typer.Argument(..., help="Container name.")) -> None:
    """Shut a running container down."""
    console.print(f"[dim]Stopping container {name}...[/dim]")
    with _report_errors():
        _existing_driver(name).halt()
    print_success(console, f"Stopped {name}")


@app.command("destroy")
def destroy_command(
    name: str = typer.Argument(..., help="Container name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Permanently remove a container."""
    if not yes:
        typer.confirm(f"Destroy container {name}?", abort=True)

    with _report_errors():
        _existing_driver(name).destroy()
    print_success(console, f"Destroyed {name}")


@app.command("state")
def state_command(name: str = typer.Argument(..., help="Container name.")) -> None:
    """Show the container state."""
    with _report_errors():
        state = cli_support.build_driver(name).state()
    console.print(state.value)


@app.command("ip")
def ip_command(name: str = typer.Argument(..., help="Container name.")) -> None:
    """Print the container's IPv4 address, waiting for it if needed."""
    with _report_errors():
        console.print(_existing_driver(name).assigned_ip())


@app.command("package")
def package_command(name: str = typer.Argument(..., help="Container name.")) -> None:
    """Archive the container rootfs into a tarball."""
    with _report_errors():
        path = _existing_driver(name).compress_rootfs()
    print_success(console, f"Rootfs archived to {path}")


if __name__ == "__main__":
    app()
