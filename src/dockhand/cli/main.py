"""Main CLI implementation using Typer."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import typer
from rich.console import Console

from dockhand.cli.commands import (
    demo_add,
    nic_rename,
    proxy_setup,
    runtime_install,
    runtime_register,
)
from dockhand.core.config import ConfigManager
from dockhand.errors import DockhandError
from dockhand.models.config import DockhandConfig
from dockhand.utils.logging import setup_logging


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dockhand",
    help="Dockhand - idempotent container host provisioning",
    add_completion=False,
)

# Errors go to stderr so piped output stays clean
console = Console(stderr=True)


def _load_config(config_path: Optional[Path], log_level: Optional[str]) -> DockhandConfig:
    manager = ConfigManager(config_path)
    config = asyncio.run(manager.load())
    setup_logging(log_level or config.logging.level)
    return config


def _run_cli_command(ctx: typer.Context, handler: Callable[..., Awaitable[int]], **kwargs):
    """Run an async command handler and map errors to exit codes."""
    try:
        config = _load_config(ctx.obj.get("config_path"), ctx.obj.get("log_level"))
        code = asyncio.run(handler(config, **kwargs))
    except DockhandError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    if code:
        raise typer.Exit(code)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (default: $DOCKHAND_CONFIG or /etc/dockhand/config.yaml)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Override the configured log level"
    ),
):
    """Provision a container host: runtime, proxy stack and demo site."""
    ctx.obj = {"config_path": config, "log_level": log_level}


# Runtime subcommands
runtime_app = typer.Typer(help="Sandboxed runtime management")
app.add_typer(runtime_app, name="runtime")


@runtime_app.command("install")
def runtime_install_command(
    ctx: typer.Context,
    no_default: bool = typer.Option(False, "--no-default", help="Register the runtime without making it default"),
    no_override: bool = typer.Option(False, "--no-override", help="Do not write the docker.service override"),
):
    """Install Sysbox and Docker CE and register the runtime."""
    _run_cli_command(ctx, runtime_install, set_default=not no_default, override=not no_override)


@runtime_app.command("register")
def runtime_register_command(
    ctx: typer.Context,
    no_default: bool = typer.Option(False, "--no-default", help="Register the runtime without making it default"),
    override: bool = typer.Option(False, "--override", help="Also write the docker.service override"),
):
    """Register the runtime in daemon.json and restart Docker."""
    _run_cli_command(ctx, runtime_register, set_default=not no_default, override=override)


# Proxy subcommands
proxy_app = typer.Typer(help="Reverse-proxy stack")
app.add_typer(proxy_app, name="proxy")


@proxy_app.command("setup")
def proxy_setup_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Contact email for Let's Encrypt"),
):
    """Create or converge nginx-proxy and the ACME companion."""
    _run_cli_command(ctx, proxy_setup, email=email)


# Demo subcommands
demo_app = typer.Typer(help="Demo site behind the proxy")
app.add_typer(demo_app, name="demo")


@demo_app.command("add")
def demo_add_command(
    ctx: typer.Context,
    fqdn: Optional[str] = typer.Option(None, "--fqdn", "-f", help="Full site name, e.g. demo.example.com"),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Base domain, e.g. example.com"),
    subdomain: Optional[str] = typer.Option(None, "--subdomain", "-s", help="Subdomain label, e.g. demo"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Contact email for Let's Encrypt"),
):
    """Deploy or redeploy the demo backend."""
    _run_cli_command(ctx, demo_add, fqdn=fqdn, domain=domain, subdomain=subdomain, email=email)


# NIC subcommands
nic_app = typer.Typer(help="Network interface naming")
app.add_typer(nic_app, name="nic")


@nic_app.command("rename")
def nic_rename_command(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Target interface name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Reboot without asking"),
):
    """Pin the primary interface to a stable name."""
    _run_cli_command(ctx, nic_rename, name=name, assume_yes=yes)


# Config subcommands
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show_command(ctx: typer.Context):
    """Print the effective configuration."""
    manager = ConfigManager(ctx.obj.get("config_path"))
    try:
        asyncio.run(manager.load())
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    typer.echo(manager.dump(), nl=False)


def main():
    """Main entry point for CLI."""
    app()
