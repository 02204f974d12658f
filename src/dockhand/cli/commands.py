"""Command implementations for CLI."""

import logging
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from dockhand.models.config import DockhandConfig
from dockhand.models.resource import Outcome, ResourceOutcome
from dockhand.resolver import InputResolver
from dockhand.utils.apt import AptInstaller
from dockhand.utils.docker import DockerEngine
from dockhand.utils.systemd import SystemdDBus
from dockhand.workflows.common import StackResult
from dockhand.workflows.demo import add_demo
from dockhand.workflows.nic import rename_interface
from dockhand.workflows.proxy import setup_proxy
from dockhand.workflows.runtime import RuntimeRegistration, install_runtime, register_runtime


logger = logging.getLogger(__name__)

console = Console()

EXIT_OK = 0
EXIT_PARTIAL = 2

OUTCOME_STYLES = {
    Outcome.CREATED: "green",
    Outcome.RECREATED: "cyan",
    Outcome.UNCHANGED: "dim",
    Outcome.FAILED: "red",
}


def render_outcomes(outcomes: List[ResourceOutcome]) -> None:
    """Print one row per reconciled resource."""
    table = Table(title="Resources")
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Outcome")
    table.add_column("Notes", style="dim", max_width=60)

    for item in outcomes:
        style = OUTCOME_STYLES[item.outcome]
        notes = item.reason or "; ".join(item.warnings)
        table.add_row(item.kind, item.name, f"[{style}]{item.outcome.value}[/{style}]", notes)

    console.print(table)


def _finish_stack(result: StackResult, done_message: str) -> int:
    render_outcomes(result.outcomes)
    if result.table:
        console.print(result.table, highlight=False)
    console.print()

    if not result.converged:
        failed = [o.name for o in result.outcomes if not o.converged]
        console.print(f"[yellow]Partial convergence:[/yellow] {', '.join(failed)} did not converge. Re-run to retry.")
        return EXIT_PARTIAL

    console.print(done_message)
    return EXIT_OK


async def proxy_setup(config: DockhandConfig, email: Optional[str]) -> int:
    """Converge nginx-proxy and the ACME companion."""
    engine = DockerEngine(config.docker.binary)
    with InputResolver() as resolver:
        result = await setup_proxy(config.proxy, engine, resolver, email=email)

    proxy = config.proxy
    return _finish_stack(
        result,
        f"[green]✓[/green] nginx-proxy + acme-companion are running.\n"
        f"Contact email: {result.parameters['email']}\n\n"
        f"Notes:\n"
        f"  • Re-run any time; it converges state.\n"
        f"  • Ports {proxy.http_port} and {proxy.https_port} must be reachable from the Internet.\n"
        f"  • Certs and ACME state persist in volumes: {proxy.certs_volume}, {proxy.acme_volume}.\n\n"
        f"Next:\n"
        f"  dockhand demo add   # add a demo site",
    )


async def demo_add(
    config: DockhandConfig,
    fqdn: Optional[str],
    domain: Optional[str],
    subdomain: Optional[str],
    email: Optional[str],
) -> int:
    """Deploy the demo backend."""
    engine = DockerEngine(config.docker.binary)
    with InputResolver() as resolver:
        result = await add_demo(
            config.demo,
            config.proxy,
            engine,
            resolver,
            fqdn=fqdn,
            domain=domain,
            subdomain=subdomain,
            email=email,
        )

    site = result.parameters["fqdn"]
    return _finish_stack(
        result,
        f"[green]✓[/green] Demo is (re)deployed at: https://{site}\n\n"
        f"DNS & firewall checklist for automatic TLS:\n"
        f"  • Create an A/AAAA record: {site} -> your server's public IP\n"
        f"  • Ensure TCP 80 and 443 are open\n\n"
        f"Quick tests (after DNS propagates):\n"
        f"  curl -I http://{site}\n"
        f"  curl -I https://{site}\n"
        f"  curl -s https://{site}/health",
    )


def _report_registration(config: DockhandConfig, registration: RuntimeRegistration) -> int:
    merge = registration.merge
    if merge is not None:
        if merge.backup_path:
            console.print(f"Backup: {merge.backup_path}")
        state = "fresh" if merge.fresh else "merged"
        console.print(f"{config.docker.daemon_config}: {state}")
    if registration.override_path:
        console.print(f"Override: {registration.override_path}")
    if registration.info:
        console.print(registration.info, highlight=False)

    if registration.error:
        console.print(f"[yellow]Warning:[/yellow] {registration.error}")
        return EXIT_PARTIAL

    console.print(f"[green]✓[/green] Docker is configured for '{config.runtime.name}'.")
    return EXIT_OK


async def runtime_install(config: DockhandConfig, set_default: bool, override: bool) -> int:
    """Install Sysbox and Docker CE and register the runtime."""
    systemd = SystemdDBus()
    await systemd.connect()
    try:
        registration = await install_runtime(
            config,
            AptInstaller(),
            systemd,
            DockerEngine(config.docker.binary),
            set_default=set_default,
            override=override,
        )
    finally:
        await systemd.disconnect()
    return _report_registration(config, registration)


async def runtime_register(config: DockhandConfig, set_default: bool, override: bool) -> int:
    """Only merge daemon.json (and optionally the unit override)."""
    systemd = SystemdDBus()
    await systemd.connect()
    try:
        registration = await register_runtime(
            config.docker,
            config.runtime,
            systemd,
            set_default=set_default,
            override=override,
        )
    finally:
        await systemd.disconnect()
    return _report_registration(config, registration)


async def nic_rename(config: DockhandConfig, name: Optional[str], assume_yes: bool) -> int:
    """Pin the primary interface name."""
    systemd = SystemdDBus()
    await systemd.connect()
    try:
        with InputResolver() as resolver:
            result = await rename_interface(config.nic, resolver, systemd, target=name, assume_yes=assume_yes)
    finally:
        await systemd.disconnect()

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    console.print(f"[green]✓[/green] {result.interface} ({result.mac}) will be named {result.target} after reboot.")
    if not result.reboot:
        console.print("Please reboot manually when ready.")
    return EXIT_OK
