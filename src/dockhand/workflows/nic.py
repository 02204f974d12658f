"""Pin the primary network interface to a stable name."""

import asyncio
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dockhand.core.merge import write_atomic
from dockhand.errors import CommandError, PreconditionError
from dockhand.models.config import NicConfig
from dockhand.models.parameter import FlagSource, ParameterSpec, PromptSource
from dockhand.resolver import InputResolver
from dockhand.resolver.validators import is_dns_label, is_yes, is_yes_no, lowercase
from dockhand.utils.process import run_command
from dockhand.utils.systemd import SystemdDBus
from dockhand.utils.templates import NIC_LINK_TEMPLATE, render_template


logger = logging.getLogger(__name__)

SYS_CLASS_NET = Path("/sys/class/net")


@dataclass
class NicRename:
    """Outcome of the rename workflow."""
    interface: str
    mac: str
    target: str
    link_file: Path
    connection: Optional[str] = None
    reboot: bool = False
    warnings: List[str] = field(default_factory=list)


def parse_default_interface(route_output: str) -> Optional[str]:
    """Device of the first default route in `ip route` output."""
    for line in route_output.splitlines():
        tokens = line.split()
        if tokens and tokens[0] == "default" and "dev" in tokens:
            index = tokens.index("dev")
            if index + 1 < len(tokens):
                return tokens[index + 1]
    return None


def parse_connection(nmcli_output: str, device: str) -> Optional[str]:
    """NetworkManager profile bound to device, from `nmcli -t -f NAME,DEVICE` output."""
    for line in nmcli_output.splitlines():
        name, sep, dev = line.rpartition(":")
        if sep and dev == device:
            return name.replace("\\:", ":")
    return None


async def _run(cmd: List[str], action: str) -> str:
    try:
        result = await run_command(cmd)
    except subprocess.CalledProcessError as e:
        raise CommandError(f"Failed to {action}", stderr=e.stderr or "") from e
    except FileNotFoundError as e:
        raise CommandError(f"Failed to {action}: {cmd[0]} not found") from e
    return result.stdout


def reboot_parameter(assume_yes: bool) -> ParameterSpec:
    return ParameterSpec(
        name="reboot",
        sources=[FlagSource("yes" if assume_yes else None, "--yes"), PromptSource("Reboot now? (y/n)")],
        validator=is_yes_no,
        normalizer=lowercase,
        required=False,
        hint="Answer y or n.",
    )


async def rename_interface(
    config: NicConfig,
    resolver: InputResolver,
    systemd: SystemdDBus,
    target: Optional[str] = None,
    assume_yes: bool = False,
) -> NicRename:
    """Write a .link file for the primary NIC and point NetworkManager at the new name."""
    target = target or config.target_name
    if not is_dns_label(target) or len(target) > 15:
        raise PreconditionError(f"'{target}' is not a valid interface name.")

    interface = parse_default_interface(await _run(["ip", "route"], "read routing table"))
    if not interface:
        raise PreconditionError("Could not detect primary interface.")
    logger.info(f"Primary interface: {interface}")

    mac = (await asyncio.to_thread((SYS_CLASS_NET / interface / "address").read_text)).strip()
    logger.info(f"MAC address: {mac}")

    link_file = Path(config.network_dir) / f"10-{target}.link"
    content = render_template(NIC_LINK_TEMPLATE, mac=mac, name=target)
    await asyncio.to_thread(lambda: link_file.parent.mkdir(parents=True, exist_ok=True))
    await asyncio.to_thread(write_atomic, link_file, content)
    logger.info(f"Created {link_file}")

    result = NicRename(interface=interface, mac=mac, target=target, link_file=link_file)

    connections = await _run(["nmcli", "-t", "-f", "NAME,DEVICE", "connection", "show"], "list connections")
    result.connection = parse_connection(connections, interface)
    if result.connection is None:
        message = f"No NetworkManager connection found for {interface}; update the profile manually"
        logger.warning(message)
        result.warnings.append(message)
    else:
        await _run(
            ["nmcli", "con", "mod", result.connection, "connection.interface-name", target],
            "set interface name",
        )
        try:
            await _run(["nmcli", "con", "mod", result.connection, "connection.id", target], "rename profile")
        except CommandError as e:
            logger.warning(str(e))
            result.warnings.append(str(e))

    logger.info("Rebuilding initramfs")
    await _run(["dracut", "-f"], "rebuild initramfs")

    try:
        await systemd.restart_unit("NetworkManager.service")
    except Exception as e:
        message = f"Could not restart NetworkManager: {e}"
        logger.warning(message)
        result.warnings.append(message)

    answer = resolver.resolve(reboot_parameter(assume_yes), {})
    result.reboot = bool(answer) and is_yes(answer)
    if result.reboot:
        await systemd.reboot()
    return result
