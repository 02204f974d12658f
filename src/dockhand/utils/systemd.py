"""systemd manager access for daemon reloads, unit restarts and reboots."""

import logging
import subprocess
from typing import Any, Optional, Sequence

from dbus_next import BusType
from dbus_next.aio import MessageBus

from dockhand.errors import CommandError
from dockhand.utils.process import run_command


logger = logging.getLogger(__name__)

SYSTEMD_BUS_NAME = "org.freedesktop.systemd1"
SYSTEMD_OBJECT_PATH = "/org/freedesktop/systemd1"
MANAGER_INTERFACE = "org.freedesktop.systemd1.Manager"


class SystemdDBus:
    """Talks to the systemd manager over the system bus.

    Hosts being provisioned are often minimal or half-configured, so the
    bus is optional: without it, or when a call over it fails, the same
    operation is run through systemctl.
    """

    def __init__(self, systemctl: str = "systemctl"):
        self.systemctl = systemctl
        self.bus: Optional[MessageBus] = None
        self.manager = None

    async def connect(self):
        try:
            self.bus = await MessageBus(bus_type=BusType.SYSTEM).connect()
            introspection = await self.bus.introspect(SYSTEMD_BUS_NAME, SYSTEMD_OBJECT_PATH)
            proxy = self.bus.get_proxy_object(SYSTEMD_BUS_NAME, SYSTEMD_OBJECT_PATH, introspection)
            self.manager = proxy.get_interface(MANAGER_INTERFACE)
            logger.debug("Connected to systemd over DBus")
        except Exception as e:
            logger.warning(f"systemd DBus unavailable, using {self.systemctl}: {e}")
            self.manager = None

    async def disconnect(self):
        if self.bus:
            self.bus.disconnect()
        self.bus = None
        self.manager = None

    async def _call(self, method: str, args: Sequence[Any], fallback: Sequence[str], action: str):
        """Run a manager method, or `systemctl <fallback>` when that is not possible."""
        if self.manager is not None:
            try:
                await getattr(self.manager, method)(*args)
                logger.info(f"{action.capitalize()}: done")
                return
            except Exception as e:
                logger.warning(f"Could not {action} over DBus, retrying with {self.systemctl}: {e}")

        cmd = [self.systemctl, *fallback]
        try:
            await run_command(cmd)
        except subprocess.CalledProcessError as e:
            raise CommandError(f"Failed to {action}", stderr=e.stderr or "") from e
        except FileNotFoundError as e:
            raise CommandError(f"Failed to {action}: {self.systemctl} not found") from e
        logger.info(f"{action.capitalize()}: done")

    async def reload_daemon(self):
        """Make systemd pick up changed unit files and drop-ins."""
        await self._call("call_reload", [], ["daemon-reload"], "reload systemd")

    async def restart_unit(self, unit: str):
        await self._call("call_restart_unit", [unit, "replace"], ["restart", unit], f"restart {unit}")

    async def reboot(self):
        await self._call("call_reboot", [], ["reboot"], "reboot the host")
