"""Tests for the systemd helper."""

import subprocess

import pytest
from unittest.mock import AsyncMock, Mock, patch

from dockhand.errors import CommandError
from dockhand.utils.process import CommandResult
from dockhand.utils.systemd import SystemdDBus


@pytest.mark.asyncio
class TestSystemdDBus:
    """DBus calls with systemctl fallback."""

    async def test_restart_over_dbus(self):
        systemd = SystemdDBus()
        systemd.manager = Mock(call_restart_unit=AsyncMock())

        with patch("dockhand.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
            await systemd.restart_unit("docker.service")

        systemd.manager.call_restart_unit.assert_awaited_once_with("docker.service", "replace")
        mock_run.assert_not_called()

    async def test_falls_back_when_dbus_call_fails(self):
        systemd = SystemdDBus()
        systemd.manager = Mock(call_reload=AsyncMock(side_effect=RuntimeError("access denied")))

        with patch("dockhand.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(0)
            await systemd.reload_daemon()

        mock_run.assert_awaited_once_with(["systemctl", "daemon-reload"])

    async def test_without_bus_uses_systemctl(self):
        systemd = SystemdDBus()

        with patch("dockhand.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(0)
            await systemd.restart_unit("NetworkManager.service")

        mock_run.assert_awaited_once_with(["systemctl", "restart", "NetworkManager.service"])

    async def test_systemctl_failure(self):
        systemd = SystemdDBus()
        error = subprocess.CalledProcessError(5, ["systemctl"], stderr="Unit docker.service not found.\n")

        with patch("dockhand.utils.systemd.run_command", new_callable=AsyncMock, side_effect=error):
            with pytest.raises(CommandError) as exc_info:
                await systemd.restart_unit("docker.service")

        assert "Unit docker.service not found." in str(exc_info.value)

    async def test_connect_failure_is_not_fatal(self):
        systemd = SystemdDBus()

        with patch("dockhand.utils.systemd.MessageBus") as mock_bus:
            mock_bus.return_value.connect = AsyncMock(side_effect=FileNotFoundError("no bus socket"))
            await systemd.connect()

        assert systemd.manager is None
