"""Tests for network interface renaming."""

import pytest
from unittest.mock import AsyncMock, patch

from dockhand.models.config import NicConfig
from dockhand.resolver import InputResolver
from dockhand.utils.process import CommandResult
from dockhand.workflows import nic
from dockhand.workflows.nic import parse_connection, parse_default_interface, rename_interface


ROUTES = """\
default via 192.168.1.1 dev enp1s0 proto dhcp metric 100
192.168.1.0/24 dev enp1s0 proto kernel scope link src 192.168.1.20 metric 100
"""


def test_parse_default_interface():
    assert parse_default_interface(ROUTES) == "enp1s0"
    assert parse_default_interface("10.0.0.0/8 dev eth1 scope link\n") is None


def test_parse_connection():
    output = "Wired connection 1:enp1s0\nlo:lo\nvpn\\:office:\n"

    assert parse_connection(output, "enp1s0") == "Wired connection 1"
    assert parse_connection(output, "wlan0") is None


@pytest.fixture
def host(tmp_path):
    """Fake /sys/class/net and command runner."""
    sys_net = tmp_path / "sys"
    (sys_net / "enp1s0").mkdir(parents=True)
    (sys_net / "enp1s0" / "address").write_text("52:54:00:12:34:56\n")

    outputs = {
        ("ip", "route"): ROUTES,
        ("nmcli", "-t", "-f", "NAME,DEVICE", "connection", "show"): "Wired connection 1:enp1s0\n",
    }
    commands = []

    async def fake_run(cmd, **kwargs):
        commands.append(cmd)
        return CommandResult(0, outputs.get(tuple(cmd), ""))

    with patch.object(nic, "SYS_CLASS_NET", sys_net), patch.object(nic, "run_command", side_effect=fake_run):
        yield commands


@pytest.mark.asyncio
class TestRenameInterface:
    """rename_interface with the host mocked out."""

    async def test_writes_link_and_updates_profile(self, host, tmp_path):
        config = NicConfig(network_dir=str(tmp_path / "network"))
        systemd = AsyncMock()
        resolver = InputResolver(channel_factory=lambda: None)

        result = await rename_interface(config, resolver, systemd)

        link = (tmp_path / "network" / "10-eth0.link").read_text()
        assert "MACAddress=52:54:00:12:34:56" in link
        assert "Name=eth0" in link
        assert result.connection == "Wired connection 1"
        assert ["nmcli", "con", "mod", "Wired connection 1", "connection.interface-name", "eth0"] in host
        assert ["dracut", "-f"] in host
        systemd.restart_unit.assert_awaited_once_with("NetworkManager.service")
        # no terminal and no --yes: never reboot
        assert result.reboot is False
        systemd.reboot.assert_not_called()

    async def test_yes_reboots(self, host, tmp_path):
        config = NicConfig(network_dir=str(tmp_path / "network"))
        systemd = AsyncMock()
        resolver = InputResolver(channel_factory=lambda: None)

        result = await rename_interface(config, resolver, systemd, target="lan0", assume_yes=True)

        assert result.reboot is True
        assert (tmp_path / "network" / "10-lan0.link").exists()
        systemd.reboot.assert_awaited_once()
