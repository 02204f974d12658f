"""Tests for the proxy and demo workflows."""

import pytest
from unittest.mock import patch

from dockhand.errors import PreconditionError, UnresolvableInput
from dockhand.models.config import DemoConfig, ProxyConfig
from dockhand.models.resource import ContainerSpec, Outcome
from dockhand.resolver import InputResolver
from dockhand.workflows.demo import add_demo, demo_inventory
from dockhand.workflows.proxy import proxy_inventory, setup_proxy


@pytest.fixture(autouse=True)
def docker_on_path():
    with patch("dockhand.workflows.common.shutil.which", return_value="/usr/bin/docker"):
        yield


def no_channel_resolver():
    return InputResolver(channel_factory=lambda: None)


class TestProxyInventory:
    """Declared proxy resources."""

    def test_order_and_contents(self):
        specs = proxy_inventory(ProxyConfig(), "ops@example.com")

        assert [(s.kind, s.name) for s in specs] == [
            ("network", "proxy"),
            ("volume", "np-certs"),
            ("volume", "np-html"),
            ("volume", "np-vhost.d"),
            ("volume", "np-acme"),
            ("container", "nginx-proxy"),
            ("container", "nginx-proxy-acme"),
        ]
        acme = specs[-1]
        assert acme.environment == {"DEFAULT_EMAIL": "ops@example.com"}
        assert acme.network == "proxy"

    def test_proxy_mounts_certs_read_only(self):
        proxy = proxy_inventory(ProxyConfig(), "ops@example.com")[5]

        certs = next(m for m in proxy.mounts if m.target == "/etc/nginx/certs")
        assert certs.read_only is True
        assert [p.as_argument() for p in proxy.ports] == ["80:80", "443:443"]


@pytest.mark.asyncio
class TestSetupProxy:
    """End-to-end proxy convergence against the in-memory engine."""

    async def test_first_run_then_rerun(self, fake_engine):
        config = ProxyConfig()

        first = await setup_proxy(config, fake_engine, no_channel_resolver(), email="ops@example.com", environ={})
        assert first.converged
        assert all(o.outcome == Outcome.CREATED for o in first.outcomes)

        # no flag on the re-run: the email comes back from the companion's environment
        second = await setup_proxy(config, fake_engine, no_channel_resolver(), environ={})

        assert second.parameters["email"] == "ops@example.com"
        assert {o.name: o.outcome for o in second.outcomes if o.kind == "container"} == {
            "nginx-proxy": Outcome.RECREATED,
            "nginx-proxy-acme": Outcome.RECREATED,
        }
        assert "nginx-proxy" in second.table

    async def test_email_from_environment(self, fake_engine):
        result = await setup_proxy(
            ProxyConfig(), fake_engine, no_channel_resolver(), environ={"LETSENCRYPT_EMAIL": "env@example.com"}
        )

        assert fake_engine.containers["nginx-proxy-acme"].environment["DEFAULT_EMAIL"] == "env@example.com"
        assert result.parameters["email"] == "env@example.com"

    async def test_missing_email_without_terminal(self, fake_engine):
        with pytest.raises(UnresolvableInput) as exc_info:
            await setup_proxy(ProxyConfig(), fake_engine, no_channel_resolver(), environ={})

        assert "LETSENCRYPT_EMAIL" in str(exc_info.value)
        assert fake_engine.calls == []

    async def test_docker_not_installed(self, fake_engine):
        with patch("dockhand.workflows.common.shutil.which", return_value=None):
            with pytest.raises(PreconditionError):
                await setup_proxy(ProxyConfig(), fake_engine, no_channel_resolver(), email="ops@example.com")


@pytest.mark.asyncio
class TestAddDemo:
    """Demo deployment."""

    async def _proxy_up(self, fake_engine):
        await setup_proxy(ProxyConfig(), fake_engine, no_channel_resolver(), email="acme@example.com", environ={})

    async def test_requires_proxy_stack(self, fake_engine):
        with pytest.raises(PreconditionError) as exc_info:
            await add_demo(DemoConfig(), ProxyConfig(), fake_engine, no_channel_resolver(), fqdn="demo.example.com")

        assert "proxy setup" in str(exc_info.value)

    async def test_deploys_with_recorded_email(self, fake_engine):
        await self._proxy_up(fake_engine)

        result = await add_demo(
            DemoConfig(), ProxyConfig(), fake_engine, no_channel_resolver(),
            domain="Example.COM", subdomain="Demo", environ={},
        )

        assert result.parameters["fqdn"] == "demo.example.com"
        demo = fake_engine.containers["demo-hello"]
        assert demo.environment["VIRTUAL_HOST"] == "demo.example.com"
        assert demo.environment["LETSENCRYPT_HOST"] == "demo.example.com"
        assert demo.environment["LETSENCRYPT_EMAIL"] == "acme@example.com"
        assert demo.network == "proxy"
        assert result.outcomes[0].outcome == Outcome.CREATED

    async def test_redeploy_recreates(self, fake_engine):
        await self._proxy_up(fake_engine)
        kwargs = dict(fqdn="demo.example.com", email="ops@example.com", environ={})

        await add_demo(DemoConfig(), ProxyConfig(), fake_engine, no_channel_resolver(), **kwargs)
        result = await add_demo(DemoConfig(), ProxyConfig(), fake_engine, no_channel_resolver(), **kwargs)

        assert result.outcomes[0].outcome == Outcome.RECREATED


def test_demo_inventory_renders_page():
    specs = demo_inventory(DemoConfig(), ProxyConfig(), "demo.example.com", "ops@example.com")

    assert len(specs) == 1
    demo = specs[0]
    assert isinstance(demo, ContainerSpec)
    assert "Hello from demo.example.com" in demo.environment["DEMO_INDEX_HTML"]
    assert demo.command[:2] == ["sh", "-c"]
    assert "DEMO_INDEX_HTML" in demo.command[2]
