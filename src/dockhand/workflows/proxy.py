"""Reverse-proxy stack: nginx-proxy and the ACME companion."""

import logging
from typing import List, Mapping, Optional

from dockhand.core.engine import create_reconciler
from dockhand.models.config import ProxyConfig
from dockhand.models.parameter import EnvSource, FlagSource, ParameterSpec, PromptSource, RecordedSource
from dockhand.models.resource import ContainerSpec, MountSpec, NetworkSpec, PortSpec, ResourceSpec, VolumeSpec
from dockhand.resolver import InputResolver
from dockhand.resolver.validators import is_email
from dockhand.utils.docker import DockerEngine
from dockhand.workflows.common import StackResult, require_docker, stack_table


logger = logging.getLogger(__name__)

EMAIL_ENV = "LETSENCRYPT_EMAIL"
MANAGED_BY = "dockhand-proxy"


def email_parameter(
    flag_value: Optional[str],
    recorded: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    message: str = "Enter a contact email for Let's Encrypt (required)",
) -> ParameterSpec:
    """Contact email: flag, environment, value recorded on the companion, prompt."""
    return ParameterSpec(
        name="email",
        sources=[
            FlagSource(flag_value, "--email"),
            EnvSource(EMAIL_ENV, environ),
            RecordedSource(recorded, "DEFAULT_EMAIL of the ACME companion"),
            PromptSource(message),
        ],
        validator=is_email,
        hint="Expected something like you@example.com.",
        override=f"--email or {EMAIL_ENV}=you@example.com",
    )


def proxy_inventory(config: ProxyConfig, email: str) -> List[ResourceSpec]:
    """Network, volumes and the two proxy containers, in dependency order."""
    labels = {"managed-by": MANAGED_BY}
    return [
        NetworkSpec(name=config.network),
        VolumeSpec(name=config.certs_volume),
        VolumeSpec(name=config.html_volume),
        VolumeSpec(name=config.vhost_volume),
        VolumeSpec(name=config.acme_volume),
        ContainerSpec(
            name=config.proxy_name,
            image=config.proxy_image,
            restart=config.restart_policy,
            ports=[
                PortSpec(host=config.http_port, container=80),
                PortSpec(host=config.https_port, container=443),
            ],
            mounts=[
                MountSpec(source=config.certs_volume, target="/etc/nginx/certs", read_only=True),
                MountSpec(source=config.vhost_volume, target="/etc/nginx/vhost.d"),
                MountSpec(source=config.html_volume, target="/usr/share/nginx/html"),
                MountSpec(source=config.docker_socket, target="/tmp/docker.sock", read_only=True),
            ],
            network=config.network,
            labels=labels,
        ),
        ContainerSpec(
            name=config.acme_name,
            image=config.acme_image,
            restart=config.restart_policy,
            environment={"DEFAULT_EMAIL": email},
            mounts=[
                MountSpec(source=config.certs_volume, target="/etc/nginx/certs"),
                MountSpec(source=config.vhost_volume, target="/etc/nginx/vhost.d"),
                MountSpec(source=config.html_volume, target="/usr/share/nginx/html"),
                MountSpec(source=config.acme_volume, target="/etc/acme.sh"),
                MountSpec(source=config.docker_socket, target="/var/run/docker.sock", read_only=True),
            ],
            network=config.network,
            labels=labels,
        ),
    ]


async def setup_proxy(
    config: ProxyConfig,
    engine: DockerEngine,
    resolver: InputResolver,
    email: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StackResult:
    """Resolve the contact email and converge the proxy stack."""
    await require_docker(engine)

    recorded = (await engine.inspect_env(config.acme_name)).get("DEFAULT_EMAIL")
    parameters = resolver.resolve_all([email_parameter(email, recorded, environ)])

    reconciler = await create_reconciler(engine)
    outcomes = await reconciler.reconcile(proxy_inventory(config, parameters["email"]))

    return StackResult(parameters=parameters, outcomes=outcomes, table=await stack_table(engine))
