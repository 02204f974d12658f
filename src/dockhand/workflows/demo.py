"""Demo backend behind the reverse proxy."""

import logging
from typing import List, Mapping, Optional

from dockhand.core.engine import create_reconciler
from dockhand.errors import PreconditionError
from dockhand.models.config import DemoConfig, ProxyConfig
from dockhand.models.parameter import DerivedSource, EnvSource, FlagSource, ParameterSpec, PromptSource
from dockhand.models.resource import ContainerSpec, ResourceSpec
from dockhand.resolver import InputResolver
from dockhand.resolver.validators import is_dns_label, is_domain, is_fqdn, join_fqdn, lowercase, split_fqdn
from dockhand.utils.docker import DockerEngine
from dockhand.utils.templates import DEMO_ENTRYPOINT_SCRIPT, DEMO_PAGE_TEMPLATE, render_template
from dockhand.workflows.common import StackResult, require_docker, stack_table
from dockhand.workflows.proxy import email_parameter


logger = logging.getLogger(__name__)

MANAGED_BY = "dockhand-demo"


def demo_parameters(
    fqdn: Optional[str] = None,
    domain: Optional[str] = None,
    subdomain: Optional[str] = None,
    email: Optional[str] = None,
    recorded_email: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> List[ParameterSpec]:
    """Parameters for the demo site.

    A full name given with --fqdn/FQDN wins over separate domain and
    subdomain values; the final fqdn is always recomposed from the parts.
    """
    override = "--fqdn/FQDN or --domain/DOMAIN with --subdomain/SUBDOMAIN"
    return [
        ParameterSpec(
            name="fqdn_input",
            sources=[FlagSource(fqdn, "--fqdn"), EnvSource("FQDN", environ)],
            validator=is_fqdn,
            normalizer=lowercase,
            required=False,
        ),
        ParameterSpec(
            name="domain",
            sources=[
                DerivedSource(("fqdn_input",), lambda value: split_fqdn(value)[1]),
                FlagSource(domain, "--domain"),
                EnvSource("DOMAIN", environ),
                PromptSource("Enter your top-level domain (e.g., example.com)"),
            ],
            validator=is_domain,
            normalizer=lowercase,
            hint="Expected something like 'example.com'.",
            override=override,
        ),
        ParameterSpec(
            name="subdomain",
            sources=[
                DerivedSource(("fqdn_input",), lambda value: split_fqdn(value)[0]),
                FlagSource(subdomain, "--subdomain"),
                EnvSource("SUBDOMAIN", environ),
                PromptSource("Enter your subdomain (e.g., demo)"),
            ],
            validator=is_dns_label,
            normalizer=lowercase,
            hint="Use lowercase letters/numbers/hyphens (no leading/trailing '-').",
            override=override,
        ),
        ParameterSpec(
            name="fqdn",
            sources=[DerivedSource(("subdomain", "domain"), join_fqdn)],
            validator=is_fqdn,
            normalizer=lowercase,
            hint="subdomain.domain must be at most 253 characters in total.",
            override=override,
        ),
        email_parameter(email, recorded_email, environ, message="Enter Let's Encrypt email (required)"),
    ]


def demo_inventory(config: DemoConfig, proxy: ProxyConfig, fqdn: str, email: str) -> List[ResourceSpec]:
    page = render_template(DEMO_PAGE_TEMPLATE, html=True, fqdn=fqdn, image=config.image)
    return [
        ContainerSpec(
            name=config.name,
            image=config.image,
            restart=proxy.restart_policy,
            network=proxy.network,
            environment={
                "VIRTUAL_HOST": fqdn,
                "LETSENCRYPT_HOST": fqdn,
                "LETSENCRYPT_EMAIL": email,
                "DEMO_INDEX_HTML": page,
            },
            labels={"managed-by": MANAGED_BY},
            command=["sh", "-c", DEMO_ENTRYPOINT_SCRIPT],
        ),
    ]


async def require_proxy(engine: DockerEngine, proxy: ProxyConfig) -> None:
    """The demo only makes sense with the proxy stack up."""
    if not await engine.network_exists(proxy.network):
        raise PreconditionError(f"Network '{proxy.network}' not found. Run 'dockhand proxy setup' first.")
    running = await engine.list_containers(all_states=False)
    for name in (proxy.proxy_name, proxy.acme_name):
        if name not in running:
            raise PreconditionError(f"{name} not running. Run 'dockhand proxy setup' first.")


async def add_demo(
    config: DemoConfig,
    proxy: ProxyConfig,
    engine: DockerEngine,
    resolver: InputResolver,
    fqdn: Optional[str] = None,
    domain: Optional[str] = None,
    subdomain: Optional[str] = None,
    email: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StackResult:
    """Resolve the site name and contact email, then (re)deploy the demo backend."""
    await require_docker(engine)
    await require_proxy(engine, proxy)

    recorded = (await engine.inspect_env(proxy.acme_name)).get("DEFAULT_EMAIL")
    parameters = resolver.resolve_all(
        demo_parameters(fqdn, domain, subdomain, email, recorded, environ)
    )
    logger.info(f"FQDN: {parameters['fqdn']}")
    logger.info(f"Email: {parameters['email']}")

    reconciler = await create_reconciler(engine)
    outcomes = await reconciler.reconcile(
        demo_inventory(config, proxy, parameters["fqdn"], parameters["email"])
    )
    return StackResult(parameters=parameters, outcomes=outcomes, table=await stack_table(engine))
