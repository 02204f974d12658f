"""Configuration models."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class DockerConfig(BaseModel):
    """Docker engine paths and unit names."""
    binary: str = Field(default="docker")
    daemon_config: str = Field(default="/etc/docker/daemon.json")
    dockerd: str = Field(default="/usr/bin/dockerd")
    containerd_socket: str = Field(default="/run/containerd/containerd.sock")
    system_dir: str = Field(default="/etc/systemd/system")
    unit: str = Field(default="docker.service")
    packages: List[str] = Field(default_factory=lambda: [
        "docker-ce",
        "docker-ce-cli",
        "containerd.io",
        "docker-buildx-plugin",
        "docker-compose-plugin",
    ])
    apt_key_url: str = Field(default="https://download.docker.com/linux/debian/gpg")
    apt_repository: str = Field(default="https://download.docker.com/linux/debian")
    keyring_path: str = Field(default="/etc/apt/keyrings/docker.asc")
    sources_list: str = Field(default="/etc/apt/sources.list.d/docker.list")


class RuntimeConfig(BaseModel):
    """Sandboxed runtime registration settings."""
    name: str = Field(default="sysbox-runc")
    path: str = Field(default="/usr/bin/sysbox-runc")
    version: str = Field(default="0.6.7")
    package_url: str = Field(
        default="https://downloads.nestybox.com/sysbox/releases/v{version}/sysbox-ce_{version}-0.linux_amd64.deb"
    )
    set_default: bool = Field(default=True)
    write_override: bool = Field(default=True)
    prerequisites: List[str] = Field(default_factory=lambda: ["curl", "ca-certificates", "wget", "gnupg"])

    @property
    def resolved_package_url(self) -> str:
        """Package URL with the version filled in."""
        return self.package_url.format(version=self.version)


class ProxyConfig(BaseModel):
    """Reverse-proxy stack settings."""
    network: str = Field(default="proxy")
    certs_volume: str = Field(default="np-certs")
    html_volume: str = Field(default="np-html")
    vhost_volume: str = Field(default="np-vhost.d")
    acme_volume: str = Field(default="np-acme")
    proxy_image: str = Field(default="nginxproxy/nginx-proxy:latest")
    acme_image: str = Field(default="nginxproxy/acme-companion:latest")
    proxy_name: str = Field(default="nginx-proxy")
    acme_name: str = Field(default="nginx-proxy-acme")
    docker_socket: str = Field(default="/var/run/docker.sock")
    restart_policy: str = Field(default="unless-stopped")
    http_port: int = Field(default=80, ge=1, le=65535)
    https_port: int = Field(default=443, ge=1, le=65535)


class DemoConfig(BaseModel):
    """Demo backend settings."""
    image: str = Field(default="nginx:alpine")
    name: str = Field(default="demo-hello")


class NicConfig(BaseModel):
    """Network interface renaming settings."""
    target_name: str = Field(default="eth0")
    network_dir: str = Field(default="/etc/systemd/network")


class DockhandConfig(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)
    nic: NicConfig = Field(default_factory=NicConfig)
