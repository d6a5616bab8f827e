"""Configuration management for the scrape agent."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import SplitResult

import yaml

from .errors import ConfigFileError
from .sources import (
    EndpointDeclaration,
    SourceConfig,
    parse_declaration,
    parse_static_source,
    validate_sources,
)


@dataclass
class PodIdentity:
    """Identity of the agent's own pod, usually from the downward API."""

    node_name: str = ""
    pod_name: str = ""
    pod_namespace: str = ""
    pod_ip: str = ""


@dataclass
class AgentConfig:
    """Main agent configuration."""

    identity: PodIdentity = field(default_factory=PodIdentity)

    # component:URL strings, URL holds a port only
    dynamic_sources: list[str] = field(default_factory=list)

    # component:URL strings with explicit host
    sources: list[str] = field(default_factory=list)

    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: str | Path) -> "AgentConfig":
        """Load configuration from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigFileError(f"Cannot load config file {path}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigFileError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "AgentConfig":
        """Create config from dictionary."""
        config = cls()

        ident = data.get("identity") or {}
        config.identity = PodIdentity(
            node_name=ident.get("node_name") or "",
            pod_name=ident.get("pod_name") or "",
            pod_namespace=ident.get("pod_namespace") or "",
            pod_ip=ident.get("pod_ip") or "",
        )
        config.apply_env()

        config.dynamic_sources = [str(s) for s in data.get("dynamic_sources") or []]
        config.sources = [str(s) for s in data.get("sources") or []]
        config.log_level = data.get("log_level") or config.log_level

        return config

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Create config from environment variables."""
        config = cls()
        config.apply_env()

        dynamic = os.environ.get("DYNAMIC_SOURCES")
        if dynamic:
            config.dynamic_sources = [s.strip() for s in dynamic.split(";") if s.strip()]

        return config

    def apply_env(self):
        """Override pod identity with downward-API environment variables."""
        self.identity.node_name = os.environ.get("NODE_NAME", self.identity.node_name)
        self.identity.pod_name = os.environ.get("POD_NAME", self.identity.pod_name)
        self.identity.pod_namespace = os.environ.get("POD_NAMESPACE", self.identity.pod_namespace)
        self.identity.pod_ip = os.environ.get("POD_IP", self.identity.pod_ip)

    def declarations(self) -> list[EndpointDeclaration]:
        """Parse dynamic source strings into declarations."""
        return [parse_declaration(s) for s in self.dynamic_sources]

    def validated_dynamic_sources(self) -> dict[str, SplitResult]:
        """Parse and validate dynamic sources."""
        return validate_sources(self.declarations())

    def static_source_configs(self) -> list[SourceConfig]:
        """Parse static sources, attributed to the agent's own pod."""
        return [
            parse_static_source(s, self.identity.pod_name, self.identity.pod_namespace)
            for s in self.sources
        ]


def load_config(config_path: Optional[str] = None) -> AgentConfig:
    """
    Load configuration from file or environment.

    An explicit path must exist; default locations and the environment are
    only used when no path is given.
    """
    if config_path:
        if not Path(config_path).is_file():
            raise ConfigFileError(f"Config file {config_path} does not exist")
        return AgentConfig.from_file(config_path)

    # Try default locations
    default_paths = [
        Path("scrape-agent.yaml"),
        Path("scrape-agent.yml"),
        Path("/etc/scrape-agent/config.yaml"),
    ]

    for path in default_paths:
        if path.exists():
            return AgentConfig.from_file(path)

    # Fall back to environment
    return AgentConfig.from_env()
