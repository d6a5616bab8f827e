"""Scrape Agent CLI - resolve and inspect scrape sources."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AgentConfig, load_config
from .discovery import PodSourceDiscovery
from .errors import DiscoveryError, SourceConfigError
from .sources import SourceConfig, create_options_for_pod_selection, local_source_configs

console = Console()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

config_option = click.option("--config", "-c", "config_path", help="Path to config file")
dynamic_source_option = click.option(
    "--dynamic-source",
    "dynamic_sources",
    multiple=True,
    help="component:URL with a port-only URL, e.g. kube-proxy:http://:10249 (repeatable)",
)
node_name_option = click.option("--node-name", envvar="NODE_NAME", help="Node the agent runs on")


def setup_logging(level: str):
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _load(config_path: Optional[str], dynamic_sources: tuple[str, ...]) -> AgentConfig:
    try:
        config = load_config(config_path)
    except SourceConfigError as e:
        _fail(f"Invalid configuration: {e}")

    level = str(config.log_level).upper()
    if level not in LOG_LEVELS:
        _fail(f"Invalid log_level {config.log_level!r}, expected one of {', '.join(LOG_LEVELS)}")
    # --log-level on the command line wins over the config file
    if click.get_current_context().find_root().params.get("log_level") is None:
        logging.getLogger().setLevel(level)
    if dynamic_sources:
        config.dynamic_sources = list(dynamic_sources)
    return config


def _fail(message: str):
    console.print(f"[red]x {message}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="scrape-agent")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: from config, else WARNING)",
)
def main(log_level: Optional[str]):
    """Scrape Agent - resolve node-local metrics sources for Kubernetes components."""
    setup_logging(log_level or "WARNING")


@main.command()
@config_option
@dynamic_source_option
@click.option("--pod-ip", envvar="POD_IP", help="IP address of the agent's pod")
def resolve(config_path: Optional[str], dynamic_sources: tuple[str, ...], pod_ip: Optional[str]):
    """Validate sources and show the targets on the agent's own pod."""
    config = _load(config_path, dynamic_sources)
    if pod_ip:
        config.identity.pod_ip = pod_ip

    ident = config.identity
    if config.dynamic_sources and not ident.pod_ip:
        _fail("Pod IP is unknown, set POD_IP or --pod-ip")

    try:
        validated = config.validated_dynamic_sources()
        targets = local_source_configs(validated, ident.pod_ip, ident.pod_name, ident.pod_namespace)
        targets.extend(config.static_source_configs())
    except SourceConfigError as e:
        _fail(f"Invalid source configuration: {e}")

    _display_sources(targets, title=f"Resolved {len(targets)} Sources")


@main.command()
@config_option
@dynamic_source_option
@node_name_option
def query(config_path: Optional[str], dynamic_sources: tuple[str, ...], node_name: Optional[str]):
    """Show the pod selection query for sibling pods on this node."""
    config = _load(config_path, dynamic_sources)
    if node_name:
        config.identity.node_name = node_name

    try:
        validated = config.validated_dynamic_sources()
    except SourceConfigError as e:
        _fail(f"Invalid source configuration: {e}")

    options = create_options_for_pod_selection(config.identity.node_name, validated)
    console.print(f"[cyan]Field selector:[/cyan] {options.field_selector}")
    console.print(f"[cyan]Label selector:[/cyan] {options.label_selector}")


@main.command()
@config_option
@dynamic_source_option
@node_name_option
def discover(config_path: Optional[str], dynamic_sources: tuple[str, ...], node_name: Optional[str]):
    """Discover sources on sibling pods through the Kubernetes API."""
    config = _load(config_path, dynamic_sources)
    if node_name:
        config.identity.node_name = node_name

    try:
        validated = config.validated_dynamic_sources()
        targets = PodSourceDiscovery().discover(config.identity.node_name, validated)
    except SourceConfigError as e:
        _fail(f"Invalid source configuration: {e}")
    except DiscoveryError as e:
        _fail(str(e))

    _display_sources(targets, title=f"Discovered {len(targets)} Sources")


def _display_sources(sources: list[SourceConfig], title: str):
    """Display resolved sources in a table."""
    if not sources:
        console.print("[yellow]No sources resolved[/yellow]")
        return

    table = Table(title=title, show_lines=True)
    table.add_column("Component", style="cyan")
    table.add_column("URL")
    table.add_column("Pod", style="green")
    table.add_column("Whitelisted", style="dim")

    for source in sources:
        pod = source.pod_config
        pod_str = f"{pod.pod_namespace}/{pod.pod_name}" if pod else ""
        whitelisted = ", ".join(source.whitelisted) or "(all)"
        table.add_row(source.component, source.url, pod_str, whitelisted)

    console.print(table)


@main.command()
@click.option("--output", "-o", type=click.Path(), help="Output file path")
def init(output: Optional[str]):
    """Generate a sample configuration file."""
    sample_config = """# Scrape Agent Configuration

# Identity of the agent's pod. NODE_NAME, POD_NAME, POD_NAMESPACE and POD_IP
# environment variables (downward API) override these values.
identity:
  node_name: ""
  pod_name: ""
  pod_namespace: ""
  pod_ip: ""

# Components scraped on the agent's pod or on sibling pods of the same node.
# Sibling pods are found by their k8s-app label. URLs name a port only.
dynamic_sources:
  - kube-proxy:http://:10249
  # - cadvisor:http://:8080?whitelisted=container_cpu_usage_seconds_total&podIdLabel=pod&namespaceIdLabel=namespace&containerNamelabel=container

# Targets with a fixed host, attributed to the agent's pod.
sources:
  # - kubelet:http://localhost:10255/metrics

log_level: INFO
"""

    output_path = output or "scrape-agent.yaml"

    with open(output_path, "w") as f:
        f.write(sample_config)

    console.print(f"[green]+ Created config file: {output_path}[/green]")
    console.print("\nEdit the file to declare your sources, then run:")
    console.print(f"  [cyan]scrape-agent resolve -c {output_path}[/cyan]")


if __name__ == "__main__":
    main()
