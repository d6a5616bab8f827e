"""Dynamic sources - components scraped on the agent's own pod or on sibling pods.

A dynamic source is declared as ``component:URL`` where the URL names only a
port, e.g. ``kube-proxy:http://:10249?whitelisted=rest_client_requests_total``.
The host is never taken from the declaration: it is the agent's pod IP for
local sources and the sibling pod's IP for discovered ones.
"""

import logging
import re
from typing import Iterable, Mapping, Sequence, Union
from urllib.parse import SplitResult, parse_qs, urlsplit

from ..errors import (
    DuplicateComponentError,
    InvalidEndpointError,
    MalformedDeclarationError,
)
from .base import (
    COMPONENT_LABEL,
    CONTAINER_NAME_LABEL_PARAM,
    DEFAULT_METRICS_PATH,
    NAMESPACE_ID_LABEL_PARAM,
    POD_ID_LABEL_PARAM,
    WHITELISTED_PARAM,
    EndpointDeclaration,
    PodConfig,
    PodSelectionOptions,
    SourceConfig,
)

logger = logging.getLogger(__name__)

MAX_PORT = 65535

# Kubernetes label value: at most 63 characters, alphanumeric at both ends
LABEL_VALUE_RE = re.compile(r"[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?")


def parse_declaration(value: str) -> EndpointDeclaration:
    """
    Parse a ``component:URL`` flag or config value.

    The component name ends at the first colon; everything after it is the URL.
    """
    component, sep, raw_url = value.partition(":")
    if not sep:
        raise MalformedDeclarationError(
            f"Source {value!r} must have the form component:URL"
        )
    try:
        url = urlsplit(raw_url)
    except ValueError as e:
        raise MalformedDeclarationError(f"Source {value!r} has an invalid URL: {e}") from e
    return EndpointDeclaration(component=component, url=url)


def split_authority(netloc: str) -> tuple[str, str]:
    """Split a URL authority into its host and port segments."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        bracket = hostport.find("]")
        if bracket != -1:
            host, rest = hostport[:bracket + 1], hostport[bracket + 1:]
            return host, rest[1:] if rest.startswith(":") else ""
    host, sep, port = hostport.rpartition(":")
    if not sep:
        return hostport, ""
    return host, port


def validate_sources(declarations: Iterable[EndpointDeclaration]) -> dict[str, SplitResult]:
    """
    Validate declared dynamic sources.

    Every declaration needs a component name that is a valid Kubernetes label
    value and an authority made of a port only. Component names must be
    unique. The first violation fails the whole batch.

    Args:
        declarations: Ordered declarations from flags or configuration

    Returns:
        Mapping of component name to its endpoint URL, unmodified

    Raises:
        MalformedDeclarationError: Empty name, invalid label value or bad authority
        DuplicateComponentError: Component declared twice
    """
    sources: dict[str, SplitResult] = {}

    for declaration in declarations:
        component = declaration.component
        if not component:
            raise MalformedDeclarationError("Dynamic source has an empty component name")
        if not LABEL_VALUE_RE.fullmatch(component):
            raise MalformedDeclarationError(
                f"Dynamic source {component!r} is not a valid Kubernetes label value"
            )

        host, port = split_authority(declaration.url.netloc)
        if host:
            raise MalformedDeclarationError(
                f"Dynamic source {component!r} must not declare a host, got {host!r}"
            )
        if not port:
            raise MalformedDeclarationError(
                f"Dynamic source {component!r} must declare a port"
            )

        if component in sources:
            raise DuplicateComponentError(component)
        sources[component] = declaration.url
        logger.debug(f"Validated dynamic source {component} on port {port}")

    return sources


def parse_port(netloc: str) -> int:
    """Extract the port from a URL authority, ignoring any host."""
    _, port = split_authority(netloc)
    if not (port.isascii() and port.isdigit()):
        raise InvalidEndpointError(f"Invalid port {port!r} in {netloc!r}")
    value = int(port)
    if not 1 <= value <= MAX_PORT:
        raise InvalidEndpointError(f"Port {value} out of range in {netloc!r}")
    return value


def _first(query: Mapping[str, Sequence[str]], key: str) -> str:
    values = query.get(key)
    return values[0] if values else ""


def map_to_source_config(
    component: str,
    url: Union[SplitResult, str],
    ip: str,
    pod_name: str,
    pod_namespace: str,
) -> SourceConfig:
    """
    Build the scrape target for one component.

    Args:
        component: Component name
        url: Endpoint URL; its host segment, if any, is ignored
        ip: Resolved address of the pod serving the component
        pod_name: Name of the pod the metrics describe
        pod_namespace: Namespace of the pod the metrics describe

    Returns:
        The resolved SourceConfig

    Raises:
        InvalidEndpointError: The URL or its port cannot be parsed
    """
    if isinstance(url, str):
        try:
            url = urlsplit(url)
        except ValueError as e:
            raise InvalidEndpointError(f"Invalid URL for {component}: {e}") from e

    port = parse_port(url.netloc)
    query = parse_qs(url.query, keep_blank_values=True)

    whitelisted_value = _first(query, WHITELISTED_PARAM)
    whitelisted = tuple(whitelisted_value.split(",")) if whitelisted_value else ()

    pod_config = PodConfig(
        pod_name=pod_name,
        pod_namespace=pod_namespace,
        pod_id_label=_first(query, POD_ID_LABEL_PARAM),
        namespace_id_label=_first(query, NAMESPACE_ID_LABEL_PARAM),
        container_name_label=_first(query, CONTAINER_NAME_LABEL_PARAM),
    )

    return SourceConfig(
        component=component,
        host=ip,
        port=port,
        path=url.path or DEFAULT_METRICS_PATH,
        whitelisted=whitelisted,
        pod_config=pod_config,
    )


def create_options_for_pod_selection(
    node_name: str,
    sources: Iterable[str],
) -> PodSelectionOptions:
    """
    Build list options selecting pods on ``node_name`` that run a declared component.

    Names are sorted so the selector does not depend on the iteration order
    of ``sources``. Every name is followed by a comma, including the last.
    """
    names = "".join(f"{name}," for name in sorted(sources))
    return PodSelectionOptions(
        field_selector=f"spec.nodeName={node_name}",
        label_selector=f"{COMPONENT_LABEL} in ({names})",
    )


def local_source_configs(
    sources: Mapping[str, SplitResult],
    ip: str,
    pod_name: str,
    pod_namespace: str,
) -> list[SourceConfig]:
    """Map every validated source to a target on the agent's own pod."""
    return [
        map_to_source_config(component, url, ip, pod_name, pod_namespace)
        for component, url in sources.items()
    ]
