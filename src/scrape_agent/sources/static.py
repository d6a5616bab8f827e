"""Static sources - targets declared with an explicit host."""

import logging

from ..errors import MalformedDeclarationError
from .base import SourceConfig
from .dynamic import map_to_source_config, parse_declaration, split_authority

logger = logging.getLogger(__name__)


def parse_static_source(value: str, pod_name: str, pod_namespace: str) -> SourceConfig:
    """
    Parse a ``component:URL`` static source such as ``kubelet:http://localhost:10255``.

    Unlike dynamic sources the URL must name both a host and a port. The
    metrics are attributed to the agent's own pod.
    """
    declaration = parse_declaration(value)
    if not declaration.component:
        raise MalformedDeclarationError(f"Static source {value!r} has an empty component name")

    host, port = split_authority(declaration.url.netloc)
    if not host or not port:
        raise MalformedDeclarationError(
            f"Static source {declaration.component!r} must declare host and port"
        )

    source = map_to_source_config(
        declaration.component,
        declaration.url,
        host.strip("[]"),
        pod_name,
        pod_namespace,
    )
    logger.debug(f"Parsed static source {source.component} at {source.url}")
    return source
