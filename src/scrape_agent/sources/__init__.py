"""Scrape sources - declaration, validation and mapping to targets."""

from .base import (
    COMPONENT_LABEL,
    DEFAULT_METRICS_PATH,
    EndpointDeclaration,
    PodConfig,
    PodSelectionOptions,
    SourceConfig,
)
from .dynamic import (
    create_options_for_pod_selection,
    local_source_configs,
    map_to_source_config,
    parse_declaration,
    validate_sources,
)
from .static import parse_static_source

__all__ = [
    "COMPONENT_LABEL",
    "DEFAULT_METRICS_PATH",
    "EndpointDeclaration",
    "PodConfig",
    "PodSelectionOptions",
    "SourceConfig",
    "create_options_for_pod_selection",
    "local_source_configs",
    "map_to_source_config",
    "parse_declaration",
    "validate_sources",
    "parse_static_source",
]
