"""Exceptions raised while resolving scrape sources."""


class SourceConfigError(ValueError):
    """Base class for source configuration errors."""

    pass


class MalformedDeclarationError(SourceConfigError):
    """A declaration has an empty component name or a bad authority."""

    pass


class DuplicateComponentError(SourceConfigError):
    """The same component name is declared more than once."""

    def __init__(self, component: str):
        super().__init__(f"Component {component!r} is declared more than once")
        self.component = component


class InvalidEndpointError(SourceConfigError):
    """An endpoint URL or its port cannot be parsed."""

    pass


class DiscoveryError(Exception):
    """Listing sibling pods through the Kubernetes API failed."""

    pass


class ConfigFileError(SourceConfigError):
    """A configuration file is missing, unreadable or not a mapping."""

    pass
