"""Data model shared by all source resolution steps."""

from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import SplitResult

DEFAULT_METRICS_PATH = "/metrics"

# Label on sibling pods that names the component they run
COMPONENT_LABEL = "k8s-app"

# Query parameters understood on an endpoint URL
WHITELISTED_PARAM = "whitelisted"
POD_ID_LABEL_PARAM = "podIdLabel"
NAMESPACE_ID_LABEL_PARAM = "namespaceIdLabel"
CONTAINER_NAME_LABEL_PARAM = "containerNamelabel"


@dataclass(frozen=True)
class PodConfig:
    """
    Identity of the pod whose metrics a source exposes.

    The label overrides name metric labels that carry the pod id, namespace id
    and container name. An empty override means the metric carries no such
    label and the configured pod name/namespace apply instead.
    """

    pod_name: str
    pod_namespace: str
    pod_id_label: str = ""
    namespace_id_label: str = ""
    container_name_label: str = ""

    @property
    def uses_metric_labels(self) -> bool:
        """True if any identity value is read from metric labels."""
        return bool(self.pod_id_label or self.namespace_id_label or self.container_name_label)

    def is_metric_label(self, label: str) -> bool:
        """Check whether a metric label is one of the identity overrides."""
        if not label:
            return False
        return label in (self.pod_id_label, self.namespace_id_label, self.container_name_label)

    def get_pod_info(self, labels: Mapping[str, str]) -> tuple[str, str, str]:
        """
        Resolve pod identity for one metric.

        Args:
            labels: Labels attached to the metric

        Returns:
            (container_name, pod_id, namespace_id)
        """
        if not self.uses_metric_labels:
            return "", self.pod_name, self.pod_namespace

        container_name = labels.get(self.container_name_label, "") if self.container_name_label else ""
        pod_id = labels.get(self.pod_id_label, "") if self.pod_id_label else self.pod_name
        namespace_id = labels.get(self.namespace_id_label, "") if self.namespace_id_label else self.pod_namespace
        return container_name, pod_id, namespace_id


@dataclass(frozen=True)
class SourceConfig:
    """A single resolved scrape target."""

    component: str
    host: str
    port: int
    path: str = DEFAULT_METRICS_PATH
    whitelisted: tuple[str, ...] = ()
    pod_config: Optional[PodConfig] = None

    @property
    def url(self) -> str:
        """Full URL the scraper fetches."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}{self.path}"

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for display or serialization."""
        pod = self.pod_config
        return {
            "component": self.component,
            "host": self.host,
            "port": self.port,
            "path": self.path,
            "whitelisted": list(self.whitelisted),
            "pod_name": pod.pod_name if pod else "",
            "pod_namespace": pod.pod_namespace if pod else "",
        }


@dataclass(frozen=True)
class EndpointDeclaration:
    """One user-declared (component, endpoint URL) binding."""

    component: str
    url: SplitResult = field(default_factory=lambda: SplitResult("", "", "", "", ""))


@dataclass(frozen=True)
class PodSelectionOptions:
    """List options for finding sibling pods on a node."""

    field_selector: str
    label_selector: str

    def to_kwargs(self) -> dict[str, str]:
        """Keyword arguments for the Kubernetes list call."""
        return {
            "field_selector": self.field_selector,
            "label_selector": self.label_selector,
        }
