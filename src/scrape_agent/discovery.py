"""Discovery of dynamic sources running on sibling pods of the same node."""

import logging
from typing import Mapping, Optional
from urllib.parse import SplitResult

from kubernetes import client, config
from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from .errors import DiscoveryError, InvalidEndpointError
from .sources import COMPONENT_LABEL, SourceConfig
from .sources.dynamic import create_options_for_pod_selection, map_to_source_config

logger = logging.getLogger(__name__)


def load_core_api() -> client.CoreV1Api:
    """Create a CoreV1Api from in-cluster config, falling back to kubeconfig."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.info("Loaded kubeconfig")
        except config.ConfigException as e:
            raise DiscoveryError(f"Failed to load Kubernetes config: {e}") from e
    return client.CoreV1Api()


class PodSourceDiscovery:
    """
    Resolve dynamic sources to targets on pods scheduled on one node.

    Each pod carrying a declared ``k8s-app`` label becomes one SourceConfig
    whose host is the pod IP and whose identity is the pod itself.
    """

    def __init__(self, core_api: Optional[client.CoreV1Api] = None, request_timeout: int = 10):
        self._core_api = core_api
        self.request_timeout = request_timeout

    @property
    def core_api(self) -> client.CoreV1Api:
        if self._core_api is None:
            self._core_api = load_core_api()
        return self._core_api

    def discover(self, node_name: str, sources: Mapping[str, SplitResult]) -> list[SourceConfig]:
        """
        List matching pods on ``node_name`` and map them to scrape targets.

        Args:
            node_name: Node the agent runs on
            sources: Validated dynamic sources

        Returns:
            One SourceConfig per matching pod with an IP

        Raises:
            DiscoveryError: The pod list call failed
        """
        if not sources:
            return []

        options = create_options_for_pod_selection(node_name, sources)
        try:
            pods = self.core_api.list_pod_for_all_namespaces(
                **options.to_kwargs(),
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            raise DiscoveryError(f"Failed to list pods on node {node_name}: {e.reason}") from e
        except HTTPError as e:
            raise DiscoveryError(f"Kubernetes API unreachable listing pods on node {node_name}: {e}") from e

        configs = []
        for pod in pods.items:
            source = self._pod_to_source(pod, sources)
            if source is not None:
                configs.append(source)

        logger.info(f"Discovered {len(configs)} dynamic sources on node {node_name}")
        return configs

    def _pod_to_source(self, pod, sources: Mapping[str, SplitResult]) -> Optional[SourceConfig]:
        """Map one listed pod, or return None if it cannot be scraped."""
        name = pod.metadata.name
        namespace = pod.metadata.namespace
        component = (pod.metadata.labels or {}).get(COMPONENT_LABEL)

        url = sources.get(component) if component else None
        if url is None:
            logger.warning(f"Pod {namespace}/{name} has undeclared component {component!r}, skipping")
            return None

        pod_ip = pod.status.pod_ip if pod.status else None
        if not pod_ip:
            logger.warning(f"Pod {namespace}/{name} has no IP yet, skipping")
            return None

        try:
            return map_to_source_config(component, url, pod_ip, name, namespace)
        except InvalidEndpointError as e:
            logger.warning(f"Skipping pod {namespace}/{name}: {e}")
            return None
