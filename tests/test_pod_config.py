"""Tests for pod identity resolution on metrics."""

from scrape_agent.sources import PodConfig


class TestPodConfig:
    """Tests for PodConfig."""

    def test_defaults(self):
        config = PodConfig("pod-name", "pod-namespace")
        assert config.pod_id_label == ""
        assert config.namespace_id_label == ""
        assert config.container_name_label == ""
        assert not config.uses_metric_labels

    def test_pod_info_without_overrides(self):
        config = PodConfig("pod-name", "pod-namespace")
        assert config.get_pod_info({"pod-id": "ignored"}) == ("", "pod-name", "pod-namespace")

    def test_pod_info_from_metric_labels(self):
        config = PodConfig("pod-name", "pod-namespace", "pod-id", "namespace-id", "container-name")
        labels = {"pod-id": "fluentd-x7z", "namespace-id": "logging", "container-name": "fluentd"}
        assert config.get_pod_info(labels) == ("fluentd", "fluentd-x7z", "logging")

    def test_missing_metric_label(self):
        config = PodConfig("pod-name", "pod-namespace", "pod-id", "namespace-id", "container-name")
        assert config.get_pod_info({}) == ("", "", "")

    def test_partial_overrides(self):
        config = PodConfig("pod-name", "pod-namespace", container_name_label="container")
        assert config.get_pod_info({"container": "app"}) == ("app", "pod-name", "pod-namespace")

    def test_is_metric_label(self):
        config = PodConfig("pod-name", "pod-namespace", "pod-id", "namespace-id", "container-name")
        assert config.is_metric_label("pod-id")
        assert config.is_metric_label("namespace-id")
        assert config.is_metric_label("container-name")
        assert not config.is_metric_label("job")

    def test_empty_label_is_never_metric_label(self):
        config = PodConfig("pod-name", "pod-namespace")
        assert not config.is_metric_label("")
