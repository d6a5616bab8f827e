"""Tests for agent configuration loading."""

import pytest

from scrape_agent.config import AgentConfig, load_config
from scrape_agent.errors import ConfigFileError, DuplicateComponentError

SAMPLE_CONFIG = """
identity:
  node_name: node-1
  pod_name: agent-x1
  pod_namespace: kube-system
  pod_ip: 10.4.0.2
dynamic_sources:
  - kube-proxy:http://:10249
  - cadvisor:http://:8080?whitelisted=container_cpu_usage_seconds_total
sources:
  - kubelet:http://localhost:10255
log_level: DEBUG
"""


class TestAgentConfig:
    """Tests for AgentConfig."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "scrape-agent.yaml"
        path.write_text(SAMPLE_CONFIG)

        config = AgentConfig.from_file(path)

        assert config.identity.node_name == "node-1"
        assert config.identity.pod_ip == "10.4.0.2"
        assert config.dynamic_sources == [
            "kube-proxy:http://:10249",
            "cadvisor:http://:8080?whitelisted=container_cpu_usage_seconds_total",
        ]
        assert config.sources == ["kubelet:http://localhost:10255"]
        assert config.log_level == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "scrape-agent.yaml"
        path.write_text("")

        config = AgentConfig.from_file(path)

        assert config.dynamic_sources == []
        assert config.sources == []
        assert config.log_level == "INFO"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "scrape-agent.yaml"
        path.write_text("dynamic_sources: [kube-proxy\n  - :")
        with pytest.raises(ConfigFileError, match="Cannot load"):
            AgentConfig.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "scrape-agent.yaml"
        path.write_text("- kube-proxy:http://:10249\n")
        with pytest.raises(ConfigFileError, match="mapping"):
            AgentConfig.from_file(path)

    def test_null_sections(self):
        config = AgentConfig.from_dict({"identity": None, "sources": None, "dynamic_sources": None})
        assert config.identity.pod_name == ""
        assert config.sources == []

    def test_env_overrides_identity(self, monkeypatch):
        monkeypatch.setenv("POD_IP", "10.9.9.9")
        monkeypatch.setenv("NODE_NAME", "node-env")

        config = AgentConfig.from_dict({"identity": {"node_name": "node-1", "pod_name": "agent-x1"}})

        assert config.identity.pod_ip == "10.9.9.9"
        assert config.identity.node_name == "node-env"
        assert config.identity.pod_name == "agent-x1"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("POD_NAME", "agent-x1")
        monkeypatch.setenv("DYNAMIC_SOURCES", "kube-proxy:http://:10249; fluentd:http://:24231")

        config = AgentConfig.from_env()

        assert config.identity.pod_name == "agent-x1"
        assert config.dynamic_sources == ["kube-proxy:http://:10249", "fluentd:http://:24231"]

    def test_validated_dynamic_sources(self):
        config = AgentConfig.from_dict({"dynamic_sources": ["kube-proxy:http://:10249"]})
        sources = config.validated_dynamic_sources()
        assert list(sources) == ["kube-proxy"]
        assert sources["kube-proxy"].netloc == ":10249"

    def test_duplicate_dynamic_sources(self):
        config = AgentConfig.from_dict({
            "dynamic_sources": ["kube-proxy:http://:10249", "kube-proxy:http://:10249"],
        })
        with pytest.raises(DuplicateComponentError):
            config.validated_dynamic_sources()

    def test_static_source_configs(self):
        config = AgentConfig.from_dict({
            "identity": {"pod_name": "agent-x1", "pod_namespace": "kube-system"},
            "sources": ["kubelet:http://localhost:10255"],
        })
        [source] = config.static_source_configs()
        assert source.host == "localhost"
        assert source.pod_config.pod_name == "agent-x1"


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(SAMPLE_CONFIG)
        assert load_config(str(path)).identity.node_name == "node-1"

    def test_default_location(self, tmp_path, monkeypatch):
        (tmp_path / "scrape-agent.yaml").write_text(SAMPLE_CONFIG)
        monkeypatch.chdir(tmp_path)
        assert load_config().identity.pod_name == "agent-x1"

    def test_missing_explicit_path(self, tmp_path, monkeypatch):
        (tmp_path / "scrape-agent.yaml").write_text(SAMPLE_CONFIG)
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigFileError, match="does not exist"):
            load_config(str(tmp_path / "typo.yaml"))

    def test_directory_as_path(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_config(str(tmp_path))

    def test_falls_back_to_env_without_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("NODE_NAME", "node-env")
        assert load_config().identity.node_name == "node-env"
