import json
import logging

from apicache.config import DATA_SOURCE_KUBERNETES, DATA_SOURCE_MEMORY, ApiCacheConfig, config_from_env
from apicache.utils.logger import JSONFormatter, get_logger


class TestConfigFromEnv:
    def test_defaults(self, monkeypatch):
        for var in ("KUBERNETES_API_URL", "KUBERNETES_TOKEN", "KUBERNETES_VERIFY_SSL",
                    "APICACHE_DATA_SOURCE", "APICACHE_FIXTURE_PATH", "APICACHE_CORS_ORIGINS"):
            monkeypatch.delenv(var, raising=False)

        cfg = config_from_env()

        assert cfg == ApiCacheConfig()
        assert cfg.data_source == DATA_SOURCE_KUBERNETES

    def test_values(self, monkeypatch):
        monkeypatch.setenv("KUBERNETES_API_URL", "https://k8s.example:6443")
        monkeypatch.setenv("KUBERNETES_TOKEN", "token")
        monkeypatch.setenv("KUBERNETES_VERIFY_SSL", "True")
        monkeypatch.setenv("APICACHE_DATA_SOURCE", " Memory ")
        monkeypatch.setenv("APICACHE_FIXTURE_PATH", "/tmp/cluster.json")
        monkeypatch.setenv("APICACHE_CORS_ORIGINS", "https://a.example, https://b.example,")

        cfg = config_from_env()

        assert cfg.cluster_url == "https://k8s.example:6443"
        assert cfg.cluster_token == "token"
        assert cfg.verify_ssl is True
        assert cfg.data_source == DATA_SOURCE_MEMORY
        assert cfg.fixture_path == "/tmp/cluster.json"
        assert cfg.cors_origins == ("https://a.example", "https://b.example")

    def test_unknown_data_source_falls_back(self, monkeypatch):
        monkeypatch.setenv("APICACHE_DATA_SOURCE", "etcd")
        assert config_from_env().data_source == DATA_SOURCE_KUBERNETES


class TestJSONFormatter:
    def _record(self, **extra):
        record = logging.LogRecord("apicache.test", logging.INFO, __file__, 1, "listed %s", ("pods",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(self._record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "apicache.test"
        assert entry["message"] == "listed pods"
        assert "timestamp" in entry

    def test_extra_keys(self):
        entry = json.loads(JSONFormatter().format(self._record(kind="pods", total=3, unrelated="x")))
        assert entry["kind"] == "pods"
        assert entry["total"] == 3
        assert "unrelated" not in entry

    def test_get_logger_configures_once(self):
        logger = get_logger("apicache.test.once")
        again = get_logger("apicache.test.once")
        assert logger is again
        assert len(logger.handlers) == 1
        assert logger.propagate is False
