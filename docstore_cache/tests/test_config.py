"""
Unit tests for configuration, errors and logging setup.
"""

import json
import logging
import pytest

import structlog
from prometheus_client import CollectorRegistry
from pydantic import ValidationError

from shared.config import DataSourceConfig, get_config
from shared.errors import CacheBackendError, ConfigurationError, DataSourceException, ErrorResponse
from shared.logging import (
    add_component_context,
    add_correlation_context,
    clear_context,
    configure_logging,
    get_logger,
    set_request_id,
)
from shared.metrics import get_metrics_collector


class TestDataSourceConfig:
    """Test cases for DataSourceConfig."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        """Run without ambient DATASOURCE_ variables or a .env file."""
        monkeypatch.chdir(tmp_path)
        for name in (
            "DATASOURCE_CACHE_BACKEND",
            "DATASOURCE_REDIS_URL",
            "DATASOURCE_CACHE_NAMESPACE",
            "DATASOURCE_MEMORY_CACHE_MAX_SIZE",
            "DATASOURCE_ALLOW_FLUSHING_COLLECTION_CACHE",
            "DATASOURCE_DEBUG",
            "DATASOURCE_MEMOIZE_LOADS",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        config = DataSourceConfig()

        assert config.cache_backend == "memory"
        assert config.cache_namespace == "db:mongo"
        assert config.memory_cache_max_size == 10_000
        assert config.allow_flushing_collection_cache is False
        assert config.debug is False
        assert config.memoize_loads is False

    def test_reads_prefixed_environment(self, monkeypatch):
        """Test settings come from DATASOURCE_ variables."""
        monkeypatch.setenv("DATASOURCE_CACHE_BACKEND", "redis")
        monkeypatch.setenv("DATASOURCE_REDIS_URL", "redis://cache:6379/2")
        monkeypatch.setenv("DATASOURCE_ALLOW_FLUSHING_COLLECTION_CACHE", "true")

        config = DataSourceConfig()

        assert config.cache_backend == "redis"
        assert config.redis_url == "redis://cache:6379/2"
        assert config.allow_flushing_collection_cache is True

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("DATASOURCE_DEBUG", "false")

        config = get_config(debug=True, memory_cache_max_size=50)

        assert config.debug is True
        assert config.memory_cache_max_size == 50

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError):
            DataSourceConfig(cache_backend="memcached")

    def test_rejects_non_positive_cache_size(self):
        with pytest.raises(ValidationError):
            DataSourceConfig(memory_cache_max_size=0)


class TestErrors:
    """Test cases for the exception hierarchy."""

    def test_configuration_error(self):
        error = ConfigurationError("bad options", details={"option": "cache"})

        assert isinstance(error, DataSourceException)
        assert error.code == "CONFIGURATION_ERROR"
        assert str(error) == "bad options"

    def test_cache_backend_error(self):
        error = CacheBackendError("redis", "connection refused")

        assert error.code == "CACHE_BACKEND_ERROR"
        assert error.message == "redis: connection refused"
        assert error.details == {}

    def test_to_response(self):
        response = ConfigurationError("bad options", details={"option": "cache"}).to_response()

        assert isinstance(response, ErrorResponse)
        assert response.model_dump() == {
            "code": "CONFIGURATION_ERROR",
            "message": "bad options",
            "details": {"option": "cache"},
        }


class TestLoggingProcessors:
    """Test cases for the structlog processors."""

    def test_component_from_logger_name(self):
        event = add_component_context(logging.getLogger(), "info", {"logger": "datasource.id_loader"})

        assert event["component"] == "datasource"

    def test_no_component_for_flat_name(self):
        event = add_component_context(logging.getLogger(), "info", {"logger": "root"})

        assert "component" not in event

    def test_request_id_added_when_set(self):
        request_id = set_request_id("req-123")
        try:
            event = add_correlation_context(None, "info", {})
            assert request_id == "req-123"
            assert event["request_id"] == "req-123"
        finally:
            clear_context()

        assert "request_id" not in add_correlation_context(None, "info", {})

    def test_generates_request_id(self):
        try:
            request_id = set_request_id()
            assert len(request_id) == 36
        finally:
            clear_context()

    def test_configure_logging_renders_json(self, caplog):
        """Test the configured pipeline emits JSON with component context."""
        configure_logging("datasource", "debug")
        try:
            get_logger("datasource.test").info("Configured", collection="users")
        finally:
            structlog.reset_defaults()

        record = [r for r in caplog.records if r.name == "datasource.test"][-1]
        event = json.loads(record.getMessage())
        assert event["event"] == "Configured"
        assert event["component"] == "datasource"
        assert event["collection"] == "users"
        assert event["level"] == "info"


class TestMetricsCollector:
    """Test cases for the metrics collector."""

    def test_registers_with_given_registry(self):
        registry = CollectorRegistry()
        metrics = get_metrics_collector("datasource", registry)

        metrics.record_cache_lookup("id", hit=True)
        metrics.record_cache_error("set")
        metrics.record_batch("query", size=3, duration=0.01, status="error")

        assert registry.get_sample_value("datasource_cache_hits_total", {"loader": "id"}) == 1
        assert registry.get_sample_value("datasource_cache_errors_total", {"operation": "set"}) == 1
        assert registry.get_sample_value(
            "datasource_store_queries_total", {"loader": "query", "status": "error"}
        ) == 1
        assert registry.get_sample_value("datasource_batch_size_sum", {"loader": "query"}) == 3

    def test_unregistered_collectors_coexist(self):
        first = get_metrics_collector()
        second = get_metrics_collector()

        first.record_cache_lookup("id", hit=False)

        assert first.get_metric("cache_misses_total").labels(loader="id")._value.get() == 1
        assert second.get_metric("cache_misses_total").labels(loader="id")._value.get() == 0
