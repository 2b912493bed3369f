# ============================================================================
# tests/unit/test_configuration.py
# ============================================================================
"""
Tests for configuration loading, settings groups and logging setup
"""

import json
import logging

import pytest
from pydantic import ValidationError

from medication_reconciliation.config import (
    LLMSettings,
    LoggingSettings,
    ReconciliationSettings,
    reconciliation_settings,
)
from medication_reconciliation.core.config import (
    Config,
    get_config,
    get_config_instance,
    reload_config,
)
from medication_reconciliation.core.medication_pipeline import extract_medications
from medication_reconciliation.utils.logging import JsonFormatter, log_performance, setup_logging


@pytest.fixture
def fresh_config():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_config_defaults(monkeypatch):
    for key in ("BACKEND", "REQUEST_TIMEOUT", "USE_CACHE", "CACHE_TTL"):
        monkeypatch.delenv(key, raising=False)

    cfg = Config()

    assert cfg.backend == "ollama"
    assert cfg.request_timeout == 30.0
    assert cfg.use_cache is True
    assert cfg.cache_ttl == 300


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("BACKEND", "azure")
    monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("USE_CACHE", "off")
    monkeypatch.setenv("CACHE_MAX_SIZE", "64")

    cfg = get_config_instance()

    assert cfg.backend == "azure"
    assert cfg.request_timeout == 12.5
    assert cfg.use_cache is False
    assert cfg.cache_max_size == 64


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("MAX_TOKENS", "lots")
    monkeypatch.setenv("TEMPERATURE", "warm")

    cfg = Config()

    assert cfg.max_tokens == 2000
    assert cfg.temperature == 0.1


def test_get_config_is_cached_until_reload(monkeypatch, fresh_config):
    monkeypatch.setenv("OLLAMA_MODEL", "first-model")
    first = get_config()

    monkeypatch.setenv("OLLAMA_MODEL", "second-model")
    assert get_config() is first

    reloaded = reload_config()
    assert reloaded["ollama_model"] == "second-model"


def test_config_dict_has_every_key():
    keys = set(Config().to_dict())
    assert {
        "backend", "ollama_host", "ollama_model", "azure_endpoint", "azure_api_key",
        "azure_deployment", "azure_api_version", "max_tokens", "temperature",
        "request_timeout", "use_cache", "cache_max_size", "cache_ttl", "log_level",
    } <= keys


def test_reconciliation_settings_defaults():
    assert reconciliation_settings.FUZZY_MAX_DISTANCE == 2
    assert reconciliation_settings.MIN_NAME_LENGTH == 3
    assert reconciliation_settings.DEFAULT_DOSE == "As prescribed"
    assert reconciliation_settings.STRUCTURED_MATCH_CONFIDENCE == 0.8
    assert reconciliation_settings.NAME_ONLY_CONFIDENCE == 0.6


def test_settings_environment_override(monkeypatch):
    monkeypatch.setenv("FUZZY_MAX_DISTANCE", "1")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("LOG_JSON", "true")

    assert ReconciliationSettings().FUZZY_MAX_DISTANCE == 1
    assert LLMSettings().LLM_TIMEOUT_SECONDS == 5.0
    assert LoggingSettings().LOG_JSON is True


@pytest.mark.parametrize("key,value,settings_cls", [
    ("MIN_NAME_LENGTH", "0", ReconciliationSettings),
    ("STRUCTURED_MATCH_CONFIDENCE", "1.5", ReconciliationSettings),
    ("LLM_TIMEOUT_SECONDS", "0", LLMSettings),
])
def test_settings_validation(monkeypatch, key, value, settings_cls):
    monkeypatch.setenv(key, value)

    with pytest.raises(ValidationError):
        settings_cls()


def test_json_formatter():
    record = logging.LogRecord(
        name="medication_reconciliation.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Cannot stop %s",
        args=("Heparin",),
        exc_info=None,
    )

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "medication_reconciliation.test"
    assert data["message"] == "Cannot stop Heparin"
    assert "extra" not in data


@pytest.mark.asyncio
async def test_json_formatter_structured_fields(caplog):
    with caplog.at_level(logging.INFO, logger="medication_reconciliation.core.medication_pipeline"):
        await extract_medications("Medications:\n- Caffeine 5mg PO daily")

    record = next(r for r in caplog.records if r.getMessage().startswith("Extraction complete"))
    data = json.loads(JsonFormatter().format(record))

    assert data["extra"]["method"] == "fallback"
    assert data["extra"]["total_found"] == 1


def test_setup_logging_sets_level():
    setup_logging(level="DEBUG")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging(level="WARNING", format_json=True)
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_log_performance(caplog):
    logger = logging.getLogger("perf-test")

    @log_performance(logger, "Doubling")
    def double(x):
        return x * 2

    @log_performance(logger, "Exploding")
    def explode():
        raise ValueError("boom")

    with caplog.at_level(logging.INFO, logger="perf-test"):
        assert double(4) == 8
        with pytest.raises(ValueError):
            explode()

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Doubling completed in") for m in messages)
    assert any(m.startswith("Exploding failed after") for m in messages)
