import logging

import pytest

from searchops.client import SearchOps
from searchops.config import Settings, clamp_batch_size
from searchops.exceptions import ConfigError
from searchops.logging_setup import setup_logging


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCHOPS_CLUSTER__HOSTS", '["http://es1:9200", "http://es2:9200"]')
    monkeypatch.setenv("SEARCHOPS_CLUSTER__COOLDOWN_SECONDS", "15")
    monkeypatch.setenv("SEARCHOPS_OPS__ERROR_POLICY", "lenient")
    monkeypatch.setenv("SEARCHOPS_OPS__BATCH_SIZE", "250")

    settings = Settings()
    assert settings.cluster.hosts == ["http://es1:9200", "http://es2:9200"]
    assert settings.cluster.cooldown_seconds == 15.0
    assert settings.ops.error_policy == "lenient"

    ops = SearchOps.from_settings(settings)
    assert ops.dispatcher.lenient
    assert ops.dispatcher.selector.endpoints() == ["http://es1:9200", "http://es2:9200"]
    assert ops.bulk_insert("books", []).batch_size == 250


def test_defaults() -> None:
    settings = Settings()
    assert settings.ops.scroll_ttl == 60
    assert settings.ops.batch_size == 1000
    assert settings.ops.error_policy == "strict"
    assert settings.cluster.cooldown_seconds == 60.0


def test_empty_host_list_is_rejected() -> None:
    settings = Settings()
    settings.cluster.hosts = []
    with pytest.raises(ConfigError):
        SearchOps.from_settings(settings)
    with pytest.raises(ConfigError):
        SearchOps.from_hosts()


@pytest.mark.parametrize(
    "requested,expected", [(None, 1000), (0, 1000), (1, 1), (-4, 1), (500, 500), (10001, 10000)]
)
def test_clamp_batch_size(requested, expected) -> None:  # type: ignore[no-untyped-def]
    assert clamp_batch_size(requested) == expected


def test_setup_logging_quiets_httpx() -> None:
    setup_logging("INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    setup_logging("debug")
    assert logging.getLogger("httpx").level == logging.DEBUG
    setup_logging("INFO")
