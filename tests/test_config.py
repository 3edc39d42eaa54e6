"""Configuration loading tests."""

from __future__ import annotations

import pytest
from hub_api.config import HubConfig, load_config_from_env
from hub_api.errors import ConfigError

_VARS = ("GITHUB_HOST", "GITHUB_USER", "GITHUB_TOKEN", "HUB_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert load_config_from_env() == HubConfig()


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_HOST", " Git.Corp.Example ")
    monkeypatch.setenv("GITHUB_USER", "octo")
    monkeypatch.setenv("GITHUB_TOKEN", "tok")
    monkeypatch.setenv("HUB_LOG_LEVEL", "debug")

    cfg = load_config_from_env()

    assert cfg.host == "git.corp.example"
    assert cfg.user == "octo"
    assert cfg.token == "tok"
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["https://git.corp.example", "git.corp.example/api", "a b"])
def test_rejects_host_with_scheme_or_path(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("GITHUB_HOST", value)

    with pytest.raises(ConfigError) as exc:
        _ = load_config_from_env()

    assert "GITHUB_HOST" in str(exc.value)


def test_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUB_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError):
        _ = load_config_from_env()
