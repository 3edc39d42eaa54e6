"""Proxy environment handling tests."""

from __future__ import annotations

import httpx
import pytest
from hub_api.proxy import EnvironmentProxyTransport, InvalidProxyError, proxy_from_environment


def test_no_proxy_configured() -> None:
    assert proxy_from_environment({}) is None
    assert proxy_from_environment({"http_proxy": ""}) is None


def test_bare_host_port_gets_http_scheme() -> None:
    assert proxy_from_environment({"http_proxy": "proxy.example.com:8080"}) == "http://proxy.example.com:8080"


def test_https_proxy_used_as_is() -> None:
    assert proxy_from_environment({"http_proxy": "https://proxy.example.com"}) == "https://proxy.example.com"


def test_lower_case_variable_wins() -> None:
    env = {"http_proxy": "http://lower.example:3128", "HTTP_PROXY": "http://upper.example:3128"}
    assert proxy_from_environment(env) == "http://lower.example:3128"


def test_upper_case_variable_is_fallback() -> None:
    assert proxy_from_environment({"HTTP_PROXY": "http://upper.example:3128"}) == "http://upper.example:3128"


def test_unparseable_proxy_raises_with_value() -> None:
    with pytest.raises(InvalidProxyError) as exc:
        _ = proxy_from_environment({"http_proxy": "::not a url::"})

    assert "invalid proxy address" in str(exc.value)
    assert "::not a url::" in str(exc.value)


def test_invalid_proxy_is_a_transport_error() -> None:
    assert issubclass(InvalidProxyError, httpx.TransportError)


def test_reads_process_environment_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("http_proxy", raising=False)
    monkeypatch.setenv("HTTP_PROXY", "proxy.internal:3128")
    assert proxy_from_environment() == "http://proxy.internal:3128"


def test_transport_reuses_one_transport_per_proxy() -> None:
    transport = EnvironmentProxyTransport(environ={})
    direct = transport.transport_for(None)
    proxied = transport.transport_for("http://proxy.example.com:8080")

    assert transport.transport_for(None) is direct
    assert transport.transport_for("http://proxy.example.com:8080") is proxied
    assert proxied is not direct
    transport.close()


def test_transport_surfaces_invalid_proxy_on_request() -> None:
    transport = EnvironmentProxyTransport(environ={"http_proxy": "::not a url::"})
    with httpx.Client(transport=transport, trust_env=False) as client:
        with pytest.raises(InvalidProxyError):
            _ = client.get("http://example.invalid/")
