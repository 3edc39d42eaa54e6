"""Proxy-aware HTTP transport.

Reads ``http_proxy`` / ``HTTP_PROXY`` on every request. Bare ``host:port``
values without a scheme are accepted and treated as ``http://host:port``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import httpx

logger = logging.getLogger(__name__)


class InvalidProxyError(httpx.TransportError):
    """The proxy environment variable holds an unusable address."""


def _parse_url(raw: str) -> httpx.URL:
    url = httpx.URL(raw)
    if not url.scheme:
        raise httpx.InvalidURL("missing protocol scheme")
    if url.scheme.startswith("http") and not url.host:
        raise httpx.InvalidURL("missing host")
    return url


def proxy_from_environment(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the proxy URL to use, or None for a direct connection.

    Raises:
        InvalidProxyError: if the configured value cannot be parsed as a URL,
            with or without an ``http://`` prefix.
    """
    env = os.environ if environ is None else environ
    proxy = env.get("http_proxy") or env.get("HTTP_PROXY") or ""
    if not proxy:
        return None

    error: Exception | None = None
    proxy_url: httpx.URL | None = None
    try:
        proxy_url = _parse_url(proxy)
    except httpx.InvalidURL as exc:
        error = exc

    if error is not None or proxy_url is None or not proxy_url.scheme.startswith("http"):
        try:
            _parse_url("http://" + proxy)
            return "http://" + proxy
        except httpx.InvalidURL:
            pass

    if error is not None or proxy_url is None:
        raise InvalidProxyError(f"invalid proxy address {proxy!r}: {error}")
    return proxy


class EnvironmentProxyTransport(httpx.BaseTransport):
    """Routes each request through the proxy named by the environment.

    One ``httpx.HTTPTransport`` is kept per distinct proxy address (``None``
    meaning direct) and reused across requests.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ
        self._transports: dict[str | None, httpx.HTTPTransport] = {}

    def transport_for(self, proxy: str | None) -> httpx.HTTPTransport:
        transport = self._transports.get(proxy)
        if transport is None:
            if proxy is None:
                transport = httpx.HTTPTransport()
            else:
                logger.debug("Using proxy %s", proxy)
                transport = httpx.HTTPTransport(proxy=httpx.Proxy(proxy))
            self._transports[proxy] = transport
        return transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        proxy = proxy_from_environment(self._environ)
        return self.transport_for(proxy).handle_request(request)

    def close(self) -> None:
        for transport in self._transports.values():
            transport.close()
        self._transports.clear()
