"""Credential resolution.

The API client only needs one thing from a credential store: given a
hostname, a ``Host`` that carries an access token.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from typing import Protocol

import httpx

from .auth import find_or_create_token
from .config import HubConfig, load_config_from_env
from .errors import AuthError, ConfigError
from .hosts import Host

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def resolve(self, hostname: str) -> Host:
        """Return a ``Host`` with a non-empty access token, or raise."""
        ...


def resolve_credentials(host: Host, store: CredentialStore) -> Host:
    """Return ``host`` if it already has a token, else ask ``store``.

    Errors raised by the store propagate unchanged.
    """
    if host.access_token:
        return host
    logger.debug("No token for %s; consulting credential store", host.host)
    return store.resolve(host.host)


class EnvCredentialStore:
    """Credentials from ``GITHUB_TOKEN`` / ``GITHUB_USER``."""

    def __init__(self, config: HubConfig | None = None) -> None:
        self._config = config

    def resolve(self, hostname: str) -> Host:
        config = self._config or load_config_from_env()
        if not config.token:
            raise ConfigError(f"No access token configured for {hostname} (set GITHUB_TOKEN)")
        return Host(host=hostname, user=config.user, access_token=config.token)


class PromptCredentialStore:
    """Interactively provisions a token with username and password.

    When the server requires a one-time password, the code is prompted for
    and the exchange is retried once with the same credentials.
    """

    def __init__(
        self,
        *,
        prompt: Callable[[str], str] = input,
        prompt_secret: Callable[[str], str] = getpass.getpass,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._prompt = prompt
        self._prompt_secret = prompt_secret
        self._transport = transport

    def resolve(self, hostname: str) -> Host:
        host = Host(host=hostname)
        user = self._prompt(f"{hostname} username: ").strip()
        password = self._prompt_secret(f"{hostname} password for {user} (never stored): ")

        try:
            token = find_or_create_token(host, user, password, transport=self._transport)
        except AuthError as exc:
            if not exc.is_two_factor_error():
                raise
            code = self._prompt("two-factor authentication code: ").strip()
            token = find_or_create_token(host, user, password, code, transport=self._transport)

        host.user = user
        host.access_token = token
        return host
