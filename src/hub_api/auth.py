"""OAuth token provisioning.

Exchanges a username and password (plus an optional one-time password) for a
long-lived token, reusing the token previously created for this application
when one exists. Passwords and tokens are never logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .api import ApiSession, BasicAuth
from .errors import AuthError, ResponseError
from .hosts import Host, api_base_url, request_url
from .hyperlinks import AUTHORIZATIONS_URL, TemplateError
from .proxy import EnvironmentProxyTransport

logger = logging.getLogger(__name__)

OAUTH_APP_NAME = "hub"
OAUTH_APP_URL = "http://hub.github.com/"
OAUTH_SCOPES = ("repo",)


@dataclass(frozen=True, slots=True)
class Authorization:
    """An OAuth authorization as listed by the API."""

    app_url: str
    token: str
    scopes: tuple[str, ...] = ()
    note: str = ""
    note_url: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> Authorization:
        if not isinstance(payload, dict):
            return cls(app_url="", token="")
        app = payload.get("app") if isinstance(payload.get("app"), dict) else {}
        scopes = payload.get("scopes")
        return cls(
            app_url=str(app.get("url") or ""),
            token=str(payload.get("token") or ""),
            scopes=tuple(str(s) for s in scopes) if isinstance(scopes, (list, tuple)) else (),
            note=str(payload.get("note") or ""),
            note_url=str(payload.get("note_url") or ""),
        )


def find_or_create_token(
    host: Host,
    user: str,
    password: str,
    two_factor_code: str = "",
    *,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Return a token for this application on ``host``.

    The first existing authorization whose application URL equals
    ``OAUTH_APP_URL`` is reused; otherwise a new one with the ``repo`` scope
    is created.

    Raises:
        AuthError: on any failure. ``is_two_factor_error()`` tells whether a
            one-time password is needed.
    """
    try:
        url = AUTHORIZATIONS_URL.expand()
    except TemplateError as exc:
        raise AuthError(exc) from exc

    session = ApiSession(
        base_url=api_base_url(host),
        auth=BasicAuth(user, password, two_factor_code),
        transport=transport or EnvironmentProxyTransport(),
        rewrite=lambda u: request_url(host.host, u),
    )
    try:
        with session:
            token = ""
            for payload in session.get_all(url):
                auth = Authorization.from_payload(payload)
                if auth.app_url == OAUTH_APP_URL:
                    token = auth.token
                    break
            if token:
                logger.info("Reusing existing %s authorization on %s", OAUTH_APP_NAME, host.host)
                return token

            params = {
                "scopes": list(OAUTH_SCOPES),
                "note": OAUTH_APP_NAME,
                "note_url": OAUTH_APP_URL,
            }
            created = Authorization.from_payload(session.create(url, params))
            logger.info("Created %s authorization on %s", OAUTH_APP_NAME, host.host)
            return created.token
    except (ResponseError, httpx.HTTPError) as exc:
        raise AuthError(exc) from exc
