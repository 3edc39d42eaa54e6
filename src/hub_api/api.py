"""Low-level GitHub REST session.

Provides:
- token or basic (+ one-time password) authentication
- JSON read-one / read-all (following ``Link: rel="next"``) / create
- streaming asset uploads
- translation of error responses into ``ResponseError``
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from typing import IO, Any

import httpx

from .errors import ResponseError

logger = logging.getLogger(__name__)

USER_AGENT = "Hub"
MEDIA_TYPE = "application/vnd.github.v3+json"


class TokenAuth(httpx.Auth):
    """``Authorization: token <access token>``."""

    def __init__(self, access_token: str) -> None:
        self._access_token = access_token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"token {self._access_token}"
        yield request


class BasicAuth(httpx.BasicAuth):
    """Basic auth that also sends ``X-GitHub-OTP`` when a code is supplied."""

    def __init__(self, login: str, password: str, one_time_password: str = "") -> None:
        super().__init__(login, password)
        self._one_time_password = one_time_password

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self._one_time_password:
            request.headers["X-GitHub-OTP"] = self._one_time_password
        yield from super().auth_flow(request)


class ApiSession:
    """A configured connection to one API endpoint.

    ``rewrite`` maps every outgoing URL (including pagination links) to the
    path that should be requested on ``base_url``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth: httpx.Auth | None = None,
        transport: httpx.BaseTransport | None = None,
        rewrite: Callable[[str], str] | None = None,
    ) -> None:
        self._rewrite = rewrite or (lambda url: url)
        self._client = httpx.Client(
            base_url=base_url,
            auth=auth,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": MEDIA_TYPE},
            follow_redirects=True,
            trust_env=False,
        )

    def __enter__(self) -> ApiSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, url)
        resp = self._client.request(method, url, **kwargs)
        if resp.status_code >= 400:
            raise ResponseError.from_response(resp)
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ResponseError(
                status_code=resp.status_code,
                reason=resp.reason_phrase,
                message="Invalid JSON in response body",
            ) from exc

    def get_one(self, url: str) -> Any:
        """GET a single resource."""
        return self._decode(self._send("GET", self._rewrite(url)))

    def get_all(self, url: str) -> list[Any]:
        """GET every page of a collection, in server order."""
        items: list[Any] = []
        next_url: str | None = url
        while next_url:
            resp = self._send("GET", self._rewrite(next_url))
            page = self._decode(resp)
            if isinstance(page, list):
                items.extend(page)
            elif page is not None:
                items.append(page)
            next_url = resp.links.get("next", {}).get("url")
        return items

    def create(self, url: str, params: Any = None) -> Any:
        """POST ``params`` as JSON and return the created resource."""
        kwargs: dict[str, Any] = {}
        if params is not None:
            kwargs["json"] = params
        return self._decode(self._send("POST", self._rewrite(url), **kwargs))

    def upload(self, url: str, content: IO[bytes], content_type: str, size: int) -> Any:
        """Stream ``size`` bytes of ``content`` to an absolute upload URL."""
        headers = {"Content-Type": content_type, "Content-Length": str(size)}
        return self._decode(self._send("POST", url, content=content, headers=headers))
