"""Host identity, project references and API endpoint resolution.

github.com is served from a dedicated API host. Every other host is treated as
a GitHub Enterprise instance that serves the same API under ``/api/v3`` on the
host itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

GITHUB_HOST = "github.com"
GITHUB_API_HOST = "api.github.com"
ENTERPRISE_API_PREFIX = "/api/v3"


@dataclass(slots=True)
class Host:
    """Credentials and identity for one host.

    ``access_token`` may be empty until credentials are resolved.
    """

    host: str = GITHUB_HOST
    user: str = ""
    access_token: str = ""
    protocol: str = "https"


_SCP_LIKE_RE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


@dataclass(frozen=True, slots=True)
class Project:
    """A remote repository identified by owner and name."""

    owner: str
    name: str
    host: str = GITHUB_HOST
    protocol: str = "https"

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"

    def web_url(self) -> str:
        return f"{self.protocol}://{self.host}/{self.owner}/{self.name}"

    @classmethod
    def from_name_with_owner(cls, value: str, host: str = GITHUB_HOST) -> Project:
        """Build a project from an ``owner/name`` string."""
        owner, sep, name = value.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"expected owner/name, got {value!r}")
        return cls(owner=owner, name=name, host=host)

    @classmethod
    def from_url(cls, url: str) -> Project:
        """Build a project from a git remote URL.

        Accepts ``https://host/owner/name(.git)``, ``ssh://git@host/owner/name``
        and scp-like ``git@host:owner/name.git``.
        """
        url = url.strip()
        protocol = "https"
        if "://" in url:
            parts = urlsplit(url)
            host = parts.hostname or ""
            path = parts.path
            if parts.scheme in ("http", "https"):
                protocol = parts.scheme
        else:
            match = _SCP_LIKE_RE.match(url)
            if match is None:
                raise ValueError(f"unrecognized remote URL {url!r}")
            host = match.group("host")
            path = match.group("path")

        segments = [s for s in path.strip("/").split("/") if s]
        if not host or len(segments) < 2:
            raise ValueError(f"unrecognized remote URL {url!r}")

        owner, name = segments[0], segments[1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return cls(owner=owner, name=name, host=host.lower(), protocol=protocol)


def is_github_host(hostname: str) -> bool:
    return hostname.lower() == GITHUB_HOST


def api_base_url(host: Host) -> str:
    """Return the scheme and authority to send API requests to."""
    if is_github_host(host.host):
        return f"https://{GITHUB_API_HOST}"
    protocol = host.protocol or "https"
    return f"{protocol}://{host.host}"


def request_url(hostname: str, url: str) -> str:
    """Rewrite a request URL for the given host.

    Only the path, query and fragment survive: the scheme and authority of an
    absolute URL (for example a pagination link) are dropped so the request
    always goes to the configured API endpoint. Enterprise paths get the
    ``/api/v3`` prefix exactly once.
    """
    parts = urlsplit(url)
    path = parts.path
    if not path.startswith("/"):
        path = "/" + path

    if not is_github_host(hostname):
        if path != ENTERPRISE_API_PREFIX and not path.startswith(ENTERPRISE_API_PREFIX + "/"):
            path = ENTERPRISE_API_PREFIX + path

    return urlunsplit(("", "", path, parts.query, parts.fragment))
