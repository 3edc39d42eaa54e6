"""API client used by commands.

Every operation follows the same shape: expand the endpoint template, get an
authenticated session (resolving credentials on first use), rewrite the URL
for the host, issue the request, and normalize failures with an action label.

A ``Client`` is not safe to share between threads: credentials are resolved
lazily and assigned to ``client.host``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import IO, Any

import httpx

from . import hyperlinks
from .api import ApiSession, TokenAuth
from .auth import find_or_create_token
from .credentials import CredentialStore, EnvCredentialStore, resolve_credentials
from .errors import AuthError, HubError, ResponseError, existence_hint, format_error
from .hosts import GITHUB_HOST, Host, Project, api_base_url, request_url
from .proxy import EnvironmentProxyTransport

logger = logging.getLogger(__name__)

LATEST_RELEASE_OWNER = "github"
LATEST_RELEASE_REPO = "hub"


class normalized_errors:
    """Re-raise response and auth errors as ``HubError`` labelled ``action``.

    Any other exception leaves the block untouched.
    """

    def __init__(self, action: str) -> None:
        self.action = action

    def __enter__(self) -> None:
        return None

    def __exit__(self, exc_type: object, exc: BaseException | None, tb: object) -> bool:
        if isinstance(exc, (ResponseError, AuthError)):
            raise format_error(self.action, exc) from exc
        return False


class Client:
    """Facade over the GitHub REST API for one host."""

    def __init__(
        self,
        host: Host | str = GITHUB_HOST,
        *,
        credential_store: CredentialStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create a client.

        Args:
            host: Host identity, or a bare hostname with no token yet.
            credential_store: Consulted once when ``host`` has no token.
            transport: Optional httpx transport for tests; defaults to the
                environment proxy transport.
        """
        self.host = Host(host=host) if isinstance(host, str) else host
        self._credential_store = credential_store or EnvCredentialStore()
        self._transport = transport

    def _new_transport(self) -> httpx.BaseTransport:
        return self._transport or EnvironmentProxyTransport()

    def _request_url(self, url: str) -> str:
        return request_url(self.host.host, url)

    def _api(self) -> ApiSession:
        self.host = resolve_credentials(self.host, self._credential_store)
        return ApiSession(
            base_url=api_base_url(self.host),
            auth=TokenAuth(self.host.access_token),
            transport=self._new_transport(),
            rewrite=self._request_url,
        )

    def _session(self, action: str) -> ApiSession:
        with normalized_errors(action):
            return self._api()

    def _get_one(self, action: str, url: str) -> Any:
        with self._session(action) as api, normalized_errors(action):
            return api.get_one(url)

    def _get_all(self, action: str, url: str) -> list[Any]:
        with self._session(action) as api, normalized_errors(action):
            return api.get_all(url)

    def _create(self, action: str, url: str, params: Any = None) -> Any:
        with self._session(action) as api, normalized_errors(action):
            return api.create(url, params)

    def _create_pull_request(self, project: Project, params: Mapping[str, Any]) -> dict[str, Any]:
        action = "creating pull request"
        url = hyperlinks.PULL_REQUESTS_URL.expand({"owner": project.owner, "repo": project.name})
        with self._session(action) as api:
            try:
                return api.create(url, dict(params))
            except ResponseError as exc:
                error = format_error(action, exc)
                hint = existence_hint(project, exc)
                if hint and isinstance(error, HubError):
                    error = error.with_hint(hint)
                raise error from exc

    def pull_request(self, project: Project, number: int | str) -> dict[str, Any]:
        url = hyperlinks.PULL_REQUESTS_URL.expand(
            {"owner": project.owner, "repo": project.name, "number": number}
        )
        return self._get_one("getting pull request", url)

    def create_pull_request(
        self, project: Project, base: str, head: str, title: str, body: str
    ) -> dict[str, Any]:
        params = {"base": base, "head": head, "title": title, "body": body}
        return self._create_pull_request(project, params)

    def create_pull_request_for_issue(
        self, project: Project, base: str, head: str, issue: int | str
    ) -> dict[str, Any]:
        """Turn an existing issue into a pull request."""
        params = {"base": base, "head": head, "issue": int(issue)}
        return self._create_pull_request(project, params)

    def repository(self, project: Project) -> dict[str, Any]:
        url = hyperlinks.REPOSITORY_URL.expand({"owner": project.owner, "repo": project.name})
        return self._get_one("getting repository", url)

    def repository_exists(self, project: Project) -> bool:
        try:
            repo = self.repository(project)
        except (HubError, httpx.HTTPError) as exc:
            logger.debug("Repository %s not reachable: %s", project, exc)
            return False
        return repo is not None

    def create_repository(
        self, project: Project, description: str = "", homepage: str = "", private: bool = False
    ) -> dict[str, Any]:
        """Create ``project`` under the user or, if the owner differs, an organization."""
        if project.owner != self.host.user:
            template = hyperlinks.ORG_REPOSITORIES_URL
        else:
            template = hyperlinks.USER_REPOSITORIES_URL
        url = template.expand({"org": project.owner})

        params = {
            "name": project.name,
            "description": description,
            "homepage": homepage,
            "private": private,
        }
        return self._create("creating repository", url, params)

    def releases(self, project: Project) -> list[dict[str, Any]]:
        url = hyperlinks.RELEASES_URL.expand({"owner": project.owner, "repo": project.name})
        return self._get_all("getting release", url)

    def create_release(self, project: Project, params: Mapping[str, Any]) -> dict[str, Any]:
        url = hyperlinks.RELEASES_URL.expand({"owner": project.owner, "repo": project.name})
        return self._create("creating release", url, dict(params))

    def upload_release_asset(self, upload_url: str, asset: IO[bytes], content_type: str) -> dict[str, Any]:
        """Upload an open file to a release's (expanded) upload URL.

        The caller owns ``asset``; it is not closed here.
        """
        size = os.fstat(asset.fileno()).st_size

        action = "uploading asset"
        with self._session(action) as api, normalized_errors(action):
            return api.upload(upload_url, asset, content_type, size)

    def ci_status(self, project: Project, sha: str) -> dict[str, Any] | None:
        """Most recent commit status for ``sha``, or None if there is none."""
        url = hyperlinks.STATUSES_URL.expand({"owner": project.owner, "repo": project.name, "ref": sha})
        statuses = self._get_all("getting CI status", url)
        if statuses:
            return statuses[0]
        return None

    def fork_repository(self, project: Project) -> dict[str, Any]:
        url = hyperlinks.FORKS_URL.expand({"owner": project.owner, "repo": project.name})
        return self._create("forking repository", url)

    def issues(self, project: Project) -> list[dict[str, Any]]:
        url = hyperlinks.REPO_ISSUES_URL.expand({"owner": project.owner, "repo": project.name})
        return self._get_all("getting issues", url)

    def create_issue(
        self, project: Project, title: str, body: str = "", labels: list[str] | None = None
    ) -> dict[str, Any]:
        url = hyperlinks.REPO_ISSUES_URL.expand({"owner": project.owner, "repo": project.name})
        params: dict[str, Any] = {"title": title, "body": body}
        if labels:
            params["labels"] = list(labels)
        return self._create("creating issue", url, params)

    def current_user(self) -> dict[str, Any]:
        url = hyperlinks.CURRENT_USER_URL.expand()
        return self._get_one("getting current user", url)

    def latest_tag_name(self) -> str:
        """Tag of the newest published hub release, queried without credentials."""
        url = hyperlinks.RELEASES_URL.expand({"owner": LATEST_RELEASE_OWNER, "repo": LATEST_RELEASE_REPO})
        action = f"getting {LATEST_RELEASE_REPO} release"

        session = ApiSession(
            base_url=api_base_url(self.host),
            transport=self._new_transport(),
            rewrite=self._request_url,
        )
        try:
            with session:
                releases = session.get_all(url)
        except (ResponseError, httpx.HTTPError) as exc:
            raise HubError(action=action, message=f"Error {action}: {exc}") from exc

        if not releases:
            raise HubError(action=action, message=f"No {LATEST_RELEASE_REPO} release is available")
        latest = releases[0]
        if not isinstance(latest, dict):
            raise HubError(action=action, message=f"Error {action}: unexpected release payload")
        return str(latest.get("tag_name") or "")

    def find_or_create_token(self, user: str, password: str, two_factor_code: str = "") -> str:
        return find_or_create_token(
            self.host, user, password, two_factor_code, transport=self._transport
        )
