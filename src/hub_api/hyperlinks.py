"""URL templates for API endpoints.

Supports the subset of RFC 6570 used by the GitHub API:
``{var}`` (required segment), ``{/var}`` (optional path segment) and
``{?a,b}`` (optional query parameters).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import quote, urlencode

_EXPRESSION_RE = re.compile(r"\{([/?]?)([^{}]*)\}")
_VARNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


class TemplateError(ValueError):
    """Raised when a URL template cannot be expanded."""


def _scalar(name: str, value: object) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TemplateError(f"template variable {name!r} must be a string or integer")
    return str(value)


class Hyperlink:
    """An expandable API path template."""

    __slots__ = ("template",)

    def __init__(self, template: str) -> None:
        self.template = template

    def __repr__(self) -> str:
        return f"Hyperlink({self.template!r})"

    def expand(self, params: Mapping[str, object] | None = None) -> str:
        """Expand the template into a concrete path or URL.

        Raises:
            TemplateError: on a malformed expression, a missing required
                variable, or a non-scalar value.
        """
        params = params or {}

        def replace(match: re.Match[str]) -> str:
            operator, body = match.group(1), match.group(2)
            names = [n.strip() for n in body.split(",")]
            for name in names:
                if not _VARNAME_RE.match(name):
                    raise TemplateError(f"malformed template expression {match.group(0)!r}")

            if operator == "?":
                query = [(n, _scalar(n, params[n])) for n in names if params.get(n) is not None]
                return "?" + urlencode(query, quote_via=quote) if query else ""

            if len(names) != 1:
                raise TemplateError(f"malformed template expression {match.group(0)!r}")
            name = names[0]
            value = params.get(name)

            if operator == "/":
                if value is None or value == "":
                    return ""
                return "/" + quote(_scalar(name, value), safe="")

            if value is None:
                raise TemplateError(f"missing template variable {name!r}")
            return quote(_scalar(name, value), safe="")

        expanded = _EXPRESSION_RE.sub(replace, self.template)
        if "{" in expanded or "}" in expanded:
            raise TemplateError(f"malformed template {self.template!r}")
        return expanded


PULL_REQUESTS_URL = Hyperlink("/repos/{owner}/{repo}/pulls{/number}")
REPOSITORY_URL = Hyperlink("/repos/{owner}/{repo}")
USER_REPOSITORIES_URL = Hyperlink("/user/repos")
ORG_REPOSITORIES_URL = Hyperlink("/orgs/{org}/repos")
RELEASES_URL = Hyperlink("/repos/{owner}/{repo}/releases{/id}")
STATUSES_URL = Hyperlink("/repos/{owner}/{repo}/statuses/{ref}")
FORKS_URL = Hyperlink("/repos/{owner}/{repo}/forks")
REPO_ISSUES_URL = Hyperlink("/repos/{owner}/{repo}/issues{/number}")
AUTHORIZATIONS_URL = Hyperlink("/authorizations{/id}")
CURRENT_USER_URL = Hyperlink("/user")
