"""GitHub API client for the hub command-line tool.

Talks to github.com or a GitHub Enterprise host, provisions OAuth tokens
(with two-factor support) and normalizes API errors for display.
"""

__version__ = "0.1.0"

from .client import Client
from .credentials import CredentialStore, EnvCredentialStore, PromptCredentialStore
from .errors import AuthError, ConfigError, HubError, ResponseError
from .hosts import Host, Project

__all__ = [
    "AuthError",
    "Client",
    "ConfigError",
    "CredentialStore",
    "EnvCredentialStore",
    "HubError",
    "Host",
    "Project",
    "PromptCredentialStore",
    "ResponseError",
]
