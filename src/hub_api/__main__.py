#!/usr/bin/env python3
"""hub-api-client entry point.

Run:
  python -m hub_api whoami                  # login of the authenticated user
  python -m hub_api latest-tag              # newest hub release tag
  python -m hub_api status OWNER/REPO SHA   # most recent CI status for a commit
"""

import argparse
import logging
import sys

import httpx

from hub_api.client import Client
from hub_api.config import load_config_from_env
from hub_api.credentials import EnvCredentialStore
from hub_api.errors import ConfigError, HubError
from hub_api.hosts import Host, Project


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="hub_api", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("whoami", help="Print the login of the authenticated user.")
    sub.add_parser("latest-tag", help="Print the newest hub release tag.")
    status = sub.add_parser("status", help="Print the most recent CI status of a commit.")
    status.add_argument("repo", help="owner/name")
    status.add_argument("sha")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    config = load_config_from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    host = Host(host=config.host, user=config.user, access_token=config.token)
    client = Client(host, credential_store=EnvCredentialStore(config))

    if args.command == "whoami":
        print(client.current_user().get("login", ""))
    elif args.command == "latest-tag":
        print(client.latest_tag_name())
    elif args.command == "status":
        project = Project.from_name_with_owner(args.repo, host=config.host)
        state = client.ci_status(project, args.sha)
        print(state.get("state", "") if state else "no status")
    return 0


def main() -> None:
    """CLI dispatcher."""
    args = parse_args(sys.argv[1:])
    try:
        code = run(args)
    except (HubError, ConfigError, httpx.HTTPError, ValueError) as exc:
        print(exc, file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
