"""Command-line wrapper around the iam_client services."""
from __future__ import annotations
import argparse
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .client import IAMClient
from .exceptions import ConfigError, IAMError
from .models import User
from .permissions import PermissionService
from .resources import ResourceService
from .roles import RoleService
from .settings import ClientConfig, load_settings
from .users import UserService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="iam-client", description="IAM service helper")
    parser.add_argument("--endpoint", help="Overrides the matching IAM_* environment variable")
    parser.add_argument("--client-id", help="Overrides the matching IAM_* environment variable")
    parser.add_argument("--client-secret", help="Overrides the matching IAM_* environment variable")
    parser.add_argument("--organization", help="Overrides the matching IAM_* environment variable")
    parser.add_argument("--application", help="Overrides the matching IAM_* environment variable")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("get-users")

    sg = sub.add_parser("get-user")
    sg.add_argument("--name", required=True)

    sd = sub.add_parser("delete-user")
    sd.add_argument("--name", required=True)

    sub.add_parser("get-roles")
    sub.add_parser("get-permissions")

    su = sub.add_parser("upload")
    su.add_argument("--file", required=True, type=Path)
    su.add_argument("--path", required=True, help="Full file path on the service side")
    su.add_argument("--user", default="")
    su.add_argument("--tag", default="custom")
    su.add_argument("--parent", default="")

    return parser


def _config_from_args(args: argparse.Namespace) -> ClientConfig:
    """Environment and /run/secrets settings, overridden by explicit CLI flags."""
    environ = dict(os.environ)
    overrides = {
        "IAM_ENDPOINT": args.endpoint,
        "IAM_CLIENT_ID": args.client_id,
        "IAM_CLIENT_SECRET": args.client_secret,
        "IAM_ORGANIZATION_NAME": args.organization,
        "IAM_APPLICATION_NAME": args.application,
    }
    environ.update({key: value for key, value in overrides.items() if value})
    config = load_settings(environ)
    if args.client_secret:
        # /run/secrets wins over the environment, not over the command line
        config = dataclasses.replace(config, client_secret=args.client_secret)
    logger.debug("Using %r", config)
    return config


def _print_json(value) -> None:
    if dataclasses.is_dataclass(value):
        value = value.to_dict()
    elif isinstance(value, list):
        value = [item.to_dict() for item in value]
    print(json.dumps(value, indent=2, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.cmd:
        parser.print_help()
        return 1

    try:
        client = IAMClient(_config_from_args(args))
    except ConfigError as e:
        print(f"[iam-client] {e}", file=sys.stderr)
        return 1

    try:
        if args.cmd == "get-users":
            _print_json(UserService(client).get_users())
        elif args.cmd == "get-user":
            user = UserService(client).get_user(args.name)
            if user is None:
                print(f"[iam-client] User '{args.name}' not found", file=sys.stderr)
                return 1
            _print_json(user)
        elif args.cmd == "delete-user":
            user = User(owner=client.config.organization_name, name=args.name)
            affected = UserService(client).delete_user(user)
            _print_json({"affected": affected})
        elif args.cmd == "get-roles":
            _print_json(RoleService(client).get_roles())
        elif args.cmd == "get-permissions":
            _print_json(PermissionService(client).get_permissions())
        elif args.cmd == "upload":
            file_url, name = ResourceService(client).upload_resource(
                args.user, args.tag, args.parent, args.path, args.file.read_bytes()
            )
            _print_json({"url": file_url, "name": name})
    except IAMError as e:
        print(f"[iam-client] {args.cmd} failed: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[iam-client] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
