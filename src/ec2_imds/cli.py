from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .client import IMDSClient
from .commands import IMDSCommand, IPVersion
from .config_loader import DEFAULT_CONFIG_PATH, ClientConfig, load_config
from .errors import IMDSError

logger = logging.getLogger("ec2-imds-cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="EC2 instance metadata client (IMDSv2)",
    )

    subparsers = parser.add_subparsers(dest="command")

    common = dict(
        config=dict(
            default=DEFAULT_CONFIG_PATH,
            help="Path to the YAML client config file",
        ),
        ip_version=dict(
            default=None,
            choices=[version.name.lower() for version in IPVersion],
            help="Address family of the metadata endpoint (defaults to config)",
        ),
        token_ttl=dict(
            type=int,
            default=None,
            help="Token lifetime in seconds (defaults to config)",
        ),
        api_version=dict(
            default=None,
            help="Metadata API version (defaults to config)",
        ),
        timeout=dict(
            type=float,
            default=None,
            help="Per-request timeout in seconds (defaults to config)",
        ),
    )

    def add_common(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("--config", **common["config"])
        cmd.add_argument("--ip-version", **common["ip_version"])
        cmd.add_argument("--token-ttl", **common["token_ttl"])
        cmd.add_argument("--api-version", **common["api_version"])
        cmd.add_argument("--timeout", **common["timeout"])

    get_cmd = subparsers.add_parser("get", help="Print the value of one metadata command")
    add_common(get_cmd)
    get_cmd.add_argument(
        "name",
        help="Metadata command, e.g. instance-id or public-ipv4 (see list-commands)",
    )

    subparsers.add_parser("list-commands", help="Print every command and its path")

    token_cmd = subparsers.add_parser("token", help="Acquire a token to check connectivity")
    add_common(token_cmd)

    parser.set_defaults(command="list-commands")
    return parser.parse_args(argv)


def _client_config(args: argparse.Namespace) -> ClientConfig:
    config = load_config(config_path=args.config)
    overrides = {}
    if args.ip_version is not None:
        overrides["ip_version"] = IPVersion.parse(args.ip_version)
    if args.token_ttl is not None:
        overrides["token_ttl"] = args.token_ttl
    if args.api_version is not None:
        overrides["api_version"] = args.api_version
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    return replace(config, **overrides)


def _list_commands() -> None:
    for command in IMDSCommand:
        print(f"{command.cli_name}\t/{command.path}")


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(message)s")
    args = parse_args(argv)

    if args.command == "list-commands":
        _list_commands()
        return 0

    try:
        config = _client_config(args)
        command = IMDSCommand.from_name(args.name) if args.command == "get" else None
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    try:
        with IMDSClient.from_config(config) as client:
            if command is None:
                if client.token is None:
                    client.acquire_token()
                print(f"Token acquired from {client.base_url} (ttl={client.token_ttl}s)")
            else:
                print(client.send_command(command))
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    except IMDSError as exc:
        logger.error("Metadata request failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
