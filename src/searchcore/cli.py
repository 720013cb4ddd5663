#!/usr/bin/env python3
"""
searchcore CLI: quick checks against a search service.

  health                          : service health (exit 1 when unavailable)
  version                         : service version
  task <uid>                      : current task state
  wait <uid> [--interval --timeout]
                                  : block until the task is terminal
  token <api-key-uid> --rules JSON [--expires-in SECONDS] [--api-key KEY]
                                  : sign a tenant token locally

Connection settings come from SEARCHCORE_* environment variables or a YAML
file given with --config. Results are printed as JSON.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from dataclasses import replace
from typing import Any, List, Optional

from searchcore.client import SearchClient
from searchcore.config import ClientConfig
from searchcore.errors import SearchClientError, error_summary
from searchcore.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _dump(obj: Any) -> None:
    if hasattr(obj, "model_dump"):
        obj = obj.model_dump(by_alias=True, mode="json", exclude_none=True)
    print(json.dumps(obj, indent=2, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="searchcore", description="searchcore command line")
    parser.add_argument("--config", help="YAML file with client settings")
    parser.add_argument("--host", help="Service URL (overrides config)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="Check service health")
    sub.add_parser("version", help="Show service version")

    p_task = sub.add_parser("task", help="Show a task")
    p_task.add_argument("uid", type=int)

    p_wait = sub.add_parser("wait", help="Wait for a task to finish")
    p_wait.add_argument("uid", type=int)
    p_wait.add_argument("--interval", type=float, help="Seconds between polls")
    p_wait.add_argument("--timeout", type=float, help="Seconds before giving up")

    p_token = sub.add_parser("token", help="Generate a tenant token")
    p_token.add_argument("api_key_uid")
    p_token.add_argument("--rules", required=True, help='Search rules as JSON, e.g. \'{"*": {}}\'')
    p_token.add_argument("--expires-in", type=int, help="Lifetime in seconds")
    p_token.add_argument("--api-key", help="Signing key (defaults to the configured key)")
    return parser


def load_config(args: argparse.Namespace) -> ClientConfig:
    config = ClientConfig.from_file(args.config) if args.config else ClientConfig.from_env()
    if args.host:
        config = replace(config, host=args.host)
    return config


async def run(args: argparse.Namespace, config: ClientConfig) -> int:
    async with SearchClient(config) as client:
        if args.command == "health":
            healthy = await client.is_healthy()
            _dump({"host": config.host, "healthy": healthy})
            return 0 if healthy else 1
        if args.command == "version":
            _dump(await client.version())
        elif args.command == "task":
            _dump(await client.get_task(args.uid))
        elif args.command == "wait":
            task = await client.wait_for_task(args.uid, interval=args.interval, timeout=args.timeout)
            _dump(task)
        elif args.command == "token":
            rules = json.loads(args.rules)
            expires_at = int(time.time()) + args.expires_in if args.expires_in is not None else None
            token = client.generate_tenant_token(
                args.api_key_uid, rules, api_key=args.api_key, expires_at=expires_at
            )
            _dump({"token": token})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(app_name="searchcore.cli")
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args)
        return asyncio.run(run(args, config))
    except (SearchClientError, ValueError, TypeError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        _dump(error_summary(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
