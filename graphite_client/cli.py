#!/usr/bin/env python3
"""
graphite-query command line tool

Examples:
    graphite-query --server http://graphite:8080 render 'servers.*.cpu' --since 30
    graphite-query render app.requests --from 2024-01-15T14:00 --until 2024-01-15T15:00 --ints
    graphite-query find 'servers.*'

Settings not given on the command line come from --config (YAML) and the
GRAPHITE_* environment variables.
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

from .client import GraphiteClient
from .config import load_config
from .errors import GraphiteError
from .intervals import TimeInterval

logger = logging.getLogger("graphite_client.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="graphite-query", description="query a Graphite server")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="YAML configuration file")
    parser.add_argument("--server",
                        help="graphite-web base URL (e.g., http://graphite:8080)")
    parser.add_argument("--timeout", type=float,
                        help="request timeout in seconds")
    parser.add_argument("--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")

    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="fetch series data")
    render.add_argument("targets", nargs="+", help="target patterns")
    window = render.add_mutually_exclusive_group(required=True)
    window.add_argument("--since", type=float, metavar="MINUTES",
                        help="fetch the last MINUTES minutes")
    window.add_argument("--from", dest="from_time", type=datetime.fromisoformat,
                        help="interval start (ISO 8601, local time)")
    render.add_argument("--until", type=datetime.fromisoformat,
                        help="interval end (ISO 8601, local time; default now)")
    render.add_argument("--ints", action="store_true",
                        help="interpret values as integers")

    find = sub.add_parser("find", help="list metric nodes")
    find.add_argument("query", help="metric path pattern")

    return parser


def run_render(client: GraphiteClient, args: argparse.Namespace) -> None:
    if args.since is not None:
        result = client.query_multi_since(args.targets, timedelta(minutes=args.since))
    else:
        # default end in the same zone as --from (naive stays naive)
        until = args.until or datetime.now(args.from_time.tzinfo)
        interval = TimeInterval(args.from_time, until)
        result = client.query_multi(args.targets, interval)

    if not result:
        logger.warning("no target matched %s", args.targets)
        return

    df = result.to_frame(as_type="int" if args.ints else "float")
    print(df.to_string(index=False))


def run_find(client: GraphiteClient, args: argparse.Namespace) -> None:
    for item in client.find(args.query):
        kind = "leaf" if item.leaf else "branch"
        print(f"{item.id}\t{kind}")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, base_url=args.server, timeout=args.timeout,
                             log_level=args.log_level)
    except ValueError as e:
        parser.error(str(e))

    # Configure logging
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
    logger.debug("graphite-query starting with server=%s timeout=%ss", config.base_url, config.timeout)

    try:
        client = GraphiteClient.from_config(config)
        if args.command == "render":
            run_render(client, args)
        else:
            run_find(client, args)
    except GraphiteError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
