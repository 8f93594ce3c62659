"""Command line entry point.

Usage:
    python -m sds_connector streams --query "Tank*"
    python -m sds_connector data Tank1 --start 2024-01-01T00:00:00Z --end 2024-01-02T00:00:00Z
    python -m sds_connector health
    python -m sds_connector --config connector.yaml health
"""
from __future__ import annotations

import argparse
import logging
import sys

from .client import SdsClient
from .config import ConnectorConfig
from .datasource import SdsDataSource
from .errors import SdsError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sds_connector",
        description="Query streams on a sequential data store",
    )
    parser.add_argument("--config", help="YAML config file (merged over ~/.sds/connector.yaml and .sds.yaml)")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on malformed booleans and timestamps instead of defaulting them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    streams = sub.add_parser("streams", help="List streams matching a filter")
    streams.add_argument("--query", default="", help="Server-side filter expression")

    data = sub.add_parser("data", help="Fetch a stream's data between two indexes")
    data.add_argument("stream_id")
    data.add_argument("--start", required=True, help="Start index, e.g. 2024-01-01T00:00:00Z")
    data.add_argument("--end", required=True, help="End index")

    sub.add_parser("health", help="Check credentials and configuration")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConnectorConfig.load(args.config)
    if args.strict:
        config.strict_decoding = True

    if args.command == "health":
        result = SdsDataSource(config=config).check_health()
        print(f"{result.status}: {result.message}")
        for key, value in result.details.items():
            print(f"  {key}: {value}")
        return 0 if result.healthy else 1

    client = SdsClient(config=config)
    try:
        token = client.get_token()
        if args.command == "streams":
            frame = client.list_streams(token, args.query)
        else:
            frame = client.fetch_stream_data(token, args.stream_id, args.start, args.end)
    except SdsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{frame.name} ({frame.row_count} rows)")
    print(frame.to_dataframe().to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
