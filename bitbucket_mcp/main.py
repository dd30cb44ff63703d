"""bitbucket-mcp entry point.

Loads configuration, builds the Bitbucket client and the MCP server, and
serves the tools (stdio by default). Usage: bitbucket-mcp [--config PATH]
[--transport NAME] [--check].
"""

import argparse
import logging
import sys
from pathlib import Path

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.config import ConfigError, load_config
from bitbucket_mcp.logging import BitbucketMcpLogging
from bitbucket_mcp.tools import build_server

TRANSPORTS = ("stdio", "http", "sse", "streamable-http")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="bitbucket-mcp",
        description="MCP server exposing Bitbucket Server pull request tools",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file (optional; env vars are enough)",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=None,
        help="MCP transport (default: from config, stdio)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: validate config, then serve until interrupted."""
    args = parse_args(argv)
    config = load_config(args.config)
    BitbucketMcpLogging(config.logging).setup()
    log = logging.getLogger("bitbucket_mcp.main")

    try:
        url, token = config.require_bitbucket()
    except ConfigError as e:
        log.error("Configuration error: %s", e)
        return 1

    if args.check:
        print("Config OK:", url)
        return 0

    client = BitbucketClient(url, token, timeout=config.bitbucket.timeout)
    server = build_server(client, name=config.server.name)
    transport = args.transport or config.server.transport

    log.info("Bitbucket MCP server started | url=%s | transport=%s", url, transport)
    try:
        server.run(transport=transport)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
