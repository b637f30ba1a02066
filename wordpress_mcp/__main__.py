"""
WordPress MCP Server - command line entry point

Usage:
    wordpress-mcp [--transport stdio|sse] [--host HOST] [--port PORT] [--config-dir DIR]

Requires WORDPRESS_URL, WORDPRESS_USERNAME and WORDPRESS_PASSWORD.

License: Mozilla Public License 2.0
"""

import argparse
import asyncio
import logging
import sys

from .errors import ConfigurationError
from .server import WordPressMCPServer, configure_logging

logger = logging.getLogger('wordpress-mcp-server')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='WordPress MCP Server')
    parser.add_argument('--transport', choices=['stdio', 'sse'], default='stdio',
                        help='Transport mode (default: stdio)')
    parser.add_argument('--host', type=str, default='0.0.0.0',
                        help='Host to bind to for SSE (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000,
                        help='Port to listen on for SSE (default: 8000)')
    parser.add_argument('--config-dir', type=str, default=None,
                        help='Configuration directory path')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()

    try:
        server = WordPressMCPServer(
            config_dir=args.config_dir,
            transport=args.transport,
            port=args.port,
        )
    except ConfigurationError as e:
        logger.error(f"Server startup failed: {e}")
        return 1

    try:
        asyncio.run(server.run(host=args.host, port=args.port))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        return 1
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
