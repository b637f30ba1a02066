"""
WordPress MCP Server

Main MCP server implementation with stdio and SSE transports.

License: Mozilla Public License 2.0
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from mcp.server import Server
from mcp.types import CallToolResult, TextContent, Tool

from . import __version__
from .capabilities import filter_tools_by_toolset, get_capability_summary
from .config import Config
from .core import QueryBuilder, WordPressAdapter, WordPressClient
from .tools import ToolExecutor, ToolGenerator, ToolResult

logger = logging.getLogger('wordpress-mcp-server')

SERVER_NAME = "wordpress-mcp"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Configure logging for the server process.

    Logs go to stderr so they never mix with the stdio protocol stream.
    The level comes from MCP_LOG_LEVEL (or LOG_LEVEL), default INFO.
    """
    level = (level or os.getenv('MCP_LOG_LEVEL') or os.getenv('LOG_LEVEL') or 'INFO').upper()
    log_file = log_file or os.getenv('MCP_LOG_FILE')

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def to_call_tool_result(result: ToolResult) -> CallToolResult:
    """Convert an envelope into the MCP call_tool response"""
    return CallToolResult(
        content=[TextContent(type="text", text=result.payload)],
        isError=result.is_error,
    )


class WordPressMCPServer:
    """
    WordPress MCP Server.

    Wires configuration, the REST client and adapter, and the tool
    generator/executor onto an MCP protocol server.
    """

    def __init__(self, config_dir: str = None, transport: str = "stdio", port: int = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize MCP server.

        Args:
            config_dir: Path to configuration directory (optional)
            transport: Transport mode ("stdio" or "sse")
            port: Port number for SSE transport (default: 8000)
            session: Optional requests session for the WordPress client

        Raises:
            ConfigurationError: If the WordPress environment is missing or invalid
        """
        self.transport = transport
        self.port = port

        # Load configuration
        if config_dir:
            self.config = Config(Path(config_dir))
        else:
            self.config = Config()

        settings = self.config.get_connection_settings()
        self.enabled_toolsets = self.config.get_enabled_toolsets()
        self.enabled_tools = filter_tools_by_toolset(self.config.get_all_tools(), self.enabled_toolsets)

        self.client = WordPressClient(
            settings,
            max_workers=self.config.get_max_workers(),
            session=session,
        )
        self.adapter = WordPressAdapter(
            self.client,
            QueryBuilder(),
            enabled_toolsets=self.enabled_toolsets,
        )
        self.tool_generator = ToolGenerator(
            self.config.get_all_tools(),
            enabled_tools=self.enabled_tools
        )
        self.tool_executor = ToolExecutor(self.adapter, self.tool_generator, self.config)

        self.server = Server(SERVER_NAME)
        self._register_handlers()

        logger.info(f"WordPress MCP Server initialized (version={__version__})")
        logger.info(f"Transport: {transport}, Toolsets: {', '.join(self.enabled_toolsets)}, "
                    f"Tools: {len(self.enabled_tools)}")

    async def list_tools(self) -> List[Tool]:
        """List enabled MCP tools"""
        tools = self.tool_generator.generate_tools()
        logger.info(f"Listing available tools ({len(tools)})")
        return [Tool(
            name=tool_dict['name'],
            description=tool_dict['description'],
            inputSchema=tool_dict['inputSchema']
        ) for tool_dict in tools]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        """Execute a tool and convert the envelope to an MCP result"""
        result = await self.tool_executor.execute_tool(name, arguments)
        return to_call_tool_result(result)

    def _register_handlers(self):
        """Register MCP protocol handlers"""

        @self.server.list_tools()
        async def list_tools():
            return await self.list_tools()

        # Arguments are validated by the executor so failures keep the envelope format
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict):
            return await self.call_tool(name, arguments)

    def get_info(self) -> Dict[str, Any]:
        """Server status summary"""
        return {
            "version": __version__,
            "server_name": SERVER_NAME,
            "transport": self.transport,
            "site": self.client.settings.site_root,
            "request_timeout": self.client.timeout,
            "capabilities": get_capability_summary(self.config.get_all_tools(), self.enabled_tools),
        }

    async def run_stdio(self):
        """Run server over stdin/stdout"""
        from mcp.server.stdio import stdio_server

        logger.info("Starting WordPress MCP Server with stdio transport")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )

    async def run_sse_server(self, host: str = "0.0.0.0", port: int = None):
        """
        Run server with SSE (Server-Sent Events) transport.

        Starts an HTTP server so MCP clients can connect over HTTP instead of
        stdin/stdout.

        Args:
            host: Host to bind to (default: 0.0.0.0)
            port: Port to listen on (from self.port or 8000)
        """
        from mcp.server.sse import SseServerTransport
        from starlette.applications import Starlette
        from starlette.responses import Response
        from starlette.routing import Mount, Route
        import uvicorn

        listen_port = port or self.port or 8000

        logger.info(f"Starting WordPress MCP Server with SSE transport on {host}:{listen_port}")

        sse = SseServerTransport("/messages/")

        async def handle_sse(request):
            async with sse.connect_sse(
                request.scope, request.receive, request._send
            ) as streams:
                await self.server.run(
                    streams[0], streams[1], self.server.create_initialization_options()
                )
            return Response()

        app = Starlette(
            routes=[
                Route("/sse", endpoint=handle_sse, methods=["GET"]),
                Mount("/messages/", app=sse.handle_post_message),
            ]
        )

        config = uvicorn.Config(
            app,
            host=host,
            port=listen_port,
            log_level="info",
            access_log=False
        )
        server = uvicorn.Server(config)
        self.sse_server = server

        await server.serve()

    async def run(self, host: str = "0.0.0.0", port: int = None):
        """Run with the configured transport"""
        if self.transport == "sse":
            await self.run_sse_server(host=host, port=port)
        elif self.transport == "stdio":
            await self.run_stdio()
        else:
            raise ValueError(f"Unsupported transport: {self.transport}")

    def close(self):
        """Shutdown server and cleanup resources"""
        logger.info("Shutting down WordPress MCP Server")

        if getattr(self, 'sse_server', None):
            logger.debug("Shutting down SSE server")
            self.sse_server.should_exit = True

        self.client.close()
