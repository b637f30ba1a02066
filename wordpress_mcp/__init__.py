"""
WordPress MCP Server

Provides an MCP (Model Context Protocol) interface to the WordPress REST API.

License: Mozilla Public License 2.0
"""

__version__ = "1.0.0"
__author__ = "WordPress MCP"

from .config import Config, ConnectionSettings, ToolConfig
from .capabilities import filter_tools_by_toolset, get_capability_summary
from .server import WordPressMCPServer

__all__ = [
    'Config',
    'ConnectionSettings',
    'ToolConfig',
    'WordPressMCPServer',
    'filter_tools_by_toolset',
    'get_capability_summary',
    '__version__',
]
