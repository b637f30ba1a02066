"""
Error taxonomy for the WordPress MCP Server

Every failure a tool call can hit is one of the classes below. The tool
executor maps each of them onto a result kind so that callers always get a
well-formed response.

License: Mozilla Public License 2.0
"""

from typing import Optional


class WordPressMCPError(Exception):
    """Base class for all server errors"""


class ConfigurationError(WordPressMCPError):
    """Missing environment variables or invalid connection settings"""


class ValidationFailed(WordPressMCPError):
    """Missing or invalid tool argument, detected before any network call"""


class UnknownOperation(WordPressMCPError):
    """Tool name not present in the enabled catalogue"""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class RemoteRequestFailed(WordPressMCPError):
    """
    Non-2xx response, transport failure or timeout talking to WordPress.

    The message carries the operation context, e.g.
    "Failed to fetch post 42: WordPress returned status 404: ...".
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
