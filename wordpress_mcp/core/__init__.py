"""
Core components for WordPress MCP Server

License: Mozilla Public License 2.0
"""

from .client import WordPressClient, WordPressResponse
from .query_builder import QueryBuilder
from .adapter import WordPressAdapter

__all__ = ['WordPressClient', 'WordPressResponse', 'QueryBuilder', 'WordPressAdapter']
