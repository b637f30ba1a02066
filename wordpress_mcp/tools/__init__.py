"""
Tools system for MCP tool listing and execution

License: Mozilla Public License 2.0
"""

from .generator import ToolGenerator
from .executor import ResultKind, ToolExecutor, ToolResult

__all__ = ['ToolGenerator', 'ToolExecutor', 'ToolResult', 'ResultKind']
