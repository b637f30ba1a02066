"""
Tool Generator

Lists MCP tool descriptors from the catalogue, filtered to the enabled toolsets.

License: Mozilla Public License 2.0
"""

import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)


class ToolGenerator:
    """
    Generates MCP tool descriptors from tool configurations with optional filtering.
    """

    def __init__(self, tool_configs: List[Any], enabled_tools: Optional[List[str]] = None):
        """
        Initialize tool generator.

        Args:
            tool_configs: List of ToolConfig objects from configuration
            enabled_tools: Optional list of tool names to enable (None = all tools)
        """
        self.tool_configs = tool_configs
        self.enabled_tools = enabled_tools

        if enabled_tools is not None:
            logger.info(f"Tool filtering enabled: {len(enabled_tools)} tools allowed")
        else:
            logger.info("Tool filtering disabled: all tools enabled")

    def is_enabled(self, name: str) -> bool:
        """Check whether a tool name is exposed"""
        return self.enabled_tools is None or name in self.enabled_tools

    def get_tool_config(self, name: str) -> Optional[Any]:
        """Enabled tool configuration by name, or None"""
        if not self.is_enabled(name):
            return None
        for tool_config in self.tool_configs:
            if tool_config.name == name:
                return tool_config
        return None

    def generate_tools(self) -> List[Dict[str, Any]]:
        """
        Generate MCP tool descriptors in catalogue order.

        Returns:
            List of tool dictionaries for the MCP protocol
        """
        tools = []

        for tool_config in self.tool_configs:
            if not self.is_enabled(tool_config.name):
                logger.debug(f"Skipping tool '{tool_config.name}' (not in enabled list)")
                continue
            tools.append(self._generate_tool(tool_config))

        logger.debug(f"Generated {len(tools)} tools")
        return tools

    def _generate_tool(self, tool_config: Any) -> Dict[str, Any]:
        return {
            "name": tool_config.name,
            "description": tool_config.description,
            "inputSchema": tool_config.input_schema
        }
