"""
MCP Capability Selection

Determines which MCP tools are exposed based on the configured toolsets.

License: Mozilla Public License 2.0
"""

import logging
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)


def filter_tools_by_toolset(tool_configs: Iterable[Any], enabled_toolsets: Iterable[str]) -> List[str]:
    """
    Determine which MCP tools to enable based on the enabled toolsets.

    Args:
        tool_configs: ToolConfig objects from the catalogue
        enabled_toolsets: Toolset names from Config.get_enabled_toolsets()

    Returns:
        List of tool names to enable, in catalogue order
    """
    toolsets = set(enabled_toolsets)
    enabled_tools = [tool.name for tool in tool_configs if tool.toolset in toolsets]

    logger.debug(f"Enabled {len(enabled_tools)} MCP tools for toolsets {sorted(toolsets)}")
    logger.debug(f"Enabled tools: {enabled_tools}")

    return enabled_tools


def get_capability_summary(tool_configs: Iterable[Any], enabled_tools: Iterable[str]) -> Dict[str, Any]:
    """
    Summarize exposed tools per toolset.

    Args:
        tool_configs: ToolConfig objects from the catalogue
        enabled_tools: Names returned by filter_tools_by_toolset()

    Returns:
        Dictionary with enabled/disabled toolsets and tool counts
    """
    enabled = set(enabled_tools)
    per_toolset: Dict[str, List[str]] = {}
    for tool in tool_configs:
        per_toolset.setdefault(tool.toolset, [])
        if tool.name in enabled:
            per_toolset[tool.toolset].append(tool.name)

    return {
        'enabled_toolsets': sorted(name for name, tools in per_toolset.items() if tools),
        'disabled_toolsets': sorted(name for name, tools in per_toolset.items() if not tools),
        'tool_count': len(enabled),
        'tools': per_toolset,
    }
