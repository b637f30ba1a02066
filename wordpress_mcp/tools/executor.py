"""
Tool Executor

Routes MCP tool calls to the WordPress adapter and wraps every outcome,
success or failure, into a ToolResult.

License: Mozilla Public License 2.0
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .validation import validate_arguments
from ..errors import RemoteRequestFailed, UnknownOperation, ValidationFailed

logger = logging.getLogger(__name__)


class ResultKind(str, Enum):
    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    REMOTE_REQUEST_FAILED = "remote_request_failed"
    UNKNOWN_OPERATION = "unknown_operation"


_ERROR_KINDS = (
    (ValidationFailed, ResultKind.VALIDATION_FAILED),
    (RemoteRequestFailed, ResultKind.REMOTE_REQUEST_FAILED),
    (UnknownOperation, ResultKind.UNKNOWN_OPERATION),
)


@dataclass(frozen=True)
class ToolResult:
    """Envelope returned for every tool call"""
    kind: ResultKind
    payload: str

    @property
    def outcome(self) -> str:
        return "success" if self.kind is ResultKind.SUCCESS else "failure"

    @property
    def is_error(self) -> bool:
        return self.kind is not ResultKind.SUCCESS

    @classmethod
    def success(cls, value: Any) -> "ToolResult":
        return cls(ResultKind.SUCCESS, json.dumps(value, indent=2, default=str))

    @classmethod
    def failure(cls, kind: ResultKind, message: str) -> "ToolResult":
        return cls(kind, f"Error: {message}")

    def to_dict(self) -> Dict[str, str]:
        return {"outcome": self.outcome, "kind": self.kind.value, "payload": self.payload}


class ToolExecutor:
    """
    Executes MCP tools against the WordPress adapter.
    """

    def __init__(self, adapter, tool_generator, config):
        """
        Initialize tool executor.

        Args:
            adapter: WordPressAdapter instance
            tool_generator: ToolGenerator instance (enabled catalogue)
            config: Config instance
        """
        self.adapter = adapter
        self.tool_generator = tool_generator
        self.config = config

    async def execute_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
        """
        Execute a tool by name with given arguments.

        Never raises: every failure becomes a ToolResult with an error kind.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            ToolResult envelope
        """
        if self.config.testing_mode:
            logger.info(f"[TESTING] Tool '{name}' called")
            logger.info(f"[TESTING] Input arguments: {json.dumps(arguments, indent=2, default=str)}")
        else:
            logger.info(f"Calling tool: {name} with arguments: {arguments}")

        try:
            result = ToolResult.success(await self._dispatch(name, arguments))
        except Exception as e:
            result = self._failure(name, e)

        if self.config.testing_mode:
            logger.info(f"[TESTING] Final response for '{name}': {result.payload[:500]}...")
        return result

    def _failure(self, name: str, error: Exception) -> ToolResult:
        for error_type, kind in _ERROR_KINDS:
            if isinstance(error, error_type):
                logger.error(f"Tool execution failed: {name}: {error}")
                return ToolResult.failure(kind, str(error))

        # Anything else is a bug or an unexpected remote shape; keep the envelope
        logger.error(f"Unexpected error executing tool '{name}': {error}", exc_info=True)
        return ToolResult.failure(ResultKind.REMOTE_REQUEST_FAILED, f"{name} failed: {error}")

    async def _dispatch(self, name: str, arguments: Optional[Dict[str, Any]]) -> Any:
        tool_config = self.tool_generator.get_tool_config(name)
        if tool_config is None:
            raise UnknownOperation(name)

        handler = getattr(self.adapter, tool_config.method, None)
        if handler is None:
            raise UnknownOperation(name)

        args = validate_arguments(tool_config.input_schema, arguments)
        shape = tool_config.call_shape

        if shape == 'none':
            return await handler()
        if shape == 'params':
            return await handler(args)

        item_id = args.pop('id', None)
        if item_id is None:
            raise ValidationFailed("Missing required argument: id")

        if shape == 'id':
            return await handler(item_id)
        if shape == 'id_params':
            return await handler(item_id, args)
        # id_force: the adapter decides what force means for its resource
        if 'force' in args:
            return await handler(item_id, force=args['force'])
        return await handler(item_id)
