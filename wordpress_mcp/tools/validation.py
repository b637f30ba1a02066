"""
Argument Validation

Checks and coerces an untyped MCP argument bag against a tool's input schema
before anything is sent to WordPress.

License: Mozilla Public License 2.0
"""

import logging
from typing import Any, Dict, Optional

from ..errors import ValidationFailed

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def _coerce_integer(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationFailed(f"Argument '{name}' must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationFailed(f"Argument '{name}' must be an integer")


def _coerce_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationFailed(f"Argument '{name}' must be a number")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ValidationFailed(f"Argument '{name}' must be a number")


def _coerce_boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValidationFailed(f"Argument '{name}' must be a boolean")


def _coerce_string(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ValidationFailed(f"Argument '{name}' must be a string")


def _coerce_array(name: str, value: Any, schema: Dict[str, Any]) -> list:
    if isinstance(value, str):
        # Accept "1,2,3" for ID lists
        value = [part.strip() for part in value.split(',') if part.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValidationFailed(f"Argument '{name}' must be an array")

    item_schema = schema.get('items') or {}
    return [_coerce_value(f"{name}[{i}]", item, item_schema) for i, item in enumerate(value)]


def _check_bounds(name: str, value: Any, schema: Dict[str, Any]) -> Any:
    """
    Apply minimum/maximum.

    Fields that declare a default are normalized instead of rejected: values
    above the maximum are clamped, values below the minimum take the default.
    """
    minimum = schema.get('minimum')
    maximum = schema.get('maximum')
    has_default = 'default' in schema

    if minimum is not None and value < minimum:
        if has_default:
            return schema['default']
        raise ValidationFailed(f"Argument '{name}' must be at least {minimum}")
    if maximum is not None and value > maximum:
        if has_default:
            return maximum
        raise ValidationFailed(f"Argument '{name}' must be at most {maximum}")
    return value


def _coerce_value(name: str, value: Any, schema: Dict[str, Any]) -> Any:
    expected = schema.get('type')

    if expected == 'integer':
        value = _check_bounds(name, _coerce_integer(name, value), schema)
    elif expected == 'number':
        value = _check_bounds(name, _coerce_number(name, value), schema)
    elif expected == 'boolean':
        value = _coerce_boolean(name, value)
    elif expected == 'string':
        value = _coerce_string(name, value)
    elif expected == 'array':
        value = _coerce_array(name, value, schema)

    allowed = schema.get('enum')
    if allowed is not None and value not in allowed:
        raise ValidationFailed(
            f"Argument '{name}' must be one of: {', '.join(str(v) for v in allowed)}"
        )
    return value


def validate_arguments(schema: Dict[str, Any], arguments: Optional[Any]) -> Dict[str, Any]:
    """
    Validate and coerce tool arguments against an input schema.

    Unknown fields and optional nulls are dropped so they never reach the
    remote query.

    Args:
        schema: JSON Schema object from the tool catalogue
        arguments: Raw arguments from the MCP client

    Returns:
        Cleaned argument dict

    Raises:
        ValidationFailed: On a missing required field or a bad value
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationFailed("Tool arguments must be an object")

    properties = schema.get('properties') or {}
    required = schema.get('required') or []

    for name in required:
        if arguments.get(name) is None:
            raise ValidationFailed(f"Missing required argument: {name}")

    cleaned: Dict[str, Any] = {}
    for name, value in arguments.items():
        if name not in properties:
            logger.debug(f"Dropping unknown argument '{name}'")
            continue
        if value is None:
            continue
        cleaned[name] = _coerce_value(name, value, properties[name])

    return cleaned
