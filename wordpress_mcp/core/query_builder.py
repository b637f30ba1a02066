"""
WordPress Query Builder

Builds REST query parameters and request payloads from tool arguments.

License: Mozilla Public License 2.0
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100
DEFAULT_PAGE = 1


class _Unset:
    """Marker for a field the caller did not supply"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


def is_provided(value: Any) -> bool:
    """
    Presence rule for partial updates.

    A field counts as provided only when it was supplied with a non-empty
    value. None, "", [] and 0 read as "not provided", so those values cannot
    be written through an update.
    """
    if value is UNSET or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    if isinstance(value, (int, float)):
        return value != 0
    return True


def clamp_per_page(value: Any) -> int:
    """Page size clamped to [1, 100]; missing, zero or negative falls back to 10"""
    try:
        per_page = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PER_PAGE
    if per_page < 1:
        return DEFAULT_PER_PAGE
    return min(per_page, MAX_PER_PAGE)


def page_number(value: Any) -> int:
    """Page number; missing or below 1 falls back to 1"""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE
    return page if page >= 1 else DEFAULT_PAGE


def _join_ids(values: Iterable[Any]) -> str:
    return ",".join(str(int(v)) for v in values)


class QueryBuilder:
    """
    Builds query strings and payloads for the WordPress REST API.
    """

    def build_list_query(self, arguments: Optional[Dict[str, Any]],
                         defaults: Optional[Dict[str, Any]] = None,
                         optional: Iterable[str] = ()) -> Dict[str, Any]:
        """
        Build query parameters for a list endpoint.

        Only fields the caller supplied plus the given defaults end up in the
        query; absent fields are omitted entirely.

        Args:
            arguments: Tool arguments
            defaults: Fallback values (e.g. status, orderby, order)
            optional: Names of pass-through filters (search, categories, ...)

        Returns:
            Query parameter dict
        """
        arguments = arguments or {}
        query: Dict[str, Any] = {
            'per_page': clamp_per_page(arguments.get('per_page')),
            'page': page_number(arguments.get('page')),
        }

        for key, default in (defaults or {}).items():
            value = arguments.get(key)
            query[key] = value if value not in (None, "") else default

        for key in optional:
            value = arguments.get(key)
            if value is None or value == "" or value == []:
                continue
            if isinstance(value, (list, tuple)):
                query[key] = _join_ids(value)
            elif isinstance(value, bool):
                query[key] = "true" if value else "false"
            else:
                query[key] = value

        logger.debug(f"Built list query: {query}")
        return query

    def build_create_payload(self, arguments: Dict[str, Any],
                             optional: Iterable[str] = ()) -> Dict[str, Any]:
        """
        Build a create payload.

        Content and excerpt default to "" and status to "draft"; other
        optional fields are left out when not supplied.
        """
        payload: Dict[str, Any] = {
            'title': arguments['title'],
            'content': arguments.get('content') or "",
            'excerpt': arguments.get('excerpt') or "",
            'status': arguments.get('status') or "draft",
        }
        for key in optional:
            if is_provided(arguments.get(key, UNSET)):
                payload[key] = arguments[key]

        logger.debug(f"Built create payload fields: {sorted(payload)}")
        return payload

    def build_update_payload(self, arguments: Dict[str, Any],
                             fields: Iterable[str]) -> Dict[str, Any]:
        """
        Build a partial update payload from the provided fields only.

        Args:
            arguments: Tool arguments (without the id)
            fields: Updatable field names

        Returns:
            Payload containing only fields that pass is_provided()
        """
        payload = {key: arguments[key] for key in fields
                   if is_provided(arguments.get(key, UNSET))}
        logger.debug(f"Built update payload fields: {sorted(payload)}")
        return payload

    def build_media_metadata(self, arguments: Dict[str, Any],
                             fields: List[str]) -> Dict[str, Any]:
        """Metadata fields to set after an upload (empty dict if none were supplied)"""
        return {key: arguments[key] for key in fields
                if is_provided(arguments.get(key, UNSET))}
