"""
Response Projection

Narrows WordPress resources to the fields each tool promises, using JSONPath
field maps, and reads pagination counters from response headers.

License: Mozilla Public License 2.0
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from jsonpath_ng import parse as jsonpath_parse

logger = logging.getLogger(__name__)

TOTAL_HEADER = "x-wp-total"
TOTAL_PAGES_HEADER = "x-wp-totalpages"

# output field -> JSONPath into the remote resource
POST_SUMMARY_FIELDS = {
    "id": "id",
    "title": "title.rendered",
    "excerpt": "excerpt.rendered",
    "status": "status",
    "date": "date",
    "link": "link",
}

POST_FIELDS = {
    "id": "id",
    "title": "title.rendered",
    "content": "content.rendered",
    "excerpt": "excerpt.rendered",
    "status": "status",
    "date": "date",
    "modified": "modified",
    "link": "link",
    "author": "author",
    "categories": "categories",
    "tags": "tags",
    "featured_media": "featured_media",
}

PAGE_SUMMARY_FIELDS = dict(POST_SUMMARY_FIELDS, parent="parent", menu_order="menu_order")

PAGE_FIELDS = {
    "id": "id",
    "title": "title.rendered",
    "content": "content.rendered",
    "excerpt": "excerpt.rendered",
    "status": "status",
    "date": "date",
    "modified": "modified",
    "link": "link",
    "author": "author",
    "parent": "parent",
    "menu_order": "menu_order",
    "featured_media": "featured_media",
}

# Create, update and publish all answer with this subset
WRITE_RESULT_FIELDS = {
    "id": "id",
    "title": "title.rendered",
    "content": "content.rendered",
    "link": "link",
    "status": "status",
}

TERM_FIELDS = {
    "id": "id",
    "name": "name",
    "slug": "slug",
    "description": "description",
    "count": "count",
    "parent": "parent",
    "link": "link",
}

MEDIA_FIELDS = {
    "id": "id",
    "title": "title.rendered",
    "source_url": "source_url",
    "mime_type": "mime_type",
    "media_type": "media_type",
    "alt_text": "alt_text",
    "caption": "caption.rendered",
    "description": "description.rendered",
    "link": "link",
    "date": "date",
}

SEARCH_HIT_FIELDS = {
    "id": "id",
    "title": "title",
    "url": "url",
    "type": "type",
    "subtype": "subtype",
}

SITE_FIELDS = {
    "name": "name",
    "description": "description",
    "url": "url",
    "home": "home",
    "timezone": "timezone_string",
    "gmt_offset": "gmt_offset",
}


@lru_cache(maxsize=None)
def _compile(path: str):
    return jsonpath_parse(path)


def extract(resource: Any, path: str) -> Any:
    """Value at a JSONPath, or None when the resource does not have it"""
    matches = _compile(path).find(resource)
    if not matches:
        return None
    return matches[0].value


def project(resource: Any, fields: Dict[str, str]) -> Dict[str, Any]:
    """
    Project one resource onto a field map.

    Missing fields come back as None rather than failing the projection.

    Raises:
        TypeError: If the resource is not a JSON object
    """
    if not isinstance(resource, dict):
        raise TypeError(f"expected a JSON object, got {type(resource).__name__}")
    return {name: extract(resource, path) for name, path in fields.items()}


def project_many(resources: Any, fields: Dict[str, str]) -> List[Dict[str, Any]]:
    """Project every item of a list response"""
    if not isinstance(resources, list):
        raise TypeError(f"expected a JSON array, got {type(resources).__name__}")
    return [project(item, fields) for item in resources]


def _int_header(headers: Any, name: str) -> Optional[int]:
    raw = headers.get(name) if headers is not None else None
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.debug(f"Ignoring non-numeric header {name}={raw!r}")
        return None


def pagination(headers: Any, current_page: int) -> Dict[str, Optional[int]]:
    """
    Pagination metadata from x-wp-total / x-wp-totalpages.

    Absent headers are reported as None instead of a made-up number.
    """
    return {
        "total": _int_header(headers, TOTAL_HEADER),
        "totalPages": _int_header(headers, TOTAL_PAGES_HEADER),
        "currentPage": current_page,
    }
