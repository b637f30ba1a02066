"""
WordPress REST Adapter

One coroutine per tool. Each builds the request, calls WordPress through the
client, and projects the response into the shape the tool promises.

License: Mozilla Public License 2.0
"""

import base64
import binascii
import logging
import posixpath
import re
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from .client import WordPressClient, WordPressResponse
from .projection import (
    MEDIA_FIELDS,
    PAGE_FIELDS,
    PAGE_SUMMARY_FIELDS,
    POST_FIELDS,
    POST_SUMMARY_FIELDS,
    SEARCH_HIT_FIELDS,
    SITE_FIELDS,
    TERM_FIELDS,
    WRITE_RESULT_FIELDS,
    pagination,
    project,
    project_many,
)
from .query_builder import QueryBuilder
from ..errors import RemoteRequestFailed, ValidationFailed

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "mp4": "video/mp4",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

MEDIA_METADATA_FIELDS = ["title", "alt_text", "caption", "description"]

POST_OPTIONAL_FIELDS = ["featured_media", "categories", "tags"]
POST_UPDATE_FIELDS = ["title", "content", "excerpt", "status"] + POST_OPTIONAL_FIELDS
PAGE_OPTIONAL_FIELDS = ["parent", "menu_order", "featured_media"]
PAGE_UPDATE_FIELDS = ["title", "content", "excerpt", "status"] + PAGE_OPTIONAL_FIELDS

LIST_DEFAULTS = {"status": "publish", "orderby": "date", "order": "desc"}

AUTHENTICATION_LABEL = "Basic Auth (Application Password)"

UPDATE_ACTIONS = {"update": ("Updating", "updated"), "publish": ("Publishing", "published")}

# toolset -> capability flags it provides
TOOLSET_CAPABILITIES = {
    "core": ["canCreatePosts", "canUpdatePosts", "canDeletePosts",
             "canManageCategories", "canManageTags"],
    "pages": ["canManagePages"],
    "media": ["canUploadMedia", "canDeleteMedia"],
    "search": ["canSearch"],
}


def mime_type_for(filename: str) -> str:
    """MIME type from the file extension; unknown extensions get octet-stream"""
    _, ext = posixpath.splitext(filename.lower())
    return MIME_TYPES.get(ext.lstrip('.'), DEFAULT_MIME_TYPE)


def decode_base64(data: str) -> bytes:
    """
    Decode base64 upload content, accepting an optional data: URI prefix.

    Raises:
        ValidationFailed: If the content is not valid base64
    """
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    data = "".join(data.split())
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationFailed(f"Media data is not valid base64: {e}")


def content_disposition(filename: str) -> str:
    """
    Attachment header for an upload.

    HTTP headers are latin-1 only, so a non-ASCII name is sent as an ASCII
    fallback plus an RFC 5987 filename* parameter, which WordPress prefers.
    """
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    fallback = re.sub(r'[^\x20-\x7e]', '_', filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _resource_kind(resource: str) -> str:
    return {"posts": "post", "pages": "page", "media": "media"}[resource]


class WordPressAdapter:
    """
    Translates tool calls into WordPress REST requests.
    """

    def __init__(self, client: WordPressClient, query_builder: Optional[QueryBuilder] = None,
                 enabled_toolsets: Optional[Iterable[str]] = None):
        """
        Initialize the adapter.

        Args:
            client: WordPressClient instance
            query_builder: QueryBuilder instance
            enabled_toolsets: Toolsets exposed by the server (for the capability map)
        """
        self.client = client
        self.query_builder = query_builder or QueryBuilder()
        self.enabled_toolsets = list(enabled_toolsets) if enabled_toolsets is not None \
            else list(TOOLSET_CAPABILITIES)

    async def _call(self, context: str, method: str, path: str, **kwargs) -> WordPressResponse:
        """Issue one request, prefixing any failure with the operation context"""
        try:
            return await self.client.request(method, path, **kwargs)
        except RemoteRequestFailed as e:
            raise RemoteRequestFailed(f"{context}: {e}", status_code=e.status_code) from e

    @staticmethod
    def _project(context: str, resource: Any, fields: Dict[str, str]) -> Dict[str, Any]:
        try:
            return project(resource, fields)
        except TypeError as e:
            raise RemoteRequestFailed(f"{context}: unexpected response shape ({e})")

    async def _list(self, context: str, path: str, arguments: Optional[Dict[str, Any]],
                    fields: Dict[str, str], defaults: Optional[Dict[str, Any]] = None,
                    optional: Iterable[str] = ()) -> Dict[str, Any]:
        query = self.query_builder.build_list_query(arguments, defaults=defaults, optional=optional)
        logger.info(f"Listing {path}: {query}")

        response = await self._call(context, "GET", path, params=query)
        try:
            items = project_many(response.data, fields)
        except TypeError as e:
            raise RemoteRequestFailed(f"{context}: unexpected response shape ({e})")

        result: Dict[str, Any] = {"items": items}
        result.update(pagination(response.headers, query['page']))
        return result

    # ------------------------------------------------------------------ lists

    async def get_posts(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._list("Failed to fetch posts", "/posts", params, POST_SUMMARY_FIELDS,
                                defaults=LIST_DEFAULTS,
                                optional=["search", "categories", "tags", "author"])

    async def get_pages(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._list("Failed to fetch pages", "/pages", params, PAGE_SUMMARY_FIELDS,
                                defaults=LIST_DEFAULTS, optional=["search", "parent"])

    async def get_categories(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._list("Failed to fetch categories", "/categories", params, TERM_FIELDS,
                                optional=["search", "parent", "hide_empty"])

    async def get_tags(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._list("Failed to fetch tags", "/tags", params, TERM_FIELDS,
                                optional=["search", "hide_empty"])

    async def list_media(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        # Attachments are stored with status "inherit", so no status default here
        return await self._list("Failed to fetch media", "/media", params, MEDIA_FIELDS,
                                defaults={"orderby": "date", "order": "desc"},
                                optional=["search", "media_type", "mime_type"])

    async def search_site(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = params or {}
        term = params.get('search')
        if not term or not str(term).strip():
            raise ValidationFailed("Search term is required")

        result = await self._list("Failed to search site", "/search", params, SEARCH_HIT_FIELDS,
                                  optional=["search", "type", "subtype"])
        result["searchTerm"] = term
        return result

    # ----------------------------------------------------------- single items

    async def _get_item(self, resource: str, item_id: int, fields: Dict[str, str]) -> Dict[str, Any]:
        context = f"Failed to fetch {_resource_kind(resource)} {item_id}"
        logger.info(f"Fetching {_resource_kind(resource)} {item_id}")
        response = await self._call(context, "GET", f"/{resource}/{item_id}")
        return self._project(context, response.data, fields)

    async def get_post(self, id: int) -> Dict[str, Any]:
        return await self._get_item("posts", id, POST_FIELDS)

    async def get_page(self, id: int) -> Dict[str, Any]:
        return await self._get_item("pages", id, PAGE_FIELDS)

    async def get_media(self, id: int) -> Dict[str, Any]:
        return await self._get_item("media", id, MEDIA_FIELDS)

    # ------------------------------------------------------- create / update

    async def _create(self, resource: str, params: Optional[Dict[str, Any]],
                      optional: List[str]) -> Dict[str, Any]:
        kind = _resource_kind(resource)
        params = params or {}
        title = params.get('title')
        if not title or not str(title).strip():
            raise ValidationFailed(f"{kind.capitalize()} title is required")

        payload = self.query_builder.build_create_payload(params, optional=optional)
        logger.info(f"Creating {kind}: {title!r} (status={payload['status']})")

        context = f"Failed to create {kind}"
        response = await self._call(context, "POST", f"/{resource}", json_body=payload)
        result = self._project(context, response.data, WRITE_RESULT_FIELDS)
        logger.info(f"{kind.capitalize()} created successfully: id={result['id']}")
        return result

    async def _update(self, resource: str, item_id: int, payload: Dict[str, Any],
                      action: str = "update") -> Dict[str, Any]:
        kind = _resource_kind(resource)
        verb, done = UPDATE_ACTIONS[action]
        logger.info(f"{verb} {kind} {item_id}: fields={sorted(payload)}")

        # The REST API models updates as POST to the item route
        context = f"Failed to {action} {kind} {item_id}"
        response = await self._call(context, "POST", f"/{resource}/{item_id}", json_body=payload)
        result = self._project(context, response.data, WRITE_RESULT_FIELDS)
        logger.info(f"{kind.capitalize()} {item_id} {done} successfully")
        return result

    async def create_post(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._create("posts", params, POST_OPTIONAL_FIELDS)

    async def create_page(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._create("pages", params, PAGE_OPTIONAL_FIELDS)

    async def update_post(self, id: int, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = self.query_builder.build_update_payload(params or {}, POST_UPDATE_FIELDS)
        return await self._update("posts", id, payload)

    async def update_page(self, id: int, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = self.query_builder.build_update_payload(params or {}, PAGE_UPDATE_FIELDS)
        return await self._update("pages", id, payload)

    async def publish_post(self, id: int) -> Dict[str, Any]:
        return await self._update("posts", id, {"status": "publish"}, action="publish")

    async def publish_page(self, id: int) -> Dict[str, Any]:
        return await self._update("pages", id, {"status": "publish"}, action="publish")

    # ----------------------------------------------------------------- delete

    async def _delete(self, resource: str, item_id: int, force: bool) -> Dict[str, Any]:
        kind = _resource_kind(resource)
        logger.info(f"Deleting {kind} {item_id} (force={force})")

        context = f"Failed to delete {kind} {item_id}"
        response = await self._call(context, "DELETE", f"/{resource}/{item_id}",
                                    params={"force": "true" if force else "false"})

        # Trashing returns the item; a forced delete returns {"deleted", "previous"}
        body = response.data if isinstance(response.data, dict) else {}
        deleted_id = body.get('id') or (body.get('previous') or {}).get('id') or item_id

        label = "Media item" if kind == "media" else kind.capitalize()
        message = f"{label} permanently deleted" if force else f"{label} moved to trash"
        logger.info(f"{label} {item_id} deleted successfully (force={force})")
        return {"message": message, "id": deleted_id}

    async def delete_post(self, id: int, force: bool = False) -> Dict[str, Any]:
        return await self._delete("posts", id, bool(force))

    async def delete_page(self, id: int, force: bool = False) -> Dict[str, Any]:
        return await self._delete("pages", id, bool(force))

    async def delete_media(self, id: int, force: bool = True) -> Dict[str, Any]:
        # Media has no trash state: WordPress rejects force=false for attachments
        if not force:
            logger.debug(f"Ignoring force=false for media {id}; media deletion is permanent")
        return await self._delete("media", id, True)

    # ------------------------------------------------------------------ media

    async def upload_media(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Upload a file, then apply title/alt text/caption/description.

        The upload endpoint takes raw bytes only, so metadata goes in a second
        request against the new item. If that second request fails the whole
        upload is reported as failed, with the id of the stored file.
        """
        params = params or {}
        filename = params.get('filename')
        data = params.get('data')
        if not filename or not str(filename).strip():
            raise ValidationFailed("Media filename is required")
        if not data:
            raise ValidationFailed("Media data (base64) is required")

        content = decode_base64(data)
        mime_type = mime_type_for(filename)
        safe_name = posixpath.basename(filename.replace('\\', '/')).replace('"', '')
        logger.info(f"Uploading media {safe_name!r} ({mime_type}, {len(content)} bytes)")

        context = f"Failed to upload media {safe_name}"
        response = await self._call(context, "POST", "/media", data=content, headers={
            "Content-Type": mime_type,
            "Content-Disposition": content_disposition(safe_name),
        })
        result = self._project(context, response.data, MEDIA_FIELDS)
        media_id = result['id']
        logger.info(f"Media uploaded successfully: id={media_id}")

        metadata = self.query_builder.build_media_metadata(params, MEDIA_METADATA_FIELDS)
        if not metadata:
            return result

        context = (f"Failed to update metadata for media {media_id} "
                   f"(file was uploaded as media {media_id})")
        response = await self._call(context, "POST", f"/media/{media_id}", json_body=metadata)
        logger.info(f"Media {media_id} metadata updated: fields={sorted(metadata)}")
        return self._project(context, response.data, MEDIA_FIELDS)

    # ------------------------------------------------------------------- site

    def capabilities(self) -> Dict[str, bool]:
        """Static declaration of what this server can do on the site"""
        flags = {}
        for toolset, names in TOOLSET_CAPABILITIES.items():
            for name in names:
                flags[name] = toolset in self.enabled_toolsets
        return flags

    async def get_site_info(self) -> Dict[str, Any]:
        logger.info("Fetching site info")
        context = "Failed to fetch site info"
        response = await self._call(context, "GET", self.client.settings.api_root)
        info = self._project(context, response.data, SITE_FIELDS)
        info["authentication"] = AUTHENTICATION_LABEL
        info["capabilities"] = self.capabilities()
        return info
