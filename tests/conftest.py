"""
Shared fixtures: a fake requests session that records calls and replays
queued responses, plus ready-made client/adapter/executor instances.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from wordpress_mcp.config import Config, ConnectionSettings
from wordpress_mcp.core import QueryBuilder, WordPressAdapter, WordPressClient
from wordpress_mcp.tools import ToolExecutor, ToolGenerator

SITE_URL = "https://blog.example.com"
BASE_URL = f"{SITE_URL}/wp-json/wp/v2"


def make_response(status: int = 200, body: Any = None, headers: Optional[Dict[str, str]] = None,
                  text: Optional[str] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if text is not None:
        response._content = text.encode('utf-8')
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode('utf-8')
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = 'utf-8'
    response.url = SITE_URL
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    params: Optional[Dict[str, Any]]
    json: Optional[Dict[str, Any]]
    data: Optional[bytes]
    headers: Optional[Dict[str, str]]
    timeout: Any


class FakeSession:
    """Stands in for requests.Session at the client's transport seam"""

    def __init__(self):
        self.headers = CaseInsensitiveDict()
        self.calls: List[RecordedCall] = []
        self.responses: List[Any] = []
        self.closed = False

    def queue(self, *items):
        self.responses.extend(items)
        return self

    def request(self, method, url, params=None, json=None, data=None, headers=None, timeout=None):
        self.calls.append(RecordedCall(method, url, params, json, data, headers, timeout))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


def wp_post(post_id: int = 42, **overrides) -> Dict[str, Any]:
    post = {
        "id": post_id,
        "date": "2024-05-01T10:00:00",
        "modified": "2024-05-02T11:30:00",
        "slug": "hello-world",
        "status": "draft",
        "type": "post",
        "link": f"{SITE_URL}/?p={post_id}",
        "title": {"rendered": "Hello World", "raw": "Hello World"},
        "content": {"rendered": "<p>Body</p>", "protected": False},
        "excerpt": {"rendered": "<p>Short</p>", "protected": False},
        "author": 1,
        "featured_media": 0,
        "categories": [1],
        "tags": [5, 7],
        "_links": {"self": [{"href": f"{BASE_URL}/posts/{post_id}"}]},
    }
    post.update(overrides)
    return post


def wp_media(media_id: int = 99, **overrides) -> Dict[str, Any]:
    media = {
        "id": media_id,
        "date": "2024-05-01T10:00:00",
        "status": "inherit",
        "link": f"{SITE_URL}/photo/",
        "title": {"rendered": "photo"},
        "caption": {"rendered": ""},
        "description": {"rendered": ""},
        "alt_text": "",
        "media_type": "image",
        "mime_type": "image/jpeg",
        "source_url": f"{SITE_URL}/wp-content/uploads/photo.jpg",
    }
    media.update(overrides)
    return media


@pytest.fixture
def settings():
    return ConnectionSettings.create(SITE_URL, "editor", "abcd efgh ijkl", timeout=5)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(settings, session):
    client = WordPressClient(settings, max_workers=2, session=session)
    yield client
    client.close()


@pytest.fixture
def adapter(client):
    return WordPressAdapter(client, QueryBuilder())


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def executor(adapter, config):
    return ToolExecutor(adapter, ToolGenerator(config.get_all_tools()), config)


@pytest.fixture
def wordpress_env(monkeypatch):
    monkeypatch.setenv("WORDPRESS_URL", SITE_URL)
    monkeypatch.setenv("WORDPRESS_USERNAME", "editor")
    monkeypatch.setenv("WORDPRESS_PASSWORD", "abcd efgh ijkl")
    monkeypatch.delenv("WORDPRESS_TOOLSETS", raising=False)
    monkeypatch.delenv("WORDPRESS_TIMEOUT", raising=False)
    monkeypatch.delenv("WORDPRESS_MAX_WORKERS", raising=False)
