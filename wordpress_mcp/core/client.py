"""
WordPress HTTP Client

Async client for the WordPress REST API. Blocking requests calls run in a
thread pool so the MCP event loop never waits on the network.

License: Mozilla Public License 2.0
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from requests.exceptions import RequestException, Timeout

from ..config import ConnectionSettings
from ..errors import RemoteRequestFailed

logger = logging.getLogger(__name__)

USER_AGENT = "wordpress-mcp-server"


@dataclass
class WordPressResponse:
    """Decoded body plus the headers the adapter reads pagination from"""
    data: Any
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)


class WordPressClient:
    """
    Async HTTP client for the WordPress REST API with thread pool execution.
    """

    def __init__(self, settings: ConnectionSettings, max_workers: int = 10,
                 session: Optional[requests.Session] = None):
        """
        Initialize WordPress client.

        Args:
            settings: Connection settings (site URL, credentials, timeout)
            max_workers: Maximum concurrent worker threads
            session: Optional requests session (a new one is created if omitted)
        """
        self.settings = settings
        self.base_url = settings.base_url
        self.timeout = settings.timeout
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": settings.authorization,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

        logger.info(f"WordPress client initialized: {self.base_url} (user={settings.username})")

    def url_for(self, path: str) -> str:
        """Absolute URL for a path under /wp-json/wp/v2, or an absolute URL unchanged"""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _execute_request(self, method: str, path: str,
                         params: Optional[Dict[str, Any]] = None,
                         json_body: Optional[Dict[str, Any]] = None,
                         data: Optional[bytes] = None,
                         headers: Optional[Dict[str, str]] = None) -> WordPressResponse:
        """
        Execute HTTP request to WordPress (synchronous, runs in thread pool).

        Raises:
            RemoteRequestFailed: On non-2xx status, transport error or bad JSON
        """
        url = self.url_for(path)
        logger.debug(f"Request: {method} {url} params={params}")

        try:
            response = self.session.request(
                method=method.upper(),
                url=url,
                params=params,
                json=json_body,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except Timeout:
            logger.error(f"Request timed out after {self.timeout}s: {method} {url}")
            raise RemoteRequestFailed(f"Request timed out after {self.timeout} seconds")
        except RequestException as e:
            logger.error(f"Request error: {e}")
            raise RemoteRequestFailed(f"Request error: {e}")
        except (UnicodeError, ValueError) as e:
            # Raised by http.client for values it cannot put on the wire
            logger.error(f"Request could not be sent: {method} {url}: {e}")
            raise RemoteRequestFailed(f"Request could not be sent: {e}")

        if not 200 <= response.status_code < 300:
            error_msg = f"WordPress returned status {response.status_code}"
            detail = self._error_detail(response)
            if detail:
                error_msg += f": {detail}"
            logger.warning(f"{method} {url} failed: {error_msg}")
            raise RemoteRequestFailed(error_msg, status_code=response.status_code)

        if not response.content:
            body = None
        else:
            try:
                body = response.json()
            except ValueError:
                raise RemoteRequestFailed(
                    f"WordPress returned a non-JSON response (status {response.status_code})",
                    status_code=response.status_code,
                )

        return WordPressResponse(data=body, status_code=response.status_code,
                                 headers=response.headers)

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Pull the message out of a WordPress error body ({"code", "message"})"""
        try:
            body = response.json()
        except ValueError:
            return (response.text or "").strip()[:200]

        if isinstance(body, dict) and body.get('message'):
            code = body.get('code')
            return f"{body['message']} ({code})" if code else str(body['message'])
        return str(body)[:200]

    async def request(self, method: str, path: str,
                      params: Optional[Dict[str, Any]] = None,
                      json_body: Optional[Dict[str, Any]] = None,
                      data: Optional[bytes] = None,
                      headers: Optional[Dict[str, str]] = None) -> WordPressResponse:
        """
        Execute an HTTP request asynchronously using the thread pool.

        Args:
            method: HTTP method
            path: Path under the REST base (e.g. "/posts/42") or absolute URL
            params: Query parameters
            json_body: JSON payload
            data: Raw request body (media uploads)
            headers: Extra headers for this request only

        Returns:
            WordPressResponse with decoded body and headers
        """
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(
                    self.executor,
                    lambda: self._execute_request(method, path, params, json_body, data, headers),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Request timed out after {self.timeout}s: {method} {path}")
            raise RemoteRequestFailed(f"Request timed out after {self.timeout} seconds")

    def close(self):
        """Shutdown the thread pool executor and HTTP session"""
        logger.debug("Shutting down WordPress client")
        self.executor.shutdown(wait=True)
        self.session.close()
