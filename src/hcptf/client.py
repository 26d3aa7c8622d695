"""HTTP client for the HCP Terraform / Terraform Enterprise API.

Thin JSON:API wrapper over httpx. Each command performs its own requests;
there is no retry, caching or pagination beyond what a command asks for.
Non-2xx responses are translated into the CLI error hierarchy so commands
can let them propagate to the dispatcher.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from . import __version__
from .config import Config
from .errors import (
    ApiError,
    AuthenticationError,
    ConfigError,
    NetworkError,
    ResourceNotFoundError,
)
from .settings import Settings

logger = logging.getLogger(__name__)

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"
PUBLIC_REGISTRY_URL = "https://registry.terraform.io"
DEFAULT_TIMEOUT = 30.0


def _error_detail(resp: httpx.Response) -> str:
    """Flatten a JSON:API ``errors`` array into one line."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason_phrase
    errors = body.get("errors") if isinstance(body, dict) else None
    if not errors:
        return resp.text[:200] or resp.reason_phrase
    parts = []
    for err in errors:
        if isinstance(err, str):
            parts.append(err)
            continue
        title = err.get("title") or ""
        detail = err.get("detail") or ""
        parts.append(f"{title}: {detail}" if title and detail else title or detail)
    return "; ".join(p for p in parts if p)


def raise_for_status(resp: httpx.Response, what: str) -> None:
    """Map an unsuccessful response to a CLI error."""
    code = resp.status_code
    if code < 400:
        return
    if code in (401, 403):
        raise AuthenticationError(f"HTTP {code} for {what}")
    if code == 404:
        raise ResourceNotFoundError(what)
    raise ApiError(code, _error_detail(resp))


def _send(client: httpx.Client, method: str, url: str, what: str, **kwargs) -> httpx.Response:
    logger.debug("%s %s", method, url)
    try:
        resp = client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        raise NetworkError(f"{method} {url}: {e}") from e
    logger.debug("%s %s -> HTTP %s", method, url, resp.status_code)
    raise_for_status(resp, what)
    return resp


def _decode(resp: httpx.Response) -> Optional[Dict[str, Any]]:
    if resp.status_code == 204 or not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise ApiError(resp.status_code, "response is not valid JSON") from e


class TFEClient:
    """Authenticated client rooted at ``<address>/api/v2``."""

    def __init__(
        self,
        address: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.address = address.rstrip("/")
        headers = {
            "Content-Type": JSONAPI_CONTENT_TYPE,
            "Accept": JSONAPI_CONTENT_TYPE,
            "User-Agent": f"hcptf/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.Client(
            base_url=f"{self.address}/api/v2/",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        # Signed archivist URLs must not receive the bearer token
        self._raw = httpx.Client(timeout=timeout, transport=transport, follow_redirects=True)

    @classmethod
    def from_config(cls, settings: Settings, config: Config, **kwargs) -> "TFEClient":
        token = config.token_for(settings)
        if not token:
            raise ConfigError(f"no API token found for {settings.hostname}")
        return cls(settings.address, token, **kwargs)

    @staticmethod
    def _path(path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if path.startswith("/api/v2/"):
            path = path[len("/api/v2/"):]
        return path.lstrip("/")

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        url = self._path(path)
        resp = _send(self._http, method, url, path, params=params, json=json)
        return _decode(resp)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None):
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, params=None):
        return self.request("POST", path, params=params, json=json)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None):
        return self.request("PATCH", path, json=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None):
        return self.request("PUT", path, json=json)

    def delete(self, path: str, json: Optional[Dict[str, Any]] = None):
        return self.request("DELETE", path, json=json)

    def download(self, url: str) -> bytes:
        """Fetch binary content (state files, plan exports), following redirects."""
        url = self._path(url)
        if url.startswith(("http://", "https://")):
            resp = _send(self._raw, "GET", url, url)
        else:
            resp = _send(self._http, "GET", url, url, follow_redirects=True)
        return resp.content

    def text(self, url: str) -> str:
        """Fetch a plain text document such as plan or apply logs."""
        return self.download(url).decode("utf-8", errors="replace")

    def upload(self, url: str, data: bytes) -> None:
        """PUT raw bytes to a signed upload URL or an API upload endpoint."""
        url = self._path(url)
        client = self._raw if url.startswith(("http://", "https://")) else self._http
        _send(
            client,
            "PUT",
            url,
            "upload URL",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )

    def close(self) -> None:
        self._http.close()
        self._raw.close()


class PublicRegistryClient:
    """Unauthenticated client for registry.terraform.io lookups."""

    def __init__(
        self,
        base_url: str = PUBLIC_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url, timeout=timeout, transport=transport, follow_redirects=True
        )

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = _send(self._http, "GET", path, path, params=params)
        return _decode(resp) or {}

    def close(self) -> None:
        self._http.close()
