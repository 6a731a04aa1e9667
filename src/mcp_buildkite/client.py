"""Buildkite API client using httpx."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .config import BuildkiteConfig
from .exceptions import (
    BuildkiteApiError,
    BuildkiteAuthError,
    BuildkiteDecodeError,
    BuildkiteNotFoundError,
    BuildkiteTransportError,
)
from .services.builds import BuildsService

logger = logging.getLogger(__name__)

USER_AGENT = "mcp-buildkite"


class Response:
    """Raw response wrapper: HTTP metadata, decoded body and pagination links."""

    def __init__(self, http_response: httpx.Response, data: Any = None) -> None:
        self.http_response = http_response
        self.data = data
        self.next_page = 0
        self.prev_page = 0
        self.first_page = 0
        self.last_page = 0
        self._populate_page_values()

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.http_response.headers

    def _populate_page_values(self) -> None:
        # Link: <https://api.buildkite.com/v2/builds?page=2>; rel="next", ...
        for rel, link in self.http_response.links.items():
            url = link.get("url")
            if not url:
                continue
            page = httpx.URL(url).params.get("page")
            if page is None or not page.isdigit():
                continue
            if rel == "next":
                self.next_page = int(page)
            elif rel == "prev":
                self.prev_page = int(page)
            elif rel == "first":
                self.first_page = int(page)
            elif rel == "last":
                self.last_page = int(page)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"


class BuildkiteClient:
    """Async HTTP client for the Buildkite REST API v2."""

    def __init__(self, config: BuildkiteConfig | None = None) -> None:
        self.config = config or BuildkiteConfig.from_env()
        self.config.validate()
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers={
                "Authorization": f"Bearer {self.config.token}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        )
        self.builds = BuildsService(self)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BuildkiteClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    async def request(self, method: str, path: str, *, json_data: Any = None) -> Response:
        """Send one request and return the wrapped response with its decoded JSON body."""
        logger.debug("%s %s", method, path)
        try:
            resp = await self._client.request(method, path, json=json_data)
        except httpx.TransportError as e:
            msg = f"{method} {path} failed: {e}"
            raise BuildkiteTransportError(msg) from e

        response = Response(resp)

        if not resp.is_success:
            logger.warning("%s %s returned %d", method, path, resp.status_code)
        if resp.status_code in (401, 403):
            raise BuildkiteAuthError(resp.status_code, resp.text, response)
        if resp.status_code == 404:
            raise BuildkiteNotFoundError(resp.text, response)
        if not resp.is_success:
            raise BuildkiteApiError(
                resp.status_code, resp.reason_phrase or "", resp.text, response
            )

        if resp.status_code == 204 or not resp.content:
            return response

        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise BuildkiteDecodeError(resp.status_code, msg, resp.text[:500], response)

        try:
            response.data = resp.json()
        except json.JSONDecodeError as e:
            raise BuildkiteDecodeError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
                response,
            ) from e
        return response

