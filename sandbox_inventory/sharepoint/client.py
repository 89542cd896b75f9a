"""
Async SharePoint Online REST client with implicit paging and safety enforcement.
One client instance is scoped to one site (or the tenant admin endpoint).
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

import httpx

from ..config import (
    CATALOG_ITEMS_ENDPOINT,
    CATALOG_ITEM_FIELDS,
    CONNECT_TIMEOUT_SECONDS,
    MAX_PAGES_PER_QUERY,
    ODATA_ACCEPT,
    REQUEST_TIMEOUT_SECONDS,
)
from ..safety.guardian import SafetyGuardian, SafetyViolation

logger = logging.getLogger("sandbox_inventory.sharepoint")


class SharePointAPIError(Exception):
    """Raised when SharePoint REST returns a non-success response."""
    def __init__(self, status_code: int, message: str, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"SharePoint API Error {status_code} for {url}: {message}")


def _error_message(response: httpx.Response) -> str:
    """Extract the message from an odata.error body, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if not isinstance(body, dict):
        return response.text[:200]
    error = body.get("odata.error") or body.get("error") or {}
    message = error.get("message", "")
    if isinstance(message, dict):
        message = message.get("value", "")
    return message or response.text[:200]


class SharePointClient:
    """
    Async SharePoint REST client bound to a single site URL.
    Features:
      - Safety-validated requests (read-only enforcement)
      - "All items" queries that follow odata.nextLink
      - Scoped lifetime via ``async with``
    """

    def __init__(
        self,
        site_url: str,
        access_token: str,
        guardian: SafetyGuardian,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.site_url = site_url.rstrip("/")
        self.access_token = access_token
        self.guardian = guardian
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(REQUEST_TIMEOUT_SECONDS, connect=CONNECT_TIMEOUT_SECONDS),
            headers={
                "Authorization": f"Bearer {self.access_token}",
                "Accept": ODATA_ACCEPT,
                "Content-Type": ODATA_ACCEPT,
            },
            transport=self._transport,
        )
        logger.debug(f"Session opened for {self.site_url}")
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug(f"Session closed for {self.site_url}")

    def _build_url(self, endpoint: str) -> str:
        """Build full REST URL from a site-relative endpoint."""
        if endpoint.startswith("http"):
            return endpoint
        return f"{self.site_url}/{endpoint.lstrip('/')}"

    async def get(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """Execute a single GET request."""
        url = self._build_url(endpoint)
        self.guardian.validate_request("GET", url)
        return await self._execute("GET", url, params=params)

    async def post(self, endpoint: str, json_body: Optional[dict] = None) -> dict:
        """Execute a single POST request (only whitelisted read queries pass)."""
        url = self._build_url(endpoint)
        self.guardian.validate_request("POST", url, json_body)
        return await self._execute("POST", url, json_body=json_body)

    async def get_all_items_stream(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        max_pages: int = MAX_PAGES_PER_QUERY,
    ) -> AsyncGenerator[dict, None]:
        """Stream every item of a collection endpoint, following odata.nextLink."""
        url = self._build_url(endpoint)
        pages = 0

        while url and pages < max_pages:
            data = await self.get(url, params=params)
            for item in data.get("value", []):
                yield item

            url = data.get("odata.nextLink") or data.get("@odata.nextLink")
            params = None  # nextLink contains all params
            pages += 1

        if url and pages >= max_pages:
            logger.warning(
                f"Paging safety cap reached ({max_pages} pages) "
                f"for endpoint: {endpoint}"
            )

    async def get_all_items(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        max_pages: int = MAX_PAGES_PER_QUERY,
    ) -> list[dict]:
        """Fetch every item of a collection endpoint into a list."""
        return [item async for item in self.get_all_items_stream(endpoint, params, max_pages)]

    async def get_catalog_items(self, catalog: int, max_pages: int = MAX_PAGES_PER_QUERY) -> list[dict]:
        """Return all items of a reserved catalog (gallery) of this site."""
        select = ",".join(CATALOG_ITEM_FIELDS)
        return await self.get_all_items(
            CATALOG_ITEMS_ENDPOINT.format(catalog=catalog),
            params={"$select": select, "$expand": "Author"},
            max_pages=max_pages,
        )

    async def _execute(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict:
        """Execute a request and decode the JSON body."""
        response = await self._execute_raw(method, url, params=params, json_body=json_body)

        if not response.is_success:
            raise SharePointAPIError(response.status_code, _error_message(response), url)
        if response.status_code == 204 or not response.content.strip():
            return {}
        try:
            return response.json()
        except ValueError:
            raise SharePointAPIError(response.status_code, "Response body is not JSON", url)

    async def _execute_raw(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> httpx.Response:
        """Execute raw HTTP request."""
        if not self._client:
            raise RuntimeError("SharePointClient not initialized. Use 'async with' context.")

        if method == "GET":
            return await self._client.get(url, params=params)
        elif method == "POST":
            return await self._client.post(url, json=json_body, params=params)
        else:
            raise SafetyViolation(f"Unsupported method at raw level: {method}")
