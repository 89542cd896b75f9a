from functools import partial
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from sandbox_inventory.safety.guardian import SafetyGuardian
from sandbox_inventory.sharepoint.client import SharePointClient

TENANT = "https://contoso.sharepoint.com"
ADMIN_URL = "https://contoso-admin.sharepoint.com"


class FakeAuthenticator:
    """Stands in for Authenticator; fails for URLs listed in ``failing``."""

    def __init__(self, failing: Optional[Dict[str, Exception]] = None):
        self.failing = failing or {}
        self.requested: List[str] = []

    async def acquire_token(self, url: str) -> str:
        self.requested.append(url)
        if url in self.failing:
            raise self.failing[url]
        return "fake-token"


def catalog_item(
    name: str,
    author: Optional[str] = "Admin",
    created: Optional[str] = "2015-03-10T12:30:00Z",
    status: Optional[str] = None,
    meta_info: Optional[str] = None,
    solution_hash: str = "hash",
) -> dict:
    item = {
        "FileLeafRef": name,
        "Created": created,
        "Status": status,
        "MetaInfo": meta_info,
        "SolutionHash": solution_hash,
    }
    if author is not None:
        item["Author"] = {"Title": author}
    return item


def catalog_transport(
    catalogs: Dict[str, List[dict]],
    errors: Optional[Dict[str, int]] = None,
    requests: Optional[List[httpx.Request]] = None,
) -> httpx.MockTransport:
    """
    Serve gallery items keyed by site URL; ``errors`` maps a site URL to an
    HTTP status returned instead.
    """
    errors = errors or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        site = str(request.url).split("/_api/", 1)[0]
        if site in errors:
            return httpx.Response(
                errors[site],
                json={"odata.error": {"code": "-1", "message": {"lang": "en-US", "value": "Access denied."}}},
            )
        if site in catalogs:
            return httpx.Response(200, json={"value": catalogs[site]})
        return httpx.Response(404, json={"odata.error": {"message": {"value": "Not found"}}})

    return httpx.MockTransport(handler)


def client_factory(transport: httpx.MockTransport) -> Callable[..., SharePointClient]:
    return partial(SharePointClient, transport=transport)


@pytest.fixture
def guardian():
    return SafetyGuardian()


@pytest.fixture
def fake_auth():
    return FakeAuthenticator()
