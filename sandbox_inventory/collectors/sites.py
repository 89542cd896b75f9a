"""
Site Collection Enumerator
Lists every site collection of the tenant through the SharePoint admin API,
excluding OneDrive personal sites and recycled sites.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import MAX_PAGES_PER_QUERY, TENANT_SITES_ENDPOINT
from ..models import SiteCollection
from ..sharepoint.client import SharePointClient

logger = logging.getLogger("sandbox_inventory.collectors.sites")

PERSONAL_SITE_TEMPLATE_PREFIX = "SPSPERS"
PERSONAL_SITE_URL_MARKER = "-my.sharepoint.com/personal/"
RECYCLED_STATUS = "Recycled"


def is_excluded(site: SiteCollection) -> bool:
    """True for OneDrive personal sites and recycled sites."""
    if site.template.upper().startswith(PERSONAL_SITE_TEMPLATE_PREFIX):
        return True
    if PERSONAL_SITE_URL_MARKER in site.url.lower():
        return True
    return site.status == RECYCLED_STATUS


class SiteEnumerator:
    """
    Enumerates tenant site collections.

    Errors are not handled here: a tenant that cannot be listed aborts the run.
    """

    def __init__(self, admin: SharePointClient, max_pages: int = MAX_PAGES_PER_QUERY):
        self.admin = admin
        self.max_pages = max_pages

    async def enumerate(self) -> list[SiteCollection]:
        sites: list[SiteCollection] = []
        excluded = 0
        start_index: Optional[str] = None
        pages = 0

        while pages < self.max_pages:
            data = await self.admin.post(
                TENANT_SITES_ENDPOINT,
                json_body={
                    "speFilter": {
                        "StartIndex": start_index,
                        "IncludePersonalSite": 0,
                        "IncludeDetail": False,
                    }
                },
            )
            pages += 1

            for entry in data.get("value", []):
                site = SiteCollection(
                    url=entry["Url"],
                    title=entry.get("Title") or "",
                    template=entry.get("Template") or "",
                    status=entry.get("Status") or "",
                )
                if is_excluded(site):
                    excluded += 1
                    continue
                sites.append(site)

            next_index = (
                data.get("NextStartIndexFromSharePoint")
                or data.get("_nextStartIndexFromSharePoint")
            )
            if not next_index or next_index == start_index:
                break
            start_index = next_index

        logger.info(
            f"Enumerated {len(sites)} site collections "
            f"({excluded} personal/recycled excluded, {pages} pages)"
        )
        return sites
