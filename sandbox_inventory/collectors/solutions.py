"""
Sandbox Solution Scanner
Queries one site's sandbox solution gallery and turns each item into a report row.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..analyzers.metadata import build_row
from ..auth.authenticator import Authenticator
from ..config import DEFAULT_PUBLIC_SITE_PATTERN, MAX_PAGES_PER_QUERY, SANDBOX_SOLUTION_CATALOG
from ..models import SiteCollection, SiteScanResult, SolutionItem
from ..safety.guardian import SafetyGuardian
from ..sharepoint.client import SharePointClient

logger = logging.getLogger("sandbox_inventory.collectors.solutions")

ClientFactory = Callable[[str, str, SafetyGuardian], SharePointClient]


def is_public_site(url: str, pattern: str = DEFAULT_PUBLIC_SITE_PATTERN) -> bool:
    """Case-insensitive substring match used to silence expected failures."""
    if not pattern:
        return False
    return pattern.lower() in url.lower()


class SolutionScanner:
    """
    Scans site collections one at a time.

    Each scan opens its own session, queries the gallery once and closes the
    session on every exit path. Failures never propagate; they are returned
    in the SiteScanResult and the site contributes no rows.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        guardian: SafetyGuardian,
        catalog: int = SANDBOX_SOLUTION_CATALOG,
        public_site_pattern: str = DEFAULT_PUBLIC_SITE_PATTERN,
        max_pages: int = MAX_PAGES_PER_QUERY,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.authenticator = authenticator
        self.guardian = guardian
        self.catalog = catalog
        self.public_site_pattern = public_site_pattern
        self.max_pages = max_pages
        self.client_factory = client_factory or SharePointClient

    async def scan(self, site: SiteCollection) -> SiteScanResult:
        result = SiteScanResult(site=site)
        started = time.time()

        try:
            token = await self.authenticator.acquire_token(site.url)
            async with self.client_factory(site.url, token, self.guardian) as client:
                items = await client.get_catalog_items(self.catalog, max_pages=self.max_pages)
                result.rows = [
                    build_row(site, SolutionItem.from_list_item(item))
                    for item in items
                ]
        except Exception as e:
            result.rows = []
            result.error = e
            result.suppressed = is_public_site(site.url, self.public_site_pattern)
            logger.debug(f"[{site.url}] Scan failed: {type(e).__name__}: {e}", exc_info=True)

        logger.info(
            f"[{site.url}] Completed in {round(time.time() - started, 2)}s — "
            f"{len(result.rows)} solutions"
        )
        return result
