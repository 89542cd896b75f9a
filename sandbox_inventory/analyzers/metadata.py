"""
Solution metadata parser
Derives report fields from raw sandbox gallery items: activation state,
compiled-assembly flag, author display name and creation date.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..models import ReportRow, SiteCollection, SolutionItem

logger = logging.getLogger("sandbox_inventory.analyzers.metadata")

ASSEMBLIES_MARKER = "SolutionHasAssemblies"
META_INFO_LINE_SEPARATOR = "\r\n"
CREATED_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_activated(status: Any) -> int:
    """1 when the gallery item carries any status value, else 0."""
    if status is None:
        return 0
    if isinstance(status, (str, dict, list)) and not status:
        return 0
    return 1


def has_assemblies(meta_info: Optional[str]) -> int:
    """
    Decode the compiled-assembly flag from a MetaInfo blob.

    The first line mentioning the marker decides; it counts as set when
    that line contains a "1" anywhere.
    """
    if not meta_info:
        return 0
    for line in meta_info.split(META_INFO_LINE_SEPARATOR):
        if ASSEMBLIES_MARKER in line:
            return 1 if "1" in line else 0
    return 0


def author_display_name(author: Any) -> str:
    """Display name of the Author lookup with commas removed."""
    if isinstance(author, dict):
        name = author.get("Title") or ""
    elif author is None:
        name = ""
    else:
        name = str(author)
    return name.replace(",", "")


def format_created(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, datetime):
        return value.strftime(CREATED_FORMAT)
    try:
        created = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable creation date passed through: {value!r}")
        return str(value)
    return created.strftime(CREATED_FORMAT)


def build_row(site: SiteCollection, item: SolutionItem) -> ReportRow:
    """Turn one gallery item into its report row."""
    return ReportRow(
        site_url=site.url,
        wsp_name=item.file_name,
        author=author_display_name(item.author),
        created_date=format_created(item.created),
        activated=is_activated(item.status),
        has_assemblies=has_assemblies(item.meta_info),
        solution_hash=item.solution_hash,
    )
