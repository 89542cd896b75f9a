"""
Inventory data models — Sites, catalog items, report rows and scan results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class SiteCollection:
    """A site collection returned by the tenant listing."""
    url: str
    title: str = ""
    template: str = ""
    status: str = ""


@dataclass
class SolutionItem:
    """One entry of a site's sandbox solution gallery."""
    file_name: str = ""
    author: Any = None          # Lookup value, e.g. {"Title": "Smith, John"}
    created: Any = None
    status: Any = None          # Present only for activated solutions
    meta_info: Optional[str] = None
    solution_hash: str = ""

    @classmethod
    def from_list_item(cls, item: dict) -> "SolutionItem":
        """Build from a REST list item (odata=nometadata)."""
        return cls(
            file_name=item["FileLeafRef"],
            author=item.get("Author"),
            created=item.get("Created"),
            status=item.get("Status"),
            meta_info=item.get("MetaInfo"),
            solution_hash=item.get("SolutionHash") or "",
        )


@dataclass
class ReportRow:
    """A single output line of the sandbox report."""
    site_url: str
    wsp_name: str
    author: str
    created_date: str
    activated: int
    has_assemblies: int
    solution_hash: str

    def fields(self) -> list[str]:
        return [
            self.site_url,
            self.wsp_name,
            self.author,
            self.created_date,
            str(self.activated),
            str(self.has_assemblies),
            self.solution_hash,
        ]


@dataclass
class SiteScanResult:
    """Outcome of scanning one site: rows on success, the exception on failure."""
    site: SiteCollection
    rows: list[ReportRow] = field(default_factory=list)
    error: Optional[Exception] = None
    suppressed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def error_summary(self) -> str:
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"

    def to_dict(self) -> dict:
        return {
            "site_url": self.site.url,
            "rows": len(self.rows),
            "error_type": type(self.error).__name__ if self.error else None,
            "error_message": str(self.error) if self.error else None,
            "suppressed": self.suppressed,
        }


@dataclass
class ScanSummary:
    """Totals for a complete inventory run."""
    admin_url: str = ""
    report_path: str = ""
    sites_total: int = 0
    sites_scanned: int = 0
    sites_failed: int = 0
    sites_suppressed: int = 0
    rows_written: int = 0
    started_at: float = 0.0
    completed_at: float = 0.0
    failures: list[SiteScanResult] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return round(self.completed_at - self.started_at, 2)

    def record(self, result: SiteScanResult):
        self.sites_scanned += 1
        if result.succeeded:
            self.rows_written += len(result.rows)
            return
        self.sites_failed += 1
        if result.suppressed:
            self.sites_suppressed += 1
        self.failures.append(result)

    def to_dict(self) -> dict:
        return {
            "admin_url": self.admin_url,
            "report_path": self.report_path,
            "sites_total": self.sites_total,
            "sites_scanned": self.sites_scanned,
            "sites_failed": self.sites_failed,
            "sites_suppressed": self.sites_suppressed,
            "rows_written": self.rows_written,
            "duration_seconds": self.duration_seconds,
            "failures": [f.to_dict() for f in self.failures],
        }
