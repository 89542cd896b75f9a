"""
JSON exporter — Produces the run summary alongside the CSV report.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .. import __version__
from ..models import ScanSummary


def export_summary_json(
    summary: ScanSummary,
    path: Path,
    audit_record: Optional[dict] = None,
) -> Path:
    """
    Write the scan summary (totals and per-site failures) to a JSON file.

    Returns:
        Path to the created JSON file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": {
            "engine": "SharePoint Sandbox Solution Inventory",
            "version": __version__,
            "generated_utc": datetime.now(timezone.utc).isoformat(),
            "mode": "READ-ONLY",
        },
        "summary": summary.to_dict(),
    }
    if audit_record:
        payload.update(audit_record)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str, ensure_ascii=False)

    return path
