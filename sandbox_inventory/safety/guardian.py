"""
Safety Guardian — Enforces strict read-only operation.
Validates all HTTP methods, blocks write attempts, and logs safety events.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger("sandbox_inventory.safety")

# ─── Blocked HTTP Methods ────────────────────────────────────────────────────

WRITE_METHODS = {"POST", "PUT", "PATCH", "MERGE", "DELETE"}

# Known read-only POST endpoints (the tenant admin API queries via POST)
SAFE_POST_ENDPOINTS = [
    re.compile(
        r"/_api/Microsoft\.Online\.SharePoint\.TenantAdministration\.Tenant/"
        r"GetSitePropertiesFromSharePointByFilters$",
        re.IGNORECASE,
    ),
]


class SafetyViolation(Exception):
    """Raised when a write operation is attempted."""
    pass


class SafetyGuardian:
    """
    Validates every outbound HTTP request to ensure read-only operation.
    Maintains an audit log of all safety checks and violations.
    """

    def __init__(self):
        self.violations: list[dict] = []
        self.checks_performed: int = 0
        self.started_at: str = datetime.now(timezone.utc).isoformat()

    def validate_request(self, method: str, url: str, body: Optional[dict] = None) -> bool:
        """
        Validate that a request is read-only.
        Returns True if safe, raises SafetyViolation if not.
        """
        self.checks_performed += 1
        method_upper = method.upper()

        if method_upper in ("GET", "HEAD", "OPTIONS"):
            return True

        if method_upper == "POST":
            path = url.split("?", 1)[0]
            for pattern in SAFE_POST_ENDPOINTS:
                if pattern.search(path):
                    return True

        reason = (
            "Write HTTP method blocked" if method_upper in WRITE_METHODS
            else "Unsupported HTTP method"
        )
        self._record_violation(method_upper, url, reason)
        raise SafetyViolation(f"SAFETY VIOLATION: {reason}: {method_upper} {url}")

    def _record_violation(self, method: str, url: str, reason: str):
        """Record a safety violation for audit."""
        self.violations.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": method,
            "url": url,
            "reason": reason,
        })
        logger.critical(f"SAFETY VIOLATION: {reason} — {method} {url}")

    def get_audit_record(self) -> dict:
        """Return the full safety audit record."""
        return {
            "safety_guardian": {
                "mode": "READ-ONLY",
                "started_at": self.started_at,
                "checks_performed": self.checks_performed,
                "violations_detected": len(self.violations),
                "violations": self.violations,
                "status": "CLEAN" if not self.violations else "VIOLATIONS_DETECTED",
            }
        }
