"""
Configuration module for the SharePoint Sandbox Solution Inventory.
Defines REST endpoints, report layout, and operational settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse


class ConfigError(Exception):
    """Raised when configuration values are invalid."""
    pass


# ─── Tenant Authentication ───────────────────────────────────────────────────

# SharePoint Online Management Shell public client
SPO_MANAGEMENT_SHELL_CLIENT_ID = "9bc3ab49-b65d-410a-85ad-de819febfddc"
LOGIN_AUTHORITY = "https://login.microsoftonline.com"

@dataclass
class CredentialAuth:
    """Username/password (admin account) authentication configuration."""
    username: str = ""              # Will be prompted if empty
    password: str = ""              # Will be prompted if empty
    client_id: str = SPO_MANAGEMENT_SHELL_CLIENT_ID
    authority: str = f"{LOGIN_AUTHORITY}/organizations"

@dataclass
class CertificateAuth:
    """Certificate-based app-only authentication configuration."""
    tenant_id: str
    client_id: str
    certificate_path: str          # Path to base64-encoded PFX
    certificate_password: str = "" # Will be prompted if empty

@dataclass
class AuthConfig:
    """Authentication configuration — supports both modes."""
    mode: str = "credentials"  # "credentials" or "certificate"
    credentials: CredentialAuth = field(default_factory=CredentialAuth)
    certificate: Optional[CertificateAuth] = None


# ─── SharePoint REST Settings ───────────────────────────────────────────────

# Reserved catalog number of the sandbox solution gallery
SANDBOX_SOLUTION_CATALOG = 121

TENANT_SITES_ENDPOINT = (
    "_api/Microsoft.Online.SharePoint.TenantAdministration.Tenant/"
    "GetSitePropertiesFromSharePointByFilters"
)
CATALOG_ITEMS_ENDPOINT = "_api/web/GetCatalog({catalog})/Items"
CATALOG_ITEM_FIELDS = [
    "FileLeafRef",
    "Created",
    "Status",
    "MetaInfo",
    "SolutionHash",
    "Author/Title",
]

ODATA_ACCEPT = "application/json;odata=nometadata"

REQUEST_TIMEOUT_SECONDS = 60.0
CONNECT_TIMEOUT_SECONDS = 30.0

# Safety cap on "all items" / "all sites" paging loops
MAX_PAGES_PER_QUERY = 10000


# ─── Scan Settings ──────────────────────────────────────────────────────────

DEFAULT_DELIMITER = ","
DEFAULT_PUBLIC_SITE_PATTERN = "public."

@dataclass
class ScanConfig:
    """Controls for the per-site scan."""
    admin_url: str = ""
    catalog: int = SANDBOX_SOLUTION_CATALOG
    public_site_pattern: str = DEFAULT_PUBLIC_SITE_PATTERN
    max_pages: int = MAX_PAGES_PER_QUERY

    def validate(self):
        parsed = urlparse(self.admin_url)
        if parsed.scheme != "https" or not parsed.netloc:
            raise ConfigError(
                f"Admin URL must be an absolute https URL: {self.admin_url!r}"
            )
        self.admin_url = self.admin_url.rstrip("/")


# ─── Output Configuration ───────────────────────────────────────────────────

REPORT_PREFIX = "SandboxReport"
REPORT_HEADER = [
    "SiteURL",
    "WSPName",
    "Author",
    "CreatedDate",
    "Activated",
    "HasAssemblies",
    "SolutionHash",
]

@dataclass
class OutputConfig:
    """Output directory and report file settings."""
    base_dir: str = ""
    timestamp: str = ""
    delimiter: str = DEFAULT_DELIMITER
    summary_json: bool = False

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        if not self.base_dir:
            self.base_dir = os.getcwd()

    def validate(self):
        if len(self.delimiter) != 1:
            raise ConfigError(
                f"Delimiter must be a single character, got {self.delimiter!r}"
            )

    @property
    def report_dir(self) -> Path:
        return Path(self.base_dir)

    @property
    def csv_path(self) -> Path:
        return self.report_dir / f"{REPORT_PREFIX}_{self.timestamp}.csv"

    @property
    def json_path(self) -> Path:
        return self.report_dir / f"{REPORT_PREFIX}_{self.timestamp}.json"


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class EngineConfig:
    """Top-level configuration for the inventory run."""
    auth: AuthConfig = field(default_factory=AuthConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    verbose: bool = False

    def validate(self):
        self.scan.validate()
        self.output.validate()
        if self.auth.mode == "certificate" and not self.auth.certificate:
            raise ConfigError(
                "Certificate mode requires --tenant-id, --client-id and --cert-path."
            )
        if self.auth.mode not in ("credentials", "certificate"):
            raise ConfigError(f"Unknown auth mode: {self.auth.mode}")

    @classmethod
    def from_file(cls, path: str) -> "EngineConfig":
        """Load configuration from a JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        config = cls()
        if "auth" in data:
            auth_data = data["auth"]
            config.auth.mode = auth_data.get("mode", "credentials")
            if "credentials" in auth_data:
                c = auth_data["credentials"]
                config.auth.credentials = CredentialAuth(
                    username=c.get("username", ""),
                    client_id=c.get("client_id", SPO_MANAGEMENT_SHELL_CLIENT_ID),
                    authority=c.get("authority", f"{LOGIN_AUTHORITY}/organizations"),
                )
            if "certificate" in auth_data:
                c = auth_data["certificate"]
                config.auth.certificate = CertificateAuth(
                    tenant_id=c["tenant_id"],
                    client_id=c["client_id"],
                    certificate_path=c.get("certificate_path", "./base64.txt"),
                    certificate_password=c.get("certificate_password", ""),
                )
        if "scan" in data:
            for k, v in data["scan"].items():
                if hasattr(config.scan, k):
                    setattr(config.scan, k, v)
        if "output" in data:
            for k, v in data["output"].items():
                if hasattr(config.output, k):
                    setattr(config.output, k, v)
        config.verbose = data.get("verbose", False)
        return config
