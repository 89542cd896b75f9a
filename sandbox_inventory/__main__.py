"""
SharePoint Sandbox Solution Inventory — Main Orchestrator

Usage:
    python -m sandbox_inventory https://contoso-admin.sharepoint.com
    python -m sandbox_inventory https://contoso-admin.sharepoint.com --username admin@contoso.com
    python -m sandbox_inventory https://contoso-admin.sharepoint.com --delimiter ";"
    python -m sandbox_inventory https://contoso-admin.sharepoint.com --certificate \\
        --tenant-id <GUID> --client-id <GUID> --cert-path ./base64.txt

This tool is STRICTLY READ-ONLY. It will NEVER modify the tenant.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

import httpx

from . import __version__
from .config import EngineConfig, CertificateAuth, ConfigError
from .safety.guardian import SafetyGuardian, SafetyViolation
from .auth.authenticator import Authenticator, AuthenticationError
from .sharepoint.client import SharePointClient, SharePointAPIError
from .collectors import SiteEnumerator, SolutionScanner
from .models import ScanSummary, SiteCollection
from .reporting import ReportWriter, export_summary_json

logger = logging.getLogger("sandbox_inventory")

TENANT_ERRORS = (AuthenticationError, SharePointAPIError, SafetyViolation, httpx.HTTPError)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sandbox_inventory",
        description="SharePoint Online sandbox solution inventory (READ-ONLY)",
    )
    parser.add_argument(
        "admin_url",
        help="Tenant admin endpoint, e.g. https://contoso-admin.sharepoint.com",
    )
    parser.add_argument(
        "--username", "-u",
        type=str,
        default=None,
        help="Admin account (prompted if omitted, as is the password)",
    )
    parser.add_argument(
        "--delimiter", "-d",
        type=str,
        default=None,
        help="Single-character field delimiter for the report (default: ',')",
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Directory for the report file (default: current directory)",
    )
    parser.add_argument(
        "--public-site-pattern",
        type=str,
        default=None,
        help="URL substring of sites whose scan errors are not reported (default: 'public.')",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON configuration file",
    )
    parser.add_argument(
        "--certificate",
        action="store_true",
        help="Use app-only certificate authentication instead of admin credentials",
    )
    parser.add_argument(
        "--tenant-id",
        type=str,
        default=None,
        help="Tenant ID (certificate mode)",
    )
    parser.add_argument(
        "--client-id",
        type=str,
        default=None,
        help="App registration client ID (certificate mode)",
    )
    parser.add_argument(
        "--cert-path",
        type=Path,
        default=None,
        help="Path to base64-encoded PFX certificate (certificate mode)",
    )
    parser.add_argument(
        "--summary-json",
        action="store_true",
        help="Also write a JSON run summary next to the CSV report",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Build configuration from an optional config file and CLI overrides."""
    if args.config and args.config.exists():
        config = EngineConfig.from_file(args.config)
    else:
        config = EngineConfig()

    config.scan.admin_url = args.admin_url
    if args.username:
        config.auth.credentials.username = args.username
    if args.delimiter is not None:
        config.output.delimiter = args.delimiter
    if args.output_dir:
        config.output.base_dir = str(args.output_dir)
    if args.public_site_pattern is not None:
        config.scan.public_site_pattern = args.public_site_pattern
    if args.summary_json:
        config.output.summary_json = True
    if args.verbose:
        config.verbose = True

    if args.certificate:
        config.auth.mode = "certificate"
        if args.tenant_id and args.client_id:
            config.auth.certificate = CertificateAuth(
                tenant_id=args.tenant_id,
                client_id=args.client_id,
                certificate_path=str(args.cert_path or "./base64.txt"),
            )
    if args.cert_path and config.auth.certificate:
        config.auth.certificate.certificate_path = str(args.cert_path)

    config.validate()
    return config


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def enumerate_sites(
    config: EngineConfig,
    authenticator: Authenticator,
    guardian: SafetyGuardian,
) -> list[SiteCollection]:
    """List tenant sites. Any exception raised here is fatal for the run."""
    token = await authenticator.acquire_token(config.scan.admin_url)
    async with SharePointClient(config.scan.admin_url, token, guardian) as admin:
        return await SiteEnumerator(admin, max_pages=config.scan.max_pages).enumerate()


async def run_inventory(
    sites: list[SiteCollection],
    scanner: SolutionScanner,
    writer: ReportWriter,
    summary: Optional[ScanSummary] = None,
) -> ScanSummary:
    """
    Scan every site in order, appending its rows to the report.

    A failing site contributes no rows; its error is printed unless the
    site matches the public-site pattern.
    """
    summary = summary or ScanSummary()
    summary.sites_total = len(sites)
    total = len(sites)

    for index, site in enumerate(sites, start=1):
        result = await scanner.scan(site)
        if result.succeeded:
            writer.write_rows(result.rows)
        elif not result.suppressed:
            print(f"  ❌ {site.url}: {result.error_summary()}")
        summary.record(result)

        percent = index / total * 100
        print(f"  [{percent:5.1f}%] {index}/{total} sites processed")

    return summary


async def main_async(argv: Optional[Sequence[str]] = None) -> int:
    """Async entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"\n❌ {e}")
        return 1

    configure_logging(config.verbose)
    guardian = SafetyGuardian()

    print("=" * 70)
    print(f" SharePoint Sandbox Solution Inventory v{__version__}")
    print(" Mode: READ-ONLY — No tenant modifications will be made")
    print("=" * 70)
    print(f"\n🏢 Admin:   {config.scan.admin_url}")
    print(f"📂 Report:  {config.output.csv_path.resolve()}")

    summary = ScanSummary(
        admin_url=config.scan.admin_url,
        report_path=str(config.output.csv_path),
        started_at=time.time(),
    )

    # --- Tenant enumeration (fatal on failure) ---
    print("\n🔐 Authenticating and enumerating site collections...")
    authenticator = Authenticator(config.auth)
    try:
        sites = await enumerate_sites(config, authenticator, guardian)
    except TENANT_ERRORS as e:
        logger.debug("Tenant enumeration failed", exc_info=True)
        print(f"❌ Tenant enumeration failed: {type(e).__name__}: {e}")
        return 1
    print(f"✅ {len(sites)} site collections found.\n")

    # --- Per-site scan ---
    scanner = SolutionScanner(
        authenticator=authenticator,
        guardian=guardian,
        catalog=config.scan.catalog,
        public_site_pattern=config.scan.public_site_pattern,
        max_pages=config.scan.max_pages,
    )
    with ReportWriter(config.output.csv_path, delimiter=config.output.delimiter) as writer:
        await run_inventory(sites, scanner, writer, summary)

    summary.completed_at = time.time()

    if config.output.summary_json:
        path = export_summary_json(
            summary, config.output.json_path, guardian.get_audit_record()
        )
        print(f"\n  📄 JSON:  {path}")

    print("\n" + "=" * 70)
    print(" SCAN COMPLETE")
    print("=" * 70)
    print(f"\n  Sites:     {summary.sites_scanned} scanned, {summary.sites_failed} failed")
    print(f"  Solutions: {summary.rows_written}")
    print(f"  Report:    {config.output.csv_path.resolve()}")
    print()
    return 0


def main():
    """Synchronous entry point for `python -m sandbox_inventory`."""
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
