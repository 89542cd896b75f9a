"""Tests for configuration loading and validation."""

import json

import pytest

from sandbox_inventory.__main__ import build_config, parse_args
from sandbox_inventory.config import ConfigError, EngineConfig, OutputConfig

ADMIN_URL = "https://contoso-admin.sharepoint.com"


def test_defaults():
    config = build_config(parse_args([ADMIN_URL]))

    assert config.scan.admin_url == ADMIN_URL
    assert config.scan.catalog == 121
    assert config.scan.public_site_pattern == "public."
    assert config.output.delimiter == ","
    assert config.auth.mode == "credentials"
    assert config.auth.credentials.username == ""


def test_report_file_name_uses_timestamp(tmp_path):
    output = OutputConfig(base_dir=str(tmp_path), timestamp="20240102030405")
    assert output.csv_path == tmp_path / "SandboxReport_20240102030405.csv"
    assert output.json_path.name == "SandboxReport_20240102030405.json"


def test_cli_overrides(tmp_path):
    config = build_config(parse_args([
        ADMIN_URL + "/",
        "--username", "admin@contoso.com",
        "--delimiter", ";",
        "--output-dir", str(tmp_path),
        "--public-site-pattern", "www.",
    ]))

    assert config.scan.admin_url == ADMIN_URL
    assert config.auth.credentials.username == "admin@contoso.com"
    assert config.output.delimiter == ";"
    assert config.output.report_dir == tmp_path
    assert config.scan.public_site_pattern == "www."


@pytest.mark.parametrize("delimiter", ["", ";;"])
def test_delimiter_must_be_single_character(delimiter):
    with pytest.raises(ConfigError):
        build_config(parse_args([ADMIN_URL, "--delimiter", delimiter]))


@pytest.mark.parametrize("url", ["http://contoso-admin.sharepoint.com", "contoso-admin"])
def test_admin_url_must_be_https(url):
    with pytest.raises(ConfigError):
        build_config(parse_args([url]))


def test_certificate_mode_requires_identity():
    with pytest.raises(ConfigError):
        build_config(parse_args([ADMIN_URL, "--certificate"]))


def test_certificate_mode(tmp_path):
    config = build_config(parse_args([
        ADMIN_URL, "--certificate",
        "--tenant-id", "tid", "--client-id", "cid",
        "--cert-path", str(tmp_path / "cert.txt"),
    ]))

    assert config.auth.mode == "certificate"
    assert config.auth.certificate.tenant_id == "tid"
    assert config.auth.certificate.certificate_path == str(tmp_path / "cert.txt")


def test_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "auth": {"credentials": {"username": "ops@contoso.com"}},
        "scan": {"public_site_pattern": "extranet.", "unknown": 1},
        "output": {"delimiter": "|"},
        "verbose": True,
    }))

    config = EngineConfig.from_file(str(path))

    assert config.auth.credentials.username == "ops@contoso.com"
    assert config.scan.public_site_pattern == "extranet."
    assert not hasattr(config.scan, "unknown")
    assert config.output.delimiter == "|"
    assert config.verbose is True


def test_cli_wins_over_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"output": {"delimiter": "|"}}))

    config = build_config(parse_args([ADMIN_URL, "--config", str(path), "--delimiter", ";"]))

    assert config.output.delimiter == ";"
