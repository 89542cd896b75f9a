"""
Authentication module — Supports admin credential and certificate-based auth.
Uses MSAL for token acquisition against Microsoft Identity Platform.

SharePoint tokens are audience-bound to a host, so the admin endpoint
(contoso-admin.sharepoint.com) and the content sites (contoso.sharepoint.com)
each get their own token. Tokens are cached per host until shortly before
they expire; renewal goes through MSAL (silent refresh first).
"""

from __future__ import annotations

import base64
import getpass
import logging
import os
import time
from typing import Callable, Optional
from urllib.parse import urlparse

from cryptography.hazmat.primitives.serialization import pkcs12, Encoding, PrivateFormat, NoEncryption
from cryptography.hazmat.primitives.hashes import SHA1
import msal

from ..config import AuthConfig, LOGIN_AUTHORITY

logger = logging.getLogger("sandbox_inventory.auth")

# Tokens are renewed this long before they expire
TOKEN_REFRESH_MARGIN_SECONDS = 300


class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


def resource_for(url: str) -> str:
    """Return the token resource (scheme + host) for a SharePoint URL."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise AuthenticationError(f"Cannot derive token resource from URL: {url!r}")
    return f"{parsed.scheme}://{parsed.netloc.lower()}"


class Authenticator:
    """
    Handles MSAL-based authentication for SharePoint Online REST.
    Supports:
      - Admin username/password (resource owner password credentials)
      - Certificate-based app-only authentication
    """

    def __init__(self, config: AuthConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self.clock = clock
        self._tokens: dict[str, tuple[str, float]] = {}
        self._app: Optional[msal.ClientApplication] = None

    async def acquire_token(self, url: str) -> str:
        """Acquire an access token valid for the host of ``url``."""
        resource = resource_for(url)
        cached = self._tokens.get(resource)
        if cached and self.clock() < cached[1] - TOKEN_REFRESH_MARGIN_SECONDS:
            return cached[0]

        scopes = [f"{resource}/.default"]
        if self.config.mode == "credentials":
            result = self._acquire_credential_token(scopes)
        elif self.config.mode == "certificate":
            result = self._acquire_certificate_token(scopes)
        else:
            raise AuthenticationError(f"Unknown auth mode: {self.config.mode}")

        token = result["access_token"]
        expires_in = int(result.get("expires_in") or 0)
        self._tokens[resource] = (token, self.clock() + expires_in)
        logger.debug(f"Token acquired for {resource}, expires in {expires_in}s")
        return token

    def _acquire_credential_token(self, scopes: list[str]) -> dict:
        """Acquire token using the admin account's username and password."""
        creds = self.config.credentials
        if not creds.username:
            creds.username = input("Enter the SharePoint admin username: ").strip()
        if not creds.password:
            creds.password = os.environ.get("SPO_ADMIN_PASSWORD", "")
        if not creds.password:
            creds.password = getpass.getpass(f"Enter the password for {creds.username}: ")

        if self._app is None:
            logger.info(f"Authenticating as {creds.username}...")
            self._app = msal.PublicClientApplication(
                client_id=creds.client_id,
                authority=creds.authority,
            )

        result = None
        accounts = self._app.get_accounts(username=creds.username)
        if accounts:
            result = self._app.acquire_token_silent(scopes, account=accounts[0])
        if not result:
            result = self._app.acquire_token_by_username_password(
                creds.username, creds.password, scopes=scopes
            )
        return self._extract_token(result, "Credential auth")

    def _acquire_certificate_token(self, scopes: list[str]) -> dict:
        """Acquire token using certificate-based client credentials."""
        cert_config = self.config.certificate
        if not cert_config:
            raise AuthenticationError("Certificate auth config not provided.")

        if self._app is None:
            logger.info("Authenticating with certificate-based app credentials...")
            private_key_pem, thumbprint = self._load_certificate()
            self._app = msal.ConfidentialClientApplication(
                client_id=cert_config.client_id,
                authority=f"{LOGIN_AUTHORITY}/{cert_config.tenant_id}",
                client_credential={
                    "thumbprint": thumbprint,
                    "private_key": private_key_pem,
                },
            )

        result = self._app.acquire_token_for_client(scopes=scopes)
        return self._extract_token(result, "Certificate auth")

    def _load_certificate(self) -> tuple[str, str]:
        """Decode the base64 PFX and return (private key PEM, SHA1 thumbprint)."""
        cert_config = self.config.certificate
        cert_path = cert_config.certificate_path
        password = cert_config.certificate_password
        if not password:
            password = os.environ.get("SPO_CERT_PASSWORD", "")
        if not password:
            password = getpass.getpass("Enter the certificate password: ")

        try:
            with open(cert_path, "r") as f:
                cert_base64 = f.read().strip()

            cert_bytes = base64.b64decode(cert_base64)
            password_bytes = password.encode("utf-8") if password else None

            private_key, certificate, _ = pkcs12.load_key_and_certificates(
                cert_bytes, password_bytes
            )

            private_key_pem = private_key.private_bytes(
                Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
            ).decode("utf-8")
            thumbprint = certificate.fingerprint(SHA1()).hex()

            logger.info(f"Certificate loaded. Thumbprint: {thumbprint}")
            return private_key_pem, thumbprint

        except FileNotFoundError:
            raise AuthenticationError(f"Certificate file not found: {cert_path}")
        except Exception as e:
            raise AuthenticationError(f"Failed to load certificate: {e}")

    @staticmethod
    def _extract_token(result: Optional[dict], label: str) -> dict:
        if result and "access_token" in result:
            return result
        result = result or {}
        error = result.get("error_description", result.get("error", "Unknown"))
        raise AuthenticationError(f"{label} failed: {error}")
