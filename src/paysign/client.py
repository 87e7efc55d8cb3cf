"""Signed HTTP client for the payware platform.

Uses stdlib urllib — no extra dependencies required.
Default API URLs: https://sandbox.payware.eu/api and https://api.payware.eu/api
(override via PAYWARE_SANDBOX_URL / PAYWARE_PRODUCTION_URL env vars).
OAuth2 endpoints live at the same host without the /api suffix.
"""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from paysign.accessor import EnvKeyAccessor
from paysign.models import Environment
from paysign.signer import PartnerSigner

DEFAULT_SANDBOX_URL = "https://sandbox.payware.eu/api"
DEFAULT_PRODUCTION_URL = "https://api.payware.eu/api"


class PaywareAPIError(Exception):
    """Raised when the platform returns an error."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"HTTP {status_code}: {message}")


def default_base_url(environment: Environment) -> str:
    if environment is Environment.PRODUCTION:
        return os.environ.get("PAYWARE_PRODUCTION_URL") or DEFAULT_PRODUCTION_URL
    return os.environ.get("PAYWARE_SANDBOX_URL") or DEFAULT_SANDBOX_URL


class PaywareClient:
    """Minimal client that signs every call with a PartnerSigner."""

    def __init__(
        self,
        signer: PartnerSigner,
        base_url: Optional[str] = None,
        timeout: float = 30,
        settings: Optional[EnvKeyAccessor] = None,
    ):
        self.signer = signer
        self.settings = settings or EnvKeyAccessor()
        self.base_url = (base_url or default_base_url(signer.environment)).rstrip("/")
        self.timeout = timeout

    @property
    def oauth2_base_url(self) -> str:
        if self.base_url.endswith("/api"):
            return self.base_url[: -len("/api")]
        return self.base_url

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        merchant_id: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> dict:
        """Signed call to the platform API."""
        return self._send(
            method, f"{self.base_url}{path}", body, params,
            merchant_id=merchant_id, oauth2_token=oauth2_token,
        )

    def _send(
        self,
        method: str,
        url: str,
        body: Any,
        params: Optional[dict],
        *,
        merchant_id: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        oauth2: bool = False,
    ) -> dict:
        if params:
            filtered = {k: str(v) for k, v in params.items() if v is not None}
            if filtered:
                url = f"{url}?{urllib.parse.urlencode(filtered)}"

        signed = self.signer.authorize(
            body, merchant_id=merchant_id, oauth2_token=oauth2_token, oauth2=oauth2,
        )
        # body goes out exactly as digested
        data = signed.body.encode("utf-8") if signed.body is not None else None
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Accept", "application/json")
        for name, value in signed.headers.items():
            req.add_header(name, value)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
                return json.loads(raw) if raw else {}
        except urllib.error.HTTPError as e:
            code = None
            try:
                error_body = json.loads(e.read().decode("utf-8"))
                code = error_body.get("code")
                msg = (
                    error_body.get("message")
                    or error_body.get("error")
                    or str(error_body)
                )
            except (ValueError, AttributeError):
                msg = e.reason
            raise PaywareAPIError(e.code, msg, code) from e
        except urllib.error.URLError as e:
            raise PaywareAPIError(0, f"Connection failed: {e.reason}") from e

    # --- OAuth2 (delegated authorization) ---

    def obtain_oauth2_token(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        grant_type: str = "client_credentials",
    ) -> dict:
        """Request an access token from a merchant (ISV only).

        Missing credentials fall back to PAYWARE_OAUTH_CLIENT_ID and
        PAYWARE_OAUTH_CLIENT_SECRET; ConfigError if neither is set.
        """
        client_id = client_id or self.settings.oauth2_client_id()
        client_secret = client_secret or self.settings.oauth2_client_secret()
        body = {"grantType": grant_type, "clientId": client_id, "clientSecret": client_secret}
        return self._send(
            "POST", f"{self.oauth2_base_url}/oauth2/tokens", body, None, oauth2=True,
        )

    def get_oauth2_token_info(self, token: str) -> dict:
        encoded = urllib.parse.quote(token, safe="")
        return self._send(
            "GET", f"{self.oauth2_base_url}/oauth2/tokens/{encoded}", None, None, oauth2=True,
        )
