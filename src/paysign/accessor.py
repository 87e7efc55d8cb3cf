"""Key accessors: where partner ids and private keys come from.

The signing core never reads ambient state; a KeyAccessor resolves the
values once and PartnerSigner passes them in explicitly.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Protocol, runtime_checkable

from paysign.exceptions import ConfigError, PrivateKeyError
from paysign.models import Environment, PartnerRole

logger = logging.getLogger(__name__)

PARTNER_ID_VAR = "PAYWARE_PARTNER_ID"
PARTNER_TYPE_VAR = "PAYWARE_PARTNER_TYPE"
OAUTH_CLIENT_ID_VAR = "PAYWARE_OAUTH_CLIENT_ID"
OAUTH_CLIENT_SECRET_VAR = "PAYWARE_OAUTH_CLIENT_SECRET"
DEFAULT_MERCHANT_ID_VAR = "PAYWARE_DEFAULT_MERCHANT_ID"
KEY_PATH_VARS = {
    Environment.SANDBOX: "PAYWARE_SANDBOX_PRIVATE_KEY_PATH",
    Environment.PRODUCTION: "PAYWARE_PRODUCTION_PRIVATE_KEY_PATH",
}


@runtime_checkable
class KeyAccessor(Protocol):
    def resolve_private_key(self, environment: Environment, role: PartnerRole) -> str:
        ...

    def resolve_partner_id(self, role: PartnerRole) -> str:
        ...


class StaticKeyAccessor:
    """In-memory accessor for a single partner."""

    def __init__(
        self,
        partner_id: str,
        private_key: str,
        production_private_key: Optional[str] = None,
    ):
        self._partner_id = partner_id
        self._keys = {
            Environment.SANDBOX: private_key,
            Environment.PRODUCTION: production_private_key,
        }

    def __repr__(self) -> str:
        return f"StaticKeyAccessor(partner_id={self._partner_id!r})"

    def resolve_private_key(self, environment: Environment, role: PartnerRole) -> str:
        key = self._keys[environment]
        if not key:
            raise PrivateKeyError(f"No {environment.value} private key configured for role {role.value}")
        return key

    def resolve_partner_id(self, role: PartnerRole) -> str:
        return self._partner_id


class EnvKeyAccessor:
    """Accessor backed by PAYWARE_* environment variables and key files on disk."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def partner_role(self) -> PartnerRole:
        """Configured partner type (defaults to merchant)."""
        value = self._environ.get(PARTNER_TYPE_VAR) or PartnerRole.MERCHANT.value
        try:
            return PartnerRole(value)
        except ValueError:
            valid = ", ".join(r.value for r in PartnerRole)
            raise ConfigError(f"Invalid {PARTNER_TYPE_VAR}: {value!r}. Valid types: {valid}")

    def resolve_partner_id(self, role: PartnerRole) -> str:
        partner_id = self._environ.get(PARTNER_ID_VAR)
        if not partner_id:
            raise ConfigError(f"{PARTNER_ID_VAR} environment variable is required for role {role.value}")
        if len(partner_id) != 8 or not partner_id.isalnum():
            logger.warning("%s=%s is not the usual 8-character partner id", PARTNER_ID_VAR, partner_id)
        return partner_id

    def resolve_private_key(self, environment: Environment, role: PartnerRole) -> str:
        var = KEY_PATH_VARS[environment]
        path = self._environ.get(var)
        if not path:
            raise ConfigError(f"{var} environment variable is required for role {role.value}")
        try:
            return Path(path).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            raise PrivateKeyError(f"Cannot read {environment.value} private key from {path}: {e.strerror}") from e

    # --- ISV OAuth2 settings ---

    def _required(self, var: str, purpose: str) -> str:
        value = self._environ.get(var)
        if not value:
            raise ConfigError(f"{var} environment variable is required for {purpose}")
        return value

    def oauth2_client_id(self) -> str:
        return self._required(OAUTH_CLIENT_ID_VAR, "isv oauth2 token requests")

    def oauth2_client_secret(self) -> str:
        return self._required(OAUTH_CLIENT_SECRET_VAR, "isv oauth2 token requests")

    def default_merchant_id(self) -> str:
        """Merchant an ISV acts for when a call names none."""
        return self._required(DEFAULT_MERCHANT_ID_VAR, "isv calls without an explicit merchant")

    def validate(self, environment: Environment = Environment.SANDBOX) -> PartnerRole:
        """Check that every setting the configured partner type needs is present.

        Raises ConfigError or PrivateKeyError on the first problem found.
        ISV partners also need the OAuth2 client credentials; the default
        merchant stays optional.
        """
        role = self.partner_role()
        partner_id = self.resolve_partner_id(role)
        self.resolve_private_key(environment, role)
        if role is PartnerRole.ISV:
            self.oauth2_client_id()
            self.oauth2_client_secret()
        logger.info(
            "Environment validated for %s partner %s (%s key)",
            role.value, partner_id, environment.value,
        )
        return role
