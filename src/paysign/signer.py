"""Partner-level signer: resolve identity once, then sign per call."""

from __future__ import annotations

import logging
from typing import Any, Optional

from paysign.accessor import EnvKeyAccessor, KeyAccessor
from paysign.digest import DigestAlgorithm
from paysign.exceptions import ClaimError, ConfigError
from paysign.headers import compose_auth_headers
from paysign.models import (
    AuthorizedRequest,
    Environment,
    PartnerIdentity,
    PartnerRole,
    SignedToken,
    SigningContext,
)
from paysign.tokens import sign_token

logger = logging.getLogger(__name__)


class PartnerSigner:
    """Signs requests for one partner identity in one environment."""

    def __init__(
        self,
        accessor: KeyAccessor,
        role: PartnerRole,
        environment: Environment = Environment.SANDBOX,
        digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
        default_merchant_id: Optional[str] = None,
    ):
        self.environment = environment
        self.digest_algorithm = digest_algorithm
        self.default_merchant_id = default_merchant_id
        self.identity = PartnerIdentity(
            partner_id=accessor.resolve_partner_id(role),
            role=role,
            private_key=accessor.resolve_private_key(environment, role),
        )
        logger.debug(
            "Signer ready for %s partner %s (%s)",
            role.value, self.identity.partner_id, environment.value,
        )

    @classmethod
    def from_env(cls, environment: Environment = Environment.SANDBOX) -> PartnerSigner:
        accessor = EnvKeyAccessor()
        role = accessor.partner_role()
        default_merchant_id = None
        if role is PartnerRole.ISV:
            try:
                default_merchant_id = accessor.default_merchant_id()
            except ConfigError:
                logger.debug("No default merchant configured; isv calls must name one")
        return cls(accessor, role, environment, default_merchant_id=default_merchant_id)

    @property
    def role(self) -> PartnerRole:
        return self.identity.role

    def context(
        self,
        body: Any = None,
        *,
        merchant_id: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        oauth2: bool = False,
    ) -> SigningContext:
        """Pick the role variant for a call."""
        if oauth2:
            if merchant_id or oauth2_token:
                raise ClaimError("oauth2 requests are never made on behalf of a merchant")
            return SigningContext.oauth2(self.identity, body)
        if self.role is PartnerRole.ISV:
            merchant_id = merchant_id or self.default_merchant_id
            if not merchant_id:
                raise ClaimError("audience (merchant partnerId) is required for isv api calls")
            if not oauth2_token:
                raise ClaimError("subject (oauth2 token) is required for isv api calls")
            return SigningContext.delegated(self.identity, merchant_id, oauth2_token, body)
        if merchant_id or oauth2_token:
            raise ClaimError(f"role {self.role.value} cannot act on behalf of a merchant")
        return SigningContext.first_party(self.identity, body)

    def sign(
        self,
        body: Any = None,
        *,
        merchant_id: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        oauth2: bool = False,
        issued_at: Optional[int] = None,
    ) -> SignedToken:
        ctx = self.context(body, merchant_id=merchant_id, oauth2_token=oauth2_token, oauth2=oauth2)
        return sign_token(
            ctx,
            self.identity.private_key,
            issued_at=issued_at,
            digest_algorithm=self.digest_algorithm,
        )

    def authorize(
        self,
        body: Any = None,
        *,
        merchant_id: Optional[str] = None,
        oauth2_token: Optional[str] = None,
        oauth2: bool = False,
        issued_at: Optional[int] = None,
    ) -> AuthorizedRequest:
        """Headers and body text ready to attach to an outgoing request."""
        token = self.sign(
            body,
            merchant_id=merchant_id,
            oauth2_token=oauth2_token,
            oauth2=oauth2,
            issued_at=issued_at,
        )
        return AuthorizedRequest(
            headers=compose_auth_headers(token, is_oauth2_request=oauth2),
            body=token.canonical_body,
        )
