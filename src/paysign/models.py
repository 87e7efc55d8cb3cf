"""Pydantic models for partner identities, signing contexts and signed tokens.

Role variants:
- first party (merchant, payment institution): iss=partnerId, aud=PLATFORM_AUDIENCE
- ISV on behalf of a merchant: iss=isvId, aud=merchantId, sub=oauth2 access token
- ISV own calls (OAuth2 subsystem): iss=isvId, aud=PLATFORM_AUDIENCE
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from paysign.exceptions import ClaimError

PLATFORM_AUDIENCE = "https://payware.eu"


# --- Enums ---

class PartnerRole(str, Enum):
    MERCHANT = "merchant"
    ISV = "isv"
    PAYMENT_INSTITUTION = "payment_institution"

    @property
    def is_first_party(self) -> bool:
        return self is not PartnerRole.ISV


class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"


# --- Data Models ---

class PartnerIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    partner_id: str
    role: PartnerRole
    private_key: str = Field(repr=False)


class SigningContext(BaseModel):
    """Everything the token builder needs for one call. Immutable."""

    model_config = ConfigDict(frozen=True)

    issuer: str
    role: PartnerRole
    audience: str = PLATFORM_AUDIENCE
    subject: Optional[str] = None
    request_body: Any = None
    is_oauth2_request: bool = False

    @model_validator(mode="after")
    def validate_role_claims(self) -> SigningContext:
        role = self.role.value
        if not self.issuer:
            raise ClaimError(f"issuer (partnerId) is required for role {role}")
        if not self.audience:
            raise ClaimError(f"audience is required for role {role}")

        if self.role.is_first_party:
            if self.audience != PLATFORM_AUDIENCE:
                raise ClaimError(
                    f"audience must be {PLATFORM_AUDIENCE} for role {role}"
                )
            if self.subject is not None:
                raise ClaimError(f"subject is not allowed for role {role}")
            return self

        # ISV: delegated iff addressed to a merchant
        if self.audience == PLATFORM_AUDIENCE:
            if self.subject is not None:
                raise ClaimError(
                    "subject is only allowed for isv calls on behalf of a merchant"
                )
            return self
        if not self.subject:
            raise ClaimError(
                "subject (oauth2 token) is required for isv calls on behalf of a merchant"
            )
        if self.is_oauth2_request:
            raise ClaimError("oauth2 requests cannot be made on behalf of a merchant")
        return self

    @property
    def is_delegated(self) -> bool:
        return self.subject is not None

    # --- Constructors per role variant ---

    @classmethod
    def first_party(cls, identity: PartnerIdentity, body: Any = None) -> SigningContext:
        """Merchant or payment-institution call to the platform API."""
        if not identity.role.is_first_party:
            raise ClaimError(
                f"role {identity.role.value} cannot sign first-party requests; "
                "use delegated() or oauth2()"
            )
        return cls(issuer=identity.partner_id, role=identity.role, request_body=body)

    @classmethod
    def delegated(
        cls,
        identity: PartnerIdentity,
        merchant_id: str,
        oauth2_token: str,
        body: Any = None,
    ) -> SigningContext:
        """ISV call on behalf of a merchant under a merchant-granted token."""
        if identity.role is not PartnerRole.ISV:
            raise ClaimError(
                f"role {identity.role.value} cannot act on behalf of a merchant"
            )
        if not merchant_id:
            raise ClaimError("audience (merchant partnerId) is required for isv delegated calls")
        return cls(
            issuer=identity.partner_id,
            role=identity.role,
            audience=merchant_id,
            subject=oauth2_token,
            request_body=body,
        )

    @classmethod
    def oauth2(cls, identity: PartnerIdentity, body: Any = None) -> SigningContext:
        """ISV call to the delegated-authorization (OAuth2) subsystem."""
        if identity.role is not PartnerRole.ISV:
            raise ClaimError(f"role {identity.role.value} has no access to oauth2 endpoints")
        return cls(
            issuer=identity.partner_id,
            role=identity.role,
            request_body=body,
            is_oauth2_request=True,
        )


class SignedToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    compact_token: str = Field(repr=False)
    issuer: str
    audience: str
    issued_at: int
    canonical_body: Optional[str] = None
    content_digest: Optional[str] = None
    digest_header: Optional[str] = None

    @property
    def has_body(self) -> bool:
        return self.canonical_body is not None


class AuthorizedRequest(BaseModel):
    """Headers plus the exact body bytes (as text) to transmit."""

    model_config = ConfigDict(frozen=True)

    headers: dict[str, str] = Field(repr=False)
    body: Optional[str] = None
