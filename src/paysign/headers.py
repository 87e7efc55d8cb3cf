"""Outgoing auth headers for signed requests.

The platform API routes on Api-Version; the OAuth2 subsystem rejects it.
"""

from __future__ import annotations

from typing import Optional

from paysign.digest import DigestAlgorithm
from paysign.exceptions import ClaimError
from paysign.models import AuthorizedRequest, PartnerIdentity, SignedToken, SigningContext
from paysign.tokens import sign_token

API_VERSION = "1"
API_VERSION_HEADER = "Api-Version"


def compose_auth_headers(token: SignedToken, is_oauth2_request: bool = False) -> dict[str, str]:
    headers = {
        "Authorization": f"Bearer {token.compact_token}",
        "Content-Type": "application/json",
    }
    if not is_oauth2_request:
        headers[API_VERSION_HEADER] = API_VERSION
    return headers


def authorize_request(
    identity: PartnerIdentity,
    context: SigningContext,
    *,
    issued_at: Optional[int] = None,
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> AuthorizedRequest:
    """Sign a context and return headers plus the body text to transmit verbatim.

    The identity's key must belong to the context's issuer, so a mismatched
    partner id or role is refused before signing.
    """
    if identity.partner_id != context.issuer:
        raise ClaimError(
            f"issuer {context.issuer!r} does not match identity partner_id {identity.partner_id!r}"
        )
    if identity.role is not context.role:
        raise ClaimError(
            f"role {context.role.value} does not match identity role {identity.role.value}"
        )
    token = sign_token(
        context, identity.private_key, issued_at=issued_at, digest_algorithm=digest_algorithm,
    )
    return AuthorizedRequest(
        headers=compose_auth_headers(token, context.is_oauth2_request),
        body=token.canonical_body,
    )
