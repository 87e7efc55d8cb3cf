"""RS256 bearer tokens that bind a request body through a header digest.

Header: {"alg": "RS256", "typ": "JWT", "contentSha256": <digest>}  (digest only with a body)
Claims: {"iss": partnerId, "aud": audience, "iat": seconds, "sub": oauth2 token (isv delegated)}

No "exp" claim is set. The platform checks "iat" against its own tolerance window.
RSA PKCS#1 v1.5 is deterministic, so equal inputs within one second give equal tokens.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from jose import jwt
from jose.exceptions import JOSEError

from paysign.digest import DigestAlgorithm, digest_body, digest_matches
from paysign.exceptions import SigningError, TokenVerificationError
from paysign.keys import load_private_key, normalize_public_key, private_key_to_pem
from paysign.models import PLATFORM_AUDIENCE, SignedToken, SigningContext

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"


def build_header(
    digest: Optional[str],
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> dict:
    """Token header. The content digest is a header field, not a claim."""
    header = {"alg": ALGORITHM, "typ": "JWT"}
    if digest is not None:
        header[digest_algorithm.value] = digest
    return header


def build_claims(context: SigningContext, issued_at: int) -> dict:
    claims: dict[str, Any] = {
        "iss": context.issuer,
        "aud": context.audience,
        "iat": issued_at,
    }
    if context.is_delegated:
        claims["sub"] = context.subject
    return claims


def sign_token(
    context: SigningContext,
    private_key: str,
    *,
    issued_at: Optional[int] = None,
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> SignedToken:
    """Sign a context with the partner's RSA key.

    The returned canonical_body is the exact text whose digest sits in the
    header; send it verbatim as the HTTP body.
    """
    key = private_key_to_pem(load_private_key(private_key))
    canonical, digest = digest_body(context.request_body, digest_algorithm)

    if issued_at is None:
        issued_at = int(time.time())
    header = build_header(digest, digest_algorithm)
    claims = build_claims(context, issued_at)

    extra_headers = {k: v for k, v in header.items() if k not in ("alg", "typ")}
    try:
        token = jwt.encode(claims, key, algorithm=ALGORITHM, headers=extra_headers or None)
    except JOSEError as e:
        raise SigningError(
            f"RS256 signing failed for role {context.role.value} (iss={context.issuer})"
        ) from e

    logger.debug(
        "Signed %s token iss=%s aud=%s delegated=%s body=%s",
        context.role.value, context.issuer, context.audience,
        context.is_delegated, digest is not None,
    )
    return SignedToken(
        compact_token=token,
        issuer=context.issuer,
        audience=context.audience,
        issued_at=issued_at,
        canonical_body=canonical,
        content_digest=digest,
        digest_header=digest_algorithm.value if digest is not None else None,
    )


def _digest_header_field(header: dict) -> Optional[DigestAlgorithm]:
    for algorithm in DigestAlgorithm:
        if algorithm.value in header:
            return algorithm
    return None


def verify_token(
    token: str,
    public_key: str,
    *,
    audience: str = PLATFORM_AUDIENCE,
    canonical_body: Optional[str] = None,
) -> dict:
    """Verify signature, audience and (when given) the body digest. Returns the claims."""
    try:
        header = jwt.get_unverified_header(token)
        claims = jwt.decode(
            token,
            normalize_public_key(public_key),
            algorithms=[ALGORITHM],
            audience=audience,
        )
    except JOSEError as e:
        raise TokenVerificationError(f"Token verification failed: {e}") from e

    algorithm = _digest_header_field(header)
    if canonical_body is None:
        if algorithm is not None:
            raise TokenVerificationError(
                f"Token carries {algorithm.value} but no body was supplied"
            )
        return claims
    if algorithm is None:
        raise TokenVerificationError("Body supplied but token has no content digest")
    if not digest_matches(canonical_body, header[algorithm.value], algorithm):
        raise TokenVerificationError(f"{algorithm.value} does not match the request body")
    return claims


@dataclass
class TokenReport:
    """Unverified structural check of a token."""

    header: dict
    claims: dict
    issues: list[str] = field(default_factory=list)
    digest_algorithm: Optional[DigestAlgorithm] = None
    body_matches: Optional[bool] = None

    @property
    def valid(self) -> bool:
        return not self.issues


def inspect_token(token: str, expected_body: Any = None) -> TokenReport:
    """Decode without verifying and list anything the platform would reject."""
    try:
        header = jwt.get_unverified_header(token)
        claims = jwt.get_unverified_claims(token)
    except JOSEError as e:
        raise TokenVerificationError(f"Malformed token: {e}") from e

    report = TokenReport(header=header, claims=claims)
    if header.get("alg") != ALGORITHM:
        report.issues.append(f"Algorithm should be {ALGORITHM}, found {header.get('alg')}")
    if header.get("typ") != "JWT":
        report.issues.append(f"Type should be JWT, found {header.get('typ')}")
    if not claims.get("iss"):
        report.issues.append("Missing issuer (iss) claim")
    if not isinstance(claims.get("iat"), int):
        report.issues.append("Missing issued-at (iat) claim")
    if not claims.get("aud"):
        report.issues.append("Missing audience (aud) claim")
    elif claims["aud"] != PLATFORM_AUDIENCE and not claims.get("sub"):
        report.issues.append("Merchant audience requires an oauth2 token in sub")
    if "exp" in claims:
        report.issues.append("Unexpected exp claim")

    report.digest_algorithm = _digest_header_field(header)
    if report.digest_algorithm is DigestAlgorithm.MD5:
        report.issues.append("contentMd5 is deprecated; use contentSha256")

    if expected_body is not None:
        if report.digest_algorithm is None:
            report.issues.append("Body supplied but token has no content digest")
        else:
            canonical, _ = digest_body(expected_body, report.digest_algorithm)
            report.body_matches = digest_matches(
                canonical, header[report.digest_algorithm.value], report.digest_algorithm
            )
            if not report.body_matches:
                report.issues.append(
                    f"{report.digest_algorithm.value} mismatch; body must be sent in canonical form"
                )
    return report
