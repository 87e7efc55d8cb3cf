"""Content digests binding a request body to a token header."""

from __future__ import annotations

import base64
import hashlib
import hmac
from enum import Enum
from typing import Any, Optional

from paysign._canonical import canonical_json
from paysign.exceptions import DigestError


class DigestAlgorithm(str, Enum):
    """Digest algorithm, valued by the JWT header field that carries it."""

    SHA256 = "contentSha256"
    MD5 = "contentMd5"  # deprecated, still accepted by the platform

    @property
    def hashlib_name(self) -> str:
        return "sha256" if self is DigestAlgorithm.SHA256 else "md5"


def content_digest(
    canonical: Optional[str],
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> Optional[str]:
    """Base64 digest of the UTF-8 bytes of a canonical body string.

    Returns None when there is no body. An empty object "{}" is a body and
    gets a real digest.
    """
    if canonical is None:
        return None
    try:
        raw = hashlib.new(algorithm.hashlib_name, canonical.encode("utf-8")).digest()
    except (UnicodeEncodeError, ValueError) as e:
        raise DigestError(f"Cannot compute {algorithm.value} for request body: {e}") from e
    return base64.b64encode(raw).decode("ascii")


def digest_body(
    body: Any,
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> tuple[Optional[str], Optional[str]]:
    """Canonicalize and digest a body. Returns (canonical, digest), both None for no body."""
    if body is None:
        return None, None
    canonical = canonical_json(body)
    return canonical, content_digest(canonical, algorithm)


def digest_matches(
    canonical: Optional[str],
    expected: Optional[str],
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> bool:
    """Constant-time check that a canonical body hashes to the expected digest."""
    actual = content_digest(canonical, algorithm)
    if actual is None or expected is None:
        return actual is None and expected is None
    return hmac.compare_digest(actual, expected)
