"""Paysign — RS256 request signing for the payware platform."""

from pathlib import Path

_VERSION_FILE = Path(__file__).resolve().parent.parent.parent / "VERSION"
__version__ = _VERSION_FILE.read_text().strip() if _VERSION_FILE.exists() else "0.0.0"

from paysign.exceptions import (
    PaysignError,
    SerializationError,
    DigestError,
    KeyMaterialError,
    PrivateKeyError,
    PublicKeyError,
    ClaimError,
    SigningError,
    TokenVerificationError,
    ConfigError,
)
from paysign._canonical import canonical_json
from paysign.digest import DigestAlgorithm, content_digest
from paysign.models import (
    PLATFORM_AUDIENCE,
    AuthorizedRequest,
    Environment,
    PartnerIdentity,
    PartnerRole,
    SignedToken,
    SigningContext,
)
from paysign.tokens import sign_token, verify_token
from paysign.headers import authorize_request, compose_auth_headers

__all__ = [
    "__version__",
    "PaysignError",
    "SerializationError",
    "DigestError",
    "KeyMaterialError",
    "PrivateKeyError",
    "PublicKeyError",
    "ClaimError",
    "SigningError",
    "TokenVerificationError",
    "ConfigError",
    "canonical_json",
    "DigestAlgorithm",
    "content_digest",
    "PLATFORM_AUDIENCE",
    "AuthorizedRequest",
    "Environment",
    "PartnerIdentity",
    "PartnerRole",
    "SignedToken",
    "SigningContext",
    "sign_token",
    "verify_token",
    "authorize_request",
    "compose_auth_headers",
]
