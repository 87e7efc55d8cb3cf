"""Paysign error hierarchy.

Messages name the role, claim or field that failed. They never carry key
material or token contents.
"""


class PaysignError(Exception):
    """Base exception for all Paysign errors."""


class SerializationError(PaysignError):
    """Request body is not representable as JSON."""


class DigestError(PaysignError):
    """Content digest could not be computed."""


class KeyMaterialError(PaysignError):
    """An RSA key is missing, unreadable or malformed."""


class PrivateKeyError(KeyMaterialError):
    """Private key is missing, unreadable or not an RSA key."""


class PublicKeyError(KeyMaterialError):
    """Public key is missing or not an RSA key."""


class ClaimError(PaysignError):
    """A claim required (or forbidden) by the partner role is wrong."""


class SigningError(PaysignError):
    """The RS256 signing backend failed."""


class TokenVerificationError(PaysignError):
    """Token signature, audience or content digest did not verify."""


class ConfigError(PaysignError):
    """Required environment configuration is missing or invalid."""
