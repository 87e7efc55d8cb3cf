"""Shared fixtures for Paysign tests."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from paysign.keys import RSAKeyPair, generate_rsa_keypair
from paysign.models import PartnerIdentity, PartnerRole

FIXED_IAT = 1_760_000_000


@pytest.fixture(scope="session")
def keypair() -> RSAKeyPair:
    """A 2048-bit RSA key pair (PKCS#8 private, SPKI public)."""
    return generate_rsa_keypair(2048)


@pytest.fixture(scope="session")
def keypair_b() -> RSAKeyPair:
    """A second, unrelated key pair."""
    return generate_rsa_keypair(2048)


@pytest.fixture(scope="session")
def pkcs1_private_key() -> str:
    """Traditional OpenSSL 'BEGIN RSA PRIVATE KEY' PEM."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def merchant(keypair) -> PartnerIdentity:
    return PartnerIdentity(partner_id="pm001", role=PartnerRole.MERCHANT, private_key=keypair.private_key)


@pytest.fixture
def institution(keypair) -> PartnerIdentity:
    return PartnerIdentity(
        partner_id="PI000001", role=PartnerRole.PAYMENT_INSTITUTION, private_key=keypair.private_key,
    )


@pytest.fixture
def isv(keypair) -> PartnerIdentity:
    return PartnerIdentity(partner_id="ISV00001", role=PartnerRole.ISV, private_key=keypair.private_key)


@pytest.fixture
def sample_body() -> dict:
    return {"trData": {"amount": "10.00"}}
