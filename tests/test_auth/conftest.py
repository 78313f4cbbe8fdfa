"""Shared key material for token verification tests."""

import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

SECRET = "test-shared-secret-with-enough-length"
KID = "key-2026-01"


def _generate_rsa_pair() -> tuple[str, str]:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def rsa_keys() -> tuple[str, str]:
    return _generate_rsa_pair()


@pytest.fixture(scope="session")
def public_jwk(rsa_keys) -> dict:
    _, public_pem = rsa_keys
    key = jwk.construct(public_pem, "RS256").to_dict()
    key["kid"] = KID
    key["use"] = "sig"
    return key


@pytest.fixture
def claims() -> dict:
    return {
        "sub": "user-1",
        "email": "investor@example.com",
        "role": "user",
        "exp": int(time.time()) + 3600,
    }


@pytest.fixture
def hs_token(claims) -> str:
    return jwt.encode(claims, SECRET, algorithm="HS256")


@pytest.fixture
def rs_token(claims, rsa_keys) -> str:
    private_pem, _ = rsa_keys
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": KID})
