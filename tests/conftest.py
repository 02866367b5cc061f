import base64
import datetime
import time
from collections.abc import Callable
from typing import Any

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from flask import Flask

from azure_ad_verification import InMemoryKeyCache, ValidationOptions

from identity_provider import APP_ID, AUDIENCE, KID, METADATA_URI, SECRET, TENANT_ID, FakeIdentityProvider


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def idp() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def http_client(idp: FakeIdentityProvider):
    client = idp.client()
    yield client
    client.close()


@pytest.fixture
def key_cache() -> InMemoryKeyCache:
    return InMemoryKeyCache()


@pytest.fixture
def options() -> ValidationOptions:
    return ValidationOptions(
        tenant_id=TENANT_ID,
        audience=AUDIENCE,
        metadata_document_uri=METADATA_URI,
    )


@pytest.fixture
def claims() -> dict[str, Any]:
    now = int(time.time())
    return {
        "sub": "1234567890",
        "name": "John Doe",
        "iat": now - 10,
        "exp": now + 3600,
        "aud": AUDIENCE,
        "tid": TENANT_ID,
        "appid": APP_ID,
    }


@pytest.fixture
def make_token(claims: dict[str, Any]):
    """
    Factory fixture that returns a function.

    Usage in tests:
        token = make_token(scp="Api.Connect")
        token = make_token(kid=None, secret="other")
    """

    def _make(
        *,
        kid: str | None = KID,
        secret: Any = SECRET,
        algorithm: str = "HS256",
        **overrides: Any,
    ) -> str:
        payload = {**claims, **overrides}
        payload = {k: v for k, v in payload.items() if v is not None}
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(payload, secret, algorithm=algorithm, headers=headers)

    return _make


@pytest.fixture(scope="session")
def rsa_signing() -> dict[str, Any]:
    """RSA private key plus a self-signed certificate in x5c form."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "token-signing")])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )
    der = certificate.public_bytes(serialization.Encoding.DER)
    return {
        "private_key": private_key,
        "x5c": base64.b64encode(der).decode("ascii"),
    }


@pytest.fixture
def key_entry() -> Callable[..., dict[str, Any]]:
    def _make(kid: str, value: str = SECRET) -> dict[str, Any]:
        return {"kid": kid, "use": "sig", "x5t": kid, "x5c": [value]}

    return _make
