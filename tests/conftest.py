import base64
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.x509.oid import NameOID

from skillgate.verification.fetcher import CertificateFetcher
from skillgate.verification.models import ValidatorConfig

CERT_URL = "https://s3.amazonaws.com/echo.api/echo-api-cert.pem"
SUBJECT_NAME = "echo-api.amazon.com"


def make_cert_pem(
    key,
    san_names=(SUBJECT_NAME,),
    not_before: datetime | None = None,
    not_after: datetime | None = None,
    signing_key=None,
) -> bytes:
    now = datetime.now(timezone.utc)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "echo-api.amazon.com")])
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=30))
    )
    if san_names:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(n) for n in san_names]),
            critical=False,
        )
    cert = builder.sign(signing_key or key, hashes.SHA256())
    return cert.public_bytes(serialization.Encoding.PEM)


def sign_body(key, body: bytes) -> str:
    return base64.b64encode(key.sign(body, padding.PKCS1v15(), hashes.SHA1())).decode()


def skill_body(timestamp: datetime | None = None, app_id: str = "amzn1.ask.skill.test") -> bytes:
    ts = (timestamp or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
    doc = {
        "version": "1.0",
        "session": {"application": {"applicationId": app_id}},
        "request": {
            "type": "LaunchRequest",
            "requestId": "amzn1.echo-api.request.1",
            "timestamp": ts,
        },
    }
    return json.dumps(doc).encode()


def stub_fetcher(pem: bytes = b"", error: Exception | None = None) -> AsyncMock:
    """A CertificateFetcher double that returns canned bytes or raises ``error``."""
    fetcher = AsyncMock(spec=CertificateFetcher)
    fetcher.fetch.return_value = pem
    if error is not None:
        fetcher.fetch.side_effect = error
    return fetcher


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def cert_pem(rsa_key):
    return make_cert_pem(rsa_key)


@pytest.fixture
def config():
    return ValidatorConfig()
