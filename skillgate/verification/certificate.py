"""X.509 checks on the downloaded signing certificate."""

from __future__ import annotations

from datetime import datetime, timezone

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.types import CertificatePublicKeyTypes

from skillgate.verification.errors import IdentityMismatchError, MalformedCertificateError

PEM_CERT_MARKER = b"-----BEGIN CERTIFICATE-----"
PEM_CERT_END = b"-----END CERTIFICATE-----"


def load_certificate(pem_data: bytes) -> x509.Certificate:
    """Parse the leaf certificate, the first PEM block in the chain document."""
    start = pem_data.find(PEM_CERT_MARKER)
    end = pem_data.find(PEM_CERT_END, start) if start != -1 else -1
    if end == -1:
        raise MalformedCertificateError("failed to parse certificate PEM: no certificate block")

    # Anything after the leaf (intermediates, junk) is not looked at.
    block = pem_data[start : end + len(PEM_CERT_END)]
    try:
        return x509.load_pem_x509_certificate(block + b"\n")
    except ValueError as exc:
        raise MalformedCertificateError(f"failed to parse certificate: {exc}") from exc


def check_validity_window(cert: x509.Certificate, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    if now < cert.not_valid_before_utc:
        raise IdentityMismatchError(
            f"certificate not valid before {cert.not_valid_before_utc.isoformat()}"
        )
    if now > cert.not_valid_after_utc:
        raise IdentityMismatchError(
            f"certificate expired at {cert.not_valid_after_utc.isoformat()}"
        )


def subject_alt_names(cert: x509.Certificate) -> list[str]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    except ValueError as exc:
        raise MalformedCertificateError(f"failed to parse certificate extensions: {exc}") from exc
    return ext.value.get_values_for_type(x509.DNSName)


def check_subject_name(cert: x509.Certificate, required_name: str) -> None:
    # Exact match only; no wildcard or substring semantics.
    if required_name not in subject_alt_names(cert):
        raise IdentityMismatchError(f"certificate is not issued to {required_name}")


def validate_certificate(
    pem_data: bytes,
    required_name: str,
    now: datetime | None = None,
) -> x509.Certificate:
    """Parse the certificate and run the date and identity checks.

    Returns the parsed certificate on success, otherwise raises a
    ``RequestValidationError`` subclass describing the first failed check.
    """
    cert = load_certificate(pem_data)
    check_validity_window(cert, now)
    check_subject_name(cert, required_name)
    return cert


def certificate_public_key(cert: x509.Certificate) -> CertificatePublicKeyTypes:
    try:
        return cert.public_key()
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise MalformedCertificateError(f"unreadable certificate public key: {exc}") from exc
