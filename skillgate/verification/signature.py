"""Body signature verification.

The platform signs the SHA-1 digest of the raw request body with RSA
PKCS#1 v1.5 and sends it base64 encoded in the ``Signature`` header. The
scheme is fixed by the platform; it is reproduced here bit for bit.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from skillgate.verification.errors import SignatureInvalidError


def decode_signature(encoded: str) -> bytes:
    if not encoded:
        raise SignatureInvalidError("missing Signature header")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureInvalidError(f"signature is not valid base64: {exc}") from exc


def body_digest(body: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA1())
    digest.update(body)
    return digest.finalize()


def verify_signature(public_key: object, encoded_signature: str, body: bytes) -> None:
    """Raise ``SignatureInvalidError`` unless ``encoded_signature`` signs ``body``."""
    signature = decode_signature(encoded_signature)

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise SignatureInvalidError(
            f"certificate key is {type(public_key).__name__}, expected an RSA key"
        )

    try:
        public_key.verify(
            signature,
            body_digest(body),
            padding.PKCS1v15(),
            Prehashed(hashes.SHA1()),
        )
    except InvalidSignature as exc:
        raise SignatureInvalidError("signature mismatch") from exc
