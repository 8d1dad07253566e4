"""Rejection taxonomy for inbound skill requests.

Every error carries the HTTP status the caller should answer with and a
``reason`` meant for logs. Clients only ever see the generic status text.
"""

from __future__ import annotations

NOT_AUTHORIZED = 401
BAD_REQUEST = 400


class RequestValidationError(Exception):
    status = NOT_AUTHORIZED

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PolicyViolationError(RequestValidationError):
    """The certificate URL is not on the allow-list."""


class CertificateFetchError(RequestValidationError):
    """The certificate could not be downloaded."""


class MalformedCertificateError(RequestValidationError):
    """The downloaded document is not a PEM encoded X.509 certificate."""


class IdentityMismatchError(RequestValidationError):
    """The certificate is outside its validity window or names someone else."""


class SignatureInvalidError(RequestValidationError):
    pass


class StaleRequestError(RequestValidationError):
    status = BAD_REQUEST


class MalformedRequestError(RequestValidationError):
    status = BAD_REQUEST


class ApplicationMismatchError(RequestValidationError):
    status = BAD_REQUEST
