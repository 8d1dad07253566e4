"""Value types shared by the request validation pipeline."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType

from skillgate.verification.errors import RequestValidationError

CERT_URL_HEADER = "SignatureCertChainUrl"
SIGNATURE_HEADER = "Signature"


@dataclass(frozen=True)
class ValidatorConfig:
    allowed_cert_host: str = "s3.amazonaws.com"
    allowed_cert_path_prefix: str = "/echo.api/"
    required_subject_name: str = "echo-api.amazon.com"
    fetch_timeout: timedelta = timedelta(seconds=5)
    # Disables TLS verification of the certificate download *and* every check below.
    insecure_skip_verify: bool = False
    freshness_window: timedelta = timedelta(seconds=150)
    # Honour the per-request ``_dev`` override.
    dev_bypass: bool = False


@dataclass(frozen=True)
class IncomingRequest:
    """A captured skill request.

    ``body`` holds the raw bytes exactly as received; it is read once from the
    transport and reused by the digest and by whatever handles the request.
    """

    headers: Mapping[str, str]
    body: bytes
    claimed_timestamp: datetime
    dev_override: bool = False

    def __post_init__(self) -> None:
        # Header lookups are case-insensitive on the wire; keep them that way here.
        normalized = {k.lower(): v for k, v in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(normalized))

    def header(self, name: str) -> str:
        return self.headers.get(name.lower(), "")

    @property
    def cert_chain_url(self) -> str:
        return self.header(CERT_URL_HEADER)

    @property
    def signature(self) -> str:
        return self.header(SIGNATURE_HEADER)


class Outcome(enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True)
class ValidationVerdict:
    outcome: Outcome
    reason: str | None = None
    status: int | None = None
    error: type[RequestValidationError] | None = field(default=None, compare=False)

    @classmethod
    def accept(cls) -> ValidationVerdict:
        return cls(Outcome.ACCEPT)

    @classmethod
    def reject(cls, exc: RequestValidationError) -> ValidationVerdict:
        return cls(Outcome.REJECT, reason=exc.reason, status=exc.status, error=type(exc))

    @property
    def accepted(self) -> bool:
        return self.outcome is Outcome.ACCEPT
