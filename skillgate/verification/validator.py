"""Request authenticity gate.

Runs the platform's mandatory security checks on one inbound request:

1. the certificate URL is on the allow-list,
2. the certificate downloads,
3. it parses, is within its validity window and names the platform,
4. the body signature verifies against its key,
5. the request timestamp is fresh.

The first failing check decides the verdict. Nothing is retried.
"""

from __future__ import annotations

from datetime import datetime, timezone

from skillgate.utils.logging import get_logger
from skillgate.verification.cert_url import is_valid_cert_url
from skillgate.verification.certificate import certificate_public_key, validate_certificate
from skillgate.verification.errors import PolicyViolationError, RequestValidationError
from skillgate.verification.fetcher import CertificateSource
from skillgate.verification.freshness import check_freshness
from skillgate.verification.models import IncomingRequest, ValidationVerdict, ValidatorConfig
from skillgate.verification.signature import verify_signature

log = get_logger(__name__)


class RequestValidator:
    def __init__(self, config: ValidatorConfig, fetcher: CertificateSource) -> None:
        self.config = config
        self._fetcher = fetcher

    async def validate(
        self,
        request: IncomingRequest,
        now: datetime | None = None,
    ) -> ValidationVerdict:
        if self.config.insecure_skip_verify:
            return ValidationVerdict.accept()
        if self.config.dev_bypass and request.dev_override:
            log.info("request_validation_bypassed")
            return ValidationVerdict.accept()

        now = now or datetime.now(timezone.utc)
        try:
            await self._check(request, now)
        except RequestValidationError as exc:
            log.warning(
                "request_rejected",
                reason=exc.reason,
                status=exc.status,
                error=type(exc).__name__,
                cert_url=request.cert_chain_url,
            )
            return ValidationVerdict.reject(exc)
        return ValidationVerdict.accept()

    async def _check(self, request: IncomingRequest, now: datetime) -> None:
        cert_url = request.cert_chain_url
        if not is_valid_cert_url(cert_url, self.config):
            raise PolicyViolationError(f"invalid cert URL: {cert_url!r}")

        pem_data = await self._fetcher.fetch(cert_url)
        cert = validate_certificate(pem_data, self.config.required_subject_name, now)
        verify_signature(certificate_public_key(cert), request.signature, request.body)

        check_freshness(request.claimed_timestamp, self.config.freshness_window, now)
