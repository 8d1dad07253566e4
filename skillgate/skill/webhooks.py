"""Skill webhook endpoint: authenticate, decode, then hand off to the skill."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from aiohttp import web

from skillgate.skill.payload import SkillRequest, parse_skill_request, verify_application_id
from skillgate.utils.logging import get_logger
from skillgate.verification.errors import BAD_REQUEST, NOT_AUTHORIZED, RequestValidationError
from skillgate.verification.models import IncomingRequest
from skillgate.verification.validator import RequestValidator

log = get_logger(__name__)

DEV_OVERRIDE_PARAM = "_dev"

SkillHandler = Callable[[web.Request, SkillRequest], Awaitable[web.StreamResponse]]

# What the caller gets to see; the detailed reason only goes to the log.
_PUBLIC_TEXT = {NOT_AUTHORIZED: "Not Authorized", BAD_REQUEST: "Bad Request"}


@dataclass(frozen=True)
class SkillApplication:
    handler: SkillHandler
    application_id: str = ""


def _reject(status: int) -> web.Response:
    return web.Response(status=status, text=_PUBLIC_TEXT.get(status, "Bad Request"))


def skill_endpoint(
    validator: RequestValidator,
    application: SkillApplication,
) -> Callable[[web.Request], Awaitable[web.StreamResponse]]:
    """Wrap a skill handler with the authenticity gate.

    The body is read once; aiohttp keeps the bytes, so the handler can still
    call ``request.read()`` or ``request.json()`` afterwards.
    """

    async def endpoint(request: web.Request) -> web.StreamResponse:
        body = await request.read()

        try:
            skill_request = parse_skill_request(body)
        except RequestValidationError as exc:
            log.warning("skill_request_malformed", path=request.path, reason=exc.reason)
            return _reject(exc.status)

        incoming = IncomingRequest(
            headers=dict(request.headers),
            body=body,
            claimed_timestamp=skill_request.timestamp,
            dev_override=bool(request.query.get(DEV_OVERRIDE_PARAM)),
        )
        verdict = await validator.validate(incoming)
        if not verdict.accepted:
            return _reject(verdict.status or NOT_AUTHORIZED)

        try:
            verify_application_id(skill_request, application.application_id)
        except RequestValidationError as exc:
            log.warning("skill_request_rejected", path=request.path, reason=exc.reason)
            return _reject(exc.status)

        log.info(
            "skill_request_accepted",
            path=request.path,
            request_type=skill_request.request_type,
            request_id=skill_request.request_id,
        )
        return await application.handler(request, skill_request)

    return endpoint
