"""Decoding of the skill request envelope.

Only the fields the gate needs are pulled out; the full document stays
available on ``SkillRequest.raw`` for the handler.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from skillgate.verification.errors import ApplicationMismatchError, MalformedRequestError


@dataclass(frozen=True)
class SkillRequest:
    request_type: str
    request_id: str
    timestamp: datetime
    application_id: str
    body: bytes = field(repr=False)
    raw: dict[str, Any] = field(repr=False, compare=False)


def parse_timestamp(value: Any) -> datetime:
    """Accept ISO-8601 strings (``Z`` suffix included) or epoch milliseconds."""
    if isinstance(value, bool):
        raise MalformedRequestError(f"unparsable request timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedRequestError(f"unparsable request timestamp: {value!r}") from exc
    if not isinstance(value, str) or not value:
        raise MalformedRequestError("missing request timestamp")

    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise MalformedRequestError(f"unparsable request timestamp: {value!r}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _application_id(doc: dict[str, Any]) -> str:
    session_app = (doc.get("session") or {}).get("application") or {}
    if session_app.get("applicationId"):
        return session_app["applicationId"]
    system = (doc.get("context") or {}).get("System") or {}
    return (system.get("application") or {}).get("applicationId", "")


def parse_skill_request(body: bytes) -> SkillRequest:
    try:
        doc = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedRequestError(f"request body is not valid JSON: {exc}") from exc

    if not isinstance(doc, dict) or not isinstance(doc.get("request"), dict):
        raise MalformedRequestError("request body has no request object")

    try:
        app_id = _application_id(doc)
    except AttributeError as exc:
        raise MalformedRequestError("malformed session or context object") from exc

    req = doc["request"]
    return SkillRequest(
        request_type=str(req.get("type", "")),
        request_id=str(req.get("requestId", "")),
        timestamp=parse_timestamp(req.get("timestamp")),
        application_id=str(app_id),
        body=body,
        raw=doc,
    )


def verify_application_id(skill_request: SkillRequest, expected: str) -> None:
    """An empty ``expected`` accepts any application."""
    if expected and skill_request.application_id != expected:
        raise ApplicationMismatchError(
            f"application ID mismatch: got {skill_request.application_id!r}"
        )
