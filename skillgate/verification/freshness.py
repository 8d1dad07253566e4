from __future__ import annotations

from datetime import datetime, timedelta, timezone

from skillgate.verification.errors import StaleRequestError


def check_freshness(
    claimed: datetime,
    window: timedelta,
    now: datetime | None = None,
) -> None:
    """Reject timestamps further than ``window`` from now, in either direction.

    The signature alone cannot tell a replayed request from the original one.
    """
    now = now or datetime.now(timezone.utc)
    if claimed.tzinfo is None:
        claimed = claimed.replace(tzinfo=timezone.utc)

    skew = abs(now - claimed)
    if skew > window:
        raise StaleRequestError(
            f"stale request: timestamp {claimed.isoformat()} is {skew.total_seconds():.0f}s "
            f"from now (limit {window.total_seconds():.0f}s)"
        )
