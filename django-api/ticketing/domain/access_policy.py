"""Day-based access decisions for check-in.

Pure functions: no store access, no clock. Callers pass the event-local
calendar day they consider "today".
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from ticketing.domain.errors import ErrorCode
from ticketing.domain.value_objects import AccessType


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    day: date | None = None
    reason: ErrorCode | None = None
    details: str = ""


def _fmt(days: Iterable[date]) -> str:
    return ", ".join(day.isoformat() for day in days)


def evaluate_access(
    access_type: AccessType,
    authorized_days: Iterable[date],
    used_days: Iterable[date],
    today: date,
) -> AccessDecision:
    """Decide whether a ticket may be checked in on ``today``.

    A day already consumed is refused whatever the access type. Past that,
    ``any_single_day`` tickets are spent by their first use, and every type
    requires today to be one of the authorized days.
    """
    authorized = tuple(authorized_days)
    used = tuple(used_days)

    if today in used:
        return AccessDecision(
            allowed=False,
            reason=ErrorCode.ALREADY_CHECKED_IN_TODAY,
            details=f"This ticket was already used today ({today.isoformat()})",
        )

    if access_type is AccessType.ANY_SINGLE_DAY and used:
        return AccessDecision(
            allowed=False,
            reason=ErrorCode.ALREADY_USED,
            details=f"This single-use ticket was already used on {used[0].isoformat()}",
        )

    if today not in authorized:
        return AccessDecision(
            allowed=False,
            reason=ErrorCode.NOT_AUTHORIZED_TODAY,
            details=f"This ticket is only valid for: {_fmt(authorized) or 'no days'}",
        )

    return AccessDecision(allowed=True, day=today)
