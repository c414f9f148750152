from datetime import datetime
from typing import Any, Iterable

import complaint_desk.config.config as configs
from complaint_desk.model.enums import LIVE_STATUSES, ComplaintStatus
from complaint_desk.util.clock import as_utc, utcnow

AGE_BUCKETS = ("critical", "urgent", "warning", "normal")


class InvalidTimestamp(ValueError):
    """Raised when a timestamp is neither a datetime nor an ISO-8601 string."""


def parse_timestamp(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat() before 3.11 does not accept a trailing "Z".
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError as exc:
            raise InvalidTimestamp(f"invalid timestamp: {value!r}") from exc
    raise InvalidTimestamp(f"invalid timestamp: {value!r}")


def _elapsed_hours(created_at: datetime | str, now: datetime | None) -> float:
    created = parse_timestamp(created_at)
    current = as_utc(now) if now is not None else utcnow()
    return (current - created).total_seconds() / 3600


def _status_value(status: ComplaintStatus | str) -> str:
    return status.value if isinstance(status, ComplaintStatus) else str(status)


def is_overdue(
    created_at: datetime | str,
    status: ComplaintStatus | str,
    resolved_at: datetime | str | None = None,
    now: datetime | None = None,
) -> bool:
    """
    A complaint is overdue when it is not resolved and more than SLA_HOURS
    have passed since it was created. Exactly SLA_HOURS is still on time.
    resolved_at is accepted for call-site symmetry; status alone decides.
    """
    if _status_value(status) == ComplaintStatus.RESOLVED.value:
        return False
    return _elapsed_hours(created_at, now) > configs.SLA_HOURS


def overdue_hours(created_at: datetime | str, now: datetime | None = None) -> float:
    """How far past the SLA a complaint is, in hours; never negative."""
    return max(0.0, _elapsed_hours(created_at, now) - configs.SLA_HOURS)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def ageing_buckets(complaints: Iterable[Any], now: datetime | None = None) -> dict[str, list[Any]]:
    """
    Group live complaints by whole days since creation:
    - critical: more than 7 days
    - urgent: 3 to 7 days
    - warning: 1 to 2 days
    - normal: under a day
    """
    current = as_utc(now) if now is not None else utcnow()
    live = {s.value for s in LIVE_STATUSES}
    buckets: dict[str, list[Any]] = {name: [] for name in AGE_BUCKETS}

    for complaint in complaints:
        if _status_value(_field(complaint, "status")) not in live:
            continue
        days = (current - parse_timestamp(_field(complaint, "created_at"))).days
        if days > 7:
            buckets["critical"].append(complaint)
        elif days >= 3:
            buckets["urgent"].append(complaint)
        elif days >= 1:
            buckets["warning"].append(complaint)
        else:
            buckets["normal"].append(complaint)

    return buckets
