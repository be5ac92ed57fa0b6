"""时间工具."""

from collections.abc import Callable
from datetime import UTC, date, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """当前 UTC 时间."""
    return datetime.now(UTC)


def local_date(value: datetime) -> date:
    """换算为本地时区的日历日（naive 时间视为本地时间）."""
    if value.tzinfo is None:
        return value.date()
    return value.astimezone().date()


def as_utc(value: datetime) -> datetime:
    """统一为带时区的 UTC 时间（naive 时间视为 UTC）."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
