from datetime import date, datetime, timedelta, timezone

from .config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today() -> date:
    """Calendar date at the server's configured UTC offset."""
    return (utc_now() + timedelta(hours=settings.TZ_OFFSET)).date()


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; raises ValueError on anything else."""
    return datetime.strptime(value, "%Y-%m-%d").date()
