import logging
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from regixo.core.config import settings
from regixo.core.exceptions import RateLimitedError
from regixo.models import Registration

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


def resolve_client_ip(headers: Mapping[str, str]) -> str:
    """First X-Forwarded-For entry, then X-Real-IP, else "unknown" """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (headers.get("x-real-ip") or "").strip()
    return real_ip or UNKNOWN_IP


def count_recent_registrations(db: Session, ip: str, since: datetime) -> int:
    return (
        db.query(func.count(Registration.id))
        .filter(Registration.ip_address == ip, Registration.created_at >= since)
        .scalar()
        or 0
    )


def check_rate_limit(db: Session, ip: str, now: Optional[datetime] = None):
    """
    At most RATE_LIMIT_MAX_REGISTRATIONS per source IP across all events
    in the trailing window. The unresolvable "unknown" address is never throttled.
    """
    if not ip or ip == UNKNOWN_IP:
        return

    now = now or datetime.now(timezone.utc)
    window_hours = settings.RATE_LIMIT_WINDOW_HOURS
    since = now - timedelta(hours=window_hours)

    recent = count_recent_registrations(db, ip, since)
    if recent >= settings.RATE_LIMIT_MAX_REGISTRATIONS:
        logger.warning(f"⚠️ Throttled {ip}: {recent} registrations in the last {window_hours}h")
        raise RateLimitedError(
            f"Too many registrations from this device. Please try again after {window_hours} hours.",
            error_code="rate_limited",
        )
