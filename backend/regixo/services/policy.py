"""
Validation & policy gate for public registrations.

Checks run in a fixed order and the first violated rule wins:
required fields, event exists, event published, deadline, capacity.
Submission-shape checks (guest count, contact fields) follow the gate.
"""

import logging
from datetime import datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.orm import Session

from regixo.core.config import settings
from regixo.core.exceptions import BadRequestError, NotFoundError, PolicyRejectedError
from regixo.db.base import ensure_utc
from regixo.models import Event, EventStatus, Registration, OCCUPYING_STATUSES
from regixo.schemas import RegisterRequest

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)


def event_timezone() -> ZoneInfo:
    return ZoneInfo(settings.EVENT_TIMEZONE)


def effective_deadline(deadline: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """
    A deadline stored at exactly midnight means "no time chosen":
    it counts until 23:59:59.999 of that calendar date.
    """
    tz = tz or event_timezone()
    local = ensure_utc(deadline).astimezone(tz)
    if local.time() == time(0, 0):
        local = datetime.combine(local.date(), END_OF_DAY, tzinfo=tz)
    return local


def deadline_passed(event: Event, now: datetime) -> bool:
    if not event.registration_deadline:
        return False
    return ensure_utc(now) > effective_deadline(event.registration_deadline)


def count_occupied_seats(db: Session, event_id: str) -> int:
    """Registrations holding a seat (pending + approved)"""
    return (
        db.query(func.count(Registration.id))
        .filter(Registration.event_id == event_id, Registration.status.in_(OCCUPYING_STATUSES))
        .scalar()
        or 0
    )


def check_event_open(db: Session, payload: RegisterRequest, now: Optional[datetime] = None) -> Event:
    """Run the gate; returns the event when it accepts this submission"""
    now = now or datetime.now(timezone.utc)

    # 1. Required fields
    if not payload.event_id or not (payload.name or "").strip():
        raise BadRequestError("event_id and name are required", error_code="missing_required_field")

    # 2. Event exists
    event = db.query(Event).filter(Event.id == payload.event_id).first()
    if event is None:
        raise NotFoundError("Event not found", error_code="event_not_found")

    # 3. Published
    if event.status != EventStatus.PUBLISHED.value:
        raise PolicyRejectedError("Event is not open for registration", error_code="event_not_open")

    # 4. Deadline
    if deadline_passed(event, now) and not event.allow_late_registration:
        raise PolicyRejectedError("Registration deadline has passed", error_code="deadline_passed")

    # 5. Capacity
    if event.has_seat_limit:
        occupied = count_occupied_seats(db, event.id)
        if occupied >= event.seat_limit:
            logger.info(f"🚫 Event {event.id} is full ({occupied}/{event.seat_limit})")
            raise PolicyRejectedError("Event is full. No more seats available.", error_code="event_full")

    return event


def check_submission(event: Event, payload: RegisterRequest):
    """Guest count bounds and the free-event contact requirement"""
    guest_count = payload.guest_count or 0
    if guest_count < 0:
        raise BadRequestError("guest_count cannot be negative", error_code="invalid_guest_count")
    if event.guest_limit and event.guest_limit > 0 and guest_count > event.guest_limit:
        raise BadRequestError(
            f"guest_count cannot exceed {event.guest_limit}", error_code="invalid_guest_count"
        )

    if not event.is_free:
        return

    has_phone = bool((payload.phone or "").strip())
    has_email = bool((payload.email or "").strip())
    show_phone = event.show_phone_field is not False
    show_email = event.show_email_field is not False

    if show_phone and show_email:
        if not has_phone and not has_email:
            raise BadRequestError(
                "Please provide at least your phone number or email.", error_code="contact_required"
            )
    elif show_phone and not has_phone:
        raise BadRequestError("Phone number is required", error_code="contact_required")
    elif show_email and not has_email:
        raise BadRequestError("Email is required", error_code="contact_required")
