import logging
import re
from collections import Counter
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regixo.core.deps import Principal
from regixo.core.exceptions import BadRequestError, InternalError, NotFoundError
from regixo.models import CustomFormField, Event, EventStatus, Registration, RegistrationStatus
from regixo.schemas import (
    CustomFieldIn,
    EventCreate,
    ManualRegistrationCreate,
    RegistrationResult,
)
from regixo.services.custom_fields import replace_custom_fields
from regixo.utils.codes import generate_random_string, generate_registration_id, generate_registration_number

logger = logging.getLogger(__name__)

# draft -> published -> closed -> published (re-open); either can go back to draft
EVENT_TRANSITIONS = {
    EventStatus.DRAFT.value: {EventStatus.PUBLISHED.value},
    EventStatus.PUBLISHED.value: {EventStatus.CLOSED.value, EventStatus.DRAFT.value},
    EventStatus.CLOSED.value: {EventStatus.PUBLISHED.value, EventStatus.DRAFT.value},
}

REGISTRATION_STATUSES = {status.value for status in RegistrationStatus}
MANUAL_STATUSES = {RegistrationStatus.APPROVED.value, RegistrationStatus.PENDING.value}


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:80] or "event"


class OrganizerService:
    """Organizer-side actions; every event is scoped to the calling principal."""

    def __init__(self, db: Session, principal: Principal):
        self.db = db
        self.principal = principal

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ {action} failed: {e}", exc_info=True)
            raise InternalError()

    def get_event(self, event_id: str) -> Event:
        event = (
            self.db.query(Event)
            .filter(Event.id == event_id, Event.organizer_id == self.principal.user_id)
            .first()
        )
        if event is None:
            raise NotFoundError("Event not found", error_code="event_not_found")
        return event

    # --------------------------------------------------------------------------
    # Events
    # --------------------------------------------------------------------------
    def create_event(self, data: EventCreate) -> Event:
        slug = slugify(data.slug or data.title)
        if self.db.query(Event.id).filter(Event.slug == slug).first():
            slug = f"{slug}-{generate_random_string(6)}"

        event = Event(
            organizer_id=self.principal.user_id,
            status=EventStatus.DRAFT.value,
            **data.model_dump(exclude={"slug"}),
            slug=slug,
        )
        self.db.add(event)
        self._commit("Event create")
        self.db.refresh(event)
        logger.info(f"📅 Organizer {self.principal.user_id} created event {event.id} ({slug})")
        return event

    def change_event_status(self, event_id: str, new_status: str) -> Event:
        event = self.get_event(event_id)
        allowed = EVENT_TRANSITIONS.get(event.status, set())
        if new_status not in allowed:
            raise BadRequestError(
                f"Cannot change event status from '{event.status}' to '{new_status}'",
                error_code="invalid_transition",
            )
        old_status = event.status
        event.status = new_status
        self._commit("Event status change")
        self.db.refresh(event)
        logger.info(f"📅 Event {event.id}: {old_status} -> {new_status}")
        return event

    def delete_event(self, event_id: str):
        event = self.get_event(event_id)
        self.db.delete(event)
        self._commit("Event delete")
        logger.info(f"🗑️ Organizer {self.principal.user_id} deleted event {event_id}")

    def set_custom_fields(self, event_id: str, items: List[CustomFieldIn]) -> List[CustomFormField]:
        event = self.get_event(event_id)
        fields = replace_custom_fields(self.db, event, items)
        self._commit("Custom field update")
        return fields

    # --------------------------------------------------------------------------
    # Registrations
    # --------------------------------------------------------------------------
    def list_registrations(self, event_id: str, status: Optional[str] = None) -> List[RegistrationResult]:
        self.get_event(event_id)
        query = self.db.query(Registration).filter(Registration.event_id == event_id)
        if status:
            query = query.filter(Registration.status == status)
        registrations = query.order_by(Registration.created_at.desc()).all()

        # Same transaction id twice within the event is worth a second look
        trx_counts = Counter(
            trx for (trx,) in self.db.query(Registration.transaction_id)
            .filter(Registration.event_id == event_id, Registration.transaction_id.isnot(None))
        )

        results = []
        for registration in registrations:
            result = RegistrationResult.model_validate(registration)
            result.duplicate_transaction = trx_counts.get(registration.transaction_id, 0) > 1
            results.append(result)
        return results

    def add_registration(self, event_id: str, data: ManualRegistrationCreate) -> Registration:
        """Organizer insert; throttle and capacity gates don't apply"""
        event = self.get_event(event_id)
        if data.status not in MANUAL_STATUSES:
            raise BadRequestError("Manual registrations must be approved or pending")

        registration = Registration(
            id=generate_registration_id(),
            event_id=event.id,
            name=data.name.strip(),
            phone=(data.phone or "").strip() or None,
            email=(data.email or "").strip() or None,
            transaction_id=(data.transaction_id or "").strip() or None,
            guest_count=data.guest_count,
            registration_number=generate_registration_number(),
            status=data.status,
        )
        self.db.add(registration)
        self._commit("Manual registration")
        self.db.refresh(registration)
        logger.info(f"➕ Organizer added {registration.registration_number} to event {event.id}")
        return registration

    def update_status(self, ids: List[str], status: str, rejection_reason: Optional[str] = None) -> int:
        """Bulk review; the reason is kept only on rejection"""
        if status not in REGISTRATION_STATUSES:
            raise BadRequestError(f"Invalid status '{status}'")

        registrations = (
            self.db.query(Registration)
            .join(Event, Registration.event_id == Event.id)
            .filter(Registration.id.in_(ids), Event.organizer_id == self.principal.user_id)
            .all()
        )
        if not registrations:
            raise NotFoundError("Registration not found", error_code="registration_not_found")

        reason = (rejection_reason or "").strip() or None
        for registration in registrations:
            registration.status = status
            if status == RegistrationStatus.REJECTED.value:
                if reason:
                    registration.rejection_reason = reason
            else:
                registration.rejection_reason = None

        self._commit("Registration status update")
        logger.info(f"📝 {len(registrations)} registration(s) {status}")
        return len(registrations)

    def update_tag(self, registration_id: str, tag: Optional[str]) -> Registration:
        registration = (
            self.db.query(Registration)
            .join(Event, Registration.event_id == Event.id)
            .filter(Registration.id == registration_id, Event.organizer_id == self.principal.user_id)
            .first()
        )
        if registration is None:
            raise NotFoundError("Registration not found", error_code="registration_not_found")

        tag = (tag or "").strip()
        registration.tag = None if tag in ("", "none") else tag
        self._commit("Tag update")
        self.db.refresh(registration)
        return registration
