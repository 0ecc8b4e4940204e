"""
Unauthenticated read paths: ticket recovery, ticket verification and the
public registrant list. Responses never say which check failed.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from regixo.core.config import settings
from regixo.core.exceptions import BadRequestError, ForbiddenError
from regixo.models import Event, EventStatus, Registration, OCCUPYING_STATUSES
from regixo.schemas import EventPublic, FindTicketRequest, PublicRegistrant, TicketRegistration
from regixo.services.policy import count_occupied_seats
from regixo.utils.masking import mask_email, mask_phone, mask_transaction_id

logger = logging.getLogger(__name__)

CONTACT_TYPES = ("phone", "email")
NOT_FOUND = {"found": False}


class LookupService:
    def __init__(self, db: Session):
        self.db = db

    def _public_event(self, event_id: str) -> Optional[dict]:
        event = self.db.query(Event).filter(Event.id == event_id).first()
        if event is None:
            return None
        return EventPublic.model_validate(event).model_dump(mode="json")

    # --------------------------------------------------------------------------
    # find-ticket
    # --------------------------------------------------------------------------
    def find_ticket(self, request: FindTicketRequest) -> dict:
        """
        Match on the contact key (transaction id, phone or email), then on a
        case-insensitive exact name. More than one hit is reported as
        ``multiple`` without any payload.
        """
        name = (request.name or "").strip().lower()
        if not name:
            raise BadRequestError("Name is required")

        if request.contact_type and request.contact_value:
            if request.contact_type not in CONTACT_TYPES:
                raise BadRequestError("Invalid contact_type")
            column = getattr(Registration, request.contact_type)
            candidates = self.db.query(Registration).filter(column == request.contact_value.strip()).all()
        elif request.transaction_id:
            trx_id = request.transaction_id.strip()
            if len(trx_id) < settings.MIN_TRANSACTION_ID_LENGTH:
                raise BadRequestError("Invalid transaction ID")
            candidates = self.db.query(Registration).filter(Registration.transaction_id == trx_id).all()
        else:
            raise BadRequestError("Provide transaction_id (paid) or contact_type + contact_value (free)")

        matched = [reg for reg in candidates if (reg.name or "").strip().lower() == name]

        if not matched:
            return NOT_FOUND

        if len(matched) > 1:
            logger.info(f"find-ticket: {len(matched)} registrations share the lookup key")
            return {"found": True, "multiple": True, "registration": None, "event": None}

        registration = matched[0]
        return {
            "found": True,
            "multiple": False,
            "registration": TicketRegistration.model_validate(registration).model_dump(mode="json"),
            "event": self._public_event(registration.event_id),
        }

    # --------------------------------------------------------------------------
    # verify-registration
    # --------------------------------------------------------------------------
    def verify(self, reg_id: Optional[str] = None, reg_number: Optional[str] = None,
               trx_id: Optional[str] = None) -> dict:
        """Look up by reg_id, else reg_number, else trx_id; contact data comes back masked"""
        query = self.db.query(Registration)
        if reg_id:
            query = query.filter(Registration.id == reg_id)
        elif reg_number:
            query = query.filter(Registration.registration_number == reg_number)
        elif trx_id:
            query = query.filter(Registration.transaction_id == trx_id)
        else:
            raise BadRequestError("Provide reg_id, reg_number, or trx_id")

        matches = query.limit(2).all()
        if len(matches) != 1:
            # A shared transaction id can't identify one ticket
            if matches:
                logger.info("verify-registration: lookup key matched more than one registration")
            return NOT_FOUND

        registration = matches[0]
        masked = TicketRegistration.model_validate(registration).model_dump(mode="json")
        masked["phone"] = mask_phone(registration.phone)
        masked["email"] = mask_email(registration.email)
        masked["transaction_id"] = mask_transaction_id(registration.transaction_id)

        return {"found": True, "registration": masked, "event": self._public_event(registration.event_id)}

    # --------------------------------------------------------------------------
    # public-registrations
    # --------------------------------------------------------------------------
    def occupied_seats(self, event_id: str) -> dict:
        return {"occupied_seats": count_occupied_seats(self.db, event_id)}

    def public_registrations(self, event_id: str) -> dict:
        """Names only, and only for published events that opted into a public list"""
        event = self.db.query(Event).filter(Event.id == event_id).first()
        if event is None or not event.show_registered_list or event.status != EventStatus.PUBLISHED.value:
            raise ForbiddenError("Not available")

        registrations = (
            self.db.query(Registration)
            .filter(Registration.event_id == event_id, Registration.status.in_(OCCUPYING_STATUSES))
            .order_by(Registration.created_at.asc())
            .all()
        )
        rows = [PublicRegistrant.model_validate(reg).model_dump(mode="json") for reg in registrations]
        return {"registrations": rows, "total": len(rows)}
