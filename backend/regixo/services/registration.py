import logging
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regixo.core.exceptions import InternalError
from regixo.models import Event, EventStatus, Registration, RegistrationStatus
from regixo.schemas import RegisterRequest, RegisterResponse
from regixo.services.custom_fields import validate_custom_fields
from regixo.services.duplicates import find_transaction_warning
from regixo.services.policy import check_event_open, check_submission, count_occupied_seats
from regixo.services.throttle import check_rate_limit
from regixo.utils.codes import generate_registration_id, generate_registration_number

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class RegistrationService:
    """
    Registration intake: policy gate, abuse throttle, duplicate-payment
    flag, write, then capacity reconciliation.

    The capacity check and the post-insert close are separate reads, so two
    concurrent submissions at the boundary may both be accepted. Organizers
    see the slight oversell; there is no lock.
    """

    def __init__(self, db: Session):
        self.db = db

    def register(self, payload: RegisterRequest, client_ip: str, now: Optional[datetime] = None) -> RegisterResponse:
        start_time = time.time()
        now = now or datetime.now(timezone.utc)

        # 1. Policy gate
        event = check_event_open(self.db, payload, now)
        check_submission(event, payload)
        custom_fields = validate_custom_fields(list(event.custom_fields), payload.custom_fields)

        # 2. Abuse throttle (prior rows only)
        check_rate_limit(self.db, client_ip, now)

        # 3. Duplicate payment reference, advisory
        trx_id_warning = find_transaction_warning(self.db, payload.transaction_id)

        # 4. Write
        registration = self._insert(event, payload, custom_fields, client_ip, now)

        # 5. Capacity reconciliation
        self.close_if_full(event)

        processing_time = time.time() - start_time
        logger.info(f"✅ Registered {registration.registration_number} for event {event.id} "
                    f"in {processing_time:.2f}s")

        return RegisterResponse(
            success=True,
            registration_number=registration.registration_number,
            registration_id=registration.id,
            trx_id_warning=trx_id_warning,
        )

    def _insert(self, event: Event, payload: RegisterRequest, custom_fields, client_ip: str, now: datetime) -> Registration:
        registration = Registration(
            id=generate_registration_id(),
            event_id=event.id,
            name=payload.name.strip(),
            phone=_clean(payload.phone),
            email=_clean(payload.email),
            guest_count=payload.guest_count or 0,
            transaction_id=_clean(payload.transaction_id),
            custom_fields=custom_fields,
            registration_number=generate_registration_number(),
            status=RegistrationStatus.PENDING.value,
            ip_address=client_ip,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(registration)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Registration insert failed for event {event.id}: {e}", exc_info=True)
            raise InternalError()
        return registration

    def close_if_full(self, event: Event) -> bool:
        """
        Re-count seats after a write and close the event once it's full.
        Best effort: the registration is already durable, so a failed close
        is logged rather than raised.
        """
        if not event.has_seat_limit:
            return False

        try:
            occupied = count_occupied_seats(self.db, event.id)
            if occupied < event.seat_limit:
                return False
            self.db.query(Event).filter(Event.id == event.id).update(
                {Event.status: EventStatus.CLOSED.value}, synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Auto-close failed for event {event.id}: {e}", exc_info=True)
            return False

        logger.info(f"🔒 Event {event.id} closed automatically ({occupied}/{event.seat_limit} seats)")
        return True
