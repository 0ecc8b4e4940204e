import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from regixo.api.deps import get_db
from regixo.core.deps import Principal, get_current_organizer
from regixo.schemas import (
    CustomFieldIn,
    CustomFieldResult,
    EventCreate,
    EventResult,
    EventStatusUpdate,
    ManualRegistrationCreate,
    RegistrationResult,
    RegistrationStatusResult,
    RegistrationStatusUpdate,
    TagUpdate,
)
from regixo.services.organizer import OrganizerService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_organizer_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_organizer),
) -> OrganizerService:
    return OrganizerService(db, principal)


# ==============================================================================
# 1. EVENTS
# ==============================================================================
@router.post("/events", response_model=EventResult, status_code=status.HTTP_201_CREATED)
def create_event(data: EventCreate, service: OrganizerService = Depends(get_organizer_service)):
    """Create an event in draft"""
    return service.create_event(data)


@router.patch("/events/{event_id}/status", response_model=EventResult)
def change_event_status(
    event_id: str,
    data: EventStatusUpdate,
    service: OrganizerService = Depends(get_organizer_service)
):
    """Publish, close, re-open or move back to draft"""
    return service.change_event_status(event_id, data.status)


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, service: OrganizerService = Depends(get_organizer_service)):
    """Delete an event together with its registrations and custom fields"""
    service.delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/events/{event_id}/custom-fields", response_model=List[CustomFieldResult])
def set_custom_fields(
    event_id: str,
    items: List[CustomFieldIn],
    service: OrganizerService = Depends(get_organizer_service)
):
    """Replace the event's registration form fields"""
    return service.set_custom_fields(event_id, items)


# ==============================================================================
# 2. REGISTRATIONS
# ==============================================================================
@router.get("/events/{event_id}/registrations", response_model=List[RegistrationResult])
def list_registrations(
    event_id: str,
    status: Optional[str] = Query(None),
    service: OrganizerService = Depends(get_organizer_service)
):
    """Newest first; optional ?status=pending|approved|rejected"""
    return service.list_registrations(event_id, status)


@router.post(
    "/events/{event_id}/registrations",
    response_model=RegistrationResult,
    status_code=status.HTTP_201_CREATED,
)
def add_registration(
    event_id: str,
    data: ManualRegistrationCreate,
    service: OrganizerService = Depends(get_organizer_service)
):
    """Add a registrant by hand (approved unless stated otherwise)"""
    return service.add_registration(event_id, data)


@router.patch("/registrations/status", response_model=RegistrationStatusResult)
def update_registration_status(
    data: RegistrationStatusUpdate,
    service: OrganizerService = Depends(get_organizer_service)
):
    """Approve, reject (with optional reason) or reset to pending"""
    updated = service.update_status(data.ids, data.status, data.rejection_reason)
    return {"updated": updated, "status": data.status}


@router.patch("/registrations/{registration_id}/tag", response_model=RegistrationResult)
def update_registration_tag(
    registration_id: str,
    data: TagUpdate,
    service: OrganizerService = Depends(get_organizer_service)
):
    return service.update_tag(registration_id, data.tag)
