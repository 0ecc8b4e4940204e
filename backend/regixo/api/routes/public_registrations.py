from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from regixo.api.deps import get_db, preflight_response
from regixo.services.lookup import LookupService

router = APIRouter()


@router.get("/public-registrations")
def public_registrations(
    event_id: Optional[str] = Query(None),
    count_only: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Seat count (always public) or, for events that allow it, the registrant names.
    """
    if not event_id:
        raise HTTPException(status_code=400, detail="event_id required")

    service = LookupService(db)
    if count_only == "true":
        return service.occupied_seats(event_id)
    return service.public_registrations(event_id)


@router.options("/public-registrations", include_in_schema=False)
def public_registrations_preflight():
    return preflight_response()
