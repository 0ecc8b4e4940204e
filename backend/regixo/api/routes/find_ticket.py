from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from regixo.api.deps import get_db, preflight_response
from regixo.schemas import FindTicketRequest
from regixo.services.lookup import LookupService

router = APIRouter()


@router.post("/find-ticket")
def find_ticket(request: FindTicketRequest, db: Session = Depends(get_db)):
    """
    Recover a ticket with name + transaction_id (paid events)
    or name + contact_type + contact_value (free events).
    """
    return LookupService(db).find_ticket(request)


@router.options("/find-ticket", include_in_schema=False)
def find_ticket_preflight():
    return preflight_response()
