from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from regixo.api.deps import get_client_ip, get_db, preflight_response
from regixo.schemas import RegisterRequest, RegisterResponse
from regixo.services.registration import RegistrationService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse)
def register(
    payload: RegisterRequest,
    client_ip: str = Depends(get_client_ip),
    db: Session = Depends(get_db)
):
    """
    Public registration for a published event.
    Always creates a pending registration; a reused transaction id only adds a warning.
    """
    return RegistrationService(db).register(payload, client_ip)


@router.options("/register", include_in_schema=False)
def register_preflight():
    return preflight_response()
