from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from regixo.api.deps import get_db, preflight_response
from regixo.services.lookup import LookupService

router = APIRouter()


@router.get("/verify-registration")
def verify_registration(
    reg_id: Optional[str] = Query(None),
    reg_number: Optional[str] = Query(None),
    trx_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """Public ticket verification with phone, email and transaction id masked"""
    if not (reg_id or reg_number or trx_id):
        raise HTTPException(status_code=400, detail="Provide reg_id, reg_number, or trx_id")
    return LookupService(db).verify(reg_id=reg_id, reg_number=reg_number, trx_id=trx_id)


@router.options("/verify-registration", include_in_schema=False)
def verify_preflight():
    return preflight_response()
