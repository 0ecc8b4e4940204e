import logging
from typing import Optional

from sqlalchemy.orm import Session

from regixo.models import Registration

logger = logging.getLogger(__name__)

DUPLICATE_TRANSACTION_WARNING = (
    "This transaction ID has been used in a previous registration. "
    "Your registration will be flagged for review."
)


def find_transaction_warning(db: Session, transaction_id: Optional[str]) -> Optional[str]:
    """
    Advisory only: a transaction id already present on any registration
    (any event, any status) yields a warning, never an error.
    """
    trx_id = (transaction_id or "").strip()
    if not trx_id:
        return None

    existing = db.query(Registration.id).filter(Registration.transaction_id == trx_id).first()
    if existing is None:
        return None

    logger.info(f"🔁 Transaction id reused (first seen on registration {existing.id})")
    return DUPLICATE_TRANSACTION_WARNING
