from typing import Optional

MASK = "****"


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """First 4 + **** + last 2 characters"""
    if not phone:
        return None
    return phone[:4] + MASK + phone[-2:]


def mask_email(email: Optional[str]) -> Optional[str]:
    """First 3 characters of the local part + ***@domain"""
    if not email:
        return None
    local, _, domain = email.partition("@")
    if not domain:
        return local[:3] + "***"
    return f"{local[:3]}***@{domain}"


def mask_transaction_id(transaction_id: Optional[str]) -> Optional[str]:
    """First 4 characters + ****"""
    if not transaction_id:
        return None
    return transaction_id[:4] + MASK
