import logging
import math
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from regixo.core.exceptions import BadRequestError
from regixo.models import CustomFormField, Event, FieldType
from regixo.models.custom_field import OPTION_FIELD_TYPES
from regixo.schemas import CustomFieldIn

logger = logging.getLogger(__name__)

FIELD_TYPES = {field_type.value for field_type in FieldType}


def normalize_options(field_type: str, options: Optional[List[str]]) -> Optional[List[str]]:
    """
    Option fields always keep a non-empty list: an emptied list falls back
    to a single blank slot. Other field types carry no options.
    """
    if field_type not in OPTION_FIELD_TYPES:
        return None
    cleaned = [(option or "").strip() for option in (options or [])]
    return cleaned if cleaned else [""]


def _choices(field: CustomFormField) -> List[str]:
    return [option for option in (field.field_options or []) if option]


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def _coerce(field: CustomFormField, value):
    name = field.field_name

    if field.field_type == FieldType.NUMBER.value:
        if isinstance(value, bool):
            raise BadRequestError(f"{name} must be a number")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise BadRequestError(f"{name} must be a number")
        elif isinstance(value, float):
            number = value
        else:
            raise BadRequestError(f"{name} must be a number")
        # NaN and Infinity have no JSON encoding
        if not math.isfinite(number):
            raise BadRequestError(f"{name} must be a number")
        if isinstance(value, str) and number.is_integer():
            return int(number)
        return number

    if field.field_type == FieldType.SELECT.value:
        if not isinstance(value, str):
            raise BadRequestError(f"{name} must be one of the listed options")
        value = value.strip()
        choices = _choices(field)
        if choices and value not in choices:
            raise BadRequestError(f"{name} must be one of the listed options")
        return value

    if field.field_type == FieldType.CHECKBOX.value:
        choices = _choices(field)
        if isinstance(value, bool):
            if choices:
                raise BadRequestError(f"{name} must be a list of options")
            return value
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise BadRequestError(f"{name} must be a list of options")
        picked = [item.strip() for item in value]
        if choices and any(item not in choices for item in picked):
            raise BadRequestError(f"{name} contains an unknown option")
        return picked

    # text
    if isinstance(value, (list, bool)):
        raise BadRequestError(f"{name} must be text")
    return str(value).strip()


def validate_custom_fields(fields: List[CustomFormField], submitted: Optional[Dict]) -> Optional[Dict]:
    """
    Check submitted values against the event's field definitions.

    Returns the cleaned mapping keyed by field id, or None when nothing
    was submitted. Keys that aren't fields of this event are dropped.
    """
    submitted = submitted or {}
    cleaned = {}

    for field in fields:
        value = submitted.get(field.id)
        if _is_empty(value) or (field.field_type == FieldType.CHECKBOX.value and value is False):
            if field.is_required:
                raise BadRequestError(f"{field.field_name} is required", error_code="custom_field_required")
            if _is_empty(value):
                continue
        cleaned[field.id] = _coerce(field, value)

    unknown = set(submitted) - {field.id for field in fields}
    if unknown:
        logger.debug(f"Dropping {len(unknown)} unknown custom field key(s)")

    return cleaned or None


def replace_custom_fields(db: Session, event: Event, items: List[CustomFieldIn]) -> List[CustomFormField]:
    """Replace an event's whole field set; caller commits"""
    for item in items:
        if item.field_type not in FIELD_TYPES:
            raise BadRequestError(f"Unsupported field type '{item.field_type}'")

    event.custom_fields.clear()
    db.flush()

    for position, item in enumerate(items):
        event.custom_fields.append(
            CustomFormField(
                field_name=item.field_name.strip(),
                field_type=item.field_type,
                field_options=normalize_options(item.field_type, item.field_options),
                is_required=item.is_required,
                sort_order=item.sort_order if item.sort_order is not None else position,
            )
        )
    db.flush()
    return sorted(event.custom_fields, key=lambda field: field.sort_order)
