from regixo.models.event import Event, EventStatus
from regixo.models.registration import Registration, RegistrationStatus, OCCUPYING_STATUSES
from regixo.models.custom_field import CustomFormField, FieldType

__all__ = [
    "Event",
    "EventStatus",
    "Registration",
    "RegistrationStatus",
    "OCCUPYING_STATUSES",
    "CustomFormField",
    "FieldType",
]
