from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt
from typing import Optional, List, Dict, Union
from datetime import datetime
from decimal import Decimal

# A submitted custom field value: string | number | string-list | boolean.
# null means the field was left unanswered
CustomFieldValue = Union[StrictBool, StrictInt, StrictFloat, str, List[str]]


# ==============================================================================
# Public registration
# ==============================================================================

class RegisterRequest(BaseModel):
    # Presence of event_id and name is checked by the service so the
    # client gets the same message for either one missing
    event_id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    guest_count: Optional[int] = None
    transaction_id: Optional[str] = None
    custom_fields: Optional[Dict[str, Optional[CustomFieldValue]]] = None


class RegisterResponse(BaseModel):
    success: bool = True
    registration_number: str
    registration_id: str
    trx_id_warning: Optional[str] = None


# ==============================================================================
# Lookups
# ==============================================================================

class FindTicketRequest(BaseModel):
    name: Optional[str] = None
    transaction_id: Optional[str] = None
    contact_type: Optional[str] = None
    contact_value: Optional[str] = None


class TicketRegistration(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str
    registration_number: str
    guest_count: Optional[int] = None
    created_at: datetime
    event_id: str
    transaction_id: Optional[str] = None
    tag: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EventPublic(BaseModel):
    title: str
    venue: Optional[str] = None
    banner_url: Optional[str] = None
    registration_deadline: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PublicRegistrant(BaseModel):
    name: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==============================================================================
# Organizer
# ==============================================================================

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = None
    banner_url: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    seat_limit: Optional[int] = Field(None, gt=0)
    guest_limit: Optional[int] = Field(None, ge=0)
    registration_deadline: Optional[datetime] = None
    allow_late_registration: bool = False
    show_registered_list: bool = False
    show_phone_field: bool = True
    show_email_field: bool = True


class EventResult(BaseModel):
    id: str
    organizer_id: str
    title: str
    slug: Optional[str] = None
    status: str
    price: Optional[Decimal] = None
    seat_limit: Optional[int] = None
    guest_limit: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    allow_late_registration: bool
    show_registered_list: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventStatusUpdate(BaseModel):
    status: str


class CustomFieldIn(BaseModel):
    field_name: str = Field(..., min_length=1, max_length=255)
    field_type: str = "text"
    field_options: Optional[List[str]] = None
    is_required: bool = False
    sort_order: Optional[int] = None


class CustomFieldResult(BaseModel):
    id: str
    field_name: str
    field_type: str
    field_options: Optional[List[str]] = None
    is_required: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class RegistrationResult(TicketRegistration):
    rejection_reason: Optional[str] = None
    custom_fields: Optional[Dict[str, Optional[CustomFieldValue]]] = None
    duplicate_transaction: bool = False


class ManualRegistrationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    transaction_id: Optional[str] = None
    guest_count: int = Field(0, ge=0)
    status: str = "approved"


class RegistrationStatusUpdate(BaseModel):
    ids: List[str] = Field(..., min_length=1)
    status: str
    rejection_reason: Optional[str] = None


class RegistrationStatusResult(BaseModel):
    updated: int
    status: str


class TagUpdate(BaseModel):
    tag: Optional[str] = None
