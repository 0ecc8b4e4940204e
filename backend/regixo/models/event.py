import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from regixo.db.base import Base, BaseModel


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class Event(Base, BaseModel):
    __tablename__ = "events"

    organizer_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True, index=True)
    description = Column(Text, nullable=True)
    venue = Column(String(255), nullable=True)
    banner_url = Column(String(1024), nullable=True)

    status = Column(String(20), default=EventStatus.DRAFT.value, nullable=False)
    price = Column(Numeric(10, 2), default=0, nullable=True)

    # Capacity and guests
    seat_limit = Column(Integer, nullable=True)
    guest_limit = Column(Integer, nullable=True)

    # Deadline
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    allow_late_registration = Column(Boolean, default=False, nullable=False)

    # Public form and listing
    show_registered_list = Column(Boolean, default=False, nullable=False)
    show_phone_field = Column(Boolean, default=True, nullable=False)
    show_email_field = Column(Boolean, default=True, nullable=False)

    registrations = relationship(
        "Registration", back_populates="event", cascade="all, delete-orphan"
    )
    custom_fields = relationship(
        "CustomFormField",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="CustomFormField.sort_order",
    )

    @property
    def is_free(self) -> bool:
        return not self.price or self.price <= 0

    @property
    def has_seat_limit(self) -> bool:
        return bool(self.seat_limit and self.seat_limit > 0)

    def __repr__(self):
        return f"<Event {self.title} ({self.status})>"
