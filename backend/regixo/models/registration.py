import enum

from sqlalchemy import Column, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from regixo.db.base import Base, BaseModel


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses that hold a seat
OCCUPYING_STATUSES = (RegistrationStatus.PENDING.value, RegistrationStatus.APPROVED.value)


class Registration(Base, BaseModel):
    __tablename__ = "registrations"

    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    # Registrant
    name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    guest_count = Column(Integer, default=0, nullable=False)

    # Payment reference, soft-unique: reuse is flagged, never rejected
    transaction_id = Column(String(255), nullable=True, index=True)

    # Review
    status = Column(String(20), default=RegistrationStatus.PENDING.value, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    tag = Column(String(64), nullable=True)

    # Attendee-facing handle, immutable once assigned
    registration_number = Column(String(32), unique=True, nullable=False)

    # Throttle accounting
    ip_address = Column(String(64), nullable=True)

    custom_fields = Column(JSON, nullable=True)

    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        Index("ix_registrations_event_status", "event_id", "status"),
        Index("ix_registrations_ip_created", "ip_address", "created_at"),
    )

    def __repr__(self):
        return f"<Registration {self.registration_number} ({self.status})>"
