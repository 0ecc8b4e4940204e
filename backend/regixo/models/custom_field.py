import enum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import relationship

from regixo.db.base import Base, BaseModel


class FieldType(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"


# Field types whose values come from the options list
OPTION_FIELD_TYPES = (FieldType.SELECT.value, FieldType.CHECKBOX.value)


class CustomFormField(Base, BaseModel):
    __tablename__ = "custom_form_fields"

    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    field_name = Column(String(255), nullable=False)
    field_type = Column(String(20), default=FieldType.TEXT.value, nullable=False)
    field_options = Column(JSON, nullable=True)
    is_required = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    event = relationship("Event", back_populates="custom_fields")

    def __repr__(self):
        return f"<CustomFormField {self.field_name} ({self.field_type})>"
