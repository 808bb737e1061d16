# db/models/response.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, ForeignKey, func
from datetime import datetime
from rsvp.db import Base
import uuid


class EventResponse(Base):
    __tablename__ = "event_responses"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id: Mapped[str] = mapped_column(String, ForeignKey("events.id"), nullable=False, index=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    # absent for public submissions; not a foreign key, responses outlive deleted users
    submitted_by: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    event = relationship("Event", back_populates="responses")
    answers = relationship("EventAnswer", back_populates="response")
