# db/models/answer.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, DateTime, ForeignKey, func
from datetime import datetime
from rsvp.db import Base
import uuid


class EventAnswer(Base):
    __tablename__ = "event_answers"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    response_id: Mapped[str] = mapped_column(String, ForeignKey("event_responses.id"), nullable=False, index=True)
    question_id: Mapped[str] = mapped_column(String, ForeignKey("event_questions.id"), nullable=False, index=True)
    # multi-value answers are stored comma-joined
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    response = relationship("EventResponse", back_populates="answers")
