# db/models/question.py
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Boolean, Integer, Enum, ForeignKey, JSON
from rsvp.db import Base
import enum
import uuid


class QuestionType(str, enum.Enum):
    short_text = "short_text"
    long_text = "long_text"
    time = "time"
    single_choice = "single_choice"
    multiple_choice = "multiple_choice"
    text_list = "text_list"


CHOICE_TYPES = (QuestionType.single_choice, QuestionType.multiple_choice)


class EventQuestion(Base):
    __tablename__ = "event_questions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id: Mapped[str] = mapped_column(String, ForeignKey("events.id"), nullable=False, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[QuestionType] = mapped_column(Enum(QuestionType), nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    options: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    event = relationship("Event", back_populates="questions")
