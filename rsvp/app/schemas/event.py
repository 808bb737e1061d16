"""Pydantic schemas for events.
"""
# app/schemas/event.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from rsvp.app.schemas.question import Question


class Event(BaseModel):
    """Event as seen by clients: questions ordered, response count derived."""
    id: str
    title: str
    additional_info: str = ""
    event_date: date | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    status: str = "awaiting"
    is_template: bool = False
    created_by: str | None = None
    created_at: datetime | None = None
    questions: List[Question] = Field(default_factory=list)
    responses_count: int = 0


class EventIn(BaseModel):
    title: str = ""
    additional_info: Optional[str] = None
    event_date: Optional[date] = None
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    status: str = "awaiting"
    is_template: bool = False


class EventWithQuestionsIn(EventIn):
    # drafts, validated one by one in the service so bad ones get a field message
    questions: List[Dict[str, Any]] = Field(default_factory=list)


class EventCreatedOut(BaseModel):
    id: str
