"""Pydantic-schemas for event reports.
"""
# app/schemas/report.py
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field


class OptionTally(BaseModel):
    label: str
    count: int
    percentage: float


class FreeTextEntry(BaseModel):
    value: str
    submitted_at: datetime | None = None
    respondent: str | None = None


class ResponseMetrics(BaseModel):
    total: int
    first_submitted_at: datetime | None = None
    last_submitted_at: datetime | None = None


class TagCount(BaseModel):
    name: str
    count: int


class TextListSummary(BaseModel):
    total_tags: int
    total_responses: int
    top_tags: List[TagCount] = Field(default_factory=list)
    all_tags: Dict[str, int] = Field(default_factory=dict)


class OptionParticipants(BaseModel):
    count: int = 0
    names: List[str] = Field(default_factory=list)


class QuestionReport(BaseModel):
    question_id: str
    text: str
    type: str
    tallies: List[OptionTally] | None = None
    participants: Dict[str, OptionParticipants] | None = None
    free_text: List[FreeTextEntry] | None = None
    text_list: TextListSummary | None = None


class EventReport(BaseModel):
    event_id: str
    title: str
    filters: Dict[str, str] = Field(default_factory=dict)
    metrics: ResponseMetrics
    questions: List[QuestionReport] = Field(default_factory=list)


class ReportQuery(BaseModel):
    filters: Dict[str, str] = Field(default_factory=dict)
