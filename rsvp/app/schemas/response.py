# app/schemas/response.py
from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class AnswerRecord(BaseModel):
    id: str | None = None
    question_id: str
    value: str


class Respondent(BaseModel):
    id: str
    name: str
    login: str | None = None


class ResponseRecord(BaseModel):
    """One submission with its answers and (when known) the submitting user."""
    id: str
    event_id: str
    submitted_at: datetime | None = None
    submitted_by: str | None = None
    user: Respondent | None = None
    answers: List[AnswerRecord] = Field(default_factory=list)

    def answer_for(self, question_id: str) -> AnswerRecord | None:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None


class SubmitResponseIn(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)


class SubmitResponseOut(BaseModel):
    response_id: str


class DeleteResponsesIn(BaseModel):
    response_ids: List[str]
