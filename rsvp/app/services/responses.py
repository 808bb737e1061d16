"""Recording, listing and deleting event responses.

A submission is two store writes: the response header, then all of its
answers in one bulk insert. There is no transaction across them; when the
answers fail the header is deleted again (compensation). A failing
compensation is reported as its own error and never swallowed.
"""
# app/services/responses.py
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from rsvp.app.core.errors import (
    AnswerPersistenceFailed,
    CompensationFailed,
    StoreError,
    SubmissionFailed,
    ValidationFailed,
)
from rsvp.app.core.logging import get_logs_writer_logger
from rsvp.app.schemas.event import Event
from rsvp.app.schemas.question import encode_answer_value
from rsvp.app.schemas.response import AnswerRecord, Respondent, ResponseRecord
from rsvp.app.services.events import fetch_event_by_id
from rsvp.db.models import EventStatus
from rsvp.db.store import Store

logger = logging.getLogger(__name__)
audit = get_logs_writer_logger()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_answer_rows(response_id: str, answer_map: Mapping[str, Any]) -> list[dict]:
    rows = []
    for question_id, value in answer_map.items():
        encoded = encode_answer_value(value)
        if encoded is None:
            continue
        rows.append({"response_id": response_id, "question_id": question_id, "value": encoded})
    return rows


def validate_answers(event: Event, answer_map: Mapping[str, Any]) -> dict[str, Any]:
    """Check an answer map against the event's questions before submitting.

    Returns:
        dict: The answers, encoded the way each question stores them.

    Raises:
        ValidationFailed: Missing required answers, unknown options, bad
            time values, or answers to questions the event does not have.
    """
    errors: dict[str, str] = {}
    by_id = {q.id: q for q in event.questions}
    for question_id in answer_map:
        if question_id not in by_id:
            errors[question_id] = "Unknown question."

    encoded: dict[str, Any] = {}
    for question in event.questions:
        value = answer_map.get(question.id)
        error = question.check_answer(value)
        if error:
            errors[question.id] = error
            continue
        encoded[question.id] = question.encode_answer(value)
    if errors:
        raise ValidationFailed("Some answers are invalid.", errors=errors)
    return encoded


def submit(store: Store, event_id: str, answer_map: Mapping[str, Any], submitted_by: str | None = None) -> str:
    """Record one response to an event.

    Args:
        store: The data store.
        event_id: The event being answered.
        answer_map: question id -> raw value (string, list, number, ...).
        submitted_by: The submitting user, None for public submissions.

    Returns:
        str: The id of the new response.

    Raises:
        SubmissionFailed: The response header could not be written.
        AnswerPersistenceFailed: The answers could not be written; the
            header was deleted again.
        CompensationFailed: The answers and the compensating delete both
            failed; an empty response header is left behind.
    """
    header = {"event_id": event_id, "submitted_by": submitted_by, "submitted_at": utcnow()}
    try:
        [response_id] = store.insert("event_responses", header)
    except StoreError as e:
        raise SubmissionFailed("Your response could not be sent.") from e

    rows = build_answer_rows(response_id, answer_map)
    if rows:
        try:
            store.insert("event_answers", rows)
        except StoreError as e:
            try:
                store.delete("event_responses", response_id)
            except StoreError as comp:
                logger.error("CompensationFailed: orphaned response %s for event %s", response_id, event_id)
                audit.error("CompensationFailed response=%s event=%s: %s", response_id, event_id, comp)
                raise CompensationFailed("Your response could not be saved.") from comp
            logger.warning("Answers for response %s failed; header removed", response_id)
            raise AnswerPersistenceFailed("Your answers could not be saved.") from e

    logger.info("Response %s recorded for event %s (%d answer(s))", response_id, event_id, len(rows))
    audit.info("response submitted %s event=%s user=%s", response_id, event_id, submitted_by)
    return response_id


def fetch_event_responses(store: Store, event_id: str) -> list[ResponseRecord]:
    """All responses of an event, newest first, with answers and submitting user."""
    responses = store.select("event_responses", {"event_id": event_id}, order_by="submitted_at", ascending=False)
    if not responses:
        return []

    answers = store.select("event_answers", {"response_id": [r["id"] for r in responses]}, order_by="created_at")
    by_response: dict[str, list[AnswerRecord]] = {}
    for a in answers:
        by_response.setdefault(a["response_id"], []).append(
            AnswerRecord(id=a["id"], question_id=a["question_id"], value=a["value"])
        )

    user_ids = {r["submitted_by"] for r in responses if r["submitted_by"]}
    users = {u["id"]: u for u in store.select("users", {"id": list(user_ids)})} if user_ids else {}

    out = []
    for r in responses:
        user = users.get(r["submitted_by"])
        out.append(ResponseRecord(
            id=r["id"],
            event_id=r["event_id"],
            submitted_at=r["submitted_at"],
            submitted_by=r["submitted_by"],
            user=Respondent(id=user["id"], name=user["name"], login=user["login"]) if user else None,
            answers=by_response.get(r["id"], []),
        ))
    return out


def delete_responses(store: Store, response_ids: Iterable[str], event_id: str | None = None) -> int:
    """Hard-delete responses and their answers. The event is left alone.

    When `event_id` is given, ids of responses to other events are skipped.

    Returns:
        int: Number of deleted responses.
    """
    ids = list(response_ids)
    if not ids:
        return 0
    if event_id is not None:
        ids = [r["id"] for r in store.select("event_responses", {"id": ids, "event_id": event_id})]
        if not ids:
            return 0
    answer_ids = [a["id"] for a in store.select("event_answers", {"response_id": ids})]
    store.delete("event_answers", answer_ids)
    deleted = store.delete("event_responses", ids)
    logger.info("Deleted %d response(s)", deleted)
    audit.info("responses deleted %s", ",".join(ids))
    return deleted


def respond(store: Store, event_id: str, answer_map: Mapping[str, Any], submitted_by: str | None = None) -> str:
    """Validate and submit a response to an open event."""
    event = fetch_event_by_id(store, event_id)
    if event.status != EventStatus.active.value:
        raise ValidationFailed("This event is not accepting responses.")
    encoded = validate_answers(event, answer_map)
    return submit(store, event.id, encoded, submitted_by)
