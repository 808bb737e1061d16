"""Event aggregation and event CRUD.

Nested store rows (event + questions + response count) are normalized into
`Event` objects here, and event writes go through the question diff.
"""
# app/services/events.py
import logging
from typing import Any, Iterable

from rsvp.app.core.errors import EventHasResponses, NotFoundError, StoreError, ValidationFailed
from rsvp.app.core.logging import get_logs_writer_logger
from rsvp.app.schemas.event import Event, EventIn
from rsvp.app.schemas.question import QuestionBase, parse_question
from rsvp.app.services.questions import diff_questions, validate_question_draft
from rsvp.db.models import EventStatus
from rsvp.db.store import Store

logger = logging.getLogger(__name__)
audit = get_logs_writer_logger()

EVENT_STATUSES = {s.value for s in EventStatus}


def normalize_event(raw: dict) -> Event:
    """Build an `Event` from a nested event record.

    Args:
        raw: The event row plus `event_questions` (question rows) and an
            optional `event_responses` aggregate of the form `[{"count": n}]`.

    Returns:
        Event: Questions ordered by `sort_order` (ties keep row order), missing
        options as `[]`, missing aggregate as a zero response count.
    """
    rows = list(enumerate(raw.get("event_questions") or []))
    rows.sort(key=lambda pair: (pair[1].get("sort_order") or 0, pair[0]))
    questions = [parse_question(row) for _, row in rows]

    aggregate = raw.get("event_responses") or []
    responses_count = 0
    if aggregate:
        responses_count = (aggregate[0] or {}).get("count") or 0

    return Event(
        id=raw["id"],
        title=raw.get("title") or "",
        additional_info=raw.get("additional_info") or "",
        event_date=raw.get("event_date"),
        start_datetime=raw.get("start_datetime"),
        end_datetime=raw.get("end_datetime"),
        status=raw.get("status") or EventStatus.awaiting.value,
        is_template=bool(raw.get("is_template")),
        created_by=raw.get("created_by"),
        created_at=raw.get("created_at"),
        questions=questions,
        responses_count=responses_count,
    )


def validate_event(payload: EventIn, questions: Iterable[Any]) -> None:
    """Reject an event payload before anything is written.

    Raises:
        ValidationFailed: With a field -> message map.
    """
    errors: dict[str, str] = {}
    if not (payload.title or "").strip():
        errors["title"] = "Enter the event title."
    if not payload.event_date:
        errors["event_date"] = "Enter the event date."
    if not payload.start_datetime:
        errors["start_datetime"] = "Enter the start date and time."
    if not payload.end_datetime:
        errors["end_datetime"] = "Enter the end date and time."
    if payload.start_datetime and payload.end_datetime and payload.start_datetime >= payload.end_datetime:
        errors["end_datetime"] = "The end must be after the start."
    if payload.status not in EVENT_STATUSES:
        errors["status"] = f"Invalid event status: {payload.status}"
    elif payload.status == EventStatus.active.value and not can_activate(questions):
        errors["status"] = "An event needs at least one question to be active."
    if errors:
        raise ValidationFailed(errors=errors)


def can_activate(questions: Iterable[Any]) -> bool:
    return len(list(questions)) > 0


def _event_row(payload: EventIn) -> dict:
    return {
        "title": payload.title.strip(),
        "additional_info": payload.additional_info or None,
        "event_date": payload.event_date,
        "start_datetime": payload.start_datetime,
        "end_datetime": payload.end_datetime,
        "status": payload.status,
        "is_template": bool(payload.is_template),
    }


def _raw_events(store: Store, filters: dict | None = None) -> list[dict]:
    events = store.select("events", filters, order_by="start_datetime")
    if not events:
        return []
    ids = [e["id"] for e in events]
    questions = store.select("event_questions", {"event_id": ids})
    counts = store.count_by("event_responses", "event_id", {"event_id": ids})
    by_event: dict[str, list[dict]] = {}
    for q in questions:
        by_event.setdefault(q["event_id"], []).append(q)
    for e in events:
        e["event_questions"] = by_event.get(e["id"], [])
        e["event_responses"] = [{"count": counts.get(e["id"], 0)}]
    return events


def visible_events(events: list[Event], role: str | None) -> list[Event]:
    """Participants only see active events; everybody else sees all."""
    if role == "participant":
        return [e for e in events if e.status == EventStatus.active.value]
    return events


def fetch_events(store: Store, role: str | None = None) -> list[Event]:
    events = [normalize_event(raw) for raw in _raw_events(store)]
    return visible_events(events, role)


def fetch_event_by_id(store: Store, event_id: str) -> Event:
    raw = _raw_events(store, {"id": event_id})
    if not raw:
        raise NotFoundError("Event not found")
    return normalize_event(raw[0])


def create_event_with_questions(
    store: Store, payload: EventIn, questions: Iterable[Any], created_by: str | None
) -> str:
    """Create an event and its question set.

    Questions get their position from their index. If the question insert
    fails, the freshly created event is deleted again.

    Returns:
        str: The id of the new event.
    """
    cleaned = [validate_question_draft(q) for q in questions]
    validate_event(payload, cleaned)

    row = _event_row(payload) | {"created_by": created_by}
    [event_id] = store.insert("events", row)

    if cleaned:
        try:
            store.insert("event_questions", [q.to_row(event_id, i) for i, q in enumerate(cleaned)])
        except StoreError:
            store.delete("events", event_id)
            raise

    logger.info("Event %s created with %d question(s)", event_id, len(cleaned))
    audit.info("event created %s by %s", event_id, created_by)
    return event_id


def update_event_with_questions(
    store: Store, event_id: str, payload: EventIn, questions: Iterable[Any]
) -> Event:
    """Update event fields and reconcile its question set.

    Once an event has responses its questions are frozen: the question diff
    is skipped and any question changes in the request are ignored.
    """
    current = fetch_event_by_id(store, event_id)
    has_responses = current.responses_count > 0

    if has_responses:
        effective: list[QuestionBase] = list(current.questions)
        logger.info("Event %s has responses; question changes ignored", event_id)
    else:
        effective = [validate_question_draft(q) for q in questions]
        known = {q.id for q in current.questions}
        foreign = [q.id for q in effective if q.id and q.id not in known]
        if foreign:
            raise ValidationFailed(errors={"questions": "Questions belong to another event."})

    validate_event(payload, effective)
    store.update("events", event_id, _event_row(payload))

    if not has_responses:
        diff = diff_questions(current.questions, effective)
        if diff.to_delete:
            store.delete("event_questions", diff.to_delete)
        for q in diff.to_update:
            values = q.to_row(event_id, q.sort_order)
            values.pop("event_id")
            store.update("event_questions", q.id, values)
        if diff.to_insert:
            store.insert("event_questions", [q.to_row(event_id, q.sort_order) for q in diff.to_insert])
        logger.info(
            "Event %s questions: +%d ~%d -%d",
            event_id, len(diff.to_insert), len(diff.to_update), len(diff.to_delete),
        )

    audit.info("event updated %s", event_id)
    return fetch_event_by_id(store, event_id)


def delete_event(store: Store, event_id: str) -> None:
    if not store.count("events", {"id": event_id}):
        raise NotFoundError("Event not found")
    if store.count("event_responses", {"event_id": event_id}) > 0:
        raise EventHasResponses("Events with responses cannot be deleted.")

    question_ids = [q["id"] for q in store.select("event_questions", {"event_id": event_id})]
    store.delete("event_questions", question_ids)
    store.delete("events", event_id)
    logger.info("Event %s deleted", event_id)
    audit.info("event deleted %s", event_id)
