# app/routers/events.py
from typing import List

from fastapi import APIRouter, Depends, status

from rsvp.app.core.errors import NotFoundError
from rsvp.app.routers.deps import active_session, get_store, require_role
from rsvp.app.schemas.event import Event, EventCreatedOut, EventWithQuestionsIn
from rsvp.app.schemas.report import EventReport, ReportQuery
from rsvp.app.schemas.response import DeleteResponsesIn, ResponseRecord, SubmitResponseIn, SubmitResponseOut
from rsvp.app.services import events as events_service
from rsvp.app.services import responses as responses_service
from rsvp.app.services.auth import AuthSession
from rsvp.db.store import Store
from rsvp.reports import build_event_report

router = APIRouter()

can_manage = require_role("admin", "organizer")


@router.get("/api/events", response_model=List[Event])
def list_events(session: AuthSession = Depends(active_session), store: Store = Depends(get_store)):
    return events_service.fetch_events(store, role=session.role)


@router.post("/api/events", response_model=EventCreatedOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventWithQuestionsIn,
    session: AuthSession = Depends(can_manage),
    store: Store = Depends(get_store),
):
    event_id = events_service.create_event_with_questions(
        store, payload, payload.questions, created_by=session.user.id
    )
    return EventCreatedOut(id=event_id)


@router.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str, session: AuthSession = Depends(active_session), store: Store = Depends(get_store)):
    event = events_service.fetch_event_by_id(store, event_id)
    if not events_service.visible_events([event], session.role):
        raise NotFoundError("Event not found")
    return event


@router.put("/api/events/{event_id}", response_model=Event, dependencies=[Depends(can_manage)])
def update_event(event_id: str, payload: EventWithQuestionsIn, store: Store = Depends(get_store)):
    return events_service.update_event_with_questions(store, event_id, payload, payload.questions)


@router.delete("/api/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(can_manage)])
def delete_event(event_id: str, store: Store = Depends(get_store)):
    events_service.delete_event(store, event_id)


@router.get("/api/events/{event_id}/responses", response_model=List[ResponseRecord], dependencies=[Depends(can_manage)])
def list_responses(event_id: str, store: Store = Depends(get_store)):
    events_service.fetch_event_by_id(store, event_id)
    return responses_service.fetch_event_responses(store, event_id)


@router.delete("/api/events/{event_id}/responses", dependencies=[Depends(can_manage)])
def delete_responses(event_id: str, payload: DeleteResponsesIn, store: Store = Depends(get_store)):
    deleted = responses_service.delete_responses(store, payload.response_ids, event_id=event_id)
    return {"deleted": deleted}


@router.post("/api/events/{event_id}/responses", response_model=SubmitResponseOut, status_code=status.HTTP_201_CREATED)
def submit_response(
    event_id: str,
    payload: SubmitResponseIn,
    session: AuthSession = Depends(active_session),
    store: Store = Depends(get_store),
):
    response_id = responses_service.respond(store, event_id, payload.answers, submitted_by=session.user.id)
    return SubmitResponseOut(response_id=response_id)


@router.post("/api/events/{event_id}/report", response_model=EventReport, dependencies=[Depends(can_manage)])
def event_report(event_id: str, query: ReportQuery, store: Store = Depends(get_store)):
    event = events_service.fetch_event_by_id(store, event_id)
    responses = responses_service.fetch_event_responses(store, event_id)
    return build_event_report(event, responses, query.filters)
