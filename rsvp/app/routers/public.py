# app/routers/public.py
"""Routes reachable without logging in, addressed by event id only."""
from fastapi import APIRouter, Depends, status

from rsvp.app.routers.deps import get_store
from rsvp.app.schemas.event import Event
from rsvp.app.schemas.response import SubmitResponseIn, SubmitResponseOut
from rsvp.app.services import events as events_service
from rsvp.app.services import responses as responses_service
from rsvp.db.store import Store

router = APIRouter()


@router.get("/public/events/{event_id}", response_model=Event)
def preview_event(event_id: str, store: Store = Depends(get_store)):
    event = events_service.fetch_event_by_id(store, event_id)
    # any status can be previewed (only active events accept responses);
    # anonymous visitors do not get the response count
    return event.model_copy(update={"responses_count": 0})


@router.post("/public/events/{event_id}/responses", response_model=SubmitResponseOut, status_code=status.HTTP_201_CREATED)
def submit_public_response(event_id: str, payload: SubmitResponseIn, store: Store = Depends(get_store)):
    response_id = responses_service.respond(store, event_id, payload.answers)
    return SubmitResponseOut(response_id=response_id)
