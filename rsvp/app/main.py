# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rsvp.app.core.config import settings
from rsvp.app.core.errors import RsvpError, ValidationFailed
from rsvp.app.core.logging import configure_logging
from rsvp.app.routers import auth, events, public, users
from rsvp.db.session import init_db

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(events.router)
app.include_router(public.router)


@app.exception_handler(RsvpError)
async def rsvp_error_handler(request: Request, exc: RsvpError):
    content = {"detail": exc.message}
    if isinstance(exc, ValidationFailed) and exc.errors:
        content["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.on_event("startup")
async def on_startup():
    init_db()


@app.get("/health")
def health():
    return {"status": "ok"}
