# app/routers/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from rsvp.app.core.errors import AuthenticationFailed, PermissionDenied
from rsvp.app.services.auth import AuthSession, InMemorySessionStore, SessionManager, SessionState
from rsvp.db.session import get_db
from rsvp.db.store import Store

session_manager = SessionManager(InMemorySessionStore())


def get_session_manager() -> SessionManager:
    return session_manager


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_session(
    token: str | None = Depends(bearer_token),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthSession:
    """Any logged-in session, including one that still has to change its password."""
    session = manager.resume(token)
    if session.state == SessionState.expired:
        raise AuthenticationFailed("Your session has expired. Please log in again.")
    if not session.is_authenticated:
        raise AuthenticationFailed("Please log in.")
    return session


def active_session(session: AuthSession = Depends(current_session)) -> AuthSession:
    if session.requires_password_change:
        raise PermissionDenied("Change your password before continuing.")
    return session


def require_role(*roles: str):
    """Dependency factory: the caller must hold one of `roles`."""

    def dependency(session: AuthSession = Depends(active_session)) -> AuthSession:
        if session.role not in roles:
            raise PermissionDenied("You do not have access to this section.")
        return session

    return dependency
