"""Client sessions.

A session moves through `anonymous -> authenticated -> expired | cleared`.
`SessionManager` issues signed tokens and keeps the logged-in user in an
injected `SessionStore`, so nothing about the current user lives in module
state.
"""
# app/services/auth.py
import enum
import logging
from typing import Optional, Protocol

from pydantic import BaseModel

from rsvp.app.core.config import settings
from rsvp.app.core.security import is_expired, read_token, sign_token
from rsvp.app.schemas.user import UserOut

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    anonymous = "anonymous"
    authenticated = "authenticated"
    expired = "expired"
    cleared = "cleared"


class AuthSession(BaseModel):
    state: SessionState = SessionState.anonymous
    user: UserOut | None = None
    token: str | None = None
    expires_at: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.authenticated and self.user is not None

    @property
    def role(self) -> str:
        return self.user.role if self.user else "participant"

    @property
    def requires_password_change(self) -> bool:
        return bool(self.user and self.user.password_change_required)


class SessionStore(Protocol):
    def save(self, token: str, user: dict) -> None: ...

    def load(self, token: str) -> Optional[dict]: ...

    def clear(self, token: str) -> None: ...


class InMemorySessionStore:
    def __init__(self):
        self._sessions: dict[str, dict] = {}

    def save(self, token: str, user: dict) -> None:
        self._sessions[token] = user

    def load(self, token: str) -> Optional[dict]:
        return self._sessions.get(token)

    def clear(self, token: str) -> None:
        self._sessions.pop(token, None)


class SessionManager:
    def __init__(self, store: SessionStore, ttl_sec: int = settings.SESSION_TTL):
        self.store = store
        self.ttl_sec = ttl_sec

    def open(self, user: UserOut) -> AuthSession:
        token = sign_token({"sub": user.id, "role": user.role}, ttl_sec=self.ttl_sec)
        self.store.save(token, user.model_dump(mode="json"))
        claims = read_token(token) or {}
        logger.info("Session opened for user %s", user.id)
        return AuthSession(
            state=SessionState.authenticated, user=user, token=token, expires_at=claims.get("exp")
        )

    def resume(self, token: str | None) -> AuthSession:
        """Rebuild the session behind `token`.

        Unknown or tampered tokens give an anonymous session; a token that
        was logged out gives `cleared`; an outdated one gives `expired` and
        is dropped from the store.
        """
        if not token:
            return AuthSession()
        claims = read_token(token)
        if not claims:
            return AuthSession()
        if is_expired(claims):
            self.store.clear(token)
            return AuthSession(state=SessionState.expired)
        stored = self.store.load(token)
        if stored is None:
            return AuthSession(state=SessionState.cleared)
        return AuthSession(
            state=SessionState.authenticated,
            user=UserOut(**stored),
            token=token,
            expires_at=claims.get("exp"),
        )

    def update_user(self, session: AuthSession, user: UserOut) -> AuthSession:
        if not session.token:
            return session
        self.store.save(session.token, user.model_dump(mode="json"))
        return session.model_copy(update={"user": user})

    def close(self, token: str | None) -> AuthSession:
        if token:
            self.store.clear(token)
        return AuthSession(state=SessionState.cleared)
