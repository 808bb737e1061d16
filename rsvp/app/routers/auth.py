# app/routers/auth.py
from fastapi import APIRouter, Depends

from rsvp.app.routers.deps import bearer_token, current_session, get_session_manager, get_store
from rsvp.app.schemas.user import LoginIn, LoginOut, PasswordChangeIn, UserOut
from rsvp.app.services import users as users_service
from rsvp.app.services.auth import AuthSession, SessionManager
from rsvp.db.store import Store

router = APIRouter()


@router.post("/api/auth/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    store: Store = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    user = users_service.login(store, payload.login, payload.password)
    session = manager.open(user)
    return LoginOut(token=session.token, user=user)


@router.post("/api/auth/logout")
def logout(
    token: str | None = Depends(bearer_token),
    manager: SessionManager = Depends(get_session_manager),
):
    session = manager.close(token)
    return {"state": session.state.value}


@router.get("/api/auth/me", response_model=UserOut)
def me(session: AuthSession = Depends(current_session)):
    return session.user


@router.post("/api/auth/password", response_model=UserOut)
def change_password(
    payload: PasswordChangeIn,
    session: AuthSession = Depends(current_session),
    store: Store = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Change the caller's own password; also ends a forced-change state."""
    user = users_service.change_password(store, session.user.id, payload.new_password, payload.confirmation)
    manager.update_user(session, user)
    return user
