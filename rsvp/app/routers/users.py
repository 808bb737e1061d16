# app/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, status

from rsvp.app.core.errors import ValidationFailed
from rsvp.app.routers.deps import get_store, require_role
from rsvp.app.schemas.user import UserCreate, UserOut, UserUpdate
from rsvp.app.services import users as users_service
from rsvp.app.services.auth import AuthSession
from rsvp.db.store import Store

router = APIRouter(dependencies=[Depends(require_role("admin"))])


@router.get("/api/users", response_model=List[UserOut])
def get_users(store: Store = Depends(get_store)):
    return users_service.fetch_users(store)


@router.post("/api/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, store: Store = Depends(get_store)):
    return users_service.create_user(store, user_data)


@router.put("/api/users/{user_id}", response_model=UserOut)
def update_user(user_id: str, user_data: UserUpdate, store: Store = Depends(get_store)):
    return users_service.update_user(store, user_id, user_data)


@router.delete("/api/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    store: Store = Depends(get_store),
    session: AuthSession = Depends(require_role("admin")),
):
    if session.user.id == user_id:
        raise ValidationFailed("You cannot delete your own account.")
    users_service.delete_user(store, user_id)
