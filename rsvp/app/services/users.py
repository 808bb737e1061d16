"""User accounts: login, CRUD and forced password changes.

Password hashes never leave this module; everything returned is `UserOut`.
"""
# app/services/users.py
import logging

from rsvp.app.core.config import settings
from rsvp.app.core.errors import AuthenticationFailed, ConflictError, NotFoundError, ValidationFailed
from rsvp.app.core.logging import get_logs_writer_logger
from rsvp.app.core.security import hash_password, verify_password
from rsvp.app.schemas.user import UserCreate, UserOut, UserUpdate
from rsvp.db.models import UserRole, UserStatus
from rsvp.db.store import Store

logger = logging.getLogger(__name__)
audit = get_logs_writer_logger()

ROLES = {r.value for r in UserRole}
STATUSES = {s.value for s in UserStatus}


def normalize_login(login: str | None) -> str:
    return (login or "").strip().lower()


def _public(row: dict) -> UserOut:
    return UserOut(**{k: v for k, v in row.items() if k != "password_hash"})


def _find_by_login(store: Store, login: str) -> dict | None:
    rows = store.select("users", {"login": login})
    return rows[0] if rows else None


def _check_role_and_status(role: str | None, status: str | None) -> None:
    errors = {}
    if role is not None and role not in ROLES:
        errors["role"] = "Invalid role."
    if status is not None and status not in STATUSES:
        errors["status"] = "Invalid status."
    if errors:
        raise ValidationFailed(errors=errors)


def login(store: Store, username: str, password: str) -> UserOut:
    """Check credentials.

    Raises:
        AuthenticationFailed: Unknown login, inactive account or wrong password.
    """
    row = _find_by_login(store, normalize_login(username))
    if (
        not row
        or row["status"] != UserStatus.active.value
        or not verify_password(password or "", row["password_hash"])
    ):
        raise AuthenticationFailed("Invalid credentials or inactive user.")
    return _public(row)


def get_user(store: Store, user_id: str) -> UserOut:
    rows = store.select("users", {"id": user_id})
    if not rows:
        raise NotFoundError("User not found")
    return _public(rows[0])


def fetch_users(store: Store) -> list[UserOut]:
    return [_public(row) for row in store.select("users", order_by="name")]


def create_user(store: Store, data: UserCreate) -> UserOut:
    errors = {}
    user_login = normalize_login(data.login)
    if not user_login:
        errors["login"] = "Enter the login."
    if not (data.name or "").strip():
        errors["name"] = "Enter the full name."
    if not (data.password or "").strip():
        errors["password"] = "Enter an initial password."
    if errors:
        raise ValidationFailed(errors=errors)
    _check_role_and_status(data.role, data.status)

    if _find_by_login(store, user_login):
        raise ConflictError("User with this login already exists")

    [user_id] = store.insert("users", {
        "login": user_login,
        "name": data.name.strip(),
        "phone": data.phone,
        "role": data.role,
        "status": data.status,
        "password_hash": hash_password(data.password),
        "password_change_required": data.password_change_required,
    })
    logger.info("User %s created (%s)", user_id, data.role)
    audit.info("user created %s login=%s role=%s", user_id, user_login, data.role)
    return get_user(store, user_id)


def update_user(store: Store, user_id: str, data: UserUpdate) -> UserOut:
    """Partially update a user. A blank or missing password keeps the old one."""
    current = get_user(store, user_id)
    values = data.model_dump(exclude_unset=True)
    password = values.pop("password", None)
    _check_role_and_status(values.get("role"), values.get("status"))

    if "login" in values:
        values["login"] = normalize_login(values["login"])
        if not values["login"]:
            raise ValidationFailed(errors={"login": "Enter the login."})
        if values["login"] != current.login and _find_by_login(store, values["login"]):
            raise ConflictError("User with this login already exists")
    if "name" in values:
        values["name"] = (values["name"] or "").strip()
        if not values["name"]:
            raise ValidationFailed(errors={"name": "Enter the full name."})
    if password and password.strip():
        values["password_hash"] = hash_password(password)

    if values:
        store.update("users", user_id, values)
    logger.info("User %s updated", user_id)
    audit.info("user updated %s fields=%s", user_id, ",".join(sorted(values)))
    return get_user(store, user_id)


def change_password(store: Store, user_id: str, new_password: str, confirmation: str) -> UserOut:
    """Set a new password and clear the forced-change flag."""
    if len(new_password or "") < settings.PASSWORD_MIN_LENGTH:
        raise ValidationFailed(errors={
            "new_password": f"The new password must have at least {settings.PASSWORD_MIN_LENGTH} characters."
        })
    if new_password != confirmation:
        raise ValidationFailed(errors={"confirmation": "The passwords do not match."})

    get_user(store, user_id)
    store.update("users", user_id, {
        "password_hash": hash_password(new_password),
        "password_change_required": False,
    })
    audit.info("password changed %s", user_id)
    return get_user(store, user_id)


def delete_user(store: Store, user_id: str) -> None:
    get_user(store, user_id)
    store.delete("users", user_id)
    logger.info("User %s deleted", user_id)
    audit.info("user deleted %s", user_id)
