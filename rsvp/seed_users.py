#!/usr/bin/env python
"""Create the tables and the first admin account.

    python -m rsvp.seed_users

Login and password come from `SEED_ADMIN_LOGIN` / `SEED_ADMIN_PASSWORD`
(environment or `.env`). The admin has to change the password on first login.
"""
import os

from dotenv import load_dotenv

from rsvp.app.schemas.user import UserCreate, UserOut
from rsvp.app.services import users as users_service
from rsvp.db.session import LocalSession, init_db
from rsvp.db.store import Store


def get_or_create(store: Store, login: str, **kwargs) -> UserOut:
    rows = store.select("users", {"login": users_service.normalize_login(login)})
    if rows:
        return users_service.get_user(store, rows[0]["id"])
    return users_service.create_user(store, UserCreate(login=login, **kwargs))


def main():
    load_dotenv()
    init_db()
    db = LocalSession()
    try:
        admin = get_or_create(
            Store(db),
            os.getenv("SEED_ADMIN_LOGIN", "admin"),
            name=os.getenv("SEED_ADMIN_NAME", "Administrator"),
            password=os.getenv("SEED_ADMIN_PASSWORD", "change-me"),
            role="admin",
            password_change_required=True,
        )
        print("Seeded users:")
        print(f"Admin login:   {admin.login}")
        print(f"Admin user_id: {admin.id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
