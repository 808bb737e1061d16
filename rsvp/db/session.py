# db/session.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from rsvp.app.core.config import settings
from rsvp.db import Base
from rsvp.db import models  # noqa: F401  (registers the tables)


def make_engine(url: str = settings.DATABASE_URL, **kwargs) -> Engine:
    # SQLite connections are shared with FastAPI's threadpool
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = make_engine()
LocalSession = sessionmaker(autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(bind=bind)


def get_db():
    db = LocalSession()
    try:
        yield db
    finally:
        db.close()
