import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


DB_PATH = os.getenv("RHYTHM_DB_PATH", os.path.join(os.getcwd(), "rhythm.sqlite3"))
Base = declarative_base()


def default_db_url():
    return os.getenv("RHYTHM_DB_URL") or f"sqlite:///{DB_PATH}"


def make_engine(url: str | None = None):
    """Build an engine; in-memory SQLite shares one connection across sessions."""
    url = url or default_db_url()
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    # history rows rely on ON DELETE CASCADE
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    return engine


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine):
    # models register their tables on Base when imported
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
