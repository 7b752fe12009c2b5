from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from signup.core.config import get_database_url, get_lock_timeout_ms


class Base(DeclarativeBase):
    pass


def make_engine(url: str, lock_timeout_ms: int = 5000, **kwargs) -> Engine:
    """
    Create an engine whose transactions can serialize on the event row lock.

    PostgreSQL gets a session-wide ``lock_timeout`` so a crowd racing for one
    event cannot queue forever. SQLite has no row locks, so every transaction
    starts with ``BEGIN IMMEDIATE`` and holds the database write lock instead;
    the busy timeout bounds the wait.
    """
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": lock_timeout_ms / 1000}
        connect_args.update(kwargs.pop("connect_args", {}))
        engine = create_engine(url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            # let the "begin" hook below emit BEGIN itself
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    if url.startswith("postgresql"):
        connect_args = {"options": f"-c lock_timeout={int(lock_timeout_ms)}"}
        connect_args.update(kwargs.pop("connect_args", {}))
        return create_engine(url, connect_args=connect_args, pool_pre_ping=True, **kwargs)

    return create_engine(url, **kwargs)


engine = make_engine(get_database_url(), get_lock_timeout_ms())
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
