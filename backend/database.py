# backend/database.py
import logging
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.pool import StaticPool

from errors import NotFoundError, SalonError, StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> Engine:
    # For SQLite
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            # One shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
        engine = create_engine(database_url, **options)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        # For PostgreSQL
        engine = create_engine(database_url)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Import models so their tables are registered on Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, action: str, commit: bool = True):
    """
    Run one unit of work against the store.

    Failures are logged under ``action`` and the session is rolled back.
    Domain errors propagate unchanged, driver errors become StorageError.
    """
    try:
        yield db
        if commit:
            db.commit()
    except SalonError as e:
        db.rollback()
        logger.error(f"{action} failed: {e}")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{action} failed: {e}")
        raise StorageError(f"{action} failed") from e


def get_or_raise(db: Session, model, record_id: int):
    record = db.get(model, record_id)
    if record is None:
        raise NotFoundError(model.__name__, record_id)
    return record
