"""Database engine setup and transaction helpers.

Tests run against in-memory SQLite (ENV=test); ``tests/conftest.py`` rebinds
``SessionLocal`` to a StaticPool engine so every connection sees the same
database.
"""

import os
from contextlib import contextmanager
from typing import Generator, TypeVar

from sqlalchemy import Select, create_engine
from sqlalchemy.orm import Session, sessionmaker

from contapyme.core.config import settings

T = TypeVar("T")

raw_url = settings.DATABASE_URL or "sqlite:///./storage/dev.db"

if raw_url.startswith("postgresql"):
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,  # seconds
        pool_pre_ping=True,
    )
else:
    if raw_url.startswith("sqlite:///") and ":memory:" not in raw_url:
        directory = os.path.dirname(raw_url[len("sqlite:///"):])
        if directory:
            os.makedirs(directory, exist_ok=True)
    engine = create_engine(raw_url, future=True, connect_args={"check_same_thread": False})

SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Generator[Session, None, None]:
    """Commit everything done inside the block, or roll all of it back.

    Unlike ``session_scope`` this wraps a caller-owned session (the request
    session from ``get_db``) and leaves it open afterwards.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def lock_for_update(stmt: Select[T]) -> Select[T]:
    """Apply row-level locking to a select.

    SQLite ignores SELECT ... FOR UPDATE (it locks the whole database on
    write instead); PostgreSQL holds the row lock until commit.
    """
    return stmt.with_for_update()
