"""SQLAlchemy database client for Anon Inbox."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text, create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship, sessionmaker

from anon_inbox import constants
from anon_inbox.errors import StoreUnavailable
from anon_inbox.models.enums import MessagePurpose
from anon_inbox.utils.pathing import ensure_runtime_directories

LOG = logging.getLogger(__name__)


class BaseModel(DeclarativeBase):
    """Declarative base class for SQLAlchemy models."""


def _database_url() -> str:
    if constants.DATABASE_URL:
        return constants.DATABASE_URL
    ensure_runtime_directories()
    return f"sqlite:///{constants.DB_FILE}"


def _build_engine(echo: bool = False):
    url = _database_url()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, future=True, connect_args=connect_args)


ENGINE = _build_engine()
SESSION_FACTORY = sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False, future=True)


class User(BaseModel):
    """Account that owns an inbox and a public submission link."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    accepting_messages: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    messages: Mapped[list["Message"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan"
    )


class Message(BaseModel):
    """Anonymous message; written once, read by its owner, deleted by its owner."""

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), index=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    purpose: Mapped[MessagePurpose] = mapped_column(Enum(MessagePurpose), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    owner: Mapped["User"] = relationship(back_populates="messages")


def init_db(echo: bool = False) -> None:
    """Create tables if they do not exist."""
    global ENGINE, SESSION_FACTORY
    ENGINE.dispose()
    ENGINE = _build_engine(echo=echo)
    SESSION_FACTORY = sessionmaker(
        bind=ENGINE,
        autoflush=False,
        expire_on_commit=False,
        future=True,
    )
    BaseModel.metadata.create_all(bind=ENGINE)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    Database failures are rolled back and surfaced as ``StoreUnavailable``.
    """
    session = SESSION_FACTORY()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        LOG.error("database operation failed: %s", exc)
        raise StoreUnavailable("Message store is unavailable.") from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
