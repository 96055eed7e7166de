"""
Purpose: Remote Store Client. Accounts and chat rows in a relational database
(Postgres in production, SQLite locally and in tests) behind simple
select/insert/update/delete calls keyed by id / user_id.

Every database failure leaves this module as an Eli5Error:
- missing table        -> SchemaError
- server unreachable   -> ConnectivityError
- duplicate email      -> AlreadyExists
- anything else        -> UnknownError carrying the backend message

Testing: in-memory SQLite engine (see `create_store("sqlite://")`).
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy import (
    JSON,
    BigInteger,
    ForeignKey,
    Index,
    String,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from eli5.config import settings
from eli5.config.logging import get_logger
from eli5.errors import (
    AlreadyExists,
    ConnectivityError,
    Eli5Error,
    NotFound,
    SchemaError,
    UnknownError,
)
from eli5.models import ChatSession, Message

logger = get_logger(__name__)

USERS_TABLE = "eli5_users"
CHATS_TABLE = "eli5_chats"

_UNDEFINED_TABLE = "42P01"


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    """Account row; email is stored lowercased and is unique."""

    __tablename__ = USERS_TABLE

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class ChatRow(Base):
    """One saved conversation; `messages` holds the whole ordered list."""

    __tablename__ = CHATS_TABLE
    __table_args__ = (
        Index("ix_eli5_chats_user_id_last_updated", "user_id", "last_updated"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey(f"{USERS_TABLE}.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    messages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    last_updated: Mapped[int] = mapped_column(BigInteger, nullable=False)


def _is_missing_table(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _UNDEFINED_TABLE:
        return True
    text = str(orig or exc).lower()
    return "no such table" in text or (
        "relation" in text and "does not exist" in text
    )


@contextmanager
def translate_errors(table: str) -> Iterator[None]:
    """Convert SQLAlchemy failures raised inside the block into Eli5Errors."""
    try:
        yield
    except Eli5Error:
        raise
    except DBAPIError as exc:
        if _is_missing_table(exc):
            logger.error("remote_table_missing", table=table, error=str(exc.orig))
            raise SchemaError(table, code=_UNDEFINED_TABLE) from exc
        if isinstance(exc, OperationalError) or exc.connection_invalidated:
            logger.error("remote_unreachable", table=table, error=str(exc.orig))
            raise ConnectivityError() from exc
        logger.error("remote_request_failed", table=table, error=str(exc.orig))
        raise UnknownError(str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        logger.error("remote_request_failed", table=table, error=str(exc))
        raise UnknownError(str(exc)) from exc


class SqlRemoteStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    # Accounts
    def find_account(self, email: str) -> Optional[dict[str, Any]]:
        with translate_errors(USERS_TABLE), self._sessions() as db:
            row = db.scalars(select(UserRow).where(UserRow.email == email)).first()
            if row is None:
                return None
            return {
                "id": row.id,
                "email": row.email,
                "name": row.name,
                "password_hash": row.password_hash,
            }

    def create_account(
        self, *, email: str, name: str, password_hash: str
    ) -> dict[str, Any]:
        row = UserRow(
            id=str(uuid.uuid4()), email=email, name=name, password_hash=password_hash
        )
        try:
            with translate_errors(USERS_TABLE), self._sessions.begin() as db:
                db.add(row)
        except UnknownError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise AlreadyExists(
                    "This email is already registered. Try signing in!"
                ) from exc
            raise
        logger.info("account_created", user_id=row.id)
        return {"id": row.id, "email": row.email, "name": row.name}

    # Chats
    def list_chats(self, user_id: str) -> list[ChatSession]:
        with translate_errors(CHATS_TABLE), self._sessions() as db:
            rows = db.scalars(
                select(ChatRow)
                .where(ChatRow.user_id == user_id)
                .order_by(ChatRow.last_updated.desc())
            ).all()
            return [
                ChatSession.from_record(
                    {
                        "id": r.id,
                        "title": r.title,
                        "messages": r.messages,
                        "last_updated": r.last_updated,
                    }
                )
                for r in rows
            ]

    def insert_chat(self, user_id: str, session: ChatSession) -> None:
        record = session.to_record(user_id)
        with translate_errors(CHATS_TABLE), self._sessions.begin() as db:
            db.add(ChatRow(**record))

    def update_chat(
        self,
        chat_id: str,
        *,
        title: Optional[str] = None,
        messages: Optional[Sequence[Message]] = None,
        last_updated: Optional[int] = None,
    ) -> None:
        values: dict[str, Any] = {}
        if title is not None:
            values["title"] = title
        if messages is not None:
            values["messages"] = [m.to_record() for m in messages]
        if last_updated is not None:
            values["last_updated"] = last_updated
        if not values:
            return

        with translate_errors(CHATS_TABLE), self._sessions.begin() as db:
            result = db.execute(
                update(ChatRow).where(ChatRow.id == chat_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFound(f"Chat {chat_id} not found.")

    def delete_chat(self, chat_id: str) -> None:
        with translate_errors(CHATS_TABLE), self._sessions.begin() as db:
            db.execute(delete(ChatRow).where(ChatRow.id == chat_id))


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def create_store(url: Optional[str] = None) -> SqlRemoteStore:
    return SqlRemoteStore(make_engine(url or settings.DATABASE_URL))


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def init_db() -> None:
    """Console entry point: create the eli5_users / eli5_chats tables."""
    from eli5.config.logging import configure_logging

    configure_logging()
    store = create_store()
    with translate_errors(USERS_TABLE):
        create_schema(store.engine)
    logger.info("schema_created", url=store.engine.url.render_as_string(hide_password=True))
