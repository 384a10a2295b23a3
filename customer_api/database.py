"""Database helpers for the customer API."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, List

from sqlalchemy import Integer, String, create_engine, func, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Customer


class StoreError(Exception):
    """Base class for record store failures."""


class StorageUnavailable(StoreError):
    """The backing storage cannot be reached or initialised."""


class InsertFailure(StoreError):
    """A single insert was rejected by the backing storage."""


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


class CustomerRecord(Base):
    """ORM model for ``customer``."""

    __tablename__ = "customer"
    # Keeps SQLite from handing out the id of a removed max row again.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


def to_customer(record: CustomerRecord) -> Customer:
    """Convert an ORM record into a :class:`Customer`."""

    return Customer(id=record.id, name=record.name)


def _is_connection_error(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def open_storage(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for ``database_url``.

    In-memory SQLite only lives as long as its connection, so it is pinned to
    a single shared connection that every request thread reuses.
    """

    try:
        url = make_url(database_url)
        options: Dict[str, Any] = {}
        if url.get_backend_name() == "sqlite":
            options["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                options["poolclass"] = StaticPool
        if "poolclass" not in options:
            options["pool_pre_ping"] = True
        return create_engine(url, future=True, **options)
    except (SQLAlchemyError, ImportError) as exc:
        raise StorageUnavailable(f"Cannot open storage at {database_url!r}: {exc}") from exc


class RecordStore:
    """Insert-and-list access to the ``customer`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create the ``customer`` table if it does not exist yet."""

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Cannot create schema: {exc}") from exc

    def insert(self, name: str) -> Customer:
        """Persist a new customer and return it with its assigned id."""

        try:
            with self.session_scope() as session:
                record = CustomerRecord(name=name)
                session.add(record)
                session.flush()
                return to_customer(record)
        except SQLAlchemyError as exc:
            if _is_connection_error(exc):
                raise StorageUnavailable(f"Cannot insert {name!r}: {exc}") from exc
            raise InsertFailure(f"Cannot insert {name!r}: {exc}") from exc

    def list_all(self) -> List[Customer]:
        """Return every stored customer ordered by id."""

        try:
            with self.session_scope() as session:
                rows = session.execute(select(CustomerRecord).order_by(CustomerRecord.id)).scalars().all()
                return [to_customer(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Cannot list customers: {exc}") from exc

    def count(self) -> int:
        """Return the number of stored customers."""

        try:
            with self.session_scope() as session:
                return session.execute(select(func.count()).select_from(CustomerRecord)).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Cannot count customers: {exc}") from exc

    def close(self) -> None:
        """Release pooled connections."""

        self.engine.dispose()
