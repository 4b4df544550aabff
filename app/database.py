"""Document Store and Connection Management Module

This module handles database connectivity and exposes the application's document
store: JSON documents addressed by path (``users/{uid}``,
``users/{uid}/interviews/{interviewId}``) persisted through SQLAlchemy.

Besides plain reads and writes, the store carries a change feed. Callers register
a listener for a document path and receive a ``ChangeEvent`` after every
committed write to that document. This is how the interview session controller
learns that a session was completed or cancelled by someone else.

Dependencies:
- sqlalchemy: For database ORM and connection management.
- dotenv: For environment variable loading.
- loguru: For logging operations.
- app.models.document_models: For the document table definition.

Author: @kcaparas1630
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
import copy
import os
from loguru import logger
from app.models.document_models import Base, Document
from app.errors.exceptions import DocumentNotFound
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interview_prep.db")


def build_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the given URL.

    SQLite URLs get ``check_same_thread=False`` so the engine can be shared by
    the request worker threads, and in-memory SQLite gets a ``StaticPool`` so
    every session sees the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True, # verify connections before using
        pool_recycle=300 # Recycle connections every 5 minutes
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind: Optional[Engine] = None):
    """Create all database tables defined in the models.

    Raises:
        Exception: If table creation fails

    Note:
        This operation is idempotent - existing tables won't be modified
    """
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database table: {e}")
        raise

def drop_tables(bind: Optional[Engine] = None):
    """Drop all database tables defined in the models.

    WARNING: This will permanently delete all data in the tables.
    Use only in development/testing environments.
    """
    try:
        Base.metadata.drop_all(bind=bind or engine)
        logger.info("Database tables dropped successfully")
    except Exception as e:
        logger.error(f"Error dropping database tables: {e}")
        raise


def parent_collection(path: str) -> str:
    """Return the collection part of a document path ("users/a/interviews/b" -> "users/a/interviews")."""
    segments = path.strip("/").split("/")
    if len(segments) < 2 or len(segments) % 2 != 0:
        raise ValueError(f"Invalid document path: {path}")
    return "/".join(segments[:-1])


@dataclass(frozen=True)
class ChangeEvent:
    """Notification emitted after a committed write to a document.

    Attributes:
        path: Path of the written document.
        data: Snapshot of the document after the write, or None if it was deleted.
        version: Document version after the write. Strictly increasing per path.
    """
    path: str
    data: Optional[Dict[str, Any]]
    version: int


ChangeListener = Callable[[ChangeEvent], None]


class DocumentStore:
    """
    JSON document store persisted through SQLAlchemy.

    All operations are coroutines so callers treat every read and write as a
    suspension point, even though the underlying driver is synchronous.

    Attributes:
        _session_factory: SQLAlchemy sessionmaker used for every operation.
        _listeners: Registered change listeners keyed by document path.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory
        self._listeners: Dict[str, List[ChangeListener]] = {}

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a document. Returns None when it does not exist."""
        with self._session_factory() as session:
            document = session.get(Document, path)
            if document is None:
                return None
            return copy.deepcopy(document.data)

    async def set(self, path: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or overwrite a document."""
        collection = parent_collection(path)
        with self._session_factory() as session:
            document = session.get(Document, path)
            if document is None:
                document = Document(path=path, collection=collection, data=copy.deepcopy(data), version=1)
                session.add(document)
            else:
                document.data = copy.deepcopy(data)
                document.version += 1
            session.commit()
            event = ChangeEvent(path=path, data=copy.deepcopy(document.data), version=document.version)
        self._notify(event)
        return copy.deepcopy(event.data)

    async def update(self, path: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Merge top-level fields into an existing document.

        Raises:
            DocumentNotFound: If the document does not exist.
        """
        with self._session_factory() as session:
            document = session.get(Document, path)
            if document is None:
                raise DocumentNotFound(path)
            data = copy.deepcopy(document.data)
            data.update(copy.deepcopy(fields))
            document.data = data
            document.version += 1
            session.commit()
            event = ChangeEvent(path=path, data=copy.deepcopy(document.data), version=document.version)
        self._notify(event)
        return copy.deepcopy(event.data)

    async def increment(self, path: str, field: str, amount: int = 1, extra_fields: Optional[Dict[str, Any]] = None) -> int:
        """Atomically add ``amount`` to a numeric field and return the new value.

        The read and the write happen inside one transaction, so concurrent
        increments are never lost.

        Raises:
            DocumentNotFound: If the document does not exist.
        """
        with self._session_factory() as session:
            with session.begin():
                document = session.execute(
                    select(Document).where(Document.path == path).with_for_update()
                ).scalar_one_or_none()
                if document is None:
                    raise DocumentNotFound(path)
                data = copy.deepcopy(document.data)
                new_value = (data.get(field) or 0) + amount
                data[field] = new_value
                if extra_fields:
                    data.update(copy.deepcopy(extra_fields))
                document.data = data
                document.version += 1
            event = ChangeEvent(path=path, data=copy.deepcopy(document.data), version=document.version)
        self._notify(event)
        return new_value

    async def delete(self, path: str) -> None:
        """Delete a document if it exists."""
        with self._session_factory() as session:
            document = session.get(Document, path)
            if document is None:
                return
            version = document.version + 1
            session.delete(document)
            session.commit()
        self._notify(ChangeEvent(path=path, data=None, version=version))

    async def list_collection(self, collection: str) -> List[Dict[str, Any]]:
        """List the documents directly inside a collection, oldest first."""
        with self._session_factory() as session:
            documents = session.execute(
                select(Document).where(Document.collection == collection.strip("/")).order_by(Document.created_at, Document.path)
            ).scalars().all()
            return [copy.deepcopy(document.data) for document in documents]

    def subscribe(self, path: str, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener for writes to ``path``.

        Returns:
            Callable that removes the listener. Calling it more than once is harmless.
        """
        self._listeners.setdefault(path, []).append(listener)
        logger.debug(f"Listener subscribed to {path}")

        def unsubscribe() -> None:
            listeners = self._listeners.get(path)
            if listeners and listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._listeners[path]
                logger.debug(f"Listener unsubscribed from {path}")

        return unsubscribe

    def _notify(self, event: ChangeEvent) -> None:
        # Copy the list: listeners may unsubscribe while being notified.
        for listener in list(self._listeners.get(event.path, [])):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Change listener for {event.path} failed: {e}")


_document_store: Optional[DocumentStore] = None

def get_document_store() -> DocumentStore:
    """FastAPI dependency returning the process-wide document store."""
    global _document_store
    if _document_store is None:
        _document_store = DocumentStore(SessionLocal)
    return _document_store
