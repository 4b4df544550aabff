"""Document Models Module

This module defines the SQLAlchemy model backing the application's document store.
Every user record and every interview session is stored as one JSON document
addressed by a slash-separated, Firestore-style path:

    users/{uid}
    users/{uid}/interviews/{interviewId}

Dependencies:
- sqlalchemy: For ORM functionality and database modeling.
- datetime: For timestamp handling.

Author: @kcaparas1630
"""

from typing import Any, Dict
from sqlalchemy import String, DateTime, Integer, JSON, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from datetime import datetime

class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass

class Document(Base):
    """A single JSON document in the document store.

    Attributes:
        path (str): Full document path, e.g. "users/abc/interviews/xyz"
        collection (str): Path of the parent collection, e.g. "users/abc/interviews"
        data (dict): Document body
        version (int): Incremented on every committed write, used to order change events
        created_at (datetime): Timestamp when the document was created
        updated_at (datetime): Timestamp when the document was last written
    """
    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)
    collection: Mapped[str] = mapped_column(String(512), index=True)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"Document(path={self.path}, version={self.version})"
