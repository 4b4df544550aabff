import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from sqlalchemy.orm import sessionmaker

from app.database import DocumentStore, build_engine, create_tables
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import UserRepository
from app.test.support import TEST_UID


@pytest.fixture
def store() -> DocumentStore:
    engine = build_engine("sqlite://")
    create_tables(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield DocumentStore(factory)
    engine.dispose()


@pytest.fixture
def users(store) -> UserRepository:
    return UserRepository(store)


@pytest.fixture
def interviews(store) -> InterviewRepository:
    return InterviewRepository(store, TEST_UID)
