"""
Pytest Configuration
====================

Each test gets its own in-memory SQLite store with the schema applied,
plus repositories, services and an API client built over it.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from groupchat.config.settings import Settings
from groupchat.database.engine import build_engine
from groupchat.database.schema import init_schema
from groupchat.main import create_app
from groupchat.modules.auth.service import AuthService
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.groups.service import GroupService
from groupchat.modules.messages.repository import MessageRepository
from groupchat.modules.messages.service import MessageService
from groupchat.modules.users.repository import UserRepository
from groupchat.modules.users.service import UserService


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def user_repository(engine):
    return UserRepository(engine)


@pytest.fixture
def group_repository(engine):
    return GroupRepository(engine)


@pytest.fixture
def message_repository(engine):
    return MessageRepository(engine)


@pytest.fixture
def user_service(user_repository):
    return UserService(user_repository)


@pytest.fixture
def group_service(group_repository, user_repository):
    return GroupService(group_repository, user_repository)


@pytest.fixture
def message_service(message_repository, group_repository, user_repository):
    return MessageService(message_repository, group_repository, user_repository)


@pytest.fixture
def auth_service(user_repository):
    return AuthService(user_repository)


@pytest.fixture
def settings():
    return Settings(_env_file=None, database_url="sqlite://", environment="test")


@pytest.fixture
def client(settings, engine):
    app = create_app(settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def count_rows(engine):
    """Number of rows in a table, read straight from the store"""
    def _count(table) -> int:
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()
    return _count
