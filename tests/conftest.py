from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from anon_inbox import constants
from anon_inbox.api import main as api_main
from anon_inbox.clients import database
from anon_inbox.clients.message_store import MessageStore
from anon_inbox.providers.header import HeaderIdentityProvider
from anon_inbox.services.acceptance_service import AcceptanceService
from anon_inbox.services.inbox_service import InboxService
from anon_inbox.services.user_service import UserService


@pytest.fixture(autouse=True)
def temp_runtime_dirs(tmp_path, monkeypatch):
    """Redirect runtime directories and database into a temp location."""
    home = tmp_path / "runtime" / "home"
    mapping = {
        "HOME_DIR": home,
        "LOG_DIR": home / "logs",
        "DB_DIR": home / "db",
        "DB_FILE": home / "db" / "anon-inbox.db",
        "DATABASE_URL": None,
    }

    for name, value in mapping.items():
        monkeypatch.setattr(constants, name, value)

    database.init_db()
    yield


@pytest.fixture
def user_service() -> UserService:
    return UserService()


@pytest.fixture
def acceptance_service() -> AcceptanceService:
    return AcceptanceService()


@pytest.fixture
def message_store() -> MessageStore:
    return MessageStore()


@pytest.fixture
def inbox_service(user_service, acceptance_service, message_store) -> InboxService:
    return InboxService(user_service, acceptance_service, message_store)


@pytest.fixture
def alice(user_service):
    return user_service.register("alice")


@pytest.fixture
def bob(user_service):
    return user_service.register("bob")


@pytest.fixture
def api_client(user_service, acceptance_service, inbox_service):
    app = api_main.app
    identity_provider = HeaderIdentityProvider(user_service)

    overrides = {
        api_main.get_user_service: lambda: user_service,
        api_main.get_acceptance_service: lambda: acceptance_service,
        api_main.get_inbox_service: lambda: inbox_service,
        api_main.get_identity_provider: lambda: identity_provider,
    }

    original_overrides = app.dependency_overrides.copy()
    original_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def noop_lifespan(_app):
        yield

    app.router.lifespan_context = noop_lifespan
    app.dependency_overrides.update(overrides)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = original_overrides
    app.router.lifespan_context = original_lifespan
