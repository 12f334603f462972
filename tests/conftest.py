"""
Pytest configuration and common fixtures for the chat backend tests.

Every test gets its own application, in-memory SQLite database and
connection registry. Database checks are done inside short
``app.app_context()`` blocks so they never share a session with the
socket or HTTP handlers under test.
"""

from collections import defaultdict

import pytest

from workflowconnect import create_app
from workflowconnect.config import Config
from workflowconnect.extensions import db, socketio
from workflowconnect.helpers.auth import create_access_token
from workflowconnect.helpers.registry import ConnectionRegistry
from workflowconnect.models import Chat, ChatParticipant, User


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-0123456789abcdef0123456789"
    JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ECHO = False
    SOCKETIO_ASYNC_MODE = "threading"
    SOCKETIO_MESSAGE_QUEUE = ""
    LOG_LEVEL = "WARNING"
    MAX_FILE_SIZE = 1024


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def app(registry):
    app = create_app(TestConfig, registry=registry)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(name: str, email: str | None = None) -> int:
        with app.app_context():
            user = User(name=name, email=email or f"{name.lower()}@example.com")
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_chat(app):
    def _make_chat(user_ids, is_group: bool = False, name: str | None = None) -> int:
        with app.app_context():
            chat = Chat(
                name=name,
                is_group=is_group,
                admin_id=user_ids[0] if is_group else None,
            )
            db.session.add(chat)
            db.session.flush()
            for user_id in user_ids:
                db.session.add(ChatParticipant(chat_id=chat.id, user_id=user_id))
            db.session.commit()
            return chat.id

    return _make_chat


@pytest.fixture
def token_for(app):
    def _token_for(user_id: int) -> str:
        with app.app_context():
            return create_access_token(user_id)

    return _token_for


@pytest.fixture
def auth_headers(token_for):
    def _auth_headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {token_for(user_id)}"}

    return _auth_headers


@pytest.fixture
def connect(app, token_for):
    clients = []

    def _connect(user_id: int | None = None, token: str | None = None):
        if token is None and user_id is not None:
            token = token_for(user_id)
        client = socketio.test_client(app, auth={"token": token} if token else None)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        if client.is_connected():
            client.disconnect()


def drain(*clients) -> None:
    for client in clients:
        client.get_received()


def events(client) -> dict:
    """Group everything the client has received by event name, payloads unwrapped."""
    grouped = defaultdict(list)
    for packet in client.get_received():
        args = packet["args"]
        if isinstance(args, list) and len(args) == 1:
            args = args[0]
        grouped[packet["name"]].append(args)
    return grouped
