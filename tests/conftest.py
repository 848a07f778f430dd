import io
from pathlib import Path

import pytest

from studydesk import create_app
from studydesk.extensions import db


def make_config(tmp_path, **overrides):
    class TestConfig:
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = "sqlite://"
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        SESSION_FILE_DIR = str(tmp_path / "sessions")
        SESSION_BACKEND = "memory"
        SESSION_COOKIE_SECURE = False
        LOG_DIR = str(tmp_path / "logs")
        LOG_LEVEL = "DEBUG"
        SENTRY_DSN = ""

    for key, val in overrides.items():
        setattr(TestConfig, key, val)
    return TestConfig


@pytest.fixture
def app_factory(tmp_path):
    built = []

    def _build(**overrides):
        app = create_app(make_config(tmp_path, **overrides))
        built.append(app)
        return app

    yield _build

    for app in built:
        app.extensions["studydesk"].reclaimer.shutdown()
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app):
    return app.test_client()


def services(app):
    return app.extensions["studydesk"]


def upload_path(app, stored_path: str) -> Path:
    return Path(app.config["UPLOAD_FOLDER"]) / stored_path.rsplit("/", 1)[-1]


def fake_file(name="notes.txt", data=b"hello"):
    return (io.BytesIO(data), name)


def register(client, username="alice", password="pw1", email=None, name=None, **extra):
    data = {
        "username": username,
        "name": name or username.title(),
        "email": email or f"{username}@x.com",
        "password": password,
    }
    data.update(extra)
    return client.post("/api/register", data=data)


def login(client, username="alice", password="pw1"):
    return client.post("/api/login", json={"username": username, "password": password})


def signed_in(app, username):
    c = app.test_client()
    assert register(c, username).status_code == 200
    assert login(c, username).status_code == 200
    return c


@pytest.fixture
def alice(app):
    return signed_in(app, "alice")


@pytest.fixture
def bob(app):
    return signed_in(app, "bob")
