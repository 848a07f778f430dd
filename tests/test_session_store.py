from datetime import timedelta

import pytest

from conftest import login, register, signed_in
from studydesk.models import User, UserSession
from studydesk.extensions import db
from studydesk.services.session_store import (
    FileSessionStore,
    MemorySessionStore,
    SessionStore,
    SqlSessionStore,
    make_session_store,
)


@pytest.fixture(params=["memory", "file", "sql"])
def store_factory(request, app, tmp_path):
    """Builds a store of each backend; the sql one runs inside an app context."""
    ctx = app.app_context()
    ctx.push()
    user = User(username="alice", name="Alice", email="alice@x.com")
    user.set_password("pw1")
    db.session.add(user)
    db.session.commit()

    def _build(lifetime=timedelta(hours=24)):
        if request.param == "memory":
            return MemorySessionStore(lifetime)
        if request.param == "file":
            return FileSessionStore(lifetime, tmp_path / "sessions-unit")
        return SqlSessionStore(lifetime)

    yield _build, user.id
    db.session.remove()
    ctx.pop()


def test_create_get_destroy(store_factory):
    build, user_id = store_factory
    store = build()

    record = store.create(user_id)
    assert len(record.sid) >= 32
    assert store.get(record.sid).user_id == user_id

    store.destroy(record.sid)
    assert store.get(record.sid) is None
    # destroying twice is harmless
    store.destroy(record.sid)


def test_each_session_gets_its_own_id(store_factory):
    build, user_id = store_factory
    store = build()
    a, b = store.create(user_id), store.create(user_id)
    assert a.sid != b.sid
    store.destroy(a.sid)
    assert store.get(b.sid) is not None


def test_expired_session_is_absent_and_purged(store_factory):
    build, user_id = store_factory
    store = build(lifetime=timedelta(seconds=-1))
    record = store.create(user_id)

    assert store.get(record.sid) is None
    assert store.purge_expired() == 0


def test_purge_expired(store_factory):
    build, user_id = store_factory
    store = build(lifetime=timedelta(seconds=-1))
    store.create(user_id)
    store.create(user_id)
    store.lifetime = timedelta(hours=1)
    keep = store.create(user_id)

    assert store.purge_expired() == 2
    assert store.get(keep.sid) is not None


def test_unknown_or_malformed_ids(store_factory):
    build, _ = store_factory
    store = build()
    assert store.get(None) is None
    assert store.get("") is None
    assert store.get("../../etc/passwd") is None
    assert store.get("x" * 43) is None


def test_file_store_ignores_corrupt_documents(tmp_path):
    store = FileSessionStore(timedelta(hours=1), tmp_path)
    record = store.create(7)
    (tmp_path / f"{record.sid}.json").write_text("{not json")
    assert store.get(record.sid) is None


def test_sql_store_deletes_rows(app):
    with app.app_context():
        user = User(username="bob", name="Bob", email="bob@x.com")
        user.set_password("pw")
        db.session.add(user)
        db.session.commit()

        store = SqlSessionStore(timedelta(hours=1))
        record = store.create(user.id)
        assert UserSession.query.count() == 1
        store.destroy(record.sid)
        assert UserSession.query.count() == 0


def test_make_session_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        make_session_store({"SESSION_BACKEND": "redis"})


@pytest.mark.parametrize("backend", ["memory", "file", "sql"])
def test_login_flow_on_every_backend(app_factory, backend):
    app = app_factory(SESSION_BACKEND=backend)
    client = signed_in(app, "alice")

    assert client.get("/api/user").get_json()["username"] == "alice"
    client.get("/api/logout")
    assert client.get("/api/user").status_code == 401

    # a fresh login issues a new working session
    assert login(client, "alice").status_code == 200
    assert client.get("/api/user").status_code == 200


def test_expired_cookie_session_is_rejected(app_factory):
    app = app_factory()
    client = signed_in(app, "alice")
    store = app.extensions["studydesk"].sessions

    # age every live session past its expiry
    for record in list(store._records.values()):
        record.expires_at -= timedelta(days=2)

    assert client.get("/api/user").status_code == 401
    assert store._records == {}


def test_incomplete_backend_cannot_be_built():
    class HalfStore(SessionStore):
        def _save(self, record):
            pass

        def _load(self, sid):
            return None

    with pytest.raises(TypeError):
        HalfStore(timedelta(hours=1))
