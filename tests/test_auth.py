import pytest

from conftest import fake_file, login, register, services, upload_path
from studydesk.errors import ValidationError
from studydesk.services import auth_service


def test_register_and_login(client):
    resp = register(client, "alice")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}

    resp = login(client, "alice")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "redirect": "/home.html"}

    cookie = resp.headers["Set-Cookie"]
    assert cookie.startswith("studydesk.sid=")
    assert "HttpOnly" in cookie
    assert "Max-Age=86400" in cookie


def test_login_accepts_form_encoding(client):
    register(client, "alice")
    resp = client.post("/api/login", data={"username": "alice", "password": "pw1"})
    assert resp.status_code == 200


def test_register_requires_fields(client):
    resp = client.post("/api/register", data={"username": "alice", "email": "alice@x.com", "password": "pw1"})
    assert resp.status_code == 400
    assert "Name" in resp.get_json()["error"]


def test_register_rejects_malformed_email(client):
    resp = register(client, "alice", email="not-an-email")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_duplicate_username_conflicts(client):
    assert register(client, "alice").status_code == 200
    resp = register(client, "alice", email="other@x.com")
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "Username is already taken."}

    # first account is untouched
    assert login(client, "alice").status_code == 200


def test_duplicate_email_conflicts_case_insensitive(client):
    assert register(client, "alice").status_code == 200
    resp = register(client, "alice2", email="ALICE@x.com")
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "Email is already registered."}


def test_bad_credentials_share_one_message(client):
    register(client, "alice")
    wrong_password = login(client, "alice", "nope")
    unknown_user = login(client, "mallory", "pw1")

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.get_json() == unknown_user.get_json() == {"error": "Invalid username or password."}


def test_login_requires_both_fields(client):
    resp = client.post("/api/login", json={"username": "alice"})
    assert resp.status_code == 400


def test_protected_routes_need_a_session(client):
    for url in ("/api/tasks", "/api/files", "/api/resources", "/api/notes", "/api/topics", "/api/user"):
        resp = client.get(url)
        assert resp.status_code == 401, url
        assert resp.get_json() == {"error": "Not authorized."}


def test_tampered_cookie_is_rejected(client):
    register(client, "alice")
    login(client, "alice")
    client.set_cookie("studydesk.sid", "forged.value")
    assert client.get("/api/user").status_code == 401


def test_logout_ends_session_and_is_idempotent(alice):
    assert alice.get("/api/tasks").status_code == 200

    resp = alice.get("/api/logout")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")
    assert alice.get("/api/tasks").status_code == 401

    assert alice.get("/api/logout").status_code == 302


def test_logout_destroys_server_side_session(app, client):
    register(client, "alice")
    resp = login(client, "alice")
    cookie = resp.headers["Set-Cookie"].split(";", 1)[0].split("=", 1)[1]

    client.get("/api/logout")

    # replaying the old cookie does not revive the session
    other = app.test_client()
    other.set_cookie("studydesk.sid", cookie)
    assert other.get("/api/user").status_code == 401


def test_user_info_never_exposes_password(alice):
    data = alice.get("/api/user").get_json()
    assert data["username"] == "alice"
    assert data["email"] == "alice@x.com"
    assert data["register_date"]
    assert "password" not in data
    assert "password_hash" not in data


def test_register_with_profile_picture(app, client):
    resp = register(client, "alice", phone="555", socials="@alice", profile_pic=fake_file("me.png", b"png-bytes"))
    assert resp.status_code == 200
    login(client, "alice")

    user = client.get("/api/user").get_json()
    assert user["phone"] == "555"
    assert user["socials"] == "@alice"
    assert user["profile_pic"].startswith("/uploads/")
    assert upload_path(app, user["profile_pic"]).read_bytes() == b"png-bytes"

    served = client.get(user["profile_pic"])
    assert served.status_code == 200
    assert served.data == b"png-bytes"


def test_profile_update_is_partial(alice):
    resp = alice.post("/api/user/update", data={"phone": "123"})
    assert resp.status_code == 200

    user = alice.get("/api/user").get_json()
    assert user["phone"] == "123"
    assert user["name"] == "Alice"
    assert user["email"] == "alice@x.com"


def test_profile_update_replaces_and_reclaims_picture(app, alice):
    alice.post("/api/user/update", data={"profile_pic": fake_file("a.png", b"one")})
    first = alice.get("/api/user").get_json()["profile_pic"]

    alice.post("/api/user/update", data={"profile_pic": fake_file("b.png", b"two")})
    second = alice.get("/api/user").get_json()["profile_pic"]

    assert first != second
    assert services(app).reclaimer.wait(5)
    assert not upload_path(app, first).exists()
    assert upload_path(app, second).read_bytes() == b"two"


def test_profile_update_email_conflict(alice, bob):
    resp = bob.post("/api/user/update", data={"email": "alice@x.com"})
    assert resp.status_code == 409
    assert bob.get("/api/user").get_json()["email"] == "bob@x.com"


def test_profile_update_rejects_blank_name(alice):
    resp = alice.post("/api/user/update", data={"name": "   "})
    assert resp.status_code == 400
    assert alice.get("/api/user").get_json()["name"] == "Alice"


def test_login_rejects_non_text_values(client):
    register(client, "alice")
    resp = client.post("/api/login", json={"username": "alice", "password": 123})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Password: Must be text."}

    assert client.post("/api/login", json={"username": ["alice"], "password": {"x": 1}}).status_code == 400


def test_register_rejects_non_text_values(client):
    resp = client.post(
        "/api/register",
        json={"username": "alice", "name": "Alice", "email": "alice@x.com", "password": 123},
    )
    assert resp.status_code == 400
    assert login(client, "alice", "123").status_code == 401


def test_profile_update_rejects_non_text_values(alice):
    assert alice.post("/api/user/update", json={"name": 5}).status_code == 400
    assert alice.post("/api/user/update", json={"phone": ["1", "2"]}).status_code == 400

    user = alice.get("/api/user").get_json()
    assert user["name"] == "Alice"
    assert user["phone"] is None


def test_services_reject_non_text_credentials(app):
    with app.app_context():
        with pytest.raises(ValidationError):
            auth_service.authenticate("alice", 123)
        with pytest.raises(ValidationError):
            auth_service.register_user(username="bob", name="Bob", email="bob@x.com", password=b"pw")
