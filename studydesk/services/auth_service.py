# studydesk/services/auth_service.py
from __future__ import annotations

import logging
from typing import Mapping, Optional

from flask import current_app
from itsdangerous import BadSignature, Signer
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import AuthError, ConflictError, StorageError, ValidationError
from ..extensions import db
from ..models.user import User
from . import get_services

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."


# -----------------
# Session cookie
# -----------------

def _signer() -> Signer:
    return Signer(current_app.config["SECRET_KEY"], salt="studydesk.sid")


def _cookie_name() -> str:
    return current_app.config.get("SESSION_ID_COOKIE", "studydesk.sid")


def sid_from_request(req) -> Optional[str]:
    raw = req.cookies.get(_cookie_name())
    if not raw:
        return None
    try:
        return _signer().unsign(raw).decode("utf-8")
    except BadSignature:
        log.info("rejected session cookie with bad signature")
        return None


def load_user_from_request(req) -> Optional[User]:
    sid = sid_from_request(req)
    if not sid:
        return None
    record = get_services().sessions.get(sid)
    if record is None:
        return None
    return db.session.get(User, record.user_id)


def issue_session(response, user: User):
    record = get_services().sessions.create(user.id)
    cfg = current_app.config
    response.set_cookie(
        _cookie_name(),
        _signer().sign(record.sid).decode("utf-8"),
        max_age=int(cfg.get("SESSION_LIFETIME", 24 * 60 * 60)),
        httponly=True,
        secure=bool(cfg.get("SESSION_COOKIE_SECURE", False)),
        samesite=cfg.get("SESSION_COOKIE_SAMESITE", "Lax"),
    )
    return record


def end_session(req, response):
    sid = sid_from_request(req)
    if sid:
        get_services().sessions.destroy(sid)
    response.delete_cookie(_cookie_name())


# -----------------
# Accounts
# -----------------

def _text(val, label: str) -> str:
    if val is None:
        return ""
    if not isinstance(val, str):
        raise ValidationError(f"{label} must be text.")
    return val.strip()


def _password(val) -> str:
    if val is not None and not isinstance(val, str):
        raise ValidationError("Password must be text.")
    return val or ""


def _email_taken(email: str, exclude_id: Optional[int] = None) -> bool:
    q = User.query.filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _commit_user(stored_pic: Optional[str] = None):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if stored_pic:
            get_services().uploads.reclaim(stored_pic)
        raise ConflictError("Username or email is already registered.") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        if stored_pic:
            get_services().uploads.reclaim(stored_pic)
        log.exception("user commit failed")
        raise StorageError() from e


def register_user(*, username, name, email, password, phone=None, socials=None, profile_pic=None) -> User:
    username = _text(username, "Username")
    name = _text(name, "Name")
    email = _text(email, "Email").lower()
    password = _password(password)
    phone = _text(phone, "Phone")
    socials = _text(socials, "Socials")
    if not username or not name or not email or not password:
        raise ValidationError("Missing required fields.")

    if User.query.filter_by(username=username).first():
        raise ConflictError("Username is already taken.")
    if _email_taken(email):
        raise ConflictError("Email is already registered.")

    stored_pic = None
    if profile_pic is not None and profile_pic.filename:
        stored_pic = get_services().uploads.store(profile_pic, image=True)

    user = User(
        username=username,
        name=name,
        email=email,
        phone=phone or None,
        socials=socials or None,
        profile_pic=stored_pic,
    )
    user.set_password(password)
    db.session.add(user)
    _commit_user(stored_pic)
    log.info("registered user %s (id=%s)", user.username, user.id)
    return user


def authenticate(username, password) -> User:
    username = _text(username, "Username")
    password = _password(password)
    if not username or not password:
        raise ValidationError("Username and password are required.")

    user = User.query.filter_by(username=username).first()
    # same answer whether the username or the password was wrong
    if not user or not user.check_password(password):
        log.info("failed login for %r", username)
        raise AuthError(INVALID_CREDENTIALS)
    log.info("user %s logged in", user.id)
    return user


def update_profile(user: User, fields: Mapping, profile_pic=None) -> User:
    """Applies the supplied fields only; anything not sent keeps its value."""
    if "name" in fields:
        name = _text(fields["name"], "Name")
        if not name:
            raise ValidationError("Name cannot be empty.")
        user.name = name

    if "email" in fields:
        email = _text(fields["email"], "Email").lower()
        if not email:
            raise ValidationError("Email cannot be empty.")
        if _email_taken(email, exclude_id=user.id):
            raise ConflictError("Email is already registered.")
        user.email = email

    for key in ("phone", "socials"):
        if key in fields:
            setattr(user, key, _text(fields[key], key.title()) or None)

    stored_pic = None
    previous_pic = user.profile_pic
    if profile_pic is not None and profile_pic.filename:
        stored_pic = get_services().uploads.store(profile_pic, image=True)
        user.profile_pic = stored_pic

    _commit_user(stored_pic)
    if stored_pic and previous_pic:
        get_services().uploads.reclaim(previous_pic)
    log.info("user %s updated profile", user.id)
    return user
