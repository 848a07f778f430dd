# studydesk/models/user.py
from datetime import datetime, date
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from ..extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    password_hash = db.Column(db.String(255), nullable=False)

    register_date = db.Column(db.Date, default=date.today)
    profile_pic = db.Column(db.String(512))
    phone = db.Column(db.String(50))
    socials = db.Column(db.Text)

    sessions = db.relationship(
        "UserSession",
        backref="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    # --- Auth helpers ---
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        # password_hash is never serialised
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "register_date": self.register_date.isoformat() if self.register_date else None,
            "profile_pic": self.profile_pic,
            "phone": self.phone,
            "socials": self.socials,
        }


class UserSession(db.Model):
    """Server-side session row used by the ``sql`` session backend."""

    __tablename__ = "sessions"

    sid = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
