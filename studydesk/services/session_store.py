# studydesk/services/session_store.py
from __future__ import annotations

import json
import logging
import os
import re
import secrets
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from threading import Lock
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageError
from ..extensions import db
from ..models.user import UserSession

log = logging.getLogger(__name__)

_SID_RE = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def new_sid() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class SessionRecord:
    sid: str
    user_id: int
    expires_at: datetime

    def expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) >= self.expires_at


class SessionStore(ABC):
    """Maps opaque session ids to user ids. Expiry is fixed when the session is issued."""

    def __init__(self, lifetime: timedelta):
        self.lifetime = lifetime

    def create(self, user_id: int) -> SessionRecord:
        record = SessionRecord(
            sid=new_sid(),
            user_id=int(user_id),
            expires_at=datetime.utcnow() + self.lifetime,
        )
        self._save(record)
        return record

    def get(self, sid: Optional[str]) -> Optional[SessionRecord]:
        if not sid or not _SID_RE.match(sid):
            return None
        record = self._load(sid)
        if record is None:
            return None
        if record.expired():
            log.debug("session %s… expired", sid[:6])
            self.destroy(sid)
            return None
        return record

    @abstractmethod
    def destroy(self, sid: Optional[str]) -> None:
        ...

    @abstractmethod
    def purge_expired(self) -> int:
        ...

    @abstractmethod
    def _save(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    def _load(self, sid: str) -> Optional[SessionRecord]:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self, lifetime: timedelta):
        super().__init__(lifetime)
        self._records: dict[str, SessionRecord] = {}
        self._lock = Lock()

    def _save(self, record):
        with self._lock:
            self._records[record.sid] = record

    def _load(self, sid):
        with self._lock:
            return self._records.get(sid)

    def destroy(self, sid):
        if not sid:
            return
        with self._lock:
            self._records.pop(sid, None)

    def purge_expired(self):
        now = datetime.utcnow()
        with self._lock:
            dead = [sid for sid, rec in self._records.items() if rec.expired(now)]
            for sid in dead:
                del self._records[sid]
        return len(dead)


class FileSessionStore(SessionStore):
    """One JSON document per session inside ``directory``."""

    def __init__(self, lifetime: timedelta, directory):
        super().__init__(lifetime)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, sid: str) -> Path:
        return self.directory / f"{sid}.json"

    def _save(self, record):
        payload = {"user_id": record.user_id, "expires_at": record.expires_at.isoformat()}
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp, self._path(record.sid))
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            log.exception("session file write failed")
            raise StorageError() from e

    def _load(self, sid):
        path = self._path(sid)
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
            return SessionRecord(
                sid=sid,
                user_id=int(data["user_id"]),
                expires_at=datetime.fromisoformat(data["expires_at"]),
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.warning("unreadable session file %s: %s", path.name, e)
            return None

    def destroy(self, sid):
        if not sid or not _SID_RE.match(sid):
            return
        try:
            self._path(sid).unlink()
        except FileNotFoundError:
            pass

    def purge_expired(self):
        removed = 0
        for path in self.directory.glob("*.json"):
            if not _SID_RE.match(path.stem):
                continue
            record = self._load(path.stem)
            if record is not None and record.expired():
                self.destroy(path.stem)
                removed += 1
        return removed


class SqlSessionStore(SessionStore):
    """Sessions kept in the application database (``sessions`` table)."""

    def _commit(self):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            log.exception("session store commit failed")
            raise StorageError() from e

    def _save(self, record):
        db.session.add(UserSession(sid=record.sid, user_id=record.user_id, expires_at=record.expires_at))
        self._commit()

    def _load(self, sid):
        row = db.session.get(UserSession, sid)
        if row is None:
            return None
        return SessionRecord(sid=row.sid, user_id=row.user_id, expires_at=row.expires_at)

    def destroy(self, sid):
        if not sid:
            return
        UserSession.query.filter_by(sid=sid).delete()
        self._commit()

    def purge_expired(self):
        removed = UserSession.query.filter(UserSession.expires_at <= datetime.utcnow()).delete()
        self._commit()
        return removed


def make_session_store(config) -> SessionStore:
    lifetime = timedelta(seconds=int(config.get("SESSION_LIFETIME", 24 * 60 * 60)))
    backend = (config.get("SESSION_BACKEND") or "sql").strip().lower()
    if backend == "memory":
        return MemorySessionStore(lifetime)
    if backend == "file":
        return FileSessionStore(lifetime, config.get("SESSION_FILE_DIR", "instance/sessions"))
    if backend == "sql":
        return SqlSessionStore(lifetime)
    raise ValueError(f"Unknown SESSION_BACKEND: {backend!r}")
