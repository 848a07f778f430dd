# studydesk/services/records.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import AppError, NotFoundError, StorageError, ValidationError
from ..extensions import db
from .storage_service import UploadStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileSlot:
    """An upload field of a record: multipart ``form_name`` stored into ``column``."""

    column: str
    form_name: str
    required: bool = False
    image: bool = False


def _blank(val) -> bool:
    if val is None:
        return True
    if isinstance(val, str):
        return not val.strip()
    return False


def _has_file(files: Optional[Mapping], name: str) -> bool:
    if not files:
        return False
    f = files.get(name)
    return bool(f and f.filename)


class RecordStore:
    """
    CRUD over one model.

    With an ``owner_field`` every read and write is filtered by the caller's
    owner id; a row belonging to someone else is invisible, and updates or
    deletes aimed at it do nothing. Without one the table is a shared catalog.
    Uploaded files referenced by a row are reclaimed when the row is deleted
    or the file is replaced.
    """

    def __init__(
        self,
        model,
        *,
        uploads: UploadStore,
        fields: Iterable[str],
        required: Iterable[str] = (),
        required_on_update: Iterable[str] = (),
        flags: Iterable[str] = (),
        file_slots: Iterable[FileSlot] = (),
        owner_field: Optional[str] = "user_id",
        label: Optional[str] = None,
    ):
        self.model = model
        self.uploads = uploads
        self.fields = tuple(fields)
        self.required = tuple(required)
        self.required_on_update = tuple(required_on_update)
        # boolean columns; every other field is text
        self.flags = tuple(flags)
        self.file_slots = tuple(file_slots)
        self.owner_field = owner_field
        self.label = label or model.__name__

    # -----------------
    # Reads
    # -----------------

    def _query(self, owner_id):
        q = self.model.query
        if self.owner_field:
            q = q.filter_by(**{self.owner_field: owner_id})
        return q

    def list(self, owner_id=None) -> list:
        return self._query(owner_id).order_by(self.model.id.asc()).all()

    def find(self, record_id, owner_id=None):
        return self._query(owner_id).filter_by(id=record_id).first()

    def get(self, record_id, owner_id=None):
        row = self.find(record_id, owner_id)
        if row is None:
            raise NotFoundError(f"{self.label} not found.")
        return row

    # -----------------
    # Writes
    # -----------------

    def create(self, owner_id, fields: Mapping, files: Optional[Mapping] = None):
        values = self._clean(fields)
        missing = [n for n in self.required if _blank(values.get(n))]
        missing += [s.form_name for s in self.file_slots if s.required and not _has_file(files, s.form_name)]
        if missing:
            raise ValidationError(self._missing_message(missing))

        stored = self._store_files(files)
        values.update(stored)
        if self.owner_field:
            values[self.owner_field] = owner_id

        row = self.model(**values)
        db.session.add(row)
        try:
            self._commit()
        except AppError:
            self._reclaim(stored.values())
            raise
        log.info("%s %s created (owner=%s)", self.label, row.id, owner_id)
        return row

    def update(self, record_id, owner_id, fields: Mapping, files: Optional[Mapping] = None):
        """Returns the updated row, or None when id (and owner) matched nothing."""
        values = self._clean(fields)
        missing = [n for n in self.required_on_update if _blank(values.get(n))]
        missing += [n for n in self.required if n in values and _blank(values[n]) and n not in missing]
        if missing:
            raise ValidationError(self._missing_message(missing))

        row = self.find(record_id, owner_id)
        if row is None:
            log.debug("%s %s: update matched no row (owner=%s)", self.label, record_id, owner_id)
            return None

        stored = self._store_files(files)
        superseded = [getattr(row, col) for col in stored if getattr(row, col)]
        for key, val in {**values, **stored}.items():
            setattr(row, key, val)
        try:
            self._commit()
        except AppError:
            self._reclaim(stored.values())
            raise

        self._reclaim(superseded)
        log.info("%s %s updated (owner=%s)", self.label, row.id, owner_id)
        return row

    def delete(self, record_id, owner_id) -> bool:
        row = self.find(record_id, owner_id)
        if row is None:
            log.debug("%s %s: delete matched no row (owner=%s)", self.label, record_id, owner_id)
            return False

        paths = [getattr(row, s.column) for s in self.file_slots]
        db.session.delete(row)
        self._commit()

        # the row is gone; file removal happens in the background
        self._reclaim(paths)
        log.info("%s %s deleted (owner=%s)", self.label, record_id, owner_id)
        return True

    # -----------------
    # Helpers
    # -----------------

    def _clean(self, fields: Mapping) -> dict:
        values = {}
        for key, val in (fields or {}).items():
            if key not in self.fields:
                continue
            if key in self.flags:
                ok = isinstance(val, bool)
            else:
                ok = val is None or isinstance(val, str)
            if not ok:
                raise ValidationError(f"Invalid value for field: {key}")
            values[key] = val
        return values

    def _missing_message(self, names: list[str]) -> str:
        return "Missing required fields: " + ", ".join(names)

    def _store_files(self, files: Optional[Mapping]) -> dict:
        stored: dict[str, str] = {}
        try:
            for slot in self.file_slots:
                if _has_file(files, slot.form_name):
                    stored[slot.column] = self.uploads.store(files[slot.form_name], image=slot.image)
        except AppError:
            self._reclaim(stored.values())
            raise
        return stored

    def _reclaim(self, paths: Iterable[Optional[str]]):
        for path in paths:
            if path:
                self.uploads.reclaim(path)

    def _commit(self):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            log.exception("%s: commit failed", self.label)
            raise StorageError() from e
