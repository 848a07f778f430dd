# studydesk/blueprints/api/notes.py
from flask import jsonify
from flask_login import current_user, login_required

from ...services import get_services
from . import api_bp
from .utils import payload, pick


def _note_fields() -> dict:
    # content is kept verbatim (leading whitespace / newlines matter in notes)
    return pick(payload(), ("content",), strip=False)


@api_bp.get("/notes")
@login_required
def notes_list():
    rows = get_services().notes.list(current_user.id)
    return jsonify([n.to_dict() for n in rows])


@api_bp.get("/notes/<int:note_id>")
@login_required
def note_get(note_id):
    return jsonify(get_services().notes.get(note_id, current_user.id).to_dict())


@api_bp.post("/notes")
@login_required
def note_create():
    n = get_services().notes.create(current_user.id, _note_fields())
    return jsonify({"success": True, "id": n.id})


@api_bp.put("/notes/<int:note_id>")
@login_required
def note_update(note_id):
    get_services().notes.update(note_id, current_user.id, _note_fields())
    return jsonify({"success": True})


@api_bp.delete("/notes/<int:note_id>")
@login_required
def note_delete(note_id):
    get_services().notes.delete(note_id, current_user.id)
    return jsonify({"success": True})
