# studydesk/blueprints/api/files.py
from flask import jsonify, request
from flask_login import current_user, login_required

from ...services import get_services
from . import api_bp
from .utils import payload, pick


@api_bp.get("/files")
@login_required
def files_list():
    rows = get_services().files.list(current_user.id)
    return jsonify([f.to_dict() for f in rows])


@api_bp.get("/files/<int:file_id>")
@login_required
def file_get(file_id):
    return jsonify(get_services().files.get(file_id, current_user.id).to_dict())


@api_bp.post("/files")
@login_required
def file_upload():
    fa = get_services().files.create(
        current_user.id,
        pick(payload(), ("category",)),
        files=request.files,
    )
    return jsonify({"success": True, "id": fa.id, "filename": fa.filename})


@api_bp.delete("/files/<int:file_id>")
@login_required
def file_delete(file_id):
    # the stored upload is reclaimed in the background after the row is gone
    get_services().files.delete(file_id, current_user.id)
    return jsonify({"success": True})
