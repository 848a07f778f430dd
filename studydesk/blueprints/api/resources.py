# studydesk/blueprints/api/resources.py
from flask import jsonify, request
from flask_login import current_user, login_required

from ...services import get_services
from . import api_bp
from .utils import payload, pick

_FIELDS = ("title", "link")


@api_bp.get("/resources")
@login_required
def resources_list():
    rows = get_services().resources.list(current_user.id)
    return jsonify([r.to_dict() for r in rows])


@api_bp.get("/resources/<int:resource_id>")
@login_required
def resource_get(resource_id):
    return jsonify(get_services().resources.get(resource_id, current_user.id).to_dict())


@api_bp.post("/resources")
@login_required
def resource_create():
    r = get_services().resources.create(current_user.id, pick(payload(), _FIELDS), files=request.files)
    return jsonify({"success": True, "id": r.id, "image": r.image})


@api_bp.put("/resources/<int:resource_id>")
@login_required
def resource_update(resource_id):
    # no new upload => the stored image stays as it is
    get_services().resources.update(resource_id, current_user.id, pick(payload(), _FIELDS), files=request.files)
    return jsonify({"success": True})


@api_bp.delete("/resources/<int:resource_id>")
@login_required
def resource_delete(resource_id):
    get_services().resources.delete(resource_id, current_user.id)
    return jsonify({"success": True})
