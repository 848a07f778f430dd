# studydesk/blueprints/api/tasks.py
from flask import jsonify
from flask_login import current_user, login_required

from ...services import get_services
from . import api_bp
from .utils import as_bool, payload, pick


def _task_fields() -> dict:
    fields = pick(payload(), ("title", "category", "completed"))
    if "completed" in fields:
        fields["completed"] = as_bool(fields["completed"])
    return fields


@api_bp.get("/tasks")
@login_required
def tasks_list():
    rows = get_services().tasks.list(current_user.id)
    return jsonify([t.to_dict() for t in rows])


@api_bp.get("/tasks/<int:task_id>")
@login_required
def task_get(task_id):
    return jsonify(get_services().tasks.get(task_id, current_user.id).to_dict())


@api_bp.post("/tasks")
@login_required
def task_create():
    t = get_services().tasks.create(current_user.id, _task_fields())
    return jsonify({"success": True, "id": t.id})


@api_bp.put("/tasks/<int:task_id>")
@login_required
def task_update(task_id):
    get_services().tasks.update(task_id, current_user.id, _task_fields())
    return jsonify({"success": True})


@api_bp.delete("/tasks/<int:task_id>")
@login_required
def task_delete(task_id):
    get_services().tasks.delete(task_id, current_user.id)
    return jsonify({"success": True})
