# studydesk/blueprints/api/topics.py
# Topics are a shared catalog: any signed-in user may read or change any of them.
from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from ...services import get_services
from . import api_bp
from .utils import payload, pick

_FIELDS = ("subject", "subtopic", "explanation", "link")


@api_bp.get("/topics")
@login_required
def topics_list():
    return jsonify([t.to_dict() for t in get_services().topics.list()])


@api_bp.get("/topics/<int:topic_id>")
@login_required
def topic_get(topic_id):
    return jsonify(get_services().topics.get(topic_id).to_dict())


@api_bp.post("/topics")
@login_required
def topic_create():
    t = get_services().topics.create(None, pick(payload(), _FIELDS), files=request.files)
    return jsonify({"success": True, "id": t.id})


@api_bp.put("/topics/<int:topic_id>")
@login_required
def topic_update(topic_id):
    get_services().topics.update(topic_id, None, pick(payload(), _FIELDS), files=request.files)
    return jsonify({"success": True})


@api_bp.delete("/topics/<int:topic_id>")
@login_required
def topic_delete(topic_id):
    if get_services().topics.delete(topic_id, None):
        # shared entries: record who removed them
        current_app.logger.info("topic %s deleted by user %s", topic_id, current_user.id)
    return jsonify({"success": True})
