# studydesk/blueprints/main/routes.py
from flask import current_app, jsonify, send_from_directory
from flask_login import current_user

from . import main_bp


@main_bp.get("/")
def index():
    return jsonify({"app": "studydesk", "authenticated": bool(current_user.is_authenticated)})


@main_bp.get("/healthz")
def healthz():
    return jsonify({"ok": True})


# Uploaded files are public under a fixed prefix, like any static asset.
@main_bp.get("/uploads/<path:filename>")
def uploaded_file(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
