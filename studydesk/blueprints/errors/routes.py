# studydesk/blueprints/errors/routes.py
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from ...errors import AppError
from ...extensions import db
from . import errors_bp

log = logging.getLogger(__name__)

_HTTP_MESSAGES = {
    400: "Bad request.",
    404: "Not found.",
    405: "Method not allowed.",
    413: "Uploaded file is too large.",
}


def _rollback():
    # a failed write must not leave the scoped session in a broken transaction
    try:
        db.session.rollback()
    except SQLAlchemyError:
        log.exception("rollback failed")


# Domain errors (validation / auth / not found / conflict / storage)
@errors_bp.app_errorhandler(AppError)
def err_app(e: AppError):
    _rollback()
    if e.status_code >= 500:
        log.error("request failed: %s", e.__cause__ or e)
    return jsonify({"error": e.message}), e.status_code


# werkzeug HTTP errors rendered in the same JSON shape
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    if e.code is None or e.code < 400:
        return e
    message = _HTTP_MESSAGES.get(e.code) or e.name
    return jsonify({"error": message}), e.code


# Database failures: log detail, answer generically
@errors_bp.app_errorhandler(SQLAlchemyError)
def err_db(e):
    _rollback()
    log.exception("database error: %s", e)
    return jsonify({"error": "Internal server error."}), 500


# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    _rollback()
    log.exception("unhandled error: %s", e)
    return jsonify({"error": "Internal server error."}), 500
