# studydesk/blueprints/api/utils.py
from flask import request


def payload():
    """Form fields for multipart/urlencoded requests, the JSON object otherwise."""
    if request.form or request.files:
        return request.form
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def pick(data, names, strip=True) -> dict:
    """Only the keys the client actually sent, so updates can stay partial."""
    out = {}
    for name in names:
        if name not in data:
            continue
        val = data.get(name)
        if strip and isinstance(val, str):
            val = val.strip()
        out[name] = val
    return out


def as_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    if isinstance(val, (int, float)):
        return val != 0
    return str(val).strip().lower() in {"1", "true", "yes", "on"}
