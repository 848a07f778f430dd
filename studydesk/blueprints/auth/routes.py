# studydesk/blueprints/auth/routes.py
from flask import current_app, jsonify, make_response, redirect, request
from flask_login import current_user, login_required

from ...errors import ValidationError
from ...services import auth_service
from . import auth_bp
from .forms import LoginForm, ProfileForm, RegisterForm

_PROFILE_FIELDS = ("name", "email", "phone", "socials")


# -----------------
# Register
# -----------------

@auth_bp.post("/register")
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        raise ValidationError(form.first_error())

    auth_service.register_user(
        username=form.username.data,
        name=form.name.data,
        email=form.email.data,
        password=form.password.data,
        phone=form.phone.data,
        socials=form.socials.data,
        profile_pic=form.profile_pic.data,
    )
    return jsonify({"success": True})


# -----------------
# Login / Logout
# -----------------

@auth_bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError(form.first_error())

    user = auth_service.authenticate(form.username.data, form.password.data)
    resp = make_response(jsonify({
        "success": True,
        "redirect": current_app.config.get("LOGIN_REDIRECT", "/home.html"),
    }))
    auth_service.issue_session(resp, user)
    return resp


@auth_bp.get("/logout")
def logout():
    # no session is fine; logging out twice is not an error
    resp = redirect("/")
    auth_service.end_session(request, resp)
    return resp


# -----------------
# Current user
# -----------------

@auth_bp.get("/user")
@login_required
def user_info():
    return jsonify(current_user.to_dict())


@auth_bp.post("/user/update")
@login_required
def user_update():
    form = ProfileForm()
    if not form.validate_on_submit():
        raise ValidationError(form.first_error())

    data = request.form if (request.form or request.files) else (request.get_json(silent=True) or {})
    fields = {key: data.get(key) for key in _PROFILE_FIELDS if key in data}
    auth_service.update_profile(current_user._get_current_object(), fields, profile_pic=form.profile_pic.data)
    return jsonify({"success": True})
