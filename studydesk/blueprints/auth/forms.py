# studydesk/blueprints/auth/forms.py
from __future__ import annotations

from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import StringField, PasswordField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional as Opt


class ApiForm(FlaskForm):
    """Forms fed by JSON or multipart API calls; the session cookie is not a CSRF surface here."""

    class Meta:
        csrf = False

    def validate(self, extra_validators=None):
        # JSON bodies can carry numbers, lists or objects where text is expected
        bad = [
            field for field in self
            if not isinstance(field, FileField)
            and any(not isinstance(v, str) for v in (field.raw_data or ()))
        ]
        if bad:
            for field in bad:
                field.errors = ["Must be text."]
            return False
        return super().validate(extra_validators=extra_validators)

    def first_error(self) -> str:
        for field in self:
            if field.errors:
                return f"{field.label.text}: {field.errors[0]}"
        return "Invalid request."


class RegisterForm(ApiForm):
    username = StringField("Username", validators=[DataRequired(), Length(max=80)])
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired()])
    phone = StringField("Phone", validators=[Opt(), Length(max=50)])
    socials = TextAreaField("Socials", validators=[Opt()])
    profile_pic = FileField("Profile picture")


class LoginForm(ApiForm):
    username = StringField("Username", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


class ProfileForm(ApiForm):
    # every field optional; only what the client sends is applied
    name = StringField("Name", validators=[Opt(), Length(max=120)])
    email = StringField("Email", validators=[Opt(), Email(), Length(max=255)])
    phone = StringField("Phone", validators=[Opt(), Length(max=50)])
    socials = TextAreaField("Socials", validators=[Opt()])
    profile_pic = FileField("Profile picture")
