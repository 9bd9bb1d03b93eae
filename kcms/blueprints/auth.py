"""Authentication blueprint: sign-in, sign-out and the current session."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify
from flask_login import current_user, login_user, logout_user
from flask_wtf import FlaskForm
from flask_wtf.csrf import generate_csrf
from wtforms import BooleanField, EmailField, PasswordField
from wtforms.validators import DataRequired, Email

from kcms.blueprints.common.forms import bind_form
from kcms.extensions import limiter
from kcms.labels import message
from kcms.models import Profile
from kcms.security import auth_rate_limit


class LoginForm(FlaskForm):
    email = EmailField("البريد الإلكتروني", validators=[DataRequired(), Email()])
    password = PasswordField("كلمة المرور", validators=[DataRequired()])
    remember_me = BooleanField("تذكرني")


auth_bp = Blueprint("auth", __name__)


def _landing_view(ctx) -> str:
    if ctx.is_admin:
        return 'admin'
    if ctx.is_coach:
        return 'coach'
    return 'unauthorized'


@auth_bp.route("/login", methods=["GET", "POST"])
@limiter.limit(auth_rate_limit)
def login():
    ctx = g.session_ctx
    if current_user.is_authenticated:
        return jsonify({'session': ctx.to_dict(include_players=False), 'view': _landing_view(ctx)})

    form = bind_form(LoginForm)
    if not form.validate_on_submit():
        if form.is_submitted():
            return jsonify({'error': message('credentials_required'), 'errors': form.errors}), 400
        return jsonify({'view': 'login'})

    email = form.email.data.strip().lower()
    profile = Profile.query.filter(Profile.email == email).first()
    if profile is None or not profile.check_password(form.password.data):
        current_app.logger.warning(f"Failed login attempt for {email}")
        return jsonify({'error': message('invalid_credentials'), 'view': 'login'}), 401

    # user_logged_in refreshes the session context of this request
    login_user(profile, remember=form.remember_me.data)
    current_app.logger.info(f"Profile {profile.id} signed in")
    return jsonify({'session': ctx.to_dict(include_players=False), 'view': _landing_view(ctx)})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({'message': message('logged_out'), 'view': 'login'})


@auth_bp.route("/session", methods=["GET"])
def session_info():
    """Identity, role and visible players of the current session."""
    ctx = g.session_ctx
    if not ctx.is_authenticated:
        return jsonify({'session': ctx.to_dict(include_players=False), 'view': 'login'}), 401
    return jsonify({'session': ctx.to_dict(), 'view': _landing_view(ctx)})


@auth_bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


__all__ = ['auth_bp', 'LoginForm']
