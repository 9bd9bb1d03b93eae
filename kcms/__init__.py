"""Application factory for the Karate Club Management System."""

from __future__ import annotations

from flask import Flask, jsonify

from kcms.blueprints.admin import admin_bp, registration_admin_bp
from kcms.blueprints.auth import auth_bp
from kcms.blueprints.coach import coach_bp
from kcms.blueprints.functions import functions_bp
from kcms.blueprints.main import main_bp
from kcms.config import Config, validate_config
from kcms.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
)
from kcms.labels import message
from kcms.models import Profile
from kcms.security.config import (
    configure_security_headers,
    configure_secure_session,
    validate_input_length
)
from kcms.services.session import init_session_context


def create_app(config_class=Config):
    """Create Flask application.

    Raises:
        ConfigurationError: the database URL or the secret key is missing
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    validate_config(app.config)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Configure security
    configure_security_headers(app)
    configure_secure_session(app)
    validate_input_length(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        return db.session.get(Profile, user_id)

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        return jsonify({'error': message('login_required'), 'view': 'login'}), 401

    init_session_context(app)

    # Registers the write-policy flush guard on db.session
    import kcms.blueprints.common.access  # noqa: F401

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(registration_admin_bp)
    app.register_blueprint(coach_bp, url_prefix='/coach')
    app.register_blueprint(functions_bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': message('not_found')}), 404

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'error': message('save_failed')}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'error': message('load_failed')}), 500

    # Register CLI commands
    from kcms.commands import register_commands
    register_commands(app)

    return app
